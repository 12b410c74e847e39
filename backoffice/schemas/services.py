from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.models.common import Status
from .common import Money


class ServiceBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=150)
    descripcion: Optional[str] = None
    productos: List[int] = []           # IDs de productos que consume
    coste_total: Money = Field(Decimal("0.00"), ge=0)
    costo_servicio: Money = Field(..., ge=0)


class ServiceCreate(ServiceBase):
    pass


class ServiceUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=150)
    descripcion: Optional[str] = None
    productos: Optional[List[int]] = None
    coste_total: Optional[Money] = Field(None, ge=0)
    costo_servicio: Optional[Money] = Field(None, ge=0)


class ServiceStatusUpdate(BaseModel):
    estado: Status


class ServiceRead(ServiceBase):
    id: int
    estado: str
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True
