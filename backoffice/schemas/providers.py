from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class ProviderBase(BaseModel):
    nombre_empresa: str = Field(..., min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    numero: Optional[str] = None
    web: Optional[str] = None


class ProviderCreate(ProviderBase):
    pass


class ProviderUpdate(BaseModel):
    nombre_empresa: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    numero: Optional[str] = None
    web: Optional[str] = None


class ProviderRead(ProviderBase):
    id: int
    email: Optional[str] = None
    estado: str
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True
