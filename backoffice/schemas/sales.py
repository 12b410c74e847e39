from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from backoffice.models.common import Status
from .common import Money

# --- RENGLONES ---

class LineItem(BaseModel):
    """Producto o servicio vendido, al precio pactado en la venta."""
    id: int
    cantidad: int = Field(..., gt=0)
    costo: Money = Field(..., ge=0)
    nombre: Optional[str] = None

# --- CREACIÓN ---

class SaleCreate(BaseModel):
    # La cédula se valida en el flujo de venta para respetar el orden de errores
    cedula_cliente: Optional[str] = None
    productos: List[LineItem] = []
    servicios: List[LineItem] = []
    iva: Decimal = Field(Decimal("0"), ge=0)   # porcentaje
    metodo: str = "efectivo"

# --- ACTUALIZACIÓN (parcial, NO recalcula total) ---

class SaleUpdate(BaseModel):
    cedula_cliente: Optional[str] = Field(None, min_length=1)
    productos: Optional[List[LineItem]] = None
    servicios: Optional[List[LineItem]] = None
    iva: Optional[Decimal] = Field(None, ge=0)
    metodo: Optional[str] = None
    estado: Optional[Status] = None

# --- LECTURA (RESPONSE) ---

class SaleRead(BaseModel):
    id: int
    cedula_cliente: str
    cliente_nombre: Optional[str] = None
    productos: List[LineItem] = []
    servicios: List[LineItem] = []
    iva: Money
    total_pagar: Money
    metodo: str
    vendedor: Optional[str] = None
    estado: str
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True

class SaleStats(BaseModel):
    total_ventas: Money
    cantidad_ventas: int
    ventas_hoy: int
    ventas_mes: int
    promedio_venta: Money
