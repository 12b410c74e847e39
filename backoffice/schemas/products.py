from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import Money

# --- CLASES BASE ---

class ProductBase(BaseModel):
    nombre_producto: str = Field(..., min_length=1, max_length=150)
    precio_producto: Money = Field(..., ge=0)
    precio_compra: Money = Field(Decimal("0.00"), ge=0)
    marca_producto: Optional[str] = None
    categoria_producto: Optional[str] = None
    proveedor_producto: Optional[int] = None   # ID del proveedor

class ProductCreate(ProductBase):
    cantidad_producto: int = Field(0, ge=0)

class ProductUpdate(BaseModel):
    nombre_producto: Optional[str] = Field(None, min_length=1, max_length=150)
    precio_producto: Optional[Money] = Field(None, ge=0)
    precio_compra: Optional[Money] = Field(None, ge=0)
    marca_producto: Optional[str] = None
    categoria_producto: Optional[str] = None
    proveedor_producto: Optional[int] = None
    cantidad_producto: Optional[int] = Field(None, ge=0)

class ProductRead(ProductBase):
    id: int
    cantidad_producto: int
    proveedor_nombre: Optional[str] = None
    estado: str
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True

# --- MOVIMIENTOS DE STOCK ---

class QuantityUpdate(BaseModel):
    # Sin piso: se acepta cualquier entero, incluso negativo
    cantidad: int

class StockAdd(BaseModel):
    cantidad: int

class StockCheckItem(BaseModel):
    id: int
    cantidad: int

class StockCheckRequest(BaseModel):
    productos: List[StockCheckItem]

class StockCheckResult(BaseModel):
    id: int
    nombre: str
    cantidadSolicitada: int
    cantidadDisponible: int
    suficiente: bool
