from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from .common import Money


class SaleReportRow(BaseModel):
    id: int
    fecha: Optional[datetime] = None
    cedula_cliente: str
    cliente: str
    vendedor: Optional[str] = None
    metodo: str
    productos: int      # unidades de producto
    servicios: int      # unidades de servicio
    iva: Money
    total_pagar: Money


class DailySales(BaseModel):
    fecha: date
    cantidad_ventas: int
    total: Money


class TopItem(BaseModel):
    id: int
    nombre: str
    cantidad_vendida: int
    total_vendido: Money
    ventas: int


class TopClient(BaseModel):
    cedula: str
    nombre: str
    compras: int
    total_gastado: Money
    ultima_compra: Optional[datetime] = None


class GeneralStats(BaseModel):
    total_clientes: int
    total_productos: int
    total_servicios: int
    total_proveedores: int
    total_usuarios: int
    total_ventas: int
    ventas_hoy: int
    ventas_mes: int
    ingresos_mes: Money
    ingresos_totales: Money
    productos_bajo_stock: int


class DashboardStats(BaseModel):
    clientes: int
    productos: int
    servicios: int
    proveedores: int
    usuarios: int
    ventas: int
    ventas_hoy: int
    ventas_mes: int
    productos_bajo_stock: int
