# backoffice/routers/dashboard.py
from datetime import date, datetime, time, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy import DateTime, bindparam, text

from backoffice.config import Settings, get_app_settings
from backoffice.database import Database, get_database
from backoffice.models import User
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.reports import DashboardStats
from backoffice.security import get_current_user

router = APIRouter()

# Un solo viaje a la BD con subconsultas
DASHBOARD_SQL = text("""
SELECT
    (SELECT COUNT(*) FROM clients   WHERE estado = 'activo') AS clientes,
    (SELECT COUNT(*) FROM products  WHERE estado = 'activo') AS productos,
    (SELECT COUNT(*) FROM services  WHERE estado = 'activo') AS servicios,
    (SELECT COUNT(*) FROM providers WHERE estado = 'activo') AS proveedores,
    (SELECT COUNT(*) FROM profiles  WHERE estado = 'activo') AS usuarios,
    (SELECT COUNT(*) FROM sales     WHERE estado = 'activo') AS ventas,
    (SELECT COUNT(*) FROM sales     WHERE estado = 'activo'
        AND fecha_creacion >= :dia_inicio AND fecha_creacion < :dia_fin) AS ventas_hoy,
    (SELECT COUNT(*) FROM sales     WHERE estado = 'activo'
        AND fecha_creacion >= :mes_inicio) AS ventas_mes,
    (SELECT COUNT(*) FROM products  WHERE estado = 'activo'
        AND cantidad_producto <= :umbral) AS productos_bajo_stock
""").bindparams(
    bindparam("dia_inicio", type_=DateTime),
    bindparam("dia_fin", type_=DateTime),
    bindparam("mes_inicio", type_=DateTime),
)


@router.get("/stats", response_model=ApiResponse[DashboardStats])
def get_dashboard_stats(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
    current_user: User = Depends(get_current_user),
):
    dia_inicio = datetime.combine(date.today(), time.min)
    row = database.fetch_one(DASHBOARD_SQL, {
        "dia_inicio": dia_inicio,
        "dia_fin": dia_inicio + timedelta(days=1),
        "mes_inicio": dia_inicio.replace(day=1),
        "umbral": settings.low_stock_threshold,
    })
    return {"success": True, "message": "Estadísticas del dashboard", "data": row}
