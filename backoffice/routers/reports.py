# backoffice/routers/reports.py
import io
from datetime import date
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_app_settings
from backoffice.crud import changes as changes_crud
from backoffice.crud import reports as reports_crud
from backoffice.database import get_db
from backoffice.models import Permission, User
from backoffice.schemas.changes import ChangeRead, ChangeStats
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.reports import DailySales, GeneralStats, SaleReportRow, TopClient, TopItem
from backoffice.security import require_permissions

router = APIRouter()

can_read_reports = require_permissions(Permission.REPORTES)


def _check_range(fecha_inicio: Optional[date], fecha_fin: Optional[date]):
    if fecha_inicio and fecha_fin and fecha_inicio > fecha_fin:
        raise HTTPException(status_code=400, detail="La fecha de inicio no puede ser posterior a la fecha fin")


# --------------------------------------------------------------------------
# 1. AUDITORÍA
# --------------------------------------------------------------------------
@router.get("/statistics", response_model=ApiResponse[ChangeStats])
def get_statistics(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    return {"success": True, "message": "Estadísticas obtenidas exitosamente", "data": changes_crud.change_stats(db)}


@router.get("/changes/by-date", response_model=ApiResponse[List[ChangeRead]])
def get_changes_by_date(
    fecha_inicio: date = Query(..., alias="fechaInicio"),
    fecha_fin: date = Query(..., alias="fechaFin"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    _check_range(fecha_inicio, fecha_fin)
    return {
        "success": True,
        "message": "Cambios obtenidos exitosamente",
        "data": changes_crud.changes_between(db, fecha_inicio, fecha_fin),
    }


# --------------------------------------------------------------------------
# 2. VENTAS
# --------------------------------------------------------------------------
@router.get("/sales", response_model=ApiResponse[List[SaleReportRow]])
def get_sales_report(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    _check_range(fecha_inicio, fecha_fin)
    return {
        "success": True,
        "message": "Reporte de ventas generado",
        "data": reports_crud.sales_report(db, fecha_inicio, fecha_fin, limit),
    }


@router.get("/sales/by-date", response_model=ApiResponse[List[DailySales]])
def get_sales_by_date(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    _check_range(fecha_inicio, fecha_fin)
    return {
        "success": True,
        "message": "Ventas por fecha",
        "data": reports_crud.sales_by_date(db, fecha_inicio, fecha_fin),
    }


@router.get("/sales/excel")
def export_sales_excel(
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    _check_range(fecha_inicio, fecha_fin)
    rows = reports_crud.sales_report(db, fecha_inicio, fecha_fin, limit=10000)

    df = pd.DataFrame(
        [
            {
                "Venta": r["id"],
                "Fecha": r["fecha"].strftime("%Y-%m-%d %H:%M") if r["fecha"] else "",
                "Cédula": r["cedula_cliente"],
                "Cliente": r["cliente"],
                "Vendedor": r["vendedor"] or "",
                "Método": r["metodo"],
                "Unid. Productos": r["productos"],
                "Unid. Servicios": r["servicios"],
                "IVA %": float(r["iva"]),
                "Total": float(r["total_pagar"]),
            }
            for r in rows
        ],
        columns=[
            "Venta", "Fecha", "Cédula", "Cliente", "Vendedor", "Método",
            "Unid. Productos", "Unid. Servicios", "IVA %", "Total",
        ],
    )

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Ventas")
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="reporte_ventas.xlsx"'},
    )


# --------------------------------------------------------------------------
# 3. PRODUCTOS, SERVICIOS Y CLIENTES
# --------------------------------------------------------------------------
@router.get("/products", response_model=ApiResponse[List[TopItem]])
def get_products_report(
    limit: int = Query(10, ge=1, le=100),
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    return {
        "success": True,
        "message": "Productos más vendidos",
        "data": reports_crud.top_products(db, limit, fecha_inicio, fecha_fin),
    }


@router.get("/services", response_model=ApiResponse[List[TopItem]])
def get_services_report(
    limit: int = Query(10, ge=1, le=100),
    fecha_inicio: Optional[date] = Query(None, alias="fechaInicio"),
    fecha_fin: Optional[date] = Query(None, alias="fechaFin"),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    return {
        "success": True,
        "message": "Servicios más vendidos",
        "data": reports_crud.top_services(db, limit, fecha_inicio, fecha_fin),
    }


@router.get("/clients", response_model=ApiResponse[List[TopClient]])
def get_clients_report(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_reports),
):
    return {"success": True, "message": "Mejores clientes", "data": reports_crud.top_clients(db, limit)}


@router.get("/general", response_model=ApiResponse[GeneralStats])
def get_general_report(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    current_user: User = Depends(can_read_reports),
):
    return {
        "success": True,
        "message": "Estadísticas generales",
        "data": reports_crud.general_stats(db, settings.low_stock_threshold),
    }
