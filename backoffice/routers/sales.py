# backoffice/routers/sales.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_app_settings
from backoffice.crud import clients as clients_crud
from backoffice.crud import sales as sales_crud
from backoffice.crud import users as users_crud
from backoffice.crud.changes import record_change
from backoffice.database import Database, get_database, get_db
from backoffice.models import ChangeType, Permission, Sale, Status, User
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.sales import SaleCreate, SaleRead, SaleStats, SaleUpdate
from backoffice.security import require_permissions
from backoffice.utils.invoice import (
    build_invoice_context, error_page, render_invoice_html, render_invoice_pdf,
)
from backoffice.utils.pagination import PageParams, page_params, paginate

router = APIRouter()
logger = logging.getLogger("backoffice.sales")

TABLA = "ventas"
can_read_sales = require_permissions(Permission.VENTAS, Permission.REPORTES)
can_sell = require_permissions(Permission.VENTAS)

SALE_BY_ID_SQL = "SELECT * FROM sales WHERE id = :id"


def _get_or_404(db: Session, sale_id: int) -> Sale:
    sale = sales_crud.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Venta no encontrada")
    return sale


# --------------------------------------------------------------------------
# 1. LISTAR VENTAS
# --------------------------------------------------------------------------
@router.get("/", response_model=ApiResponse[List[SaleRead]])
def get_sales(
    search: Optional[str] = None,  # cédula, cliente, vendedor o método
    estado: Optional[Status] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_sales),
):
    query = sales_crud.query_sales(db, search, estado.value if estado else None)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": "Ventas obtenidas exitosamente",
        "data": items,
        "pagination": pagination,
    }


# --------------------------------------------------------------------------
# 2. ESTADÍSTICAS
# --------------------------------------------------------------------------
@router.get("/stats", response_model=ApiResponse[SaleStats])
def get_sales_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_sales),
):
    return {
        "success": True,
        "message": "Estadísticas obtenidas exitosamente",
        "data": sales_crud.sale_stats(db),
    }


# --------------------------------------------------------------------------
# 3. VENTAS DE UN CLIENTE
# --------------------------------------------------------------------------
@router.get("/client/{cedula}", response_model=ApiResponse[List[SaleRead]])
def get_sales_by_client(
    cedula: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_sales),
):
    return {
        "success": True,
        "message": "Ventas del cliente obtenidas exitosamente",
        "data": sales_crud.sales_by_client(db, cedula),
    }


# --------------------------------------------------------------------------
# 4. FACTURA HTML (pública, se abre directo en el navegador para imprimir)
# --------------------------------------------------------------------------
@router.get("/{sale_id}/invoice", response_class=HTMLResponse)
def get_invoice(
    sale_id: str,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
):
    # Solo dígitos ASCII: int() aceptaría "1_0", espacios o dígitos unicode
    if not (sale_id.isascii() and sale_id.isdigit()):
        return HTMLResponse(error_page("ID de venta inválido"), status_code=400)
    parsed_id = int(sale_id)

    try:
        # Lectura directa de la fila: los renglones pueden venir como texto
        sale_row = database.fetch_one(SALE_BY_ID_SQL, {"id": parsed_id})
        if sale_row is None:
            return HTMLResponse(error_page("Venta no encontrada"), status_code=404)

        client_row = clients_crud.fetch_client_row(database, sale_row.get("cedula_cliente"))
        html_content = render_invoice_html(build_invoice_context(sale_row, client_row, settings))
        return HTMLResponse(html_content)
    except Exception as exc:
        logger.exception("Error al generar la factura de la venta %s", parsed_id)
        return HTMLResponse(error_page(f"Error al generar la factura: {exc}"), status_code=500)


# --------------------------------------------------------------------------
# 5. FACTURA PDF
# --------------------------------------------------------------------------
@router.get("/{sale_id}/invoice.pdf")
def get_invoice_pdf(
    sale_id: int,
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
    current_user: User = Depends(can_read_sales),
):
    sale_row = database.fetch_one(SALE_BY_ID_SQL, {"id": sale_id})
    if sale_row is None:
        raise HTTPException(status_code=404, detail="Venta no encontrada")

    client_row = clients_crud.fetch_client_row(database, sale_row.get("cedula_cliente"))
    html_content = render_invoice_html(build_invoice_context(sale_row, client_row, settings, for_pdf=True))
    try:
        pdf_bytes = render_invoice_pdf(html_content)
    except RuntimeError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=Factura_{sale_id:06d}.pdf"},
    )


# --------------------------------------------------------------------------
# 6. DETALLE
# --------------------------------------------------------------------------
@router.get("/{sale_id}", response_model=ApiResponse[SaleRead])
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_sales),
):
    return {"success": True, "message": "Venta obtenida exitosamente", "data": _get_or_404(db, sale_id)}


# --------------------------------------------------------------------------
# 7. CREAR VENTA
# --------------------------------------------------------------------------
@router.post("/", response_model=ApiResponse[SaleRead], status_code=status.HTTP_201_CREATED)
def create_sale(
    sale_in: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell),
):
    seller = users_crud.get_user(db, current_user.id)
    try:
        sale = sales_crud.create_sale(db, seller, sale_in)
    except sales_crud.SaleValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    if sale is not None:
        record_change(
            db, current_user.usuario,
            f"Venta registrada: #{sale.id} cliente {sale.cedula_cliente}, total ${sale.total_pagar}",
            ChangeType.AGREGAR, TABLA, sale.id,
        )
    return {"success": True, "message": "Venta creada exitosamente", "data": sale}


# --------------------------------------------------------------------------
# 8. ACTUALIZAR (parcial, sin recalcular total)
# --------------------------------------------------------------------------
@router.put("/{sale_id}", response_model=ApiResponse[SaleRead])
def update_sale(
    sale_id: int,
    sale_in: SaleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell),
):
    sale = _get_or_404(db, sale_id)
    sales_crud.update_sale(db, sale, sale_in)

    record_change(
        db, current_user.usuario, f"Venta actualizada: #{sale.id}",
        ChangeType.ACTUALIZAR, TABLA, sale.id,
    )
    return {"success": True, "message": "Venta actualizada exitosamente", "data": sale}


# --------------------------------------------------------------------------
# 9. ELIMINAR (borrado físico)
# --------------------------------------------------------------------------
@router.delete("/{sale_id}", response_model=ApiResponse[SaleRead])
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell),
):
    sale = _get_or_404(db, sale_id)
    snapshot = SaleRead.model_validate(sale)
    sales_crud.delete_sale(db, sale)

    record_change(
        db, current_user.usuario, f"Venta eliminada: #{sale_id} cliente {snapshot.cedula_cliente}",
        ChangeType.INACTIVO, TABLA, sale_id,
    )
    return {"success": True, "message": "Venta eliminada exitosamente", "data": snapshot}
