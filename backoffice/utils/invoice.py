# backoffice/utils/invoice.py
from datetime import datetime
from html import escape
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi.templating import Jinja2Templates
from xhtml2pdf import pisa

from .totals import money, parse_line_items, subtotal_from_total, to_decimal

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

NO_DISPONIBLE = "No disponible"


def _format_fecha(value: Any) -> str:
    # Con SQL directo SQLite devuelve la fecha como texto
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")
    return NO_DISPONIBLE


def _client_block(client_row: Optional[Dict[str, Any]], cedula: str) -> Dict[str, str]:
    if not client_row:
        return {
            "nombre": NO_DISPONIBLE,
            "cedula": cedula or NO_DISPONIBLE,
            "email": NO_DISPONIBLE,
            "numero": NO_DISPONIBLE,
            "locacion": NO_DISPONIBLE,
        }
    nombre = f"{client_row.get('nombre') or ''} {client_row.get('apellido') or ''}".strip()
    return {
        "nombre": nombre or NO_DISPONIBLE,
        "cedula": client_row.get("cedula") or cedula or NO_DISPONIBLE,
        "email": client_row.get("email") or NO_DISPONIBLE,
        "numero": client_row.get("numero") or NO_DISPONIBLE,
        "locacion": client_row.get("locacion") or NO_DISPONIBLE,
    }


def _lines(raw: Any, default_label: str):
    rows = []
    for item in parse_line_items(raw):
        rows.append({
            "nombre": item.nombre or f"{default_label} #{item.id}",
            "cantidad": item.cantidad,
            "costo": money(item.costo),
            "importe": money(to_decimal(item.costo) * item.cantidad),
        })
    return rows


def build_invoice_context(sale_row: Dict[str, Any], client_row: Optional[Dict[str, Any]],
                          settings, for_pdf: bool = False) -> Dict[str, Any]:
    total = money(sale_row.get("total_pagar"))
    iva = to_decimal(sale_row.get("iva"))
    subtotal = subtotal_from_total(total, iva)

    return {
        "store": {
            "name": settings.store_name,
            "address": settings.store_address,
            "phone": settings.store_phone,
            "ruc": settings.store_ruc,
        },
        "sale": {
            "id": sale_row["id"],
            "fecha": _format_fecha(sale_row.get("fecha_creacion")),
            "metodo": sale_row.get("metodo") or "efectivo",
            "vendedor": sale_row.get("vendedor") or NO_DISPONIBLE,
            "estado": sale_row.get("estado"),
        },
        "cliente": _client_block(client_row, sale_row.get("cedula_cliente")),
        "productos": _lines(sale_row.get("productos"), "Producto"),
        "servicios": _lines(sale_row.get("servicios"), "Servicio"),
        "subtotal": subtotal,
        "iva_porcentaje": money(iva),
        "iva_monto": total - subtotal,
        "total": total,
        "for_pdf": for_pdf,
    }


def render_invoice_html(context: Dict[str, Any]) -> str:
    return templates.get_template("invoice.html").render(context)


def render_invoice_pdf(html_content: str) -> bytes:
    pdf_out = BytesIO()
    pisa_status = pisa.CreatePDF(html_content, dest=pdf_out)
    if pisa_status.err:
        raise RuntimeError("Error al generar el PDF de la factura")
    return pdf_out.getvalue()


def error_page(message: str) -> str:
    return (
        "<!DOCTYPE html><html lang=\"es\"><head><meta charset=\"utf-8\">"
        "<title>Factura</title></head><body>"
        f"<h1>{escape(message)}</h1>"
        "</body></html>"
    )
