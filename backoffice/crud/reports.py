# backoffice/crud/reports.py
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.models import Client, Product, Provider, Sale, Service, Status, User
from backoffice.utils.totals import money, parse_line_items, to_decimal

ACTIVO = Status.ACTIVO.value


def _range(fecha_inicio: Optional[date], fecha_fin: Optional[date]):
    start = datetime.combine(fecha_inicio, time.min) if fecha_inicio else None
    end = datetime.combine(fecha_fin + timedelta(days=1), time.min) if fecha_fin else None
    return start, end


def _active_sales(db: Session, fecha_inicio: Optional[date] = None, fecha_fin: Optional[date] = None):
    start, end = _range(fecha_inicio, fecha_fin)
    query = db.query(Sale).filter(Sale.estado == ACTIVO)
    if start:
        query = query.filter(Sale.fecha_creacion >= start)
    if end:
        query = query.filter(Sale.fecha_creacion < end)
    return query.order_by(Sale.fecha_creacion.desc(), Sale.id.desc())


# --------------------------------------------------------------------------
# 1. VENTAS
# --------------------------------------------------------------------------
def sales_report(db: Session, fecha_inicio: Optional[date] = None, fecha_fin: Optional[date] = None,
                 limit: int = 100) -> List[dict]:
    rows = []
    for sale in _active_sales(db, fecha_inicio, fecha_fin).limit(limit).all():
        rows.append({
            "id": sale.id,
            "fecha": sale.fecha_creacion,
            "cedula_cliente": sale.cedula_cliente,
            "cliente": sale.cliente_nombre or "No disponible",
            "vendedor": sale.vendedor,
            "metodo": sale.metodo,
            "productos": sum(i.cantidad for i in parse_line_items(sale.productos)),
            "servicios": sum(i.cantidad for i in parse_line_items(sale.servicios)),
            "iva": money(sale.iva),
            "total_pagar": money(sale.total_pagar),
        })
    return rows


def sales_by_date(db: Session, fecha_inicio: Optional[date] = None,
                  fecha_fin: Optional[date] = None) -> List[dict]:
    """Ventas agrupadas por día, más reciente primero."""
    days: Dict[date, dict] = OrderedDict()
    for sale in _active_sales(db, fecha_inicio, fecha_fin).all():
        day = sale.fecha_creacion.date()
        bucket = days.setdefault(day, {"fecha": day, "cantidad_ventas": 0, "total": Decimal("0")})
        bucket["cantidad_ventas"] += 1
        bucket["total"] += to_decimal(sale.total_pagar)
    return [dict(b, total=money(b["total"])) for b in days.values()]


# --------------------------------------------------------------------------
# 2. PRODUCTOS Y SERVICIOS MÁS VENDIDOS
# --------------------------------------------------------------------------
def _top_items(db: Session, column: str, catalog: Dict[int, str], limit: int,
               fecha_inicio: Optional[date], fecha_fin: Optional[date]) -> List[dict]:
    acc: Dict[int, dict] = {}
    for sale in _active_sales(db, fecha_inicio, fecha_fin).all():
        for item in parse_line_items(getattr(sale, column)):
            row = acc.setdefault(item.id, {
                "id": item.id,
                "nombre": catalog.get(item.id) or item.nombre or f"#{item.id}",
                "cantidad_vendida": 0,
                "total_vendido": Decimal("0"),
                "ventas": 0,
            })
            row["cantidad_vendida"] += item.cantidad
            row["total_vendido"] += to_decimal(item.costo) * item.cantidad
            row["ventas"] += 1

    ranking = sorted(acc.values(), key=lambda r: (-r["cantidad_vendida"], r["id"]))[:limit]
    return [dict(r, total_vendido=money(r["total_vendido"])) for r in ranking]


def top_products(db: Session, limit: int = 10, fecha_inicio: Optional[date] = None,
                 fecha_fin: Optional[date] = None) -> List[dict]:
    catalog = dict(db.query(Product.id, Product.nombre_producto).all())
    return _top_items(db, "productos", catalog, limit, fecha_inicio, fecha_fin)


def top_services(db: Session, limit: int = 10, fecha_inicio: Optional[date] = None,
                 fecha_fin: Optional[date] = None) -> List[dict]:
    catalog = dict(db.query(Service.id, Service.nombre).all())
    return _top_items(db, "servicios", catalog, limit, fecha_inicio, fecha_fin)


# --------------------------------------------------------------------------
# 3. CLIENTES
# --------------------------------------------------------------------------
def top_clients(db: Session, limit: int = 10) -> List[dict]:
    rows = (
        db.query(
            Sale.cedula_cliente,
            func.count(Sale.id).label("compras"),
            func.sum(Sale.total_pagar).label("total"),
            func.max(Sale.fecha_creacion).label("ultima_compra"),
        )
        .filter(Sale.estado == ACTIVO)
        .group_by(Sale.cedula_cliente)
        .all()
    )
    names = {
        c.cedula: c.nombre_completo
        for c in db.query(Client).filter(Client.cedula.in_([r.cedula_cliente for r in rows])).all()
    } if rows else {}

    result = [
        {
            "cedula": r.cedula_cliente,
            "nombre": names.get(r.cedula_cliente, "No disponible"),
            "compras": r.compras,
            "total_gastado": money(r.total),
            "ultima_compra": r.ultima_compra,
        }
        for r in rows
    ]
    result.sort(key=lambda r: (-r["total_gastado"], r["cedula"]))
    return result[:limit]


# --------------------------------------------------------------------------
# 4. ESTADÍSTICAS GENERALES
# --------------------------------------------------------------------------
def general_stats(db: Session, low_stock_threshold: int) -> dict:
    today = date.today()
    day_start = datetime.combine(today, time.min)
    month_start = datetime.combine(today.replace(day=1), time.min)

    def count(model, *filters):
        return db.query(func.count(model.id)).filter(*filters).scalar() or 0

    ingresos_mes = db.query(func.sum(Sale.total_pagar)).filter(
        Sale.estado == ACTIVO, Sale.fecha_creacion >= month_start
    ).scalar()
    ingresos_totales = db.query(func.sum(Sale.total_pagar)).filter(Sale.estado == ACTIVO).scalar()

    return {
        "total_clientes": count(Client, Client.estado == ACTIVO),
        "total_productos": count(Product, Product.estado == ACTIVO),
        "total_servicios": count(Service, Service.estado == ACTIVO),
        "total_proveedores": count(Provider, Provider.estado == ACTIVO),
        "total_usuarios": count(User, User.estado == ACTIVO),
        "total_ventas": count(Sale, Sale.estado == ACTIVO),
        "ventas_hoy": count(Sale, Sale.estado == ACTIVO, Sale.fecha_creacion >= day_start),
        "ventas_mes": count(Sale, Sale.estado == ACTIVO, Sale.fecha_creacion >= month_start),
        "ingresos_mes": money(ingresos_mes),
        "ingresos_totales": money(ingresos_totales),
        "productos_bajo_stock": count(
            Product, Product.estado == ACTIVO, Product.cantidad_producto <= low_stock_threshold
        ),
    }
