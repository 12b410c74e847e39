# backoffice/crud/sales.py
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from backoffice.crud import clients as clients_crud
from backoffice.crud import products as products_crud
from backoffice.crud import services as services_crud
from backoffice.models import Client, Product, Sale, Status, User
from backoffice.schemas.sales import LineItem, SaleCreate, SaleUpdate
from backoffice.utils.totals import compute_sale_total, money, to_decimal

logger = logging.getLogger("backoffice.sales")


class SaleValidationError(Exception):
    """La venta no pasa validación; el mensaje se muestra tal cual al usuario."""


def get_sale(db: Session, sale_id: int) -> Optional[Sale]:
    return db.query(Sale).filter(Sale.id == sale_id).first()


def query_sales(db: Session, search: Optional[str] = None, estado: Optional[str] = None):
    query = db.query(Sale)
    if search:
        search_fmt = f"%{search}%"
        query = query.outerjoin(Client, Client.cedula == Sale.cedula_cliente).filter(or_(
            Sale.cedula_cliente.ilike(search_fmt),
            Sale.vendedor.ilike(search_fmt),
            Sale.metodo.ilike(search_fmt),
            Client.nombre.ilike(search_fmt),
            Client.apellido.ilike(search_fmt),
        ))
    if estado:
        query = query.filter(Sale.estado == estado)
    return query.order_by(Sale.fecha_creacion.desc(), Sale.id.desc())


def sales_by_client(db: Session, cedula: str) -> List[Sale]:
    return (
        db.query(Sale)
        .filter(Sale.cedula_cliente == cedula)
        .order_by(Sale.fecha_creacion.desc(), Sale.id.desc())
        .all()
    )


# --------------------------------------------------------------------------
# CREACIÓN DE VENTA
# --------------------------------------------------------------------------
def create_sale(db: Session, seller: Optional[User], sale_in: SaleCreate) -> Optional[Sale]:
    """
    1. Valida (usuario, cédula, cliente, productos + stock, servicios). Sin escrituras.
    2. Calcula totales en Decimal.
    3. Inserta la venta y descuenta stock en UNA transacción. El descuento es
       condicional (cantidad >= pedida); si alguno no aplica se revierte todo.
    Devuelve la venta releída de la BD (None si ya no existe).
    """
    # --- 1. VALIDACIONES ---
    if seller is None:
        raise SaleValidationError("Usuario no encontrado")

    cedula = (sale_in.cedula_cliente or "").strip()
    if not cedula:
        raise SaleValidationError("La cédula del cliente es requerida")

    if clients_crud.get_client_by_cedula(db, cedula) is None:
        raise SaleValidationError("Cliente no encontrado")

    requested: Dict[int, int] = {}
    names: Dict[int, str] = {}
    productos: List[LineItem] = []
    for item in sale_in.productos:
        product = db.query(Product).filter(Product.id == item.id).first()
        if product is None:
            raise SaleValidationError(f"Producto con ID {item.id} no encontrado")
        # Un mismo producto repetido en varios renglones suma su cantidad
        requested[item.id] = requested.get(item.id, 0) + item.cantidad
        names[item.id] = product.nombre_producto
        if product.cantidad_producto < requested[item.id]:
            raise SaleValidationError(f"Stock insuficiente para el producto {product.nombre_producto}")
        productos.append(item.model_copy(update={"nombre": item.nombre or product.nombre_producto}))

    servicios: List[LineItem] = []
    for item in sale_in.servicios:
        service = services_crud.get_service(db, item.id)
        if service is None:
            raise SaleValidationError(f"Servicio con ID {item.id} no encontrado")
        servicios.append(item.model_copy(update={"nombre": item.nombre or service.nombre}))

    # --- 2. TOTALES ---
    subtotal, total = compute_sale_total(productos, servicios, sale_in.iva)

    # --- 3. PERSISTENCIA ---
    sale = Sale(
        cedula_cliente=cedula,
        productos=[i.model_dump(mode="json") for i in productos],
        servicios=[i.model_dump(mode="json") for i in servicios],
        iva=to_decimal(sale_in.iva),
        total_pagar=total,
        metodo=sale_in.metodo or "efectivo",
        vendedor=seller.nombre_completo,
        estado=Status.ACTIVO.value,
    )
    try:
        db.add(sale)
        db.flush()  # Para obtener el ID de la venta
        for product_id, cantidad in requested.items():
            if not products_crud.decrement_stock(db, product_id, cantidad):
                # Otra venta se llevó el stock entre la validación y el descuento
                raise SaleValidationError(f"Stock insuficiente para el producto {names[product_id]}")
        db.commit()
    except Exception:
        db.rollback()
        raise

    sale_id = sale.id
    logger.info(
        "Venta %s registrada: cliente=%s subtotal=%s total=%s vendedor=%s",
        sale_id, cedula, subtotal, total, seller.usuario,
    )

    db.expire_all()
    return get_sale(db, sale_id)


def update_sale(db: Session, sale: Sale, sale_in: SaleUpdate) -> Sale:
    """Actualización parcial. El total NO se recalcula."""
    data = sale_in.model_dump(exclude_unset=True, exclude_none=True)
    for key in ("productos", "servicios"):
        if key in data:
            data[key] = [i.model_dump(mode="json") for i in getattr(sale_in, key)]
    if "estado" in data:
        data["estado"] = Status(data["estado"]).value

    for key, value in data.items():
        setattr(sale, key, value)
    db.commit()
    db.refresh(sale)
    return sale


def delete_sale(db: Session, sale: Sale) -> None:
    # Borrado físico; NO devuelve el stock
    db.delete(sale)
    db.commit()


# --------------------------------------------------------------------------
# ESTADÍSTICAS
# --------------------------------------------------------------------------
def _month_bounds(today: date):
    start = datetime.combine(today.replace(day=1), time.min)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month


def sale_stats(db: Session) -> dict:
    active = Sale.estado == Status.ACTIVO.value

    total, count = db.query(func.sum(Sale.total_pagar), func.count(Sale.id)).filter(active).one()
    total = money(total)

    today = date.today()
    day_start = datetime.combine(today, time.min)
    day_end = day_start + timedelta(days=1)
    month_start, month_end = _month_bounds(today)

    ventas_hoy = db.query(func.count(Sale.id)).filter(
        active, Sale.fecha_creacion >= day_start, Sale.fecha_creacion < day_end
    ).scalar() or 0
    ventas_mes = db.query(func.count(Sale.id)).filter(
        active, Sale.fecha_creacion >= month_start, Sale.fecha_creacion < month_end
    ).scalar() or 0

    return {
        "total_ventas": total,
        "cantidad_ventas": count or 0,
        "ventas_hoy": ventas_hoy,
        "ventas_mes": ventas_mes,
        "promedio_venta": money(total / count) if count else money(0),
    }
