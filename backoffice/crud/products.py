# backoffice/crud/products.py
import logging
from typing import Iterable, List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session, joinedload

from backoffice.models import Product, Status
from backoffice.schemas.products import StockCheckItem

logger = logging.getLogger("backoffice.products")


def get_product(db: Session, product_id: int) -> Optional[Product]:
    return (
        db.query(Product)
        .options(joinedload(Product.proveedor))
        .filter(Product.id == product_id)
        .first()
    )


def query_products(db: Session, search: Optional[str] = None, estado: Optional[str] = None,
                   categoria: Optional[str] = None):
    query = db.query(Product).options(joinedload(Product.proveedor))
    if search:
        search_fmt = f"%{search}%"
        query = query.filter(or_(
            Product.nombre_producto.ilike(search_fmt),
            Product.marca_producto.ilike(search_fmt),
            Product.categoria_producto.ilike(search_fmt),
        ))
    if estado:
        query = query.filter(Product.estado == estado)
    if categoria:
        query = query.filter(Product.categoria_producto == categoria)
    return query.order_by(Product.nombre_producto)


def name_taken(db: Session, nombre: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.nombre_producto == nombre)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def check_stock(db: Session, items: Iterable[StockCheckItem]) -> List[dict]:
    """Los IDs que no existen simplemente no aparecen en el resultado."""
    results = []
    for item in items:
        product = db.query(Product).filter(Product.id == item.id).first()
        if product is None:
            continue
        results.append({
            "id": product.id,
            "nombre": product.nombre_producto,
            "cantidadSolicitada": item.cantidad,
            "cantidadDisponible": product.cantidad_producto,
            "suficiente": product.cantidad_producto >= item.cantidad,
        })
    return results


def set_quantity(db: Session, product: Product, cantidad: int) -> Product:
    # Sobrescribe sin validar piso: se aceptan negativos (comportamiento heredado)
    if cantidad < 0:
        logger.warning(
            "Cantidad negativa asignada al producto %s (%s): %s",
            product.id, product.nombre_producto, cantidad,
        )
    product.cantidad_producto = cantidad
    db.commit()
    db.refresh(product)
    return product


def add_stock(db: Session, product: Product, cantidad: int) -> Product:
    if cantidad <= 0:
        raise ValueError("La cantidad a añadir debe ser mayor que cero")
    db.execute(
        update(Product)
        .where(Product.id == product.id)
        .values(cantidad_producto=Product.cantidad_producto + cantidad)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(product)
    return product


def decrement_stock(db: Session, product_id: int, cantidad: int) -> bool:
    """
    Descuenta existencias en UNA sentencia, solo si alcanza:
    UPDATE products SET cantidad = cantidad - q WHERE id = ? AND cantidad >= q
    No hace commit: corre dentro de la transacción de la venta.
    Devuelve False si ninguna fila fue afectada.
    """
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.cantidad_producto >= cantidad)
        .values(cantidad_producto=Product.cantidad_producto - cantidad)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def low_stock(db: Session, threshold: int) -> List[Product]:
    return (
        db.query(Product)
        .filter(Product.estado == Status.ACTIVO.value, Product.cantidad_producto <= threshold)
        .order_by(Product.cantidad_producto)
        .all()
    )
