# backoffice/routers/products.py
import io
import logging
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from backoffice.crud import products as products_crud
from backoffice.crud import providers as providers_crud
from backoffice.crud.changes import record_change
from backoffice.database import get_db
from backoffice.models import ChangeType, Permission, Product, Status, User
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.products import (
    ProductCreate, ProductRead, ProductUpdate, QuantityUpdate,
    StockAdd, StockCheckRequest, StockCheckResult,
)
from backoffice.security import require_permissions
from backoffice.utils.pagination import PageParams, page_params, paginate
from backoffice.utils.totals import to_decimal

router = APIRouter()
logger = logging.getLogger("backoffice.products")

TABLA = "productos"
can_manage_products = require_permissions(Permission.PRODUCTOS)
can_sell_products = require_permissions(Permission.PRODUCTOS, Permission.VENTAS)


def _get_or_404(db: Session, product_id: int) -> Product:
    product = products_crud.get_product(db, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Producto no encontrado")
    return product


def _check_provider(db: Session, provider_id: Optional[int]):
    if provider_id is not None and providers_crud.get_provider(db, provider_id) is None:
        raise HTTPException(status_code=400, detail="Proveedor no encontrado")


# --------------------------------------------------------------------------
# 1. LISTADOS
# --------------------------------------------------------------------------
@router.get("/", response_model=ApiResponse[List[ProductRead]])
def get_products(
    search: Optional[str] = None,
    estado: Optional[Status] = None,
    categoria: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    query = products_crud.query_products(db, search, estado.value if estado else None, categoria)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": "Productos obtenidos exitosamente",
        "data": items,
        "pagination": pagination,
    }


@router.get("/active", response_model=ApiResponse[List[ProductRead]])
def get_active_products(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell_products),
):
    """Catálogo para el punto de venta (sin paginar)."""
    items = products_crud.query_products(db, estado=Status.ACTIVO.value).all()
    return {"success": True, "message": "Productos activos obtenidos exitosamente", "data": items}


# --------------------------------------------------------------------------
# 2. EXPORTAR A EXCEL
# --------------------------------------------------------------------------
@router.get("/export/excel")
def export_products_excel(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    products = products_crud.query_products(db).all()

    data = [
        {
            "ID": p.id,
            "Nombre": p.nombre_producto,
            "Marca": p.marca_producto or "",
            "Categoría": p.categoria_producto or "",
            "Proveedor": p.proveedor_nombre or "",
            "Stock": p.cantidad_producto,
            "Precio Venta": float(to_decimal(p.precio_producto)),
            "Precio Compra": float(to_decimal(p.precio_compra)),
            "Estado": p.estado,
        }
        for p in products
    ]
    df = pd.DataFrame(data, columns=[
        "ID", "Nombre", "Marca", "Categoría", "Proveedor",
        "Stock", "Precio Venta", "Precio Compra", "Estado",
    ])

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Productos")
    output.seek(0)

    headers = {"Content-Disposition": 'attachment; filename="productos_serenity.xlsx"'}
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers=headers,
    )


# --------------------------------------------------------------------------
# 3. VERIFICAR STOCK (antes de vender)
# --------------------------------------------------------------------------
@router.post("/check-stock", response_model=ApiResponse[List[StockCheckResult]])
def check_stock(
    body: StockCheckRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_sell_products),
):
    results = products_crud.check_stock(db, body.productos)
    return {"success": True, "message": "Verificación de stock completada", "data": results}


# --------------------------------------------------------------------------
# 4. DETALLE
# --------------------------------------------------------------------------
@router.get("/{product_id}", response_model=ApiResponse[ProductRead])
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    return {"success": True, "message": "Producto obtenido exitosamente", "data": _get_or_404(db, product_id)}


# --------------------------------------------------------------------------
# 5. CREAR
# --------------------------------------------------------------------------
@router.post("/", response_model=ApiResponse[ProductRead], status_code=status.HTTP_201_CREATED)
def create_product(
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    if products_crud.name_taken(db, product_in.nombre_producto):
        raise HTTPException(status_code=400, detail="Ya existe un producto con ese nombre")
    _check_provider(db, product_in.proveedor_producto)

    product = Product(**product_in.model_dump(), estado=Status.ACTIVO.value)
    db.add(product)
    db.commit()
    db.refresh(product)

    record_change(
        db, current_user.usuario,
        f"Producto agregado: {product.nombre_producto} (stock inicial {product.cantidad_producto})",
        ChangeType.AGREGAR, TABLA, product.id,
    )
    return {"success": True, "message": "Producto creado exitosamente", "data": product}


# --------------------------------------------------------------------------
# 6. ACTUALIZAR
# --------------------------------------------------------------------------
@router.put("/{product_id}", response_model=ApiResponse[ProductRead])
def update_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    product = _get_or_404(db, product_id)

    update_data = product_in.model_dump(exclude_unset=True)
    nuevo_nombre = update_data.get("nombre_producto")
    if nuevo_nombre and products_crud.name_taken(db, nuevo_nombre, exclude_id=product.id):
        raise HTTPException(status_code=400, detail="Ya existe un producto con ese nombre")
    if "proveedor_producto" in update_data:
        _check_provider(db, update_data["proveedor_producto"])

    for key, value in update_data.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)

    record_change(
        db, current_user.usuario,
        f"Producto actualizado: {product.nombre_producto}",
        ChangeType.ACTUALIZAR, TABLA, product.id,
    )
    return {"success": True, "message": "Producto actualizado exitosamente", "data": product}


# --------------------------------------------------------------------------
# 7. ELIMINAR (BORRADO LÓGICO) Y ACTIVAR/DESACTIVAR
# --------------------------------------------------------------------------
@router.delete("/{product_id}", response_model=ApiResponse[ProductRead])
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    product = _get_or_404(db, product_id)
    product.estado = Status.INACTIVO.value
    db.commit()
    db.refresh(product)

    record_change(
        db, current_user.usuario,
        f"Producto eliminado: {product.nombre_producto}",
        ChangeType.INACTIVO, TABLA, product.id,
    )
    return {"success": True, "message": "Producto eliminado exitosamente", "data": product}


@router.put("/{product_id}/toggle-status", response_model=ApiResponse[ProductRead])
def toggle_product_status(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    product = _get_or_404(db, product_id)
    nuevo = Status.INACTIVO if product.estado == Status.ACTIVO.value else Status.ACTIVO
    product.estado = nuevo.value
    db.commit()
    db.refresh(product)

    record_change(
        db, current_user.usuario,
        f"Producto {product.nombre_producto} marcado como {nuevo.value}",
        ChangeType.ACTIVO if nuevo == Status.ACTIVO else ChangeType.INACTIVO,
        TABLA, product.id,
    )
    return {"success": True, "message": f"Producto {nuevo.value}", "data": product}


# --------------------------------------------------------------------------
# 8. AJUSTES DE STOCK
# --------------------------------------------------------------------------
@router.put("/{product_id}/quantity", response_model=ApiResponse[ProductRead])
def set_product_quantity(
    product_id: int,
    body: QuantityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    product = _get_or_404(db, product_id)
    anterior = product.cantidad_producto
    products_crud.set_quantity(db, product, body.cantidad)

    record_change(
        db, current_user.usuario,
        f"Cantidad del producto {product.nombre_producto} cambiada de {anterior} a {product.cantidad_producto}",
        ChangeType.ACTUALIZAR, TABLA, product.id,
    )
    return {"success": True, "message": "Cantidad actualizada exitosamente", "data": product}


@router.put("/{product_id}/add-stock", response_model=ApiResponse[ProductRead])
def add_product_stock(
    product_id: int,
    body: StockAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_products),
):
    if body.cantidad <= 0:
        raise HTTPException(status_code=400, detail="ID de producto o cantidad inválidos")

    product = _get_or_404(db, product_id)
    products_crud.add_stock(db, product, body.cantidad)

    record_change(
        db, current_user.usuario,
        f"Stock añadido al producto: {product.nombre_producto} "
        f"(+{body.cantidad} unidades, total: {product.cantidad_producto})",
        ChangeType.ACTUALIZAR, TABLA, product.id,
    )
    return {"success": True, "message": "Stock añadido exitosamente", "data": product}
