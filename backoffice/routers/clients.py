# backoffice/routers/clients.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.crud import clients as clients_crud
from backoffice.crud.changes import record_change
from backoffice.database import get_db
from backoffice.models import ChangeType, Client, Permission, Status, User
from backoffice.schemas.clients import ClientCreate, ClientRead, ClientUpdate
from backoffice.schemas.common import ApiResponse
from backoffice.security import require_permissions
from backoffice.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

TABLA = "clientes"
can_manage_clients = require_permissions(Permission.CLIENTE)


def _get_or_404(db: Session, client_id: int) -> Client:
    client = clients_crud.get_client(db, client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return client


# --------------------------------------------------------------------------
# 1. LISTAR CLIENTES
# --------------------------------------------------------------------------
@router.get("/", response_model=ApiResponse[List[ClientRead]])
def get_clients(
    search: Optional[str] = None,  # nombre, apellido, cédula o email
    estado: Optional[Status] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    query = clients_crud.query_clients(db, search, estado.value if estado else None)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": "Clientes obtenidos exitosamente",
        "data": items,
        "pagination": pagination,
    }


# --------------------------------------------------------------------------
# 2. BUSCAR POR CÉDULA
# --------------------------------------------------------------------------
@router.get("/cedula/{cedula}", response_model=ApiResponse[ClientRead])
def get_client_by_cedula(
    cedula: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    client = clients_crud.get_client_by_cedula(db, cedula)
    if not client:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return {"success": True, "message": "Cliente encontrado", "data": client}


# --------------------------------------------------------------------------
# 3. OBTENER DETALLE
# --------------------------------------------------------------------------
@router.get("/{client_id}", response_model=ApiResponse[ClientRead])
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    return {"success": True, "message": "Cliente obtenido exitosamente", "data": _get_or_404(db, client_id)}


# --------------------------------------------------------------------------
# 4. CREAR CLIENTE
# --------------------------------------------------------------------------
@router.post("/", response_model=ApiResponse[ClientRead], status_code=status.HTTP_201_CREATED)
def create_client(
    client_in: ClientCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    if clients_crud.cedula_taken(db, client_in.cedula):
        raise HTTPException(status_code=400, detail="Ya existe un cliente con esta cédula")

    new_client = Client(**client_in.model_dump(), estado=Status.ACTIVO.value)
    db.add(new_client)
    db.commit()
    db.refresh(new_client)

    record_change(
        db, current_user.usuario,
        f"Cliente agregado: {new_client.nombre_completo} (cédula {new_client.cedula})",
        ChangeType.AGREGAR, TABLA, new_client.id,
    )
    return {"success": True, "message": "Cliente creado exitosamente", "data": new_client}


# --------------------------------------------------------------------------
# 5. ACTUALIZAR CLIENTE
# --------------------------------------------------------------------------
@router.put("/{client_id}", response_model=ApiResponse[ClientRead])
def update_client(
    client_id: int,
    client_in: ClientUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    client = _get_or_404(db, client_id)

    update_data = client_in.model_dump(exclude_unset=True)
    if update_data.get("cedula") and clients_crud.cedula_taken(db, update_data["cedula"], exclude_id=client.id):
        raise HTTPException(status_code=400, detail="Ya existe un cliente con esta cédula")

    for key, value in update_data.items():
        setattr(client, key, value)
    db.commit()
    db.refresh(client)

    record_change(
        db, current_user.usuario,
        f"Cliente actualizado: {client.nombre_completo} (campos: {', '.join(update_data) or 'ninguno'})",
        ChangeType.ACTUALIZAR, TABLA, client.id,
    )
    return {"success": True, "message": "Cliente actualizado exitosamente", "data": client}


# --------------------------------------------------------------------------
# 6. ELIMINAR (BORRADO LÓGICO)
# --------------------------------------------------------------------------
@router.delete("/{client_id}", response_model=ApiResponse[ClientRead])
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    client = _get_or_404(db, client_id)
    clients_crud.set_status(db, client, Status.INACTIVO)

    record_change(
        db, current_user.usuario,
        f"Cliente eliminado: {client.nombre_completo}",
        ChangeType.INACTIVO, TABLA, client.id,
    )
    return {"success": True, "message": "Cliente eliminado exitosamente", "data": client}


# --------------------------------------------------------------------------
# 7. ACTIVAR / DESACTIVAR
# --------------------------------------------------------------------------
@router.put("/{client_id}/toggle-status", response_model=ApiResponse[ClientRead])
def toggle_client_status(
    client_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_clients),
):
    client = _get_or_404(db, client_id)
    nuevo = Status.INACTIVO if client.estado == Status.ACTIVO.value else Status.ACTIVO
    clients_crud.set_status(db, client, nuevo)

    record_change(
        db, current_user.usuario,
        f"Cliente {client.nombre_completo} marcado como {nuevo.value}",
        ChangeType.ACTIVO if nuevo == Status.ACTIVO else ChangeType.INACTIVO,
        TABLA, client.id,
    )
    return {"success": True, "message": f"Cliente {nuevo.value}", "data": client}
