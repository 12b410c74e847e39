# backoffice/routers/providers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.crud import providers as providers_crud
from backoffice.crud.changes import record_change
from backoffice.database import get_db
from backoffice.models import ChangeType, Permission, Provider, Status, User
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.providers import ProviderCreate, ProviderRead, ProviderUpdate
from backoffice.security import require_permissions
from backoffice.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

TABLA = "proveedores"
can_manage_providers = require_permissions(Permission.PROVEEDORES)


def _get_or_404(db: Session, provider_id: int) -> Provider:
    provider = providers_crud.get_provider(db, provider_id)
    if not provider:
        raise HTTPException(status_code=404, detail="Proveedor no encontrado")
    return provider


@router.get("/", response_model=ApiResponse[List[ProviderRead]])
def get_providers(
    search: Optional[str] = None,
    estado: Optional[Status] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_providers),
):
    query = providers_crud.query_providers(db, search, estado.value if estado else None)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": "Proveedores obtenidos exitosamente",
        "data": items,
        "pagination": pagination,
    }


@router.get("/{provider_id}", response_model=ApiResponse[ProviderRead])
def get_provider(
    provider_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_providers),
):
    return {"success": True, "message": "Proveedor obtenido exitosamente", "data": _get_or_404(db, provider_id)}


@router.post("/", response_model=ApiResponse[ProviderRead], status_code=status.HTTP_201_CREATED)
def create_provider(
    provider_in: ProviderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_providers),
):
    provider = Provider(**provider_in.model_dump(), estado=Status.ACTIVO.value)
    db.add(provider)
    db.commit()
    db.refresh(provider)

    record_change(
        db, current_user.usuario, f"Proveedor agregado: {provider.nombre_empresa}",
        ChangeType.AGREGAR, TABLA, provider.id,
    )
    return {"success": True, "message": "Proveedor creado exitosamente", "data": provider}


@router.put("/{provider_id}", response_model=ApiResponse[ProviderRead])
def update_provider(
    provider_id: int,
    provider_in: ProviderUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_providers),
):
    provider = _get_or_404(db, provider_id)
    for key, value in provider_in.model_dump(exclude_unset=True).items():
        setattr(provider, key, value)
    db.commit()
    db.refresh(provider)

    record_change(
        db, current_user.usuario, f"Proveedor actualizado: {provider.nombre_empresa}",
        ChangeType.ACTUALIZAR, TABLA, provider.id,
    )
    return {"success": True, "message": "Proveedor actualizado exitosamente", "data": provider}


@router.delete("/{provider_id}", response_model=ApiResponse[ProviderRead])
def delete_provider(
    provider_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_providers),
):
    provider = _get_or_404(db, provider_id)
    provider.estado = Status.INACTIVO.value
    db.commit()
    db.refresh(provider)

    record_change(
        db, current_user.usuario, f"Proveedor eliminado: {provider.nombre_empresa}",
        ChangeType.INACTIVO, TABLA, provider.id,
    )
    return {"success": True, "message": "Proveedor eliminado exitosamente", "data": provider}
