# backoffice/routers/services.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.crud import services as services_crud
from backoffice.crud.changes import record_change
from backoffice.database import get_db
from backoffice.models import ChangeType, Permission, Service, Status, User
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.services import ServiceCreate, ServiceRead, ServiceStatusUpdate, ServiceUpdate
from backoffice.security import require_permissions
from backoffice.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

TABLA = "servicios"
can_manage_services = require_permissions(Permission.SERVICIOS)


def _get_or_404(db: Session, service_id: int) -> Service:
    service = services_crud.get_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Servicio no encontrado")
    return service


@router.get("/", response_model=ApiResponse[List[ServiceRead]])
def get_services(
    search: Optional[str] = None,
    estado: Optional[Status] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_services),
):
    query = services_crud.query_services(db, search, estado.value if estado else None)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": "Servicios obtenidos exitosamente",
        "data": items,
        "pagination": pagination,
    }


@router.get("/active", response_model=ApiResponse[List[ServiceRead]])
def get_active_services(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permissions(Permission.SERVICIOS, Permission.VENTAS)),
):
    items = services_crud.query_services(db, estado=Status.ACTIVO.value).all()
    return {"success": True, "message": "Servicios activos obtenidos exitosamente", "data": items}


@router.get("/{service_id}", response_model=ApiResponse[ServiceRead])
def get_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_services),
):
    return {"success": True, "message": "Servicio obtenido exitosamente", "data": _get_or_404(db, service_id)}


@router.post("/", response_model=ApiResponse[ServiceRead], status_code=status.HTTP_201_CREATED)
def create_service(
    service_in: ServiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_services),
):
    service = Service(**service_in.model_dump(), estado=Status.ACTIVO.value)
    db.add(service)
    db.commit()
    db.refresh(service)

    record_change(
        db, current_user.usuario, f"Servicio agregado: {service.nombre}",
        ChangeType.AGREGAR, TABLA, service.id,
    )
    return {"success": True, "message": "Servicio creado exitosamente", "data": service}


@router.put("/{service_id}", response_model=ApiResponse[ServiceRead])
def update_service(
    service_id: int,
    service_in: ServiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_services),
):
    service = _get_or_404(db, service_id)
    for key, value in service_in.model_dump(exclude_unset=True).items():
        setattr(service, key, value)
    db.commit()
    db.refresh(service)

    record_change(
        db, current_user.usuario, f"Servicio actualizado: {service.nombre}",
        ChangeType.ACTUALIZAR, TABLA, service.id,
    )
    return {"success": True, "message": "Servicio actualizado exitosamente", "data": service}


@router.patch("/{service_id}/status", response_model=ApiResponse[ServiceRead])
def change_service_status(
    service_id: int,
    body: ServiceStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_services),
):
    service = _get_or_404(db, service_id)
    service.estado = body.estado.value
    db.commit()
    db.refresh(service)

    record_change(
        db, current_user.usuario, f"Servicio {service.nombre} marcado como {body.estado.value}",
        ChangeType.ACTIVO if body.estado == Status.ACTIVO else ChangeType.INACTIVO,
        TABLA, service.id,
    )
    return {"success": True, "message": f"Servicio {body.estado.value}", "data": service}


@router.delete("/{service_id}", response_model=ApiResponse[ServiceRead])
def delete_service(
    service_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_services),
):
    service = _get_or_404(db, service_id)
    service.estado = Status.INACTIVO.value
    db.commit()
    db.refresh(service)

    record_change(
        db, current_user.usuario, f"Servicio eliminado: {service.nombre}",
        ChangeType.INACTIVO, TABLA, service.id,
    )
    return {"success": True, "message": "Servicio eliminado exitosamente", "data": service}
