# backoffice/routers/changes.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from backoffice.crud import changes as changes_crud
from backoffice.database import get_db
from backoffice.models import Change, Permission, User
from backoffice.schemas.changes import ChangeRead, ChangeStats
from backoffice.schemas.common import ApiResponse
from backoffice.security import require_permissions
from backoffice.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

can_read_changes = require_permissions(Permission.REPORTES)


@router.get("/", response_model=ApiResponse[List[ChangeRead]])
def get_changes(
    search: Optional[str] = None,
    tabla: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_changes),
):
    items, pagination = paginate(changes_crud.query_changes(db, search, tabla), params)
    return {
        "success": True,
        "message": "Cambios obtenidos exitosamente",
        "data": items,
        "pagination": pagination,
    }


@router.get("/stats", response_model=ApiResponse[ChangeStats])
def get_change_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_changes),
):
    return {"success": True, "message": "Estadísticas obtenidas exitosamente", "data": changes_crud.change_stats(db)}


@router.get("/table/{tabla}", response_model=ApiResponse[List[ChangeRead]])
def get_changes_by_table(
    tabla: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_changes),
):
    items, pagination = paginate(changes_crud.query_changes(db, tabla=tabla), params)
    return {
        "success": True,
        "message": f"Cambios de la tabla {tabla}",
        "data": items,
        "pagination": pagination,
    }


@router.get("/user/{usuario}", response_model=ApiResponse[List[ChangeRead]])
def get_changes_by_user(
    usuario: str,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_changes),
):
    query = changes_crud.query_changes(db).filter(Change.usuario_id == usuario)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": f"Cambios realizados por {usuario}",
        "data": items,
        "pagination": pagination,
    }


@router.get("/{change_id}", response_model=ApiResponse[ChangeRead])
def get_change(
    change_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_read_changes),
):
    change = db.query(Change).filter(Change.id == change_id).first()
    if not change:
        raise HTTPException(status_code=404, detail="Cambio no encontrado")
    return {"success": True, "message": "Cambio obtenido exitosamente", "data": change}
