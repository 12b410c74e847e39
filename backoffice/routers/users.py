# backoffice/routers/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.crud import users as users_crud
from backoffice.crud.changes import record_change
from backoffice.database import get_db
from backoffice.models import ChangeType, Permission, Status, User
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.users import PasswordChange, UserCreate, UserRead, UserStats, UserUpdate
from backoffice.security import get_current_user, require_permissions, verify_password
from backoffice.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

TABLA = "usuarios"
can_manage_users = require_permissions(Permission.USUARIOS)


def _get_or_404(db: Session, user_id: int) -> User:
    user = users_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return user


# --------------------------------------------------------------------------
# 1. LISTADO Y ESTADÍSTICAS
# --------------------------------------------------------------------------
@router.get("/", response_model=ApiResponse[List[UserRead]])
def get_users(
    search: Optional[str] = None,
    estado: Optional[Status] = None,
    perfil: Optional[str] = None,
    params: PageParams = Depends(page_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    query = users_crud.query_users(db, search, estado.value if estado else None, perfil)
    items, pagination = paginate(query, params)
    return {
        "success": True,
        "message": "Usuarios obtenidos exitosamente",
        "data": items,
        "pagination": pagination,
    }


@router.get("/stats", response_model=ApiResponse[UserStats])
def get_user_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    return {"success": True, "message": "Estadísticas obtenidas exitosamente", "data": users_crud.user_stats(db)}


@router.get("/{user_id}", response_model=ApiResponse[UserRead])
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    return {"success": True, "message": "Usuario obtenido exitosamente", "data": _get_or_404(db, user_id)}


# --------------------------------------------------------------------------
# 2. CREAR
# --------------------------------------------------------------------------
@router.post("/", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    conflict = users_crud.find_conflict(db, user_in.usuario, user_in.email, user_in.cedula)
    if conflict:
        raise HTTPException(status_code=400, detail=conflict)

    user = users_crud.create_user(db, user_in.model_dump(exclude={"password"}), user_in.password)

    record_change(
        db, current_user.usuario,
        f"Usuario agregado: {user.usuario} ({user.perfil})",
        ChangeType.AGREGAR, TABLA, user.id,
    )
    return {"success": True, "message": "Usuario creado exitosamente", "data": user}


# --------------------------------------------------------------------------
# 3. ACTUALIZAR
# --------------------------------------------------------------------------
@router.put("/{user_id}", response_model=ApiResponse[UserRead])
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    user = _get_or_404(db, user_id)

    update_data = user_in.model_dump(exclude_unset=True)
    conflict = users_crud.find_conflict(
        db, update_data.get("usuario"), update_data.get("email"), update_data.get("cedula"),
        exclude_id=user.id,
    )
    if conflict:
        raise HTTPException(status_code=400, detail=conflict)

    if update_data.get("permisos") is not None:
        update_data["permisos"] = [p.value for p in update_data["permisos"]]
    for key, value in update_data.items():
        if value is None and key in ("nombre", "apellido", "email", "cedula", "usuario", "perfil", "permisos"):
            continue  # columnas NOT NULL
        setattr(user, key, value)
    db.commit()
    db.refresh(user)

    record_change(
        db, current_user.usuario, f"Usuario actualizado: {user.usuario}",
        ChangeType.ACTUALIZAR, TABLA, user.id,
    )
    return {"success": True, "message": "Usuario actualizado exitosamente", "data": user}


# --------------------------------------------------------------------------
# 4. ELIMINAR (BORRADO LÓGICO) Y ACTIVAR/DESACTIVAR
# --------------------------------------------------------------------------
@router.delete("/{user_id}", response_model=ApiResponse[UserRead])
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=403, detail="No puedes eliminar tu propio usuario")

    user = _get_or_404(db, user_id)
    user.estado = Status.INACTIVO.value
    db.commit()
    db.refresh(user)

    record_change(
        db, current_user.usuario, f"Usuario eliminado: {user.usuario}",
        ChangeType.INACTIVO, TABLA, user.id,
    )
    return {"success": True, "message": "Usuario eliminado exitosamente", "data": user}


@router.patch("/{user_id}/toggle-status", response_model=ApiResponse[UserRead])
def toggle_user_status(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(can_manage_users),
):
    if user_id == current_user.id:
        raise HTTPException(status_code=403, detail="No puedes cambiar el estado de tu propio usuario")

    user = _get_or_404(db, user_id)
    nuevo = Status.INACTIVO if user.is_active else Status.ACTIVO
    user.estado = nuevo.value
    db.commit()
    db.refresh(user)

    record_change(
        db, current_user.usuario, f"Usuario {user.usuario} marcado como {nuevo.value}",
        ChangeType.ACTIVO if nuevo == Status.ACTIVO else ChangeType.INACTIVO,
        TABLA, user.id,
    )
    return {"success": True, "message": f"Usuario {nuevo.value}", "data": user}


# --------------------------------------------------------------------------
# 5. CAMBIO DE CONTRASEÑA (propia, o de otro con permiso Asignar)
# --------------------------------------------------------------------------
@router.patch("/{user_id}/change-password", response_model=ApiResponse)
def change_password(
    user_id: int,
    body: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    is_self = user_id == current_user.id
    if not is_self and Permission.ASIGNAR not in current_user.permission_set:
        raise HTTPException(status_code=403, detail="No tienes permisos para cambiar esta contraseña")

    user = _get_or_404(db, user_id)
    if is_self:
        if not body.password_actual or not verify_password(body.password_actual, user.password_hash):
            raise HTTPException(status_code=400, detail="La contraseña actual es incorrecta")

    users_crud.set_password(db, user, body.password_nueva)

    record_change(
        db, current_user.usuario, f"Contraseña actualizada para el usuario {user.usuario}",
        ChangeType.ACTUALIZAR, TABLA, user.id,
    )
    return {"success": True, "message": "Contraseña actualizada exitosamente"}
