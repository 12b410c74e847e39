# backoffice/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_app_settings
from backoffice.crud import users as users_crud
from backoffice.crud.changes import record_change
from backoffice.database import get_db
from backoffice.models import ChangeType, Permission, User
from backoffice.schemas.auth import LoginData, LoginRequest, ProfileUpdate, RegisterRequest
from backoffice.schemas.common import ApiResponse
from backoffice.schemas.users import UserRead
from backoffice.security import get_current_user, token_for_user, verify_password

router = APIRouter()
logger = logging.getLogger("backoffice.auth")


@router.post("/login", response_model=ApiResponse[LoginData])
def login(
    credentials: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = users_crud.get_user_by_username(db, credentials.usuario)

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Intento de acceso fallido para '%s'", credentials.usuario)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario inactivo")

    logger.info("Inicio de sesión: %s", user.usuario)
    return {
        "success": True,
        "message": "Login exitoso",
        "data": {"token": token_for_user(settings, user), "token_type": "bearer", "user": user},
    }


@router.post("/register", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Alta pública: el usuario nace solo con acceso a Inicio."""
    conflict = users_crud.find_conflict(db, body.usuario, body.email, body.cedula)
    if conflict:
        raise HTTPException(status_code=400, detail=conflict)

    data = body.model_dump(exclude={"password"})
    data.update(perfil="Empleado", permisos=[Permission.INICIO])
    user = users_crud.create_user(db, data, body.password)

    record_change(
        db, user.usuario, f"Usuario registrado: {user.usuario}",
        ChangeType.AGREGAR, "usuarios", user.id,
    )
    return {"success": True, "message": "Usuario registrado exitosamente", "data": user}


@router.get("/profile", response_model=ApiResponse[UserRead])
def get_profile(current_user: User = Depends(get_current_user)):
    return {"success": True, "message": "Perfil obtenido exitosamente", "data": current_user}


@router.put("/profile", response_model=ApiResponse[UserRead])
def update_profile(
    body: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    update_data = body.model_dump(exclude_unset=True)
    if update_data.get("email"):
        conflict = users_crud.find_conflict(db, email=update_data["email"], exclude_id=current_user.id)
        if conflict:
            raise HTTPException(status_code=400, detail=conflict)

    for key, value in update_data.items():
        if value is None and key in ("nombre", "apellido", "email"):
            continue
        setattr(current_user, key, value)
    db.commit()
    db.refresh(current_user)

    record_change(
        db, current_user.usuario, f"Perfil actualizado: {current_user.usuario}",
        ChangeType.ACTUALIZAR, "usuarios", current_user.id,
    )
    return {"success": True, "message": "Perfil actualizado exitosamente", "data": current_user}


@router.post("/logout", response_model=ApiResponse)
def logout(current_user: User = Depends(get_current_user)):
    # JWT sin estado: el cliente descarta el token
    logger.info("Cierre de sesión: %s", current_user.usuario)
    return {"success": True, "message": "Logout exitoso"}
