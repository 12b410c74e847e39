from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_app_settings
from backoffice.database import get_db
from backoffice.models import Permission, User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def verify_password(plain_password, hashed_password):
    """Verifica si la contraseña coincide con el hash guardado."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    """Genera el hash seguro de la contraseña."""
    return pwd_context.hash(password)


def create_access_token(settings, data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def token_for_user(settings, user: User) -> str:
    return create_access_token(settings, {
        "sub": user.usuario,
        "uid": user.id,
        "perfil": user.perfil,
        "permisos": list(user.permisos or []),
    })


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de acceso requerido",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Credenciales no válidas",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    # Los permisos se leen de la BD, no del token: un cambio aplica de inmediato
    user = db.query(User).filter(User.usuario == username).first()
    if user is None or not user.is_active:
        raise credentials_exception

    return user


def require_permissions(*permissions: Permission):
    """
    Dependencia: el usuario debe tener AL MENOS UNO de los permisos indicados.
    Uso: Depends(require_permissions(Permission.VENTAS, Permission.REPORTES))
    """
    required = set(permissions)

    def checker(current_user: User = Depends(get_current_user)) -> User:
        if not required & current_user.permission_set:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tienes permisos para acceder a este recurso",
            )
        return current_user

    return checker
