# backoffice/crud/users.py
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from backoffice.models import Status, User
from backoffice.security import get_password_hash


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.usuario == username).first()


def query_users(db: Session, search: Optional[str] = None, estado: Optional[str] = None,
                perfil: Optional[str] = None):
    query = db.query(User)
    if search:
        search_fmt = f"%{search}%"
        query = query.filter(or_(
            User.nombre.ilike(search_fmt),
            User.apellido.ilike(search_fmt),
            User.usuario.ilike(search_fmt),
            User.email.ilike(search_fmt),
            User.cedula.ilike(search_fmt),
        ))
    if estado:
        query = query.filter(User.estado == estado)
    if perfil:
        query = query.filter(User.perfil == perfil)
    return query.order_by(User.fecha_creacion.desc(), User.id.desc())


def find_conflict(db: Session, usuario: Optional[str] = None, email: Optional[str] = None,
                  cedula: Optional[str] = None, exclude_id: Optional[int] = None) -> Optional[str]:
    """Devuelve el mensaje del primer campo único ya ocupado, o None."""
    checks = (
        (User.usuario, usuario, "El nombre de usuario ya está en uso"),
        (User.email, email, "El email ya está registrado"),
        (User.cedula, cedula, "La cédula ya está registrada"),
    )
    for column, value, message in checks:
        if not value:
            continue
        query = db.query(User.id).filter(column == value)
        if exclude_id is not None:
            query = query.filter(User.id != exclude_id)
        if query.first() is not None:
            return message
    return None


def create_user(db: Session, data: dict, password: str) -> User:
    permisos = [p.value if hasattr(p, "value") else p for p in data.pop("permisos", [])]
    user = User(**data, permisos=permisos, password_hash=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def set_password(db: Session, user: User, password: str) -> None:
    user.password_hash = get_password_hash(password)
    db.commit()


def user_stats(db: Session) -> dict:
    total = db.query(func.count(User.id)).scalar() or 0
    activos = db.query(func.count(User.id)).filter(User.estado == Status.ACTIVO.value).scalar() or 0
    por_perfil = dict(db.query(User.perfil, func.count(User.id)).group_by(User.perfil).all())
    por_genero = {
        (genero or "Sin especificar"): count
        for genero, count in db.query(User.genero, func.count(User.id)).group_by(User.genero).all()
    }
    return {
        "total": total,
        "activos": activos,
        "inactivos": total - activos,
        "porPerfil": por_perfil,
        "porGenero": por_genero,
    }
