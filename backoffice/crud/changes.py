# backoffice/crud/changes.py
import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.models import Change, ChangeType

logger = logging.getLogger("backoffice.audit")


def record_change(db: Session, actor: str, descripcion: str, tipo: ChangeType,
                  tabla: str, id_cambiado: int = 0) -> Optional[Change]:
    """
    Registra un cambio en la bitácora.
    Se llama DESPUÉS de que la operación principal ya hizo commit: si la
    bitácora falla se registra en el log y la petición sigue su curso.
    """
    entry = Change(
        id_cambiado=id_cambiado or 0,
        usuario_id=actor,
        descripcion=descripcion,
        tipo_cambio=tipo.value,
        tabla_afectada=tabla,
    )
    try:
        db.add(entry)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("No se pudo registrar el cambio en %s: %s", tabla, descripcion)
        return None
    return entry


def query_changes(db: Session, search: Optional[str] = None, tabla: Optional[str] = None):
    query = db.query(Change)
    if search:
        search_fmt = f"%{search}%"
        query = query.filter(or_(
            Change.descripcion.ilike(search_fmt),
            Change.usuario_id.ilike(search_fmt),
            Change.tabla_afectada.ilike(search_fmt),
        ))
    if tabla:
        query = query.filter(Change.tabla_afectada == tabla)
    return query.order_by(Change.fecha.desc(), Change.id.desc())


def changes_between(db: Session, fecha_inicio: date, fecha_fin: date):
    start = datetime.combine(fecha_inicio, time.min)
    end = datetime.combine(fecha_fin + timedelta(days=1), time.min)
    return (
        db.query(Change)
        .filter(Change.fecha >= start, Change.fecha < end)
        .order_by(Change.fecha.desc(), Change.id.desc())
        .all()
    )


def change_stats(db: Session) -> dict:
    today = datetime.combine(date.today(), time.min)
    week_ago = today - timedelta(days=7)

    por_tipo = dict(
        db.query(Change.tipo_cambio, func.count(Change.id)).group_by(Change.tipo_cambio).all()
    )
    por_tabla = dict(
        db.query(Change.tabla_afectada, func.count(Change.id)).group_by(Change.tabla_afectada).all()
    )
    return {
        "total_cambios": db.query(func.count(Change.id)).scalar() or 0,
        "cambios_hoy": db.query(func.count(Change.id)).filter(Change.fecha >= today).scalar() or 0,
        "cambios_semana": db.query(func.count(Change.id)).filter(Change.fecha >= week_ago).scalar() or 0,
        "por_tipo": por_tipo,
        "por_tabla": por_tabla,
    }
