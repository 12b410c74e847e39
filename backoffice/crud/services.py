# backoffice/crud/services.py
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backoffice.models import Service


def get_service(db: Session, service_id: int) -> Optional[Service]:
    return db.query(Service).filter(Service.id == service_id).first()


def query_services(db: Session, search: Optional[str] = None, estado: Optional[str] = None):
    query = db.query(Service)
    if search:
        search_fmt = f"%{search}%"
        query = query.filter(or_(
            Service.nombre.ilike(search_fmt),
            Service.descripcion.ilike(search_fmt),
        ))
    if estado:
        query = query.filter(Service.estado == estado)
    return query.order_by(Service.nombre)
