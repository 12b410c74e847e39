# backoffice/crud/providers.py
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from backoffice.models import Provider


def get_provider(db: Session, provider_id: int) -> Optional[Provider]:
    return db.query(Provider).filter(Provider.id == provider_id).first()


def query_providers(db: Session, search: Optional[str] = None, estado: Optional[str] = None):
    query = db.query(Provider)
    if search:
        search_fmt = f"%{search}%"
        query = query.filter(or_(
            Provider.nombre_empresa.ilike(search_fmt),
            Provider.email.ilike(search_fmt),
            Provider.web.ilike(search_fmt),
        ))
    if estado:
        query = query.filter(Provider.estado == estado)
    return query.order_by(Provider.nombre_empresa)
