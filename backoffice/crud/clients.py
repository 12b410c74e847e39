# backoffice/crud/clients.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backoffice.database import Database
from backoffice.models import Client, Status

logger = logging.getLogger("backoffice.clients")


def get_client(db: Session, client_id: int) -> Optional[Client]:
    return db.query(Client).filter(Client.id == client_id).first()


def get_client_by_cedula(db: Session, cedula: str) -> Optional[Client]:
    return db.query(Client).filter(Client.cedula == cedula).first()


def query_clients(db: Session, search: Optional[str] = None, estado: Optional[str] = None):
    query = db.query(Client)
    if search:
        # Búsqueda insensible a mayúsculas
        search_fmt = f"%{search}%"
        query = query.filter(or_(
            Client.nombre.ilike(search_fmt),
            Client.apellido.ilike(search_fmt),
            Client.cedula.ilike(search_fmt),
            Client.email.ilike(search_fmt),
        ))
    if estado:
        query = query.filter(Client.estado == estado)
    return query.order_by(Client.fecha_creacion.desc(), Client.id.desc())


def cedula_taken(db: Session, cedula: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Client.id).filter(Client.cedula == cedula)
    if exclude_id is not None:
        query = query.filter(Client.id != exclude_id)
    return query.first() is not None


def set_status(db: Session, client: Client, estado: Status) -> Client:
    client.estado = estado.value
    db.commit()
    db.refresh(client)
    return client


def fetch_client_row(database: Database, cedula: str) -> Optional[Dict[str, Any]]:
    """
    Lectura directa para la factura. Si falla se devuelve None y la
    factura muestra "No disponible" en los datos del cliente.
    """
    try:
        return database.fetch_one(
            "SELECT * FROM clients WHERE cedula = :cedula", {"cedula": cedula}
        )
    except SQLAlchemyError:
        logger.warning("No se pudo leer el cliente %s para la factura", cedula, exc_info=True)
        return None
