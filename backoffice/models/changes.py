# backoffice/models/changes.py
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from backoffice.database import Base


class ChangeType(str, enum.Enum):
    AGREGAR = "Agregar"
    ACTUALIZAR = "Actualizar"
    ACTIVO = "Activo"
    INACTIVO = "Inactivo"


class Change(Base):
    """Bitácora de cambios: quién modificó qué registro y cómo."""
    __tablename__ = "changes"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    id_cambiado = Column(Integer, default=0, nullable=False)
    usuario_id = Column(String(50), index=True, nullable=False)  # username del autor
    descripcion = Column(Text, nullable=False)
    tipo_cambio = Column(String(20), nullable=False)
    tabla_afectada = Column(String(50), index=True, nullable=False)
    fecha = Column(DateTime, default=datetime.now, server_default=func.now(), index=True)
