# backoffice/models/providers.py
from sqlalchemy import Column, Integer, String

from backoffice.database import Base
from .common import created_at_column, status_column


class Provider(Base):
    __tablename__ = "providers"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre_empresa = Column(String(150), nullable=False, index=True)
    email = Column(String(120), nullable=True)
    numero = Column(String(20), nullable=True)
    web = Column(String(200), nullable=True)

    estado = status_column()
    fecha_creacion = created_at_column()
