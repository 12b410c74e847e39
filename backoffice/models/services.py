# backoffice/models/services.py
from sqlalchemy import JSON, Column, Integer, Numeric, String, Text

from backoffice.database import Base
from .common import created_at_column, status_column


class Service(Base):
    __tablename__ = "services"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(150), nullable=False, index=True)
    descripcion = Column(Text, nullable=True)

    # IDs de los productos que consume el servicio
    productos = Column(JSON, default=list, nullable=False)

    coste_total = Column(Numeric(10, 2), default=0, nullable=False)     # costo de insumos
    costo_servicio = Column(Numeric(10, 2), default=0, nullable=False)  # precio al cliente

    estado = status_column()
    fecha_creacion = created_at_column()
