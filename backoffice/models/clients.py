# backoffice/models/clients.py
from sqlalchemy import Column, Date, Integer, String

from backoffice.database import Base
from .common import created_at_column, status_column


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    cedula = Column(String(20), unique=True, index=True, nullable=False)
    numero = Column(String(20), nullable=True)   # teléfono
    email = Column(String(120), nullable=True)
    fecha_nacimiento = Column(Date, nullable=True)
    genero = Column(String(20), nullable=True)
    locacion = Column(String(200), nullable=True)

    estado = status_column()
    fecha_creacion = created_at_column()

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}"
