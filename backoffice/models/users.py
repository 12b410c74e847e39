# backoffice/models/users.py
import enum

from sqlalchemy import JSON, Column, Date, Integer, String

from backoffice.database import Base
from .common import Status, created_at_column, status_column


class Permission(str, enum.Enum):
    INICIO = "Inicio"
    ASIGNAR = "Asignar"
    CLIENTE = "Cliente"
    VENTAS = "Ventas"
    PRODUCTOS = "Productos"
    SERVICIOS = "Servicios"
    PROVEEDORES = "Proveedores"
    REPORTES = "Reportes"
    USUARIOS = "Usuarios"


class User(Base):
    # En el negocio se les llama "perfiles"
    __tablename__ = "profiles"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    email = Column(String(120), unique=True, index=True, nullable=False)
    genero = Column(String(20), nullable=True)
    fecha_nacimiento = Column(Date, nullable=True)
    cedula = Column(String(20), unique=True, index=True, nullable=False)

    usuario = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    perfil = Column(String(50), default="Empleado", nullable=False)  # nombre del rol
    permisos = Column(JSON, default=list, nullable=False)            # lista de Permission

    estado = status_column()
    fecha_creacion = created_at_column()

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}"

    @property
    def is_active(self) -> bool:
        return self.estado == Status.ACTIVO.value

    @property
    def permission_set(self) -> set:
        granted = set()
        for name in self.permisos or []:
            try:
                granted.add(Permission(name))
            except ValueError:
                # Permiso desconocido guardado en BD: se ignora
                continue
        return granted
