# backoffice/models/products.py
from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backoffice.database import Base
from .common import created_at_column, status_column


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre_producto = Column(String(150), unique=True, index=True, nullable=False)
    cantidad_producto = Column(Integer, default=0, nullable=False)  # existencias

    precio_producto = Column(Numeric(10, 2), default=0, nullable=False)  # precio de venta
    precio_compra = Column(Numeric(10, 2), default=0, nullable=False)

    marca_producto = Column(String(100), nullable=True)
    categoria_producto = Column(String(50), nullable=True)
    proveedor_producto = Column(Integer, ForeignKey("providers.id"), nullable=True)

    estado = status_column()
    fecha_creacion = created_at_column()

    proveedor = relationship("Provider")

    @property
    def proveedor_nombre(self):
        return self.proveedor.nombre_empresa if self.proveedor else None
