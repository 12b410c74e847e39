# backoffice/models/sales.py
from sqlalchemy import JSON, Column, Integer, Numeric, String
from sqlalchemy.orm import relationship

from backoffice.database import Base
from .common import created_at_column, status_column


class Sale(Base):
    __tablename__ = "sales"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)

    # Referencia al cliente por cédula (no es llave foránea)
    cedula_cliente = Column(String(20), index=True, nullable=False)

    # Renglones embebidos: [{"id", "cantidad", "costo", "nombre"}]
    productos = Column(JSON, default=list, nullable=False)
    servicios = Column(JSON, default=list, nullable=False)

    iva = Column(Numeric(5, 2), default=0, nullable=False)           # porcentaje
    total_pagar = Column(Numeric(12, 2), default=0, nullable=False)
    metodo = Column(String(30), default="efectivo", nullable=False)
    vendedor = Column(String(200), nullable=True)                     # nombre al momento de la venta

    estado = status_column()
    fecha_creacion = created_at_column()

    # Join por cédula, sin llave foránea
    cliente = relationship(
        "Client",
        primaryjoin="foreign(Sale.cedula_cliente) == Client.cedula",
        viewonly=True,
    )

    @property
    def cliente_nombre(self):
        return self.cliente.nombre_completo if self.cliente else None
