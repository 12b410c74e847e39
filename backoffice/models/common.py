# backoffice/models/common.py
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func


class Status(str, enum.Enum):
    ACTIVO = "activo"
    INACTIVO = "inactivo"


def status_column():
    return Column(String(20), default=Status.ACTIVO.value, nullable=False, index=True)


def created_at_column():
    # Hora local del servidor; las estadísticas "hoy" / "este mes" usan el mismo reloj
    return Column(DateTime, default=datetime.now, server_default=func.now())
