from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel


class ChangeRead(BaseModel):
    id: int
    id_cambiado: int
    usuario_id: str
    descripcion: str
    tipo_cambio: str
    tabla_afectada: str
    fecha: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChangeStats(BaseModel):
    total_cambios: int
    cambios_hoy: int
    cambios_semana: int
    por_tipo: Dict[str, int]
    por_tabla: Dict[str, int]
