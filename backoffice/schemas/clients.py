from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

# --- CLASES BASE ---

class ClientBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    apellido: str = Field(..., min_length=1, max_length=100)
    cedula: str = Field(..., min_length=1, max_length=20)
    numero: Optional[str] = None        # Teléfono
    email: Optional[EmailStr] = None
    fecha_nacimiento: Optional[date] = None
    genero: Optional[str] = None
    locacion: Optional[str] = None

# --- CREACIÓN ---
class ClientCreate(ClientBase):
    pass

# --- ACTUALIZACIÓN ---
class ClientUpdate(BaseModel):
    # Todo opcional: solo se tocan los campos enviados
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    apellido: Optional[str] = Field(None, min_length=1, max_length=100)
    cedula: Optional[str] = Field(None, min_length=1, max_length=20)
    numero: Optional[str] = None
    email: Optional[EmailStr] = None
    fecha_nacimiento: Optional[date] = None
    genero: Optional[str] = None
    locacion: Optional[str] = None

# --- LECTURA (RESPONSE) ---
class ClientRead(ClientBase):
    id: int
    email: Optional[str] = None
    estado: str
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True
