from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field

from backoffice.models.users import Permission

# --- CLASES BASE ---

class UserBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=100)
    apellido: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    genero: Optional[str] = None
    fecha_nacimiento: Optional[date] = None
    cedula: str = Field(..., min_length=1, max_length=20)
    usuario: str = Field(..., min_length=3, max_length=50)

# --- CREACIÓN ---
class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    perfil: str = "Empleado"
    permisos: List[Permission] = []

# --- ACTUALIZACIÓN ---
class UserUpdate(BaseModel):
    # La contraseña NO se cambia aquí, tiene su propio endpoint
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    apellido: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    genero: Optional[str] = None
    fecha_nacimiento: Optional[date] = None
    cedula: Optional[str] = Field(None, min_length=1, max_length=20)
    usuario: Optional[str] = Field(None, min_length=3, max_length=50)
    perfil: Optional[str] = None
    permisos: Optional[List[Permission]] = None

class PasswordChange(BaseModel):
    password_actual: Optional[str] = None  # obligatoria cuando el usuario cambia la suya
    password_nueva: str = Field(..., min_length=6)

# --- LECTURA (RESPONSE) ---
class UserRead(UserBase):
    id: int
    email: str
    perfil: str
    permisos: List[str] = []
    estado: str
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserStats(BaseModel):
    total: int
    activos: int
    inactivos: int
    porPerfil: Dict[str, int]
    porGenero: Dict[str, int]
