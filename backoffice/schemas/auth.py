from datetime import date
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .users import UserBase, UserRead


class LoginRequest(BaseModel):
    usuario: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginData(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class RegisterRequest(UserBase):
    password: str = Field(..., min_length=6)


class ProfileUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=100)
    apellido: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    genero: Optional[str] = None
    fecha_nacimiento: Optional[date] = None
