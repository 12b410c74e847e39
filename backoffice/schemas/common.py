# backoffice/schemas/common.py
from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer

T = TypeVar("T")

# Decimal en Python, número en el JSON que consume el frontend
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class FieldError(BaseModel):
    field: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    """Sobre estándar de todas las respuestas JSON."""
    success: bool = True
    message: str = ""
    data: Optional[T] = None
    pagination: Optional[Pagination] = None
    errors: Optional[List[FieldError]] = None
