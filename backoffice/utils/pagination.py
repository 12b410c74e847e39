# backoffice/utils/pagination.py
import math
from dataclasses import dataclass

from fastapi import Query


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
) -> PageParams:
    return PageParams(page=page, limit=limit)


def paginate(query, params: PageParams):
    """Devuelve (items, pagination) para una query de SQLAlchemy."""
    total = query.count()
    items = query.offset(params.offset).limit(params.limit).all()
    pagination = {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "totalPages": math.ceil(total / params.limit) if total else 0,
    }
    return items, pagination
