"""
Offset pagination for ORM selects.
"""

from typing import Any, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import logger

T = TypeVar("T")


class PaginationParams:
    """Page number (1-based), page size and an optional free-text search term."""

    def __init__(self, page: int = 1, size: int = 10, search: Optional[str] = None):
        self.page = page
        self.size = size
        self.search = search.strip() if search and search.strip() else None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of results with navigation metadata."""

    items: List[T]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, items: List[T], total: int, pagination: PaginationParams) -> "PaginatedResponse[T]":
        pages = -(-total // pagination.size) if total else 0
        return cls(
            items=items,
            total=total,
            page=pagination.page,
            size=pagination.size,
            pages=pages,
            has_next=pagination.page < pages,
            has_prev=pagination.page > 1,
        )


async def paginate_query(
    db: AsyncSession,
    query: Any,
    pagination: PaginationParams,
    order_by: Sequence[Any] = (),
) -> PaginatedResponse[Any]:
    """
    Count the filtered select, then fetch one ordered page of it.

    Args:
        db: Database session
        query: Filtered ORM select, without ordering
        pagination: Pagination parameters
        order_by: Ordering expressions; include a unique column for stable pages
    """
    try:
        total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        page_query = query.order_by(*order_by).offset(pagination.offset).limit(pagination.size)
        items = list((await db.execute(page_query)).scalars().unique().all())
    except Exception as e:
        logger.exception(f"Error paginating query: {e}")
        raise
    return PaginatedResponse.build(items, total, pagination)
