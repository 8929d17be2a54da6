"""
Shared repository building blocks.

Read repositories open one short-lived session per call from a session
factory, so several reads can be awaited concurrently without sharing a
connection.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.logging import logger


@dataclass(frozen=True)
class ReportScope:
    """Optional restriction of a computation to one program or one department."""

    program_id: Optional[UUID] = None
    department_id: Optional[UUID] = None

    @property
    def cache_fragment(self) -> str:
        return f"{self.program_id or 'all'}:{self.department_id or 'all'}"


@dataclass(frozen=True)
class DateWindow:
    """Half-open creation-time window: start inclusive, end exclusive."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_bounded(self) -> bool:
        return self.start is not None or self.end is not None


class SessionFactoryRepository:
    """Base class for repositories that read through their own sessions."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def _fetch_all(self, stmt: Any) -> List[Any]:
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = list(result.scalars().unique().all())
        logger.debug(f"{type(self).__name__} fetched {len(rows)} rows")
        return rows


def apply_window(stmt: Any, column: Any, window: DateWindow) -> Any:
    """Restrict a statement to rows whose `column` falls inside the window."""
    if window.start is not None:
        stmt = stmt.where(column >= window.start)
    if window.end is not None:
        stmt = stmt.where(column < window.end)
    return stmt
