"""Stakeholder read access."""

from typing import List, Protocol

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.models.stakeholder import Stakeholder
from app.repositories.base import SessionFactoryRepository


class StakeholderRepository(Protocol):
    async def list_stakeholders(self) -> List[Stakeholder]:
        """All stakeholders with category and program links loaded."""
        ...


class SqlAlchemyStakeholderRepository(SessionFactoryRepository):
    """StakeholderRepository backed by SQLAlchemy."""

    async def list_stakeholders(self) -> List[Stakeholder]:
        stmt = (
            select(Stakeholder)
            .options(
                selectinload(Stakeholder.category),
                selectinload(Stakeholder.programs),
            )
            .order_by(Stakeholder.name, Stakeholder.id)
        )
        return await self._fetch_all(stmt)
