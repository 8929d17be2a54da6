"""Budget read access."""

from typing import List, Protocol

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.models.budget import Budget
from app.repositories.base import DateWindow, ReportScope, SessionFactoryRepository, apply_window


class BudgetRepository(Protocol):
    async def list_budgets(self, scope: ReportScope, window: DateWindow) -> List[Budget]:
        """Budgets in scope created inside the window, with program and project loaded."""
        ...


class SqlAlchemyBudgetRepository(SessionFactoryRepository):
    """BudgetRepository backed by SQLAlchemy."""

    async def list_budgets(self, scope: ReportScope, window: DateWindow) -> List[Budget]:
        stmt = select(Budget).options(
            selectinload(Budget.program),
            selectinload(Budget.project),
        )
        if scope.program_id:
            stmt = stmt.where(Budget.program_id == scope.program_id)
        elif scope.department_id:
            stmt = stmt.where(Budget.department_id == scope.department_id)
        stmt = apply_window(stmt, Budget.created_at, window)
        return await self._fetch_all(stmt.order_by(Budget.created_at, Budget.id))
