"""Activity read access."""

from typing import List, Protocol

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.models.activity import Activity
from app.models.program import Program, Project
from app.repositories.base import DateWindow, ReportScope, SessionFactoryRepository, apply_window


class ActivityRepository(Protocol):
    async def list_activities(self, scope: ReportScope, window: DateWindow) -> List[Activity]:
        """Activities in scope created inside the window, with project and program loaded."""
        ...


class SqlAlchemyActivityRepository(SessionFactoryRepository):
    """ActivityRepository backed by SQLAlchemy."""

    async def list_activities(self, scope: ReportScope, window: DateWindow) -> List[Activity]:
        stmt = select(Activity).options(
            selectinload(Activity.project).selectinload(Project.program)
        )
        if scope.program_id:
            stmt = stmt.join(Activity.project).where(Project.program_id == scope.program_id)
        elif scope.department_id:
            stmt = (
                stmt.join(Activity.project)
                .join(Project.program)
                .where(Program.department_id == scope.department_id)
            )
        stmt = apply_window(stmt, Activity.created_at, window)
        return await self._fetch_all(stmt.order_by(Activity.created_at, Activity.id))
