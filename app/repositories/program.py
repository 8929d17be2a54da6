"""Program and department read access."""

from typing import List, Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.models.department import Department
from app.models.program import Program, Project
from app.repositories.base import ReportScope, SessionFactoryRepository


class ProgramRepository(Protocol):
    async def list_programs(self, scope: ReportScope) -> List[Program]:
        """Programs in scope with department, category and stakeholders loaded."""
        ...

    async def list_programs_with_details(self, department_id: Optional[UUID] = None) -> List[Program]:
        """Programs with category, budgets and projects/activities loaded."""
        ...


class DepartmentRepository(Protocol):
    async def list_departments_with_programs(self) -> List[Department]:
        ...


class SqlAlchemyProgramRepository(SessionFactoryRepository):
    """ProgramRepository backed by SQLAlchemy."""

    async def list_programs(self, scope: ReportScope) -> List[Program]:
        stmt = select(Program).options(
            selectinload(Program.department),
            selectinload(Program.category),
            selectinload(Program.stakeholders),
        )
        if scope.program_id:
            stmt = stmt.where(Program.id == scope.program_id)
        elif scope.department_id:
            stmt = stmt.where(Program.department_id == scope.department_id)
        return await self._fetch_all(stmt.order_by(Program.name, Program.id))

    async def list_programs_with_details(self, department_id: Optional[UUID] = None) -> List[Program]:
        stmt = select(Program).options(
            selectinload(Program.category),
            selectinload(Program.budgets),
            selectinload(Program.projects).selectinload(Project.activities),
        )
        if department_id:
            stmt = stmt.where(Program.department_id == department_id)
        return await self._fetch_all(stmt.order_by(Program.name, Program.id))


class SqlAlchemyDepartmentRepository(SessionFactoryRepository):
    """DepartmentRepository backed by SQLAlchemy."""

    async def list_departments_with_programs(self) -> List[Department]:
        stmt = (
            select(Department)
            .options(
                selectinload(Department.programs).selectinload(Program.projects).selectinload(Project.activities),
                selectinload(Department.programs).selectinload(Program.budgets),
            )
            .order_by(Department.name)
        )
        return await self._fetch_all(stmt)
