"""
Repository interfaces and their SQLAlchemy implementations.

Services depend on the Protocol types only, so tests can pass in-memory
fakes.
"""

from app.repositories.base import DateWindow, ReportScope
from app.repositories.activity import ActivityRepository, SqlAlchemyActivityRepository
from app.repositories.budget import BudgetRepository, SqlAlchemyBudgetRepository
from app.repositories.program import (
    DepartmentRepository,
    ProgramRepository,
    SqlAlchemyDepartmentRepository,
    SqlAlchemyProgramRepository,
)
from app.repositories.stakeholder import StakeholderRepository, SqlAlchemyStakeholderRepository
from app.repositories.report import ReportRepository, SqlAlchemyReportRepository

__all__ = [
    "DateWindow",
    "ReportScope",
    "ActivityRepository",
    "BudgetRepository",
    "DepartmentRepository",
    "ProgramRepository",
    "ReportRepository",
    "StakeholderRepository",
    "SqlAlchemyActivityRepository",
    "SqlAlchemyBudgetRepository",
    "SqlAlchemyDepartmentRepository",
    "SqlAlchemyProgramRepository",
    "SqlAlchemyReportRepository",
    "SqlAlchemyStakeholderRepository",
]
