"""
Models package initialization.

This module imports all models to ensure they are registered with SQLAlchemy.
"""

from app.models.base import Base

from app.models.department import Department
from app.models.program import Program, ProgramCategory, ProgramStatus, Project
from app.models.activity import Activity, ActivityStatus
from app.models.budget import Budget
from app.models.stakeholder import (
    Stakeholder,
    StakeholderCategory,
    activity_stakeholders,
    program_stakeholders,
)
from app.models.report import Report, ReportMetrics, ReportStatus


__all__ = [
    "Base",
    "Department",
    "Program",
    "ProgramCategory",
    "ProgramStatus",
    "Project",
    "Activity",
    "ActivityStatus",
    "Budget",
    "Stakeholder",
    "StakeholderCategory",
    "activity_stakeholders",
    "program_stakeholders",
    "Report",
    "ReportMetrics",
    "ReportStatus",
]
