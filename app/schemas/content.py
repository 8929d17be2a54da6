"""
Pydantic schemas for the structured report document.

Content is stored as JSON on the report row and validated back into these
models when read.
"""

from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from app.schemas.common import CamelModel
from app.schemas.metrics import ReportMetrics


class SummarySection(CamelModel):
    overview: str
    highlights: List[str]
    key_metrics: ReportMetrics


class ProgramItem(CamelModel):
    id: UUID
    name: str
    department: Optional[str] = None
    category: Optional[str] = None
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProgramsSection(CamelModel):
    total: int
    list: List[ProgramItem]


class ActivityItem(CamelModel):
    id: UUID
    name: str
    program: Optional[str] = None
    type: Optional[str] = None
    status: str
    participants: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ActivitiesSection(CamelModel):
    total: int
    completed: int
    ongoing: int
    list: List[ActivityItem]


class BudgetItem(CamelModel):
    id: UUID
    description: Optional[str] = None
    planned: float
    realized: float
    percentage: float
    category: Optional[str] = None


class BudgetsSection(CamelModel):
    total: float
    used: float
    remaining: float
    percentage: float
    list: List[BudgetItem]


class StakeholderItem(CamelModel):
    id: UUID
    name: str
    category: Optional[str] = None
    type: Optional[str] = None
    importance: Optional[str] = None
    influence: Optional[str] = None


class StakeholdersSection(CamelModel):
    total: int
    by_category: Dict[str, int]
    list: List[StakeholderItem]


class ImpactSection(CamelModel):
    social: float
    environmental: float
    economic: float
    overall: float
    beneficiaries: int
    satisfaction: float


class ReportContent(CamelModel):
    """The six-section report document."""

    type: str
    period: str
    summary: SummarySection
    programs: ProgramsSection
    activities: ActivitiesSection
    budgets: BudgetsSection
    stakeholders: StakeholdersSection
    impact: ImpactSection
