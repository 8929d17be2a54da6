"""
Pydantic schemas for analytics payloads: period comparisons, trend series
and the analytics dashboard.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from app.schemas.common import CamelModel
from app.schemas.metrics import ReportMetrics

# Name used by placeholder rows substituted for empty collections.
# Clients treat it as "no data", never as a real category.
NO_DATA = "No Data"


class TrendMetric(str, Enum):
    BUDGET = "budget"
    ACTIVITIES = "activities"
    BENEFICIARIES = "beneficiaries"


class TrendGroupBy(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class TrendPoint(CamelModel):
    """One bucket of a trend series; `end_date` is the exclusive bucket end."""

    period: str
    value: float
    start_date: date
    end_date: date


class PeriodMetrics(CamelModel):
    start_date: date
    end_date: date
    label: str
    metrics: ReportMetrics


class MetricsDelta(CamelModel):
    budget_change: float
    program_growth: float
    activity_growth: float
    beneficiary_growth: float
    impact_change: float


class PeriodComparison(CamelModel):
    period1: PeriodMetrics
    period2: PeriodMetrics
    comparison: MetricsDelta


class AnalyticsOverview(CamelModel):
    total_budget: float
    budget_used: float
    budget_growth: float
    total_programs: int
    program_growth: float
    total_activities: int
    activity_growth: float
    total_beneficiaries: int
    beneficiary_growth: float


class BudgetTrendRow(CamelModel):
    period: str
    planned: float
    realized: float


class ProgramDistributionRow(CamelModel):
    name: str
    count: int
    budget: float


class ActivityStatusRow(CamelModel):
    status: str
    count: int


class DepartmentPerformanceRow(CamelModel):
    name: str
    completion: int
    budget: float


class MonthlyImpactRow(CamelModel):
    month: str
    social: int
    economic: int
    environmental: int


class TopProgramRow(CamelModel):
    name: str
    completion: int
    budget: float
    impact: int


class AnalyticsDashboard(CamelModel):
    overview: AnalyticsOverview
    budget_trend: List[BudgetTrendRow]
    program_distribution: List[ProgramDistributionRow]
    activity_status: List[ActivityStatusRow]
    department_performance: List[DepartmentPerformanceRow]
    monthly_impact: List[MonthlyImpactRow]
    top_programs: List[TopProgramRow]
    comparison: Optional[PeriodComparison] = None
