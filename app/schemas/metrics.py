"""
Pydantic schemas for computed report metrics and resolved periods.
"""

from datetime import date

from pydantic import ConfigDict

from app.schemas.common import CamelModel


class PeriodRange(CamelModel):
    """A period token resolved to an inclusive calendar date range."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    label: str


class ReportMetrics(CamelModel):
    """
    Standardized bundle of financial, programmatic and impact metrics.

    Every field defaults to zero so that an empty data set yields an
    all-zero bundle.
    """

    model_config = ConfigDict(frozen=True)

    # Financial
    total_budget: float = 0.0
    budget_used: float = 0.0
    budget_remaining: float = 0.0
    budget_percentage: float = 0.0

    # Programs
    total_programs: int = 0
    active_programs: int = 0
    completed_programs: int = 0
    program_completion_rate: float = 0.0

    # Activities
    total_activities: int = 0
    completed_activities: int = 0
    ongoing_activities: int = 0
    activity_completion_rate: float = 0.0

    # Stakeholders
    total_stakeholders: int = 0
    total_beneficiaries: int = 0
    average_satisfaction: float = 0.0

    # Impact
    social_impact: float = 0.0
    environmental_impact: float = 0.0
    economic_impact: float = 0.0
    overall_impact: float = 0.0
