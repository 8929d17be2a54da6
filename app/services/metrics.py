"""
Metrics calculation for CSR reports.

This module reduces programs, activities, budgets and stakeholders into the
standardized ReportMetrics bundle used by reports, comparisons, trends and
the analytics dashboard.
"""

import asyncio
from typing import Iterable, List, NamedTuple

from app.core.logging import logger
from app.models.activity import Activity, ActivityStatus
from app.models.budget import Budget
from app.models.program import Program, ProgramStatus
from app.models.stakeholder import Stakeholder
from app.repositories.activity import ActivityRepository
from app.repositories.base import DateWindow, ReportScope
from app.repositories.budget import BudgetRepository
from app.repositories.program import ProgramRepository
from app.repositories.stakeholder import StakeholderRepository
from app.schemas.metrics import ReportMetrics

# Placeholder until satisfaction surveys are collected; consumers rely on this exact value.
AVERAGE_SATISFACTION = 85.0


class MetricsSource(NamedTuple):
    """Record sets a metrics bundle is computed from."""

    programs: List[Program]
    activities: List[Activity]
    budgets: List[Budget]
    stakeholders: List[Stakeholder]


def ratio_percent(part: float, whole: float) -> float:
    """part / whole as a percentage; 0 when whole is 0."""
    return part / whole * 100 if whole > 0 else 0.0


def _clamp_score(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def _amount(value) -> float:
    return float(value or 0)


def total_participants(activities: Iterable[Activity]) -> int:
    return sum(activity.participants or 0 for activity in activities)


def summarize_metrics(source: MetricsSource) -> ReportMetrics:
    """Pure reduction of fetched records into a metrics bundle."""
    programs, activities, budgets, stakeholders = source

    total_budget = sum(_amount(budget.amount) for budget in budgets)
    budget_used = sum(_amount(budget.spent_amount) for budget in budgets)
    budget_percentage = ratio_percent(budget_used, total_budget)

    active_programs = sum(1 for program in programs if program.status == ProgramStatus.ACTIVE)
    completed_programs = sum(1 for program in programs if program.status == ProgramStatus.COMPLETED)

    completed_activities = sum(1 for activity in activities if activity.status == ActivityStatus.COMPLETED)
    ongoing_activities = sum(1 for activity in activities if activity.status == ActivityStatus.ONGOING)

    beneficiaries = total_participants(activities)

    social = _clamp_score(beneficiaries / 100 * 20)
    environmental = _clamp_score(active_programs / 5 * 20)
    economic = _clamp_score(budget_percentage)

    return ReportMetrics(
        total_budget=total_budget,
        budget_used=budget_used,
        budget_remaining=total_budget - budget_used,
        budget_percentage=budget_percentage,
        total_programs=len(programs),
        active_programs=active_programs,
        completed_programs=completed_programs,
        program_completion_rate=ratio_percent(completed_programs, len(programs)),
        total_activities=len(activities),
        completed_activities=completed_activities,
        ongoing_activities=ongoing_activities,
        activity_completion_rate=ratio_percent(completed_activities, len(activities)),
        total_stakeholders=len(stakeholders),
        total_beneficiaries=beneficiaries,
        average_satisfaction=AVERAGE_SATISFACTION,
        social_impact=social,
        environmental_impact=environmental,
        economic_impact=economic,
        overall_impact=(social + environmental + economic) / 3,
    )


class MetricsCalculator:
    """Computes ReportMetrics for a scope and creation-time window."""

    def __init__(
        self,
        programs: ProgramRepository,
        activities: ActivityRepository,
        budgets: BudgetRepository,
        stakeholders: StakeholderRepository,
    ):
        self.programs = programs
        self.activities = activities
        self.budgets = budgets
        self.stakeholders = stakeholders

    async def fetch(self, scope: ReportScope, window: DateWindow) -> MetricsSource:
        """
        Read the four record sets concurrently.

        Programs and stakeholders are not windowed. Any failing read aborts
        the whole fetch.
        """
        programs, activities, budgets, stakeholders = await asyncio.gather(
            self.programs.list_programs(scope),
            self.activities.list_activities(scope, window),
            self.budgets.list_budgets(scope, window),
            self.stakeholders.list_stakeholders(),
        )
        return MetricsSource(list(programs), list(activities), list(budgets), list(stakeholders))

    async def calculate_metrics(
        self,
        scope: ReportScope = ReportScope(),
        window: DateWindow = DateWindow(),
    ) -> ReportMetrics:
        source = await self.fetch(scope, window)
        metrics = summarize_metrics(source)
        logger.debug(
            f"Metrics for scope {scope.cache_fragment} window {window.start}..{window.end}: "
            f"{metrics.total_programs} programs, {metrics.total_activities} activities, "
            f"budget {metrics.budget_used}/{metrics.total_budget}"
        )
        return metrics
