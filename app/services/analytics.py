"""
Service layer for the analytics dashboard.

This module aggregates metrics, distributions and rankings for one period
and caches the resulting dashboard in redis.
"""

import asyncio
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from app.core.cache import get_cache, invalidate_cache_pattern, set_cache
from app.core.config import settings
from app.core.logging import logger
from app.models.activity import Activity, ActivityStatus
from app.models.budget import Budget
from app.models.department import Department
from app.models.program import Program
from app.repositories.activity import ActivityRepository
from app.repositories.base import ReportScope
from app.repositories.budget import BudgetRepository
from app.repositories.program import DepartmentRepository, ProgramRepository
from app.schemas.analytics import (
    NO_DATA,
    ActivityStatusRow,
    AnalyticsDashboard,
    AnalyticsOverview,
    BudgetTrendRow,
    DepartmentPerformanceRow,
    MonthlyImpactRow,
    ProgramDistributionRow,
    TopProgramRow,
)
from app.services.comparison import ComparisonEngine, percent_change
from app.services.content import UNCATEGORIZED
from app.services.metrics import MetricsCalculator, ratio_percent, total_participants
from app.services.period import MONTH_ABBREVIATIONS, get_previous_period, period_window, resolve_period

ANALYTICS_CACHE_PATTERN = "analytics:*"
RANKING_LIMIT = 5

ACTIVITY_STATUS_LABELS = {
    ActivityStatus.COMPLETED: "Completed",
    ActivityStatus.ONGOING: "Ongoing",
}
DEFAULT_ACTIVITY_STATUS_LABEL = "Planned"

# Placeholder rows substituted for empty collections
EMPTY_BUDGET_TREND = BudgetTrendRow(period="Jan", planned=0, realized=0)
EMPTY_PROGRAM_DISTRIBUTION = ProgramDistributionRow(name=NO_DATA, count=0, budget=0)
EMPTY_ACTIVITY_STATUS = ActivityStatusRow(status=NO_DATA, count=0)
EMPTY_DEPARTMENT_PERFORMANCE = DepartmentPerformanceRow(name=NO_DATA, completion=0, budget=0)
EMPTY_MONTHLY_IMPACT = MonthlyImpactRow(month=NO_DATA, social=0, economic=0, environmental=0)
EMPTY_TOP_PROGRAM = TopProgramRow(name=NO_DATA, completion=0, budget=0, impact=0)


def _month_label(budget_or_activity) -> str:
    return MONTH_ABBREVIATIONS[budget_or_activity.created_at.month - 1]


def _planned(budgets: Iterable[Budget]) -> float:
    return sum(float(budget.amount or 0) for budget in budgets)


def _realized(budgets: Iterable[Budget]) -> float:
    return sum(float(budget.spent_amount or 0) for budget in budgets)


def _program_activities(program: Program) -> List[Activity]:
    return [activity for project in program.projects for activity in project.activities]


def _completion(activities: List[Activity]) -> int:
    completed = sum(1 for activity in activities if activity.status == ActivityStatus.COMPLETED)
    return round(ratio_percent(completed, len(activities)))


def budget_trend(budgets: List[Budget]) -> List[BudgetTrendRow]:
    """Planned vs realized amounts per creation month, in order of first appearance."""
    planned: Dict[str, float] = {}
    realized: Dict[str, float] = defaultdict(float)
    for budget in sorted(budgets, key=lambda b: (b.created_at, str(b.id))):
        month = _month_label(budget)
        planned[month] = planned.get(month, 0.0) + float(budget.amount or 0)
        realized[month] += float(budget.spent_amount or 0)
    rows = [BudgetTrendRow(period=month, planned=planned[month], realized=realized[month]) for month in planned]
    return rows or [EMPTY_BUDGET_TREND]


def program_distribution(programs: List[Program]) -> List[ProgramDistributionRow]:
    counts: Dict[str, int] = {}
    budgets: Dict[str, float] = defaultdict(float)
    for program in programs:
        name = program.category.name if program.category else UNCATEGORIZED
        counts[name] = counts.get(name, 0) + 1
        budgets[name] += _planned(program.budgets)
    rows = [ProgramDistributionRow(name=name, count=count, budget=budgets[name]) for name, count in counts.items()]
    return rows or [EMPTY_PROGRAM_DISTRIBUTION]


def activity_status(activities: List[Activity]) -> List[ActivityStatusRow]:
    counts: Dict[str, int] = {}
    for activity in activities:
        label = ACTIVITY_STATUS_LABELS.get(activity.status, DEFAULT_ACTIVITY_STATUS_LABEL)
        counts[label] = counts.get(label, 0) + 1
    rows = [ActivityStatusRow(status=label, count=count) for label, count in counts.items()]
    return rows or [EMPTY_ACTIVITY_STATUS]


def department_performance(departments: List[Department]) -> List[DepartmentPerformanceRow]:
    """Departments ranked by activity completion; those without completed work are left out."""
    rows = []
    for department in departments:
        activities = [activity for program in department.programs for activity in _program_activities(program)]
        completion = _completion(activities)
        if completion > 0:
            budget = sum(_planned(program.budgets) for program in department.programs)
            rows.append(DepartmentPerformanceRow(name=department.name, completion=completion, budget=budget))
    rows.sort(key=lambda row: (-row.completion, row.name))
    return rows[:RANKING_LIMIT] or [EMPTY_DEPARTMENT_PERFORMANCE]


def activity_impact_score(activity: Activity) -> float:
    if activity.status == ActivityStatus.COMPLETED:
        return 100.0
    return float(activity.progress or 0)


def monthly_impact(activities: List[Activity]) -> List[MonthlyImpactRow]:
    """Average activity-derived impact scores per creation month."""
    totals: Dict[str, List[float]] = {}
    for activity in sorted(activities, key=lambda a: (a.created_at, str(a.id))):
        score = activity_impact_score(activity)
        participant_factor = min((activity.participants or 0) / 100, 1)
        month = totals.setdefault(_month_label(activity), [0.0, 0.0, 0.0, 0])
        month[0] += score * (0.5 + participant_factor * 0.5)
        month[1] += score * 0.7
        month[2] += score * 0.6
        month[3] += 1
    rows = [
        MonthlyImpactRow(
            month=label,
            social=round(social / count),
            economic=round(economic / count),
            environmental=round(environmental / count),
        )
        for label, (social, economic, environmental, count) in totals.items()
    ]
    return rows or [EMPTY_MONTHLY_IMPACT]


def program_impact(program: Program) -> TopProgramRow:
    """
    Score a program from activity completion, budget efficiency and reach.

    Programs with activities score at least 10 and programs with only a
    budget at least 5.
    """
    activities = _program_activities(program)
    budget = _planned(program.budgets)
    completion = _completion(activities)
    beneficiaries = total_participants(activities)
    efficiency = ratio_percent(_realized(program.budgets), budget)

    impact = 0
    if activities or budget > 0:
        impact = min(round(completion * 0.4 + efficiency * 0.3 + min(beneficiaries / 100, 100) * 0.3), 100)
        impact = max(impact, 10 if activities else 5)
    return TopProgramRow(name=program.name, completion=completion, budget=budget, impact=impact)


def top_programs(programs: List[Program]) -> List[TopProgramRow]:
    rows = [row for row in map(program_impact, programs) if row.budget > 0 or row.completion > 0]
    rows.sort(key=lambda row: (-row.impact, row.name))
    return rows[:RANKING_LIMIT] or [EMPTY_TOP_PROGRAM]


def analytics_cache_key(period: str, compare: Optional[str], scope: ReportScope) -> str:
    return f"analytics:{period}:{compare or 'none'}:{scope.cache_fragment}"


async def invalidate_analytics_cache() -> int:
    deleted = await invalidate_cache_pattern(ANALYTICS_CACHE_PATTERN)
    if deleted:
        logger.debug(f"Invalidated {deleted} analytics cache entries")
    return deleted


class AnalyticsService:
    """Service class for the analytics dashboard."""

    def __init__(
        self,
        calculator: MetricsCalculator,
        programs: ProgramRepository,
        activities: ActivityRepository,
        budgets: BudgetRepository,
        departments: DepartmentRepository,
        use_cache: bool = True,
    ):
        self.calculator = calculator
        self.programs = programs
        self.activities = activities
        self.budgets = budgets
        self.departments = departments
        self.comparison = ComparisonEngine(calculator)
        self.use_cache = use_cache

    async def get_dashboard(
        self,
        period: str,
        scope: ReportScope = ReportScope(),
        compare: Optional[str] = None,
        today: Optional[date] = None,
    ) -> AnalyticsDashboard:
        """
        Build the analytics dashboard for a period.

        Args:
            period: Period token
            scope: Optional program/department restriction
            compare: Optional second period token to compare against
            today: Reference date for fallback periods

        Returns:
            Dashboard with placeholder rows in place of empty collections
        """
        cache_key = analytics_cache_key(period, compare, scope)
        if self.use_cache:
            cached = await get_cache(cache_key)
            if cached:
                logger.debug(f"Cache hit for {cache_key}")
                return AnalyticsDashboard.model_validate(cached)

        current = resolve_period(period, today=today)
        previous = resolve_period(get_previous_period(period), today=today)
        window = period_window(current)

        comparison_task = (
            self.comparison.compare_periods(period, compare, scope, today=today)
            if compare else asyncio.sleep(0, result=None)
        )
        (
            metrics,
            previous_metrics,
            budgets,
            activities,
            programs,
            departments,
            comparison,
        ) = await asyncio.gather(
            self.calculator.calculate_metrics(scope, window),
            self.calculator.calculate_metrics(scope, period_window(previous)),
            self.budgets.list_budgets(scope, window),
            self.activities.list_activities(scope, window),
            self.programs.list_programs_with_details(scope.department_id),
            self.departments.list_departments_with_programs(),
            comparison_task,
        )

        overview = AnalyticsOverview(
            total_budget=metrics.total_budget,
            budget_used=metrics.budget_used,
            budget_growth=percent_change(metrics.total_budget, previous_metrics.total_budget),
            total_programs=metrics.total_programs,
            program_growth=percent_change(metrics.total_programs, previous_metrics.total_programs),
            total_activities=metrics.total_activities,
            activity_growth=percent_change(metrics.total_activities, previous_metrics.total_activities),
            total_beneficiaries=metrics.total_beneficiaries,
            beneficiary_growth=percent_change(metrics.total_beneficiaries, previous_metrics.total_beneficiaries),
        )
        dashboard = AnalyticsDashboard(
            overview=overview,
            budget_trend=budget_trend(budgets),
            program_distribution=program_distribution(programs),
            activity_status=activity_status(activities),
            department_performance=department_performance(departments),
            monthly_impact=monthly_impact(activities),
            top_programs=top_programs(programs),
            comparison=comparison,
        )
        logger.info(f"Generated analytics dashboard for {current.label} (scope {scope.cache_fragment})")

        if self.use_cache:
            await set_cache(
                cache_key,
                dashboard.model_dump(mode="json"),
                expire=timedelta(seconds=settings.cache.analytics_ttl),
            )
        return dashboard
