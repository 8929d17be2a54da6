"""
Report content assembly.

Builds the six-section report document (summary, programs, activities,
budgets, stakeholders, impact) from one fetch of the underlying records.
Output depends only on the scope, the period and the stored data, so
regenerating an unchanged report yields identical content.
"""

from collections import Counter
from datetime import date
from typing import Any, Callable, List, Optional, Sequence

from app.core.logging import logger
from app.models.activity import ActivityStatus
from app.repositories.base import DateWindow, ReportScope
from app.schemas.content import (
    ActivitiesSection,
    ActivityItem,
    BudgetItem,
    BudgetsSection,
    ImpactSection,
    ProgramItem,
    ProgramsSection,
    ReportContent,
    StakeholderItem,
    StakeholdersSection,
    SummarySection,
)
from app.schemas.metrics import ReportMetrics
from app.services.metrics import MetricsCalculator, MetricsSource, ratio_percent, summarize_metrics
from app.services.period import ALL_TIME_LABEL, period_window, resolve_period

LIST_LIMIT = 50
UNCATEGORIZED = "Lainnya"


def format_id_number(value: float) -> str:
    """Format a number the id-ID way: "." groups thousands, "," marks decimals."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def _value(item: Any) -> Any:
    return getattr(item, "value", item)


def most_recent(items: Sequence[Any], key: Callable[[Any], Optional[Any]], limit: int = LIST_LIMIT) -> List[Any]:
    """Newest first by `key`; undated items go last; id breaks ties."""
    dated = sorted(
        (item for item in items if key(item) is not None),
        key=lambda item: (key(item), str(item.id)),
        reverse=True,
    )
    undated = sorted((item for item in items if key(item) is None), key=lambda item: str(item.id))
    return (dated + undated)[:limit]


def build_summary(report_type: str, label: str, metrics: ReportMetrics) -> SummarySection:
    overview = (
        f"Laporan {report_type} periode {label} mencakup {metrics.total_programs} program "
        f"dengan total {metrics.total_activities} kegiatan dan anggaran "
        f"Rp {format_id_number(metrics.total_budget)}."
    )
    highlights = [
        f"Total Anggaran: Rp {format_id_number(metrics.total_budget)}",
        f"Realisasi: {metrics.budget_percentage:.1f}%",
        f"Tingkat Penyelesaian Program: {metrics.program_completion_rate:.1f}%",
        f"Total Penerima Manfaat: {format_id_number(metrics.total_beneficiaries)} orang",
    ]
    return SummarySection(overview=overview, highlights=highlights, key_metrics=metrics)


def build_programs(source: MetricsSource) -> ProgramsSection:
    items = [
        ProgramItem(
            id=program.id,
            name=program.name,
            department=program.department.name if program.department else None,
            category=program.category.name if program.category else None,
            status=_value(program.status),
            start_date=program.start_date,
            end_date=program.end_date,
        )
        for program in source.programs
    ]
    return ProgramsSection(total=len(items), list=items)


def build_activities(source: MetricsSource) -> ActivitiesSection:
    activities = source.activities
    recent = most_recent(activities, key=lambda activity: activity.start_date)
    items = [
        ActivityItem(
            id=activity.id,
            name=activity.name,
            program=activity.project.program.name if activity.project and activity.project.program else None,
            type=activity.type,
            status=_value(activity.status),
            participants=activity.participants or 0,
            start_date=activity.start_date,
            end_date=activity.end_date,
        )
        for activity in recent
    ]
    return ActivitiesSection(
        total=len(activities),
        completed=sum(1 for activity in activities if activity.status == ActivityStatus.COMPLETED),
        ongoing=sum(1 for activity in activities if activity.status == ActivityStatus.ONGOING),
        list=items,
    )


def build_budgets(source: MetricsSource, metrics: ReportMetrics) -> BudgetsSection:
    recent = most_recent(source.budgets, key=lambda budget: budget.created_at)
    items = []
    for budget in recent:
        planned = float(budget.amount or 0)
        realized = float(budget.spent_amount or 0)
        items.append(
            BudgetItem(
                id=budget.id,
                description=budget.description,
                planned=planned,
                realized=realized,
                percentage=ratio_percent(realized, planned),
                category=budget.category,
            )
        )
    return BudgetsSection(
        total=metrics.total_budget,
        used=metrics.budget_used,
        remaining=metrics.budget_remaining,
        percentage=metrics.budget_percentage,
        list=items,
    )


def build_stakeholders(source: MetricsSource) -> StakeholdersSection:
    stakeholders = source.stakeholders
    by_category = Counter(
        stakeholder.category.name if stakeholder.category else UNCATEGORIZED
        for stakeholder in stakeholders
    )
    items = [
        StakeholderItem(
            id=stakeholder.id,
            name=stakeholder.name,
            category=stakeholder.category.name if stakeholder.category else None,
            type=stakeholder.type,
            importance=stakeholder.importance,
            influence=stakeholder.influence,
        )
        for stakeholder in sorted(stakeholders, key=lambda s: (s.name, str(s.id)))[:LIST_LIMIT]
    ]
    return StakeholdersSection(total=len(stakeholders), by_category=dict(sorted(by_category.items())), list=items)


def build_impact(metrics: ReportMetrics) -> ImpactSection:
    return ImpactSection(
        social=metrics.social_impact,
        environmental=metrics.environmental_impact,
        economic=metrics.economic_impact,
        overall=metrics.overall_impact,
        beneficiaries=metrics.total_beneficiaries,
        satisfaction=metrics.average_satisfaction,
    )


class ContentAssembler:
    """Generates ReportContent documents."""

    def __init__(self, calculator: MetricsCalculator):
        self.calculator = calculator

    async def generate_report_content(
        self,
        report_type: str,
        scope: ReportScope = ReportScope(),
        period_token: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ReportContent:
        """
        Build the report document for a scope and period.

        Without a period token the whole history is covered and the period
        label is "All Time".
        """
        if period_token:
            period = resolve_period(period_token, today=today)
            label, window = period.label, period_window(period)
        else:
            label, window = ALL_TIME_LABEL, DateWindow()

        source = await self.calculator.fetch(scope, window)
        metrics = summarize_metrics(source)

        content = ReportContent(
            type=report_type,
            period=label,
            summary=build_summary(report_type, label, metrics),
            programs=build_programs(source),
            activities=build_activities(source),
            budgets=build_budgets(source, metrics),
            stakeholders=build_stakeholders(source),
            impact=build_impact(metrics),
        )
        logger.info(
            f"Generated {report_type} report content for {label}: "
            f"{content.programs.total} programs, {content.activities.total} activities"
        )
        return content
