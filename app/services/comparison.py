"""Period-over-period metrics comparison."""

import asyncio
from datetime import date
from typing import Optional

from app.core.logging import logger
from app.repositories.base import ReportScope
from app.schemas.analytics import MetricsDelta, PeriodComparison, PeriodMetrics
from app.schemas.metrics import ReportMetrics
from app.services.metrics import MetricsCalculator
from app.services.period import period_window, resolve_period


def percent_change(current: float, previous: float) -> float:
    """
    Relative change from `previous` to `current` in percent.

    A zero baseline yields 100 for any positive current value and 0
    otherwise; existing dashboards depend on this rule.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def metrics_delta(current: ReportMetrics, previous: ReportMetrics) -> MetricsDelta:
    return MetricsDelta(
        budget_change=percent_change(current.budget_used, previous.budget_used),
        program_growth=percent_change(current.total_programs, previous.total_programs),
        activity_growth=percent_change(current.total_activities, previous.total_activities),
        beneficiary_growth=percent_change(current.total_beneficiaries, previous.total_beneficiaries),
        impact_change=percent_change(current.overall_impact, previous.overall_impact),
    )


class ComparisonEngine:
    """Compares the metrics of two independently resolved periods."""

    def __init__(self, calculator: MetricsCalculator):
        self.calculator = calculator

    async def compare_periods(
        self,
        period1: str,
        period2: str,
        scope: ReportScope = ReportScope(),
        today: Optional[date] = None,
    ) -> PeriodComparison:
        """
        Compare two periods; `period1` is the baseline and `period2` the
        current value in every delta.
        """
        first = resolve_period(period1, today=today)
        second = resolve_period(period2, today=today)

        metrics1, metrics2 = await asyncio.gather(
            self.calculator.calculate_metrics(scope, period_window(first)),
            self.calculator.calculate_metrics(scope, period_window(second)),
        )
        logger.info(f"Compared periods {first.label} and {second.label}")

        return PeriodComparison(
            period1=PeriodMetrics(**first.model_dump(), metrics=metrics1),
            period2=PeriodMetrics(**second.model_dump(), metrics=metrics2),
            comparison=metrics_delta(metrics2, metrics1),
        )
