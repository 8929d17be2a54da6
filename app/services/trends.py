"""
Trend series generation.

A date range is cut into consecutive month, quarter or year buckets and
one metric is computed per bucket.
"""

from datetime import date, datetime, time, timezone
from typing import Callable, Dict, List, NamedTuple

from app.core.logging import logger
from app.repositories.base import DateWindow, ReportScope
from app.schemas.analytics import TrendGroupBy, TrendMetric, TrendPoint
from app.schemas.metrics import ReportMetrics
from app.services.metrics import MetricsCalculator
from app.services.period import MONTH_ABBREVIATIONS, add_months

MAX_TREND_BUCKETS = 50

BUCKET_MONTHS = {
    TrendGroupBy.MONTH: 1,
    TrendGroupBy.QUARTER: 3,
    TrendGroupBy.YEAR: 12,
}

METRIC_VALUES: Dict[TrendMetric, Callable[[ReportMetrics], float]] = {
    TrendMetric.BUDGET: lambda metrics: metrics.budget_used,
    TrendMetric.ACTIVITIES: lambda metrics: metrics.total_activities,
    TrendMetric.BENEFICIARIES: lambda metrics: metrics.total_beneficiaries,
}


class Bucket(NamedTuple):
    label: str
    start: date
    end: date  # exclusive


def bucket_label(start: date, group_by: TrendGroupBy) -> str:
    if group_by == TrendGroupBy.MONTH:
        return f"{MONTH_ABBREVIATIONS[start.month - 1]} {start.year}"
    if group_by == TrendGroupBy.QUARTER:
        return f"Q{(start.month - 1) // 3 + 1} {start.year}"
    return str(start.year)


def trend_buckets(start: date, end: date, group_by: TrendGroupBy) -> List[Bucket]:
    """Contiguous buckets starting at `start` until one begins after `end`, capped."""
    buckets: List[Bucket] = []
    step = BUCKET_MONTHS[group_by]
    current = start
    count = 0
    while current <= end and len(buckets) < MAX_TREND_BUCKETS:
        count += 1
        # Offsets are taken from the range start so clamped month ends do not drift
        following = add_months(start, step * count)
        buckets.append(Bucket(bucket_label(current, group_by), current, following))
        current = following
    return buckets


def _instant(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class TrendSeriesGenerator:
    """Builds ordered per-bucket series of one metric."""

    def __init__(self, calculator: MetricsCalculator):
        self.calculator = calculator

    async def get_trend_series(
        self,
        metric: TrendMetric,
        group_by: TrendGroupBy,
        start_date: date,
        end_date: date,
        scope: ReportScope = ReportScope(),
    ) -> List[TrendPoint]:
        select_value = METRIC_VALUES[metric]
        points = []
        for bucket in trend_buckets(start_date, end_date, group_by):
            metrics = await self.calculator.calculate_metrics(
                scope, DateWindow(start=_instant(bucket.start), end=_instant(bucket.end))
            )
            points.append(
                TrendPoint(
                    period=bucket.label,
                    value=select_value(metrics),
                    start_date=bucket.start,
                    end_date=bucket.end,
                )
            )
        logger.info(f"Trend series {metric.value}/{group_by.value}: {len(points)} buckets from {start_date} to {end_date}")
        return points
