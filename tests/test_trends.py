"""
Tests for trend series generation.
"""

from datetime import date

import pytest

from app.schemas.analytics import TrendGroupBy, TrendMetric
from app.services.trends import MAX_TREND_BUCKETS, TrendSeriesGenerator, trend_buckets


def test_monthly_buckets():
    """Test monthly buckets stop once a bucket would start after the range end."""
    buckets = trend_buckets(date(2024, 1, 1), date(2024, 3, 31), TrendGroupBy.MONTH)

    assert [b.label for b in buckets] == ["Jan 2024", "Feb 2024", "Mar 2024"]
    assert buckets[-1].end == date(2024, 4, 1)


def test_quarter_and_year_labels():
    """Test quarter and year bucket labels."""
    quarters = trend_buckets(date(2023, 10, 1), date(2024, 6, 30), TrendGroupBy.QUARTER)
    years = trend_buckets(date(2022, 1, 1), date(2024, 1, 1), TrendGroupBy.YEAR)

    assert [b.label for b in quarters] == ["Q4 2023", "Q1 2024", "Q2 2024"]
    assert [b.label for b in years] == ["2022", "2023", "2024"]


def test_buckets_are_contiguous_from_month_end():
    """Test buckets starting on the 31st stay contiguous."""
    buckets = trend_buckets(date(2024, 1, 31), date(2024, 6, 30), TrendGroupBy.MONTH)

    for current, following in zip(buckets, buckets[1:]):
        assert current.end == following.start
    assert buckets[1].start == date(2024, 2, 29)
    assert buckets[2].start == date(2024, 3, 31)


def test_bucket_count_is_capped():
    """Test long ranges never produce more than the bucket cap."""
    buckets = trend_buckets(date(1900, 1, 1), date(2024, 12, 31), TrendGroupBy.MONTH)

    assert len(buckets) == MAX_TREND_BUCKETS


def test_inverted_range_is_empty():
    """Test a range ending before it starts has no buckets."""
    assert trend_buckets(date(2024, 5, 1), date(2024, 1, 1), TrendGroupBy.MONTH) == []


@pytest.mark.asyncio
async def test_budget_trend_series(calculator):
    """Test budget usage per quarter."""
    points = await TrendSeriesGenerator(calculator).get_trend_series(
        TrendMetric.BUDGET, TrendGroupBy.QUARTER, date(2024, 1, 1), date(2024, 12, 31)
    )

    assert [p.period for p in points] == ["Q1 2024", "Q2 2024", "Q3 2024", "Q4 2024"]
    assert [p.value for p in points] == [250_000, 500_000, 0, 0]
    assert points[0].end_date == points[1].start_date


@pytest.mark.asyncio
async def test_activity_and_beneficiary_series(calculator):
    """Test activity counts and participants per month."""
    generator = TrendSeriesGenerator(calculator)

    activities = await generator.get_trend_series(
        TrendMetric.ACTIVITIES, TrendGroupBy.MONTH, date(2024, 1, 1), date(2024, 4, 30)
    )
    beneficiaries = await generator.get_trend_series(
        TrendMetric.BENEFICIARIES, TrendGroupBy.MONTH, date(2024, 1, 1), date(2024, 4, 30)
    )

    assert [p.value for p in activities] == [1, 1, 1, 1]
    assert [p.value for p in beneficiaries] == [120, 30, 0, 50]


@pytest.mark.asyncio
async def test_series_computes_one_window_per_bucket(calculator):
    """Test every bucket is computed over its own window, in order."""
    await TrendSeriesGenerator(calculator).get_trend_series(
        TrendMetric.ACTIVITIES, TrendGroupBy.YEAR, date(1950, 1, 1), date(2100, 1, 1)
    )

    windows = calculator.activities.calls
    assert len(windows) == MAX_TREND_BUCKETS
    assert all(a.end == b.start for a, b in zip(windows, windows[1:]))
