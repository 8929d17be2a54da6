"""
Tests for period comparison.
"""

from datetime import date

import pytest

from app.services.comparison import ComparisonEngine, percent_change


@pytest.mark.parametrize("current,previous,expected", [
    (150, 100, 50),
    (50, 100, -50),
    (0, 100, -100),
    (10, 0, 100),
    (0, 0, 0),
])
def test_percent_change(current, previous, expected):
    """Test relative change, including the zero baseline rule."""
    assert percent_change(current, previous) == pytest.approx(expected)


@pytest.mark.asyncio
async def test_compare_quarters(calculator):
    """Test the first period is the baseline of every delta."""
    comparison = await ComparisonEngine(calculator).compare_periods("Q1-2024", "Q2-2024")

    assert comparison.period1.label == "Q1-2024"
    assert comparison.period1.start_date == date(2024, 1, 1)
    assert comparison.period2.end_date == date(2024, 6, 30)
    assert comparison.period1.metrics.budget_used == 250_000
    assert comparison.period2.metrics.budget_used == 500_000

    delta = comparison.comparison
    assert delta.budget_change == pytest.approx(100)
    assert delta.program_growth == 0
    assert delta.activity_growth == pytest.approx(-200 / 3)
    assert delta.beneficiary_growth == pytest.approx(-200 / 3)
    assert delta.impact_change == pytest.approx((118 / 3 - 21) / 21 * 100)


@pytest.mark.asyncio
async def test_compare_against_empty_period(calculator):
    """Test an empty baseline reports +100% growth for every non-zero figure."""
    comparison = await ComparisonEngine(calculator).compare_periods("2020", "Q1-2024")

    assert comparison.period1.label == "Tahun 2020"
    assert comparison.period1.metrics.total_activities == 0
    assert comparison.comparison.activity_growth == 100
    assert comparison.comparison.budget_change == 100


@pytest.mark.asyncio
async def test_comparison_serializes_camel_case(calculator):
    """Test the payload uses camelCase keys."""
    comparison = await ComparisonEngine(calculator).compare_periods("Q1-2024", "Q2-2024")

    payload = comparison.model_dump(by_alias=True)

    assert set(payload) == {"period1", "period2", "comparison"}
    assert "startDate" in payload["period1"]
    assert "budgetUsed" in payload["period1"]["metrics"]
    assert "beneficiaryGrowth" in payload["comparison"]
