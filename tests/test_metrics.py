"""
Tests for metrics calculation.
"""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from app.models import Budget, Program, ProgramStatus
from app.repositories.base import DateWindow, ReportScope
from app.services.metrics import AVERAGE_SATISFACTION, MetricsSource, summarize_metrics
from app.services.period import date_window, period_window, resolve_period

from conftest import FailingRepository, FakeRecords, build_calculator


@pytest.mark.asyncio
async def test_empty_scope_yields_zero_metrics():
    """Test metrics over no records are all zero apart from the satisfaction placeholder."""
    calculator = build_calculator(FakeRecords())

    metrics = await calculator.calculate_metrics()

    dumped = metrics.model_dump()
    assert dumped.pop("average_satisfaction") == AVERAGE_SATISFACTION
    assert all(value == 0 for value in dumped.values())


def test_budget_figures():
    """Test budget usage, remainder and percentage of a single budget."""
    budget = Budget(id=uuid4(), amount=Decimal("1000000"), spent_amount=Decimal("250000"))

    metrics = summarize_metrics(MetricsSource([], [], [budget], []))

    assert metrics.total_budget == 1_000_000
    assert metrics.budget_used == 250_000
    assert metrics.budget_remaining == 750_000
    assert metrics.budget_percentage == 25
    assert metrics.economic_impact == 25


def test_zero_budget_percentage_ignores_spending():
    """Test a zero total budget gives a zero percentage even with spending recorded."""
    budget = Budget(id=uuid4(), amount=Decimal("0"), spent_amount=Decimal("5000"))

    metrics = summarize_metrics(MetricsSource([], [], [budget], []))

    assert metrics.budget_percentage == 0
    assert metrics.economic_impact == 0


def test_environmental_impact_from_active_programs():
    """Test four active programs and no beneficiaries."""
    programs = [Program(id=uuid4(), name=f"P{i}", status=ProgramStatus.ACTIVE) for i in range(4)]

    metrics = summarize_metrics(MetricsSource(programs, [], [], []))

    assert metrics.environmental_impact == pytest.approx(16)
    assert metrics.social_impact == 0
    assert metrics.economic_impact == 0
    assert metrics.overall_impact == pytest.approx(16 / 3)


def test_impact_scores_are_capped():
    """Test impact scores never exceed 100 and overspending is kept as is."""
    programs = [Program(id=uuid4(), name=f"P{i}", status=ProgramStatus.ACTIVE) for i in range(40)]
    budget = Budget(id=uuid4(), amount=Decimal("100"), spent_amount=Decimal("300"))

    metrics = summarize_metrics(MetricsSource(programs, [], [budget], []))

    assert metrics.environmental_impact == 100
    assert metrics.economic_impact == 100
    assert metrics.budget_percentage == 300
    assert metrics.budget_remaining == -200
    for score in (metrics.social_impact, metrics.environmental_impact, metrics.economic_impact, metrics.overall_impact):
        assert 0 <= score <= 100


@pytest.mark.asyncio
async def test_quarter_metrics(calculator):
    """Test metrics for Q1-2024 over the in-memory records."""
    metrics = await calculator.calculate_metrics(window=period_window(resolve_period("Q1-2024")))

    assert metrics.total_programs == 3
    assert metrics.active_programs == 2
    assert metrics.completed_programs == 1
    assert metrics.program_completion_rate == pytest.approx(100 / 3)
    assert metrics.total_activities == 3
    assert metrics.completed_activities == 1
    assert metrics.ongoing_activities == 1
    assert metrics.total_beneficiaries == 150
    assert metrics.total_budget == 1_000_000
    assert metrics.budget_used == 250_000
    assert metrics.total_stakeholders == 3
    assert metrics.social_impact == 30
    assert metrics.environmental_impact == 8
    assert metrics.overall_impact == pytest.approx(21)


@pytest.mark.asyncio
async def test_program_scope(calculator, records):
    """Test a program scope restricts programs, activities and budgets."""
    water = records.programs[1]

    metrics = await calculator.calculate_metrics(ReportScope(program_id=water.id))

    assert metrics.total_programs == 1
    assert metrics.completed_programs == 1
    assert metrics.total_activities == 2
    assert metrics.total_beneficiaries == 50
    assert metrics.total_budget == 500_000
    # Stakeholders are counted across the organisation
    assert metrics.total_stakeholders == 3


@pytest.mark.asyncio
async def test_department_scope(calculator, records):
    """Test a department scope covers every program of the department."""
    environment = records.departments[1]

    metrics = await calculator.calculate_metrics(ReportScope(department_id=environment.id))

    assert metrics.total_programs == 2
    assert metrics.active_programs == 1
    assert metrics.total_activities == 2


@pytest.mark.asyncio
async def test_window_includes_last_day(calculator):
    """Test records created during the last day of a range are counted."""
    metrics = await calculator.calculate_metrics(window=date_window(date(2024, 1, 1), date(2024, 1, 15)))

    assert metrics.total_activities == 1
    assert metrics.total_budget == 1_000_000

    metrics = await calculator.calculate_metrics(window=date_window(date(2024, 1, 1), date(2024, 1, 14)))

    assert metrics.total_activities == 0


@pytest.mark.asyncio
async def test_failing_read_aborts_calculation(records):
    """Test one failing read fails the whole calculation."""
    calculator = build_calculator(records)
    calculator.budgets = FailingRepository(OperationalError("SELECT", {}, Exception("connection lost")))

    with pytest.raises(OperationalError):
        await calculator.calculate_metrics(window=DateWindow())
