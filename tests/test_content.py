"""
Tests for report content assembly.
"""

from datetime import date, timedelta
from uuid import uuid4

import pytest

from app.models import Activity, ActivityStatus
from app.services.content import LIST_LIMIT, UNCATEGORIZED, ContentAssembler, format_id_number
from app.services.period import ALL_TIME_LABEL

from conftest import build_calculator, utc


@pytest.mark.parametrize("value,expected", [
    (0, "0"),
    (150, "150"),
    (1_000_000, "1.000.000"),
    (1234.5, "1.234,5"),
])
def test_format_id_number(value, expected):
    """Test Indonesian number formatting."""
    assert format_id_number(value) == expected


@pytest.mark.asyncio
async def test_generate_quarter_content(calculator):
    """Test the six sections for Q1-2024."""
    content = await ContentAssembler(calculator).generate_report_content("quarterly", period_token="Q1-2024")

    assert content.type == "quarterly"
    assert content.period == "Q1-2024"
    assert content.summary.overview == (
        "Laporan quarterly periode Q1-2024 mencakup 3 program dengan total 3 kegiatan "
        "dan anggaran Rp 1.000.000."
    )
    assert content.summary.highlights == [
        "Total Anggaran: Rp 1.000.000",
        "Realisasi: 25.0%",
        "Tingkat Penyelesaian Program: 33.3%",
        "Total Penerima Manfaat: 150 orang",
    ]
    assert content.summary.key_metrics.total_activities == 3

    assert content.programs.total == 3
    assert {p.name for p in content.programs.list} == {"Literacy for All", "Clean Water", "Mangrove Restoration"}

    assert content.activities.total == 3
    assert content.activities.completed == 1
    assert content.activities.ongoing == 1
    assert [a.name for a in content.activities.list] == ["Book Drive", "Tutor Training", "Site Survey"]
    assert content.activities.list[0].program == "Literacy for All"
    assert content.activities.list[2].participants == 0

    assert content.budgets.total == 1_000_000
    assert content.budgets.remaining == 750_000
    assert len(content.budgets.list) == 1
    assert content.budgets.list[0].percentage == 25

    assert content.impact.beneficiaries == 150
    assert content.impact.overall == pytest.approx(21)


@pytest.mark.asyncio
async def test_stakeholder_section(calculator):
    """Test stakeholders are grouped by category with a bucket for uncategorized ones."""
    content = await ContentAssembler(calculator).generate_report_content("annual", period_token="2024")

    assert content.stakeholders.total == 3
    assert content.stakeholders.by_category == {UNCATEGORIZED: 1, "Partners": 2}
    assert [s.name for s in content.stakeholders.list] == ["Anonymous Donor", "Local NGO", "Village Council"]


@pytest.mark.asyncio
async def test_without_period_covers_all_time(calculator):
    """Test content without a period token spans every record."""
    content = await ContentAssembler(calculator).generate_report_content("annual")

    assert content.period == ALL_TIME_LABEL
    assert content.activities.total == 4
    assert content.budgets.total == 1_500_000


@pytest.mark.asyncio
async def test_content_is_deterministic(calculator):
    """Test generating twice from unchanged data yields identical content."""
    assembler = ContentAssembler(calculator)

    first = await assembler.generate_report_content("quarterly", period_token="Q1-2024")
    second = await assembler.generate_report_content("quarterly", period_token="Q1-2024")

    assert first == second


@pytest.mark.asyncio
async def test_activity_list_is_capped(records):
    """Test only the most recent activities are listed while totals count all of them."""
    project = records.activities[0].project
    records.activities = [
        Activity(
            id=uuid4(), project=project, name=f"Session {i}", status=ActivityStatus.COMPLETED,
            participants=1, start_date=date(2024, 1, 1) + timedelta(days=i), created_at=utc(2024, 1, 1),
        )
        for i in range(LIST_LIMIT + 10)
    ]

    content = await ContentAssembler(build_calculator(records)).generate_report_content("monthly", period_token="Jan-2024")

    assert content.activities.total == LIST_LIMIT + 10
    assert len(content.activities.list) == LIST_LIMIT
    assert content.activities.list[0].name == f"Session {LIST_LIMIT + 9}"
