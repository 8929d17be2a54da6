"""
Configuration for pytest.

This module provides fixtures and configuration for running tests.
"""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("ENABLE_CACHE", "false")

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, List, Optional
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.db.session import get_db, get_session_factory
from app.main import app
from app.models import (
    Activity,
    ActivityStatus,
    Base,
    Budget,
    Department,
    Program,
    ProgramCategory,
    ProgramStatus,
    Project,
    Stakeholder,
    StakeholderCategory,
)
from app.repositories.base import DateWindow, ReportScope
from app.services.metrics import MetricsCalculator


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite engine; NullPool gives every session its own connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'csr_test.db'}",
        poolclass=NullPool,
        future=True,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory):
    """Create an async test client bound to the test database."""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def seeded(session_factory):
    """
    Seed departments, programs, activities, budgets and stakeholders.

    Q1-2024 holds two activities (150 participants) and one budget of
    1,000,000 with 250,000 spent; Q2-2024 holds one activity and one fully
    spent budget of 500,000.
    """
    community = Department(id=uuid4(), name="Community Development", code="CD")
    environment = Department(id=uuid4(), name="Environment", code="ENV")
    education = ProgramCategory(id=uuid4(), name="Education")
    health = ProgramCategory(id=uuid4(), name="Health")

    literacy = Program(
        id=uuid4(), name="Literacy for All", status=ProgramStatus.ACTIVE,
        department=community, category=education, target_beneficiary=500,
        start_date=date(2024, 1, 1), end_date=date(2024, 12, 31),
    )
    water = Program(
        id=uuid4(), name="Clean Water", status=ProgramStatus.COMPLETED,
        department=environment, category=health,
        start_date=date(2023, 6, 1), end_date=date(2024, 6, 30),
    )
    mangrove = Program(
        id=uuid4(), name="Mangrove Restoration", status=ProgramStatus.ACTIVE,
        department=environment,
    )

    reading = Project(id=uuid4(), program=literacy, name="Reading Corners", progress=40)
    wells = Project(id=uuid4(), program=water, name="Village Wells", progress=100)

    workshop = Activity(
        id=uuid4(), project=reading, name="Tutor Training", type="training",
        status=ActivityStatus.COMPLETED, participants=120, progress=100,
        start_date=date(2024, 1, 20), end_date=date(2024, 1, 21), created_at=utc(2024, 1, 15),
    )
    book_drive = Activity(
        id=uuid4(), project=reading, name="Book Drive", type="distribution",
        status=ActivityStatus.ONGOING, participants=30, progress=50,
        start_date=date(2024, 2, 12), created_at=utc(2024, 2, 10),
    )
    well_opening = Activity(
        id=uuid4(), project=wells, name="Well Opening", type="event",
        status=ActivityStatus.COMPLETED, participants=50, progress=100,
        start_date=date(2024, 4, 8), created_at=utc(2024, 4, 5),
    )

    literacy_budget = Budget(
        id=uuid4(), department=community, program=literacy, project=reading,
        description="Books and training", category="operational",
        amount=Decimal("1000000.00"), spent_amount=Decimal("250000.00"),
        period="Q1-2024", created_at=utc(2024, 1, 10),
    )
    water_budget = Budget(
        id=uuid4(), department=environment, program=water,
        description="Well construction", category="capital",
        amount=Decimal("500000.00"), spent_amount=Decimal("500000.00"),
        period="Q2-2024", created_at=utc(2024, 4, 1),
    )

    villagers = StakeholderCategory(id=uuid4(), name="Community", type="community")
    council = Stakeholder(
        id=uuid4(), name="Village Council", type="government", category=villagers,
        importance="high", influence="high", programs=[literacy],
    )
    ngo = Stakeholder(id=uuid4(), name="Local NGO", type="organization", importance="medium", influence="low")

    async with session_factory() as session:
        session.add_all([
            community, environment, education, health, literacy, water, mangrove,
            reading, wells, workshop, book_drive, well_opening,
            literacy_budget, water_budget, villagers, council, ngo,
        ])
        await session.commit()

    return SimpleNamespace(
        community_id=community.id,
        environment_id=environment.id,
        literacy_id=literacy.id,
        water_id=water.id,
        mangrove_id=mangrove.id,
        workshop_id=workshop.id,
        literacy_budget_id=literacy_budget.id,
    )


# ---------------------------------------------------------------------------
# In-memory repositories for service tests
# ---------------------------------------------------------------------------

def in_window(created_at: Optional[datetime], window: DateWindow) -> bool:
    if window.start is not None and (created_at is None or created_at < window.start):
        return False
    if window.end is not None and (created_at is None or created_at >= window.end):
        return False
    return True


def _activity_in_scope(activity: Activity, scope: ReportScope) -> bool:
    program = activity.project.program if activity.project else None
    if scope.program_id:
        return program is not None and program.id == scope.program_id
    if scope.department_id:
        return program is not None and program.department_id == scope.department_id
    return True


@dataclass
class FakeRecords:
    programs: List[Program] = field(default_factory=list)
    activities: List[Activity] = field(default_factory=list)
    budgets: List[Budget] = field(default_factory=list)
    stakeholders: List[Stakeholder] = field(default_factory=list)
    departments: List[Department] = field(default_factory=list)


class FakeProgramRepository:
    def __init__(self, records: FakeRecords):
        self.records = records

    async def list_programs(self, scope: ReportScope) -> List[Program]:
        if scope.program_id:
            return [p for p in self.records.programs if p.id == scope.program_id]
        if scope.department_id:
            return [p for p in self.records.programs if p.department_id == scope.department_id]
        return list(self.records.programs)

    async def list_programs_with_details(self, department_id=None) -> List[Program]:
        return [p for p in self.records.programs if department_id is None or p.department_id == department_id]


class FakeDepartmentRepository:
    def __init__(self, records: FakeRecords):
        self.records = records

    async def list_departments_with_programs(self) -> List[Department]:
        return list(self.records.departments)


class FakeActivityRepository:
    def __init__(self, records: FakeRecords):
        self.records = records
        self.calls: List[DateWindow] = []

    async def list_activities(self, scope: ReportScope, window: DateWindow) -> List[Activity]:
        self.calls.append(window)
        return [
            a for a in self.records.activities
            if _activity_in_scope(a, scope) and in_window(a.created_at, window)
        ]


class FakeBudgetRepository:
    def __init__(self, records: FakeRecords):
        self.records = records

    async def list_budgets(self, scope: ReportScope, window: DateWindow) -> List[Budget]:
        def in_scope(budget: Budget) -> bool:
            if scope.program_id:
                return budget.program_id == scope.program_id
            if scope.department_id:
                return budget.department_id == scope.department_id
            return True

        return [b for b in self.records.budgets if in_scope(b) and in_window(b.created_at, window)]


class FakeStakeholderRepository:
    def __init__(self, records: FakeRecords):
        self.records = records

    async def list_stakeholders(self) -> List[Stakeholder]:
        return list(self.records.stakeholders)


class FailingRepository:
    """Stands in for any read repository whose backend is down."""

    def __init__(self, error: Exception):
        self.error = error

    async def _fail(self, *args: Any, **kwargs: Any):
        raise self.error

    list_programs = list_activities = list_budgets = list_stakeholders = _fail


def build_calculator(records: FakeRecords) -> MetricsCalculator:
    return MetricsCalculator(
        programs=FakeProgramRepository(records),
        activities=FakeActivityRepository(records),
        budgets=FakeBudgetRepository(records),
        stakeholders=FakeStakeholderRepository(records),
    )


@pytest.fixture
def records() -> FakeRecords:
    """
    In-memory records: two departments, three programs, four activities
    (three in Q1-2024), two budgets and three stakeholders.
    """
    community = Department(id=uuid4(), name="Community Development")
    environment = Department(id=uuid4(), name="Environment")
    education = ProgramCategory(id=uuid4(), name="Education")
    partners = StakeholderCategory(id=uuid4(), name="Partners")

    literacy = Program(
        id=uuid4(), name="Literacy for All", status=ProgramStatus.ACTIVE,
        department_id=community.id, department=community, category=education,
        start_date=date(2024, 1, 1), end_date=date(2024, 12, 31),
    )
    water = Program(
        id=uuid4(), name="Clean Water", status=ProgramStatus.COMPLETED,
        department_id=environment.id, department=environment,
    )
    mangrove = Program(
        id=uuid4(), name="Mangrove Restoration", status=ProgramStatus.ACTIVE,
        department_id=environment.id, department=environment,
    )
    community.programs = [literacy]
    environment.programs = [water, mangrove]

    reading = Project(id=uuid4(), program_id=literacy.id, program=literacy, name="Reading Corners")
    wells = Project(id=uuid4(), program_id=water.id, program=water, name="Village Wells")

    activities = [
        Activity(
            id=uuid4(), project=reading, name="Tutor Training", type="training",
            status=ActivityStatus.COMPLETED, participants=120, progress=100,
            start_date=date(2024, 1, 20), created_at=utc(2024, 1, 15),
        ),
        Activity(
            id=uuid4(), project=reading, name="Book Drive", type="distribution",
            status=ActivityStatus.ONGOING, participants=30, progress=50,
            start_date=date(2024, 2, 12), created_at=utc(2024, 2, 10),
        ),
        Activity(
            id=uuid4(), project=wells, name="Site Survey", type="survey",
            status=ActivityStatus.PLANNED, participants=None, progress=0,
            start_date=None, created_at=utc(2024, 3, 3),
        ),
        Activity(
            id=uuid4(), project=wells, name="Well Opening", type="event",
            status=ActivityStatus.COMPLETED, participants=50, progress=100,
            start_date=date(2024, 4, 8), created_at=utc(2024, 4, 5),
        ),
    ]
    reading.activities = activities[:2]
    wells.activities = activities[2:]
    literacy.projects = [reading]
    water.projects = [wells]
    mangrove.projects = []

    budgets = [
        Budget(
            id=uuid4(), department_id=community.id, program_id=literacy.id, program=literacy,
            description="Books and training", category="operational",
            amount=Decimal("1000000.00"), spent_amount=Decimal("250000.00"), created_at=utc(2024, 1, 10),
        ),
        Budget(
            id=uuid4(), department_id=environment.id, program_id=water.id, program=water,
            description="Well construction", category="capital",
            amount=Decimal("500000.00"), spent_amount=Decimal("500000.00"), created_at=utc(2024, 4, 1),
        ),
    ]
    literacy.budgets = budgets[:1]
    water.budgets = budgets[1:]
    mangrove.budgets = []

    stakeholders = [
        Stakeholder(id=uuid4(), name="Village Council", type="government", category=partners, importance="high", influence="high"),
        Stakeholder(id=uuid4(), name="Local NGO", type="organization", category=partners, importance="medium", influence="low"),
        Stakeholder(id=uuid4(), name="Anonymous Donor", type="individual", category=None, importance="low", influence="low"),
    ]

    return FakeRecords(
        programs=[literacy, water, mangrove],
        activities=activities,
        budgets=budgets,
        stakeholders=stakeholders,
        departments=[community, environment],
    )


@pytest.fixture
def calculator(records) -> MetricsCalculator:
    return build_calculator(records)
