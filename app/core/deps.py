"""
Dependencies for FastAPI endpoints.

This module wires repositories and services to the database session and
extracts shared query parameters.
"""

from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.exceptions import (
    CSRReportingError,
    ReportConflictError,
    ReportNotFoundError,
    ReportPersistenceError,
    ReportValidationError,
)
from app.core.logging import logger
from app.db.session import get_db, get_session_factory
from app.repositories.activity import SqlAlchemyActivityRepository
from app.repositories.base import ReportScope
from app.repositories.budget import SqlAlchemyBudgetRepository
from app.repositories.program import SqlAlchemyDepartmentRepository, SqlAlchemyProgramRepository
from app.repositories.report import SqlAlchemyReportRepository
from app.repositories.stakeholder import SqlAlchemyStakeholderRepository
from app.services.analytics import AnalyticsService
from app.services.comparison import ComparisonEngine
from app.services.content import ContentAssembler
from app.services.metrics import MetricsCalculator
from app.services.report import ReportService
from app.services.trends import TrendSeriesGenerator
from app.utils.pagination import PaginationParams


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    size: int = Query(10, ge=1, le=100, description="Page size"),
    search: Optional[str] = Query(None, description="Search term"),
) -> PaginationParams:
    """
    Get pagination parameters from request query.
    
    Returns:
        PaginationParams object with extracted values
    """
    return PaginationParams(page=page, size=size, search=search)


def get_report_scope(
    program_id: Optional[UUID] = Query(None, alias="programId"),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
) -> ReportScope:
    return ReportScope(program_id=program_id, department_id=department_id)


def get_metrics_calculator(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> MetricsCalculator:
    return MetricsCalculator(
        programs=SqlAlchemyProgramRepository(session_factory),
        activities=SqlAlchemyActivityRepository(session_factory),
        budgets=SqlAlchemyBudgetRepository(session_factory),
        stakeholders=SqlAlchemyStakeholderRepository(session_factory),
    )


def get_analytics_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
    calculator: MetricsCalculator = Depends(get_metrics_calculator),
) -> AnalyticsService:
    return AnalyticsService(
        calculator=calculator,
        programs=SqlAlchemyProgramRepository(session_factory),
        activities=SqlAlchemyActivityRepository(session_factory),
        budgets=SqlAlchemyBudgetRepository(session_factory),
        departments=SqlAlchemyDepartmentRepository(session_factory),
        use_cache=settings.cache.enabled,
    )


def get_comparison_engine(calculator: MetricsCalculator = Depends(get_metrics_calculator)) -> ComparisonEngine:
    return ComparisonEngine(calculator)


def get_trend_generator(calculator: MetricsCalculator = Depends(get_metrics_calculator)) -> TrendSeriesGenerator:
    return TrendSeriesGenerator(calculator)


def get_report_service(
    db: AsyncSession = Depends(get_db),
    calculator: MetricsCalculator = Depends(get_metrics_calculator),
) -> ReportService:
    return ReportService(
        reports=SqlAlchemyReportRepository(db),
        assembler=ContentAssembler(calculator),
        calculator=calculator,
    )


def to_http_exception(exc: CSRReportingError) -> HTTPException:
    """Translate a domain exception into the HTTP error the API returns for it."""
    if isinstance(exc, ReportNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")
    if isinstance(exc, ReportValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, ReportConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, ReportPersistenceError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    logger.error(f"Unmapped reporting error: {exc}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
