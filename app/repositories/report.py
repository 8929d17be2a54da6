"""
Report persistence.

Unlike the read repositories, the report repository is bound to a single
session so that a report row and its metrics snapshot are written in one
transaction.
"""

from typing import Any, Dict, List, Optional, Protocol
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import logger
from app.models.report import Report, ReportMetrics
from app.schemas.report import ReportFilter, ReportSortField, SortOrder
from app.utils.pagination import PaginatedResponse, PaginationParams, paginate_query

SORT_COLUMNS: Dict[ReportSortField, Any] = {
    ReportSortField.TITLE: Report.title,
    ReportSortField.TYPE: Report.type,
    ReportSortField.STATUS: Report.status,
    ReportSortField.PERIOD: Report.period,
    ReportSortField.CREATED_AT: Report.created_at,
    ReportSortField.UPDATED_AT: Report.updated_at,
    ReportSortField.PUBLISHED_AT: Report.published_at,
    ReportSortField.VERSION: Report.version,
    ReportSortField.VIEW_COUNT: Report.view_count,
    ReportSortField.DOWNLOAD_COUNT: Report.download_count,
}


class ReportRepository(Protocol):
    async def get(self, report_id: UUID) -> Optional[Report]:
        ...

    async def list_reports(
        self,
        filters: ReportFilter,
        pagination: PaginationParams,
        sort_by: ReportSortField,
        sort_order: SortOrder,
    ) -> PaginatedResponse[Any]:
        ...

    async def count_snapshots(self, report_id: UUID) -> int:
        ...

    def add(self, instance: Any) -> None:
        ...

    async def delete(self, report: Report) -> None:
        ...

    async def increment_counter(self, report_id: UUID, counter: str) -> None:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


def sort_expressions(sort_by: ReportSortField, sort_order: SortOrder) -> List[Any]:
    """Ordering for the report list; id breaks ties so pages are stable."""
    column = SORT_COLUMNS[sort_by]
    if sort_order == SortOrder.DESC:
        return [column.desc(), Report.id.desc()]
    return [column.asc(), Report.id.asc()]


class SqlAlchemyReportRepository:
    """ReportRepository backed by one AsyncSession."""

    COUNTERS = {"view_count": Report.view_count, "download_count": Report.download_count}

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, report_id: UUID) -> Optional[Report]:
        result = await self.db.execute(
            select(Report)
            .where(Report.id == report_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def list_reports(
        self,
        filters: ReportFilter,
        pagination: PaginationParams,
        sort_by: ReportSortField = ReportSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> PaginatedResponse[Any]:
        stmt = select(Report)
        if filters.type:
            stmt = stmt.where(Report.type == filters.type)
        if filters.status:
            stmt = stmt.where(Report.status == filters.status)
        if filters.period:
            stmt = stmt.where(Report.period == filters.period)
        if filters.program_id:
            stmt = stmt.where(Report.program_id == filters.program_id)
        if filters.department_id:
            stmt = stmt.where(Report.department_id == filters.department_id)
        search = filters.search or pagination.search
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(Report.title.ilike(pattern), Report.description.ilike(pattern)))

        logger.debug(f"Listing reports page={pagination.page} size={pagination.size} sort={sort_by.value} {sort_order.value}")
        return await paginate_query(self.db, stmt, pagination, order_by=sort_expressions(sort_by, sort_order))

    async def count_snapshots(self, report_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(ReportMetrics).where(ReportMetrics.report_id == report_id)
        )
        return result.scalar_one()

    def add(self, instance: Any) -> None:
        self.db.add(instance)

    async def delete(self, report: Report) -> None:
        await self.db.delete(report)

    async def increment_counter(self, report_id: UUID, counter: str) -> None:
        """Atomically bump a view/download counter without touching updated_at."""
        column = self.COUNTERS[counter]
        await self.db.execute(
            update(Report)
            .where(Report.id == report_id)
            .values({column: column + 1, Report.updated_at: Report.updated_at})
        )

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
