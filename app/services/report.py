"""
Service layer for CSR reports.

This module contains the report lifecycle: creation with an initial metrics
snapshot, metadata updates, workflow timestamps, content regeneration,
deletion and export. Every write is a single commit; a failed commit is
rolled back and surfaced as ReportPersistenceError.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from app.core.exceptions import (
    ReportConflictError,
    ReportNotFoundError,
    ReportPersistenceError,
    ReportValidationError,
)
from app.core.logging import logger
from app.models.report import Report, ReportStatus
from app.models.report import ReportMetrics as ReportMetricsSnapshot
from app.repositories.base import ReportScope
from app.repositories.report import ReportRepository
from app.schemas.content import ReportContent
from app.schemas.metrics import ReportMetrics
from app.schemas.report import ExportFormat, ReportCreate, ReportFilter, ReportSortField, ReportUpdate, SortOrder
from app.services.analytics import invalidate_analytics_cache
from app.services.content import ContentAssembler
from app.services.export import ExportFile, build_report_export
from app.services.metrics import MetricsCalculator
from app.services.period import date_window, resolve_period
from app.utils.pagination import PaginatedResponse, PaginationParams

NON_NULLABLE_FIELDS = ("title", "type", "period", "start_date", "end_date")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_date_range(
    period: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """Explicit dates win over the period's own range; an inverted range is rejected."""
    resolved = resolve_period(period, today=today)
    start = start_date or resolved.start_date
    end = end_date or resolved.end_date
    if start > end:
        raise ReportValidationError(f"Start date {start} is after end date {end}")
    return start, end


def stamp_workflow(report: Report, status: ReportStatus, now: datetime) -> None:
    """Record the first entry into a workflow state; later entries keep the original time."""
    if status == ReportStatus.REVIEW:
        if report.submitted_at is None:
            report.submitted_at = now
    elif status == ReportStatus.APPROVED:
        if report.approved_at is None:
            report.approved_at = now
        if report.reviewed_at is None:
            report.reviewed_at = now
    elif status == ReportStatus.PUBLISHED:
        if report.published_at is None:
            report.published_at = now


def metrics_snapshot(version: int, metrics: ReportMetrics) -> ReportMetricsSnapshot:
    return ReportMetricsSnapshot(id=uuid4(), version=version, created_at=_now(), **metrics.model_dump())


class ReportService:
    """Service class for CSR reports."""

    def __init__(
        self,
        reports: ReportRepository,
        assembler: ContentAssembler,
        calculator: MetricsCalculator,
    ):
        self.reports = reports
        self.assembler = assembler
        self.calculator = calculator

    async def _generate(
        self,
        report_type: str,
        period: str,
        scope: ReportScope,
        start: date,
        end: date,
        today: Optional[date] = None,
    ) -> Tuple[ReportContent, ReportMetrics]:
        content = await self.assembler.generate_report_content(report_type, scope, period, today=today)
        metrics = await self.calculator.calculate_metrics(scope, date_window(start, end))
        return content, metrics

    async def _commit(self, action: str, report_id: Optional[UUID] = None) -> None:
        try:
            await self.reports.commit()
        except StaleDataError as e:
            await self.reports.rollback()
            logger.warning(f"Concurrent modification while trying to {action} report {report_id}: {e}")
            raise ReportConflictError(report_id)
        except SQLAlchemyError as e:
            await self.reports.rollback()
            logger.error(f"Failed to {action} report {report_id}: {e}")
            raise ReportPersistenceError(f"Failed to {action} report", report_id=report_id)

    async def _get_or_raise(self, report_id: UUID) -> Report:
        report = await self.reports.get(report_id)
        if report is None:
            logger.warning(f"Report not found: {report_id}")
            raise ReportNotFoundError(report_id)
        return report

    async def create_report(self, data: ReportCreate, today: Optional[date] = None) -> Report:
        """
        Create a report at version 1 together with its first metrics snapshot.

        Content and metrics are computed before anything is written; the
        report row and the snapshot are committed together.

        Args:
            data: Report creation payload
            today: Reference date for fallback periods

        Returns:
            The persisted report
        """
        start, end = resolve_date_range(data.period, data.start_date, data.end_date, today=today)
        scope = ReportScope(program_id=data.program_id, department_id=data.department_id)
        content, metrics = await self._generate(data.type, data.period, scope, start, end, today=today)

        now = _now()
        report = Report(
            id=uuid4(),
            title=data.title,
            description=data.description,
            type=data.type,
            status=data.status,
            period=data.period,
            start_date=start,
            end_date=end,
            program_id=data.program_id,
            department_id=data.department_id,
            template=data.template,
            tags=data.tags,
            content=content.model_dump(mode="json", by_alias=True),
            metrics=metrics.model_dump(mode="json", by_alias=True),
            version=1,
            view_count=0,
            download_count=0,
            created_at=now,
            updated_at=now,
        )
        stamp_workflow(report, data.status, now)
        report.metrics_records.append(metrics_snapshot(1, metrics))

        self.reports.add(report)
        await self._commit("create", report.id)
        await invalidate_analytics_cache()

        logger.info(f"Created report {report.id} '{report.title}' ({report.type}, {report.period})")
        return await self._get_or_raise(report.id)

    async def get_report(self, report_id: UUID, count_view: bool = False) -> Report:
        """Fetch a report; with `count_view` its view counter is incremented first."""
        report = await self._get_or_raise(report_id)
        if count_view:
            await self.reports.increment_counter(report_id, "view_count")
            await self._commit("record a view of", report_id)
            report = await self._get_or_raise(report_id)
        return report

    async def list_reports(
        self,
        filters: ReportFilter,
        pagination: PaginationParams,
        sort_by: ReportSortField = ReportSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
    ) -> PaginatedResponse[Any]:
        return await self.reports.list_reports(filters, pagination, sort_by, sort_order)

    async def update_report(self, report_id: UUID, data: ReportUpdate, today: Optional[date] = None) -> Report:
        """
        Patch report metadata and optionally regenerate its content.

        Regeneration replaces content and current metrics, increments the
        version by one and appends one snapshot, all in the same commit as
        the metadata changes.
        """
        report = await self._get_or_raise(report_id)
        changes = data.model_dump(exclude_unset=True, exclude={"regenerate_content"})

        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ReportValidationError(f"Field '{field}' cannot be null")

        status = changes.pop("status", None)
        if {"period", "start_date", "end_date"} & changes.keys():
            period = changes.get("period", report.period)
            # A new period without explicit dates re-derives the range from the period
            if "period" in changes:
                start_default, end_default = None, None
            else:
                start_default, end_default = report.start_date, report.end_date
            changes["start_date"], changes["end_date"] = resolve_date_range(
                period,
                changes.get("start_date", start_default),
                changes.get("end_date", end_default),
                today=today,
            )

        regenerated = None
        if data.regenerate_content:
            scope = ReportScope(
                program_id=changes.get("program_id", report.program_id),
                department_id=changes.get("department_id", report.department_id),
            )
            regenerated = await self._generate(
                changes.get("type", report.type),
                changes.get("period", report.period),
                scope,
                changes.get("start_date", report.start_date),
                changes.get("end_date", report.end_date),
                today=today,
            )

        for field, value in changes.items():
            setattr(report, field, value)

        now = _now()
        if status is not None:
            report.status = status
            stamp_workflow(report, status, now)

        if regenerated is not None:
            content, metrics = regenerated
            report.version += 1
            report.content = content.model_dump(mode="json", by_alias=True)
            report.metrics = metrics.model_dump(mode="json", by_alias=True)
            report.metrics_records.append(metrics_snapshot(report.version, metrics))
        report.updated_at = now

        await self._commit("update", report_id)
        if regenerated is not None:
            await invalidate_analytics_cache()
            logger.info(f"Regenerated report {report_id} content, now version {report.version}")
        else:
            logger.info(f"Updated report {report_id}: {sorted(changes) + (['status'] if status else [])}")
        return await self._get_or_raise(report_id)

    async def delete_report(self, report_id: UUID) -> None:
        """Delete a report and, through the cascade, its snapshots."""
        report = await self._get_or_raise(report_id)
        await self.reports.delete(report)
        await self._commit("delete", report_id)
        await invalidate_analytics_cache()
        logger.info(f"Deleted report {report_id}")

    async def export_report(self, report_id: UUID, fmt: ExportFormat) -> ExportFile:
        """Project the report into `fmt` and count the download."""
        await self._get_or_raise(report_id)
        await self.reports.increment_counter(report_id, "download_count")
        await self._commit("record a download of", report_id)
        report = await self._get_or_raise(report_id)
        logger.info(f"Exporting report {report_id} as {fmt.value}")
        return build_report_export(report, fmt)
