"""
Report API endpoints.
This module provides endpoints for creating, reading, updating, deleting and
exporting CSR reports.
"""
import io
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import StreamingResponse

from app.core.deps import get_pagination_params, get_report_service, to_http_exception
from app.core.exceptions import CSRReportingError
from app.core.logging import logger
from app.models.report import ReportStatus
from app.schemas.common import ApiResponse
from app.schemas.report import (
    ExportFormat,
    ReportCreate,
    ReportDetail,
    ReportFilter,
    ReportPage,
    ReportSortField,
    ReportUpdate,
    SortOrder,
)
from app.services.export import parse_export_format
from app.services.report import ReportService
from app.utils.pagination import PaginationParams

router = APIRouter()


@router.get("", response_model=ApiResponse[ReportPage])
async def list_reports(
    type: Optional[str] = Query(None, description="Report type"),
    report_status: Optional[ReportStatus] = Query(None, alias="status", description="Workflow status"),
    period: Optional[str] = Query(None, description="Period token, e.g. Q1-2024"),
    program_id: Optional[UUID] = Query(None, alias="programId"),
    department_id: Optional[UUID] = Query(None, alias="departmentId"),
    sort_by: ReportSortField = Query(ReportSortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    pagination: PaginationParams = Depends(get_pagination_params),
    service: ReportService = Depends(get_report_service),
) -> ApiResponse[ReportPage]:
    """
    List reports with filtering, sorting and pagination.

    Returns:
        One page of reports, each with its latest metrics snapshot
    """
    filters = ReportFilter(
        type=type,
        status=report_status,
        period=period,
        program_id=program_id,
        department_id=department_id,
        search=pagination.search,
    )
    page = await service.list_reports(filters, pagination, sort_by, sort_order)
    return ApiResponse(data=ReportPage.model_validate(page, from_attributes=True))


@router.post("", response_model=ApiResponse[ReportDetail], status_code=status.HTTP_201_CREATED)
async def create_report(
    report_in: ReportCreate,
    service: ReportService = Depends(get_report_service),
) -> ApiResponse[ReportDetail]:
    """
    Create a report with generated content and its first metrics snapshot.
    """
    logger.debug(f"Creating report: {report_in.title}")
    try:
        report = await service.create_report(report_in)
    except CSRReportingError as e:
        raise to_http_exception(e)
    return ApiResponse(message="Report created", data=ReportDetail.model_validate(report))


@router.get("/{report_id}", response_model=ApiResponse[ReportDetail])
async def get_report(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
) -> ApiResponse[ReportDetail]:
    """
    Get a report by ID; each call counts as a view.
    """
    logger.debug(f"Getting report by ID: {report_id}")
    try:
        report = await service.get_report(report_id, count_view=True)
    except CSRReportingError as e:
        raise to_http_exception(e)
    return ApiResponse(data=ReportDetail.model_validate(report))


@router.patch("/{report_id}", response_model=ApiResponse[ReportDetail])
async def update_report(
    report_id: UUID,
    report_update: ReportUpdate,
    service: ReportService = Depends(get_report_service),
) -> ApiResponse[ReportDetail]:
    """
    Update report metadata; `regenerateContent: true` also rebuilds content
    and metrics as a new version. A write that races another change to the
    same report is rolled back with 409.
    """
    logger.debug(f"Updating report: {report_id}")
    try:
        report = await service.update_report(report_id, report_update)
    except CSRReportingError as e:
        raise to_http_exception(e)
    return ApiResponse(message="Report updated", data=ReportDetail.model_validate(report))


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(
    report_id: UUID,
    service: ReportService = Depends(get_report_service),
):
    """
    Delete a report and its metrics snapshots.
    """
    logger.debug(f"Deleting report: {report_id}")
    try:
        await service.delete_report(report_id)
    except CSRReportingError as e:
        raise to_http_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{report_id}/export")
async def export_report(
    report_id: UUID,
    format: str = Query("json", description="Export format: json, csv or excel"),
    service: ReportService = Depends(get_report_service),
):
    """
    Export a report as JSON, CSV or an Excel workbook; each call counts as a download.

    Returns:
        JSON envelope, or a file download for csv and excel
    """
    try:
        export = await service.export_report(report_id, parse_export_format(format))
    except CSRReportingError as e:
        raise to_http_exception(e)

    if export.format == ExportFormat.JSON:
        return ApiResponse(data=export.body)

    headers = {"Content-Disposition": f"attachment; filename={export.filename}"}
    if export.format == ExportFormat.CSV:
        return StreamingResponse(iter([export.body]), media_type=export.media_type, headers=headers)
    return StreamingResponse(io.BytesIO(export.body), media_type=export.media_type, headers=headers)
