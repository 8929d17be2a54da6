"""
Analytics API endpoints.
This module provides the analytics dashboard, period comparisons, trend
series and dashboard exports.
"""
import io
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from app.core.deps import (
    get_analytics_service,
    get_comparison_engine,
    get_report_scope,
    get_trend_generator,
    to_http_exception,
)
from app.core.exceptions import CSRReportingError
from app.core.logging import logger
from app.repositories.base import ReportScope
from app.schemas.analytics import AnalyticsDashboard, PeriodComparison, TrendGroupBy, TrendMetric, TrendPoint
from app.schemas.common import ApiResponse
from app.schemas.report import ExportFormat
from app.services.analytics import AnalyticsService
from app.services.comparison import ComparisonEngine
from app.services.export import build_dashboard_export, parse_export_format
from app.services.trends import TrendSeriesGenerator

router = APIRouter()


def _default_period() -> str:
    return str(datetime.now(timezone.utc).year)


@router.get("", response_model=ApiResponse[AnalyticsDashboard])
async def get_analytics(
    period: Optional[str] = Query(None, description="Period token; defaults to the current year"),
    compare: Optional[str] = Query(None, description="Second period token to compare against"),
    scope: ReportScope = Depends(get_report_scope),
    service: AnalyticsService = Depends(get_analytics_service),
) -> ApiResponse[AnalyticsDashboard]:
    """
    Get the analytics dashboard for a period.

    Returns:
        Overview with growth against the previous period, distributions,
        rankings and the optional comparison
    """
    period = period or _default_period()
    logger.debug(f"Analytics requested for period {period}, compare={compare}")
    dashboard = await service.get_dashboard(period, scope, compare=compare or None)
    return ApiResponse(data=dashboard)


@router.get("/compare", response_model=ApiResponse[PeriodComparison])
async def compare_periods(
    period1: str = Query(..., description="Baseline period token"),
    period2: str = Query(..., description="Period token compared to the baseline"),
    scope: ReportScope = Depends(get_report_scope),
    engine: ComparisonEngine = Depends(get_comparison_engine),
) -> ApiResponse[PeriodComparison]:
    """
    Compare the metrics of two periods.
    """
    comparison = await engine.compare_periods(period1, period2, scope)
    return ApiResponse(data=comparison)


@router.get("/trends", response_model=ApiResponse[List[TrendPoint]])
async def get_trends(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    metric: TrendMetric = Query(TrendMetric.BUDGET),
    group_by: TrendGroupBy = Query(TrendGroupBy.MONTH, alias="groupBy"),
    scope: ReportScope = Depends(get_report_scope),
    generator: TrendSeriesGenerator = Depends(get_trend_generator),
) -> ApiResponse[List[TrendPoint]]:
    """
    Get a metric bucketed by month, quarter or year over a date range.
    """
    points = await generator.get_trend_series(metric, group_by, start_date, end_date, scope)
    return ApiResponse(data=points)


@router.get("/export")
async def export_analytics(
    period: Optional[str] = Query(None, description="Period token; defaults to the current year"),
    format: str = Query("json", description="Export format: json, csv or excel"),
    scope: ReportScope = Depends(get_report_scope),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Export the analytics dashboard as JSON, CSV or an Excel workbook.
    """
    try:
        fmt = parse_export_format(format)
    except CSRReportingError as e:
        raise to_http_exception(e)

    period = period or _default_period()
    dashboard = await service.get_dashboard(period, scope)
    export = build_dashboard_export(dashboard, period, fmt)
    logger.info(f"Exporting analytics for {period} as {fmt.value}")

    if export.format == ExportFormat.JSON:
        return ApiResponse(data=export.body)

    headers = {"Content-Disposition": f"attachment; filename={export.filename}"}
    if export.format == ExportFormat.CSV:
        return StreamingResponse(iter([export.body]), media_type=export.media_type, headers=headers)
    return StreamingResponse(io.BytesIO(export.body), media_type=export.media_type, headers=headers)
