"""
Schemas package initialization.

This module imports all schemas to make them available from a single import point.
"""

from app.schemas.common import ApiResponse, CamelModel
from app.schemas.metrics import PeriodRange, ReportMetrics
from app.schemas.content import ReportContent
from app.schemas.analytics import (
    AnalyticsDashboard,
    PeriodComparison,
    TrendGroupBy,
    TrendMetric,
    TrendPoint,
)
from app.schemas.report import (
    ExportFormat,
    Report,
    ReportCreate,
    ReportDetail,
    ReportFilter,
    ReportPage,
    ReportSortField,
    ReportUpdate,
    SortOrder,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "PeriodRange",
    "ReportMetrics",
    "ReportContent",
    "AnalyticsDashboard",
    "PeriodComparison",
    "TrendGroupBy",
    "TrendMetric",
    "TrendPoint",
    "ExportFormat",
    "Report",
    "ReportCreate",
    "ReportDetail",
    "ReportFilter",
    "ReportPage",
    "ReportSortField",
    "ReportUpdate",
    "SortOrder",
]
