"""
Pydantic schemas for reports.

This module defines the request and response schemas for report-related
API endpoints using Pydantic models.
"""

from typing import List, Optional
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import Field, model_validator

from app.models.report import ReportStatus
from app.schemas.common import CamelModel
from app.schemas.content import ReportContent
from app.schemas.metrics import ReportMetrics


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    EXCEL = "excel"


class ReportSortField(str, Enum):
    """Fields the report list can be ordered by."""

    TITLE = "title"
    TYPE = "type"
    STATUS = "status"
    PERIOD = "period"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    PUBLISHED_AT = "publishedAt"
    VERSION = "version"
    VIEW_COUNT = "viewCount"
    DOWNLOAD_COUNT = "downloadCount"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ReportCreate(CamelModel):
    """Schema for creating a new report."""

    title: str = Field(..., min_length=1, max_length=200)
    type: str = Field(..., min_length=1, max_length=50)
    period: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    status: ReportStatus = ReportStatus.DRAFT
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    program_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    template: Optional[str] = None
    tags: Optional[List[str]] = None


class ReportUpdate(CamelModel):
    """Schema for updating an existing report; unset fields stay untouched."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    status: Optional[ReportStatus] = None
    period: Optional[str] = Field(None, min_length=1, max_length=20)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    program_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    template: Optional[str] = None
    tags: Optional[List[str]] = None
    regenerate_content: bool = False


class ReportFilter(CamelModel):
    """Schema for filtering reports."""

    type: Optional[str] = None
    status: Optional[ReportStatus] = None
    period: Optional[str] = None
    program_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    search: Optional[str] = None


class ReportMetricsSnapshot(ReportMetrics):
    """A persisted metrics snapshot row."""

    id: UUID
    report_id: UUID
    version: int
    created_at: datetime


class Report(CamelModel):
    """Schema for report response data."""

    id: UUID
    title: str
    description: Optional[str] = None
    type: str
    status: ReportStatus
    period: str
    start_date: date
    end_date: date
    program_id: Optional[UUID] = None
    department_id: Optional[UUID] = None
    template: Optional[str] = None
    tags: Optional[List[str]] = None
    version: int
    view_count: int
    download_count: int
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    latest_metrics: Optional[ReportMetricsSnapshot] = None


class ReportDetail(Report):
    """Full report including content and the snapshot history, newest first."""

    content: Optional[ReportContent] = None
    metrics_records: List[ReportMetricsSnapshot] = []

    @model_validator(mode="after")
    def _latest_from_history(self):
        if self.latest_metrics is None and self.metrics_records:
            self.latest_metrics = self.metrics_records[0]
        return self


class ReportPage(CamelModel):
    """Paginated list of reports."""

    items: List[Report]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool
