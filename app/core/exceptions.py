"""
Domain exceptions raised by the reporting services.

Routers translate these into HTTP responses; services never raise HTTPException
themselves.
"""

from typing import Optional
from uuid import UUID


class CSRReportingError(Exception):
    """Base class for reporting engine errors."""


class ReportValidationError(CSRReportingError):
    """Input that cannot be turned into a consistent report (HTTP 400)."""


class ReportNotFoundError(CSRReportingError):
    """Unknown report id (HTTP 404)."""

    def __init__(self, report_id: UUID):
        self.report_id = report_id
        super().__init__(f"Report not found: {report_id}")


class ReportConflictError(CSRReportingError):
    """The report changed underneath a write, which was rolled back (HTTP 409)."""

    def __init__(self, report_id: Optional[UUID]):
        self.report_id = report_id
        super().__init__(f"Report {report_id} was modified concurrently; reload and retry")


class ReportPersistenceError(CSRReportingError):
    """A write unit failed and was rolled back (HTTP 500)."""

    def __init__(self, message: str, report_id: Optional[UUID] = None):
        self.report_id = report_id
        super().__init__(message)
