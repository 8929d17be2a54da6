"""
Services package initialization.

This module imports all services to make them available from a single import point.
"""

from app.services.metrics import MetricsCalculator
from app.services.content import ContentAssembler
from app.services.comparison import ComparisonEngine
from app.services.trends import TrendSeriesGenerator
from app.services.analytics import AnalyticsService
from app.services.report import ReportService

__all__ = [
    "MetricsCalculator",
    "ContentAssembler",
    "ComparisonEngine",
    "TrendSeriesGenerator",
    "AnalyticsService",
    "ReportService",
]
