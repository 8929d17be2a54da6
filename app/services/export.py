"""
Export projections for reports and the analytics dashboard.

The same report (or dashboard) is reshaped per format: a nested object for
JSON, flat `section,key,value` rows for CSV and named tabular sheets for
Excel. Rendering to bytes is kept separate from projection.
"""

import csv
import io
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from app.core.exceptions import ReportValidationError
from app.models.report import Report
from app.schemas.analytics import AnalyticsDashboard
from app.schemas.content import ReportContent
from app.schemas.metrics import ReportMetrics
from app.schemas.report import ExportFormat
from app.utils.serialization import make_json_serializable

HEADER_FILL = PatternFill(start_color="1F6F50", end_color="1F6F50", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MISSING = "-"

CsvRow = Tuple[str, str, Any]


class Sheet(NamedTuple):
    name: str
    rows: List[Dict[str, Any]]


def report_content(report: Report) -> Optional[ReportContent]:
    return ReportContent.model_validate(report.content) if report.content else None


def report_metrics(report: Report) -> Optional[ReportMetrics]:
    snapshot = report.latest_metrics
    return ReportMetrics.model_validate(snapshot) if snapshot is not None else None


def report_info(report: Report) -> Dict[str, Any]:
    return make_json_serializable({
        "id": report.id,
        "title": report.title,
        "description": report.description,
        "type": report.type,
        "status": report.status,
        "period": report.period,
        "startDate": report.start_date,
        "endDate": report.end_date,
        "program": report.program.name if report.program else MISSING,
        "department": report.department.name if report.department else MISSING,
        "version": report.version,
        "createdAt": report.created_at,
        "publishedAt": report.published_at,
    })


def report_json(report: Report) -> Dict[str, Any]:
    """Full nested projection."""
    content = report_content(report)
    metrics = report_metrics(report)
    return {
        "report": report_info(report),
        "metrics": metrics.model_dump(mode="json", by_alias=True) if metrics else None,
        "content": content.model_dump(mode="json", by_alias=True) if content else None,
    }


def _flatten(section: str, items: List[Dict[str, Any]]) -> List[CsvRow]:
    return [
        (section, f"{index}.{key}", value)
        for index, item in enumerate(items, start=1)
        for key, value in item.items()
    ]


def report_csv_rows(report: Report) -> List[CsvRow]:
    """Flat key-value projection."""
    rows: List[CsvRow] = [("report", key, value) for key, value in report_info(report).items()]

    metrics = report_metrics(report)
    if metrics:
        rows.extend(("metrics", key, value) for key, value in metrics.model_dump(by_alias=True).items())

    content = report_content(report)
    if content:
        dumped = content.model_dump(mode="json", by_alias=True)
        for section in ("programs", "activities", "budgets", "stakeholders"):
            rows.extend(_flatten(section, dumped[section]["list"]))
        rows.extend(("stakeholdersByCategory", name, count) for name, count in dumped["stakeholders"]["byCategory"].items())
    return rows


def report_sheets(report: Report) -> List[Sheet]:
    """Multi-sheet tabular projection."""
    info = report_info(report)
    metrics = report_metrics(report)
    content = report_content(report)

    summary = Sheet("Summary", [{
        "Report Title": info["title"],
        "Type": info["type"],
        "Period": info["period"],
        "Status": info["status"],
        "Program": info["program"],
        "Department": info["department"],
        "Version": info["version"],
    }])
    metric_rows = []
    if metrics:
        metric_rows = [
            {"Metric": name, "Value": value}
            for name, value in metrics.model_dump(by_alias=True).items()
        ]
    if content is None:
        return [summary, Sheet("Metrics", metric_rows)]

    return [
        summary,
        Sheet("Metrics", metric_rows),
        Sheet("Programs", [
            {
                "Program Name": p.name,
                "Department": p.department or MISSING,
                "Category": p.category or MISSING,
                "Status": p.status,
                "Start Date": p.start_date,
                "End Date": p.end_date,
            }
            for p in content.programs.list
        ]),
        Sheet("Activities", [
            {
                "Activity Name": a.name,
                "Program": a.program or MISSING,
                "Type": a.type or MISSING,
                "Status": a.status,
                "Participants": a.participants,
                "Start Date": a.start_date,
                "End Date": a.end_date,
            }
            for a in content.activities.list
        ]),
        Sheet("Budgets", [
            {
                "Description": b.description or MISSING,
                "Planned Amount": b.planned,
                "Realized Amount": b.realized,
                "Percentage": round(b.percentage, 2),
                "Category": b.category or MISSING,
            }
            for b in content.budgets.list
        ]),
        Sheet("Stakeholders", [
            {
                "Name": s.name,
                "Category": s.category or MISSING,
                "Type": s.type or MISSING,
                "Importance": s.importance or MISSING,
                "Influence": s.influence or MISSING,
            }
            for s in content.stakeholders.list
        ]),
    ]


def dashboard_json(dashboard: AnalyticsDashboard, period: str) -> Dict[str, Any]:
    return {"period": period, **dashboard.model_dump(mode="json", by_alias=True)}


def dashboard_csv_rows(dashboard: AnalyticsDashboard, period: str) -> List[CsvRow]:
    dumped = dashboard.model_dump(mode="json", by_alias=True)
    rows: List[CsvRow] = [("overview", "period", period)]
    rows.extend(("overview", key, value) for key, value in dumped["overview"].items())
    for section in ("budgetTrend", "programDistribution", "activityStatus", "departmentPerformance", "monthlyImpact", "topPrograms"):
        rows.extend(_flatten(section, dumped[section]))
    return rows


def dashboard_sheets(dashboard: AnalyticsDashboard, period: str) -> List[Sheet]:
    overview = dashboard.overview
    return [
        Sheet("Overview", [{
            "Period": period,
            "Total Budget": overview.total_budget,
            "Budget Used": overview.budget_used,
            "Budget Growth %": round(overview.budget_growth, 2),
            "Total Programs": overview.total_programs,
            "Program Growth %": round(overview.program_growth, 2),
            "Total Activities": overview.total_activities,
            "Activity Growth %": round(overview.activity_growth, 2),
            "Total Beneficiaries": overview.total_beneficiaries,
            "Beneficiary Growth %": round(overview.beneficiary_growth, 2),
        }]),
        Sheet("Budget Trend", [
            {"Period": row.period, "Planned": row.planned, "Realized": row.realized, "Difference": row.planned - row.realized}
            for row in dashboard.budget_trend
        ]),
        Sheet("Program Distribution", [
            {"Category": row.name, "Count": row.count, "Budget": row.budget}
            for row in dashboard.program_distribution
        ]),
        Sheet("Activity Status", [
            {"Status": row.status, "Count": row.count}
            for row in dashboard.activity_status
        ]),
        Sheet("Department Performance", [
            {"Department": row.name, "Completion %": row.completion, "Budget": row.budget}
            for row in dashboard.department_performance
        ]),
        Sheet("Monthly Impact", [
            {"Month": row.month, "Social": row.social, "Economic": row.economic, "Environmental": row.environmental}
            for row in dashboard.monthly_impact
        ]),
        Sheet("Top Programs", [
            {"Program": row.name, "Completion %": row.completion, "Budget": row.budget, "Impact Score": row.impact}
            for row in dashboard.top_programs
        ]),
    ]


def render_csv(rows: List[CsvRow]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["section", "key", "value"])
    for section, key, value in rows:
        writer.writerow([section, key, "" if value is None else value])
    return buf.getvalue()


def _apply_header_style(ws, col_count: int) -> None:
    for col in range(1, col_count + 1):
        cell = ws.cell(row=1, column=col)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = Alignment(horizontal="center", vertical="center")


def _auto_width(ws) -> None:
    """Size columns to their content, capped at 60 characters."""
    for col in ws.columns:
        max_len = max((min(len(str(cell.value)), 60) for cell in col if cell.value is not None), default=0)
        ws.column_dimensions[get_column_letter(col[0].column)].width = max(max_len + 4, 12)


def render_workbook(sheets: List[Sheet]) -> bytes:
    """Render sheets into an .xlsx workbook; the first row of each sheet is its header."""
    wb = Workbook()
    wb.remove(wb.active)
    for sheet in sheets:
        # Excel limits sheet titles to 31 characters
        ws = wb.create_sheet(title=sheet.name[:31])
        if not sheet.rows:
            continue
        headers = list(sheet.rows[0].keys())
        ws.append(headers)
        for row in sheet.rows:
            ws.append([make_json_serializable(row.get(header)) for header in headers])
        _apply_header_style(ws, len(headers))
        _auto_width(ws)

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


class ExportFile(NamedTuple):
    format: ExportFormat
    filename: str
    media_type: str
    body: Any  # dict for json, str for csv, bytes for excel


def parse_export_format(value: str) -> ExportFormat:
    try:
        return ExportFormat((value or "").lower())
    except ValueError:
        allowed = ", ".join(f.value for f in ExportFormat)
        raise ReportValidationError(f"Unsupported export format '{value}'. Use one of: {allowed}")


def build_report_export(report: Report, fmt: ExportFormat) -> ExportFile:
    stem = f"report_{report.id}"
    if fmt == ExportFormat.CSV:
        return ExportFile(fmt, f"{stem}.csv", "text/csv", render_csv(report_csv_rows(report)))
    if fmt == ExportFormat.EXCEL:
        return ExportFile(fmt, f"{stem}.xlsx", EXCEL_MEDIA_TYPE, render_workbook(report_sheets(report)))
    return ExportFile(fmt, f"{stem}.json", "application/json", report_json(report))


def build_dashboard_export(dashboard: AnalyticsDashboard, period: str, fmt: ExportFormat) -> ExportFile:
    stem = f"analytics_{period}"
    if fmt == ExportFormat.CSV:
        return ExportFile(fmt, f"{stem}.csv", "text/csv", render_csv(dashboard_csv_rows(dashboard, period)))
    if fmt == ExportFormat.EXCEL:
        return ExportFile(fmt, f"{stem}.xlsx", EXCEL_MEDIA_TYPE, render_workbook(dashboard_sheets(dashboard, period)))
    return ExportFile(fmt, f"{stem}.json", "application/json", dashboard_json(dashboard, period))
