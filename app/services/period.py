"""
Period token resolution.

A period token is a short string naming a reporting interval: a quarter
("Q1-2024"), a calendar year ("2024") or a month ("Jan-2024"). Anything
else resolves to the current calendar month, so resolution never fails.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from app.repositories.base import DateWindow
from app.schemas.metrics import PeriodRange

MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DEFAULT_PERIOD_LABEL = "Current Period"
ALL_TIME_LABEL = "All Time"

QUARTER_TOKEN = re.compile(r"Q([1-4])-(\d{4})")
YEAR_TOKEN = re.compile(r"\d{4}")
MONTH_TOKEN = re.compile(r"([A-Za-z]{3})-(\d{4})")


def last_day_of_month(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def _month_index(abbreviation: str) -> Optional[int]:
    lowered = abbreviation.lower()
    for index, name in enumerate(MONTH_ABBREVIATIONS):
        if name.lower() == lowered:
            return index + 1
    return None


def _parse(token: str) -> Optional[Tuple[str, int, int]]:
    """Split a token into (kind, year, number); number is the quarter or month."""
    match = QUARTER_TOKEN.fullmatch(token)
    if match:
        return "quarter", int(match.group(2)), int(match.group(1))
    if YEAR_TOKEN.fullmatch(token):
        return "year", int(token), 0
    match = MONTH_TOKEN.fullmatch(token)
    if match:
        month = _month_index(match.group(1))
        if month is not None:
            return "month", int(match.group(2)), month
    return None


def _current_month(today: date) -> PeriodRange:
    return PeriodRange(
        start_date=today.replace(day=1),
        end_date=last_day_of_month(today.year, today.month),
        label=DEFAULT_PERIOD_LABEL,
    )


def resolve_period(token: Optional[str], today: Optional[date] = None) -> PeriodRange:
    """
    Resolve a period token to an inclusive date range.

    Args:
        token: Period token; empty or unrecognized tokens are allowed
        today: Reference date for the fallback range, defaults to the current UTC date

    Returns:
        PeriodRange with start_date <= end_date
    """
    today = today or datetime.now(timezone.utc).date()
    token = (token or "").strip()
    parsed = _parse(token)
    if parsed is None:
        return _current_month(today)

    kind, year, number = parsed
    if year < 1:
        return _current_month(today)

    if kind == "quarter":
        start_month = (number - 1) * 3 + 1
        return PeriodRange(
            start_date=date(year, start_month, 1),
            end_date=last_day_of_month(year, start_month + 2),
            label=token,
        )
    if kind == "year":
        return PeriodRange(
            start_date=date(year, 1, 1),
            end_date=date(year, 12, 31),
            label=f"Tahun {year}",
        )
    return PeriodRange(
        start_date=date(year, number, 1),
        end_date=last_day_of_month(year, number),
        label=f"{MONTH_ABBREVIATIONS[number - 1]}-{year:04d}",
    )


def get_previous_period(token: str) -> str:
    """Token of the interval immediately preceding `token`; unrecognized tokens pass through."""
    parsed = _parse((token or "").strip())
    if parsed is None:
        return token

    kind, year, number = parsed
    if kind == "quarter":
        if number == 1:
            return f"Q4-{year - 1:04d}"
        return f"Q{number - 1}-{year:04d}"
    if kind == "year":
        return f"{year - 1:04d}"
    if number == 1:
        return f"Dec-{year - 1:04d}"
    return f"{MONTH_ABBREVIATIONS[number - 2]}-{year:04d}"


def date_window(start_date: date, end_date: date) -> DateWindow:
    """Half-open UTC window covering every instant of the inclusive day range."""
    return DateWindow(
        start=datetime.combine(start_date, time.min, tzinfo=timezone.utc),
        end=datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def period_window(period: PeriodRange) -> DateWindow:
    return date_window(period.start_date, period.end_date)
