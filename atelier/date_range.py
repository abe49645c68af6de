"""
Report window resolution.

Maps a date-range selector (today, week, month, year, all) to the lower
bound applied to event counts. Catalog items are never windowed; only
view and click events are.
"""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

from dateutil.relativedelta import relativedelta

from atelier.config import config


class DateRange(str, Enum):
    """Report window selector."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"

    @classmethod
    def parse(cls, value: Optional[str]) -> "DateRange":
        """Normalize a selector. Unknown or empty values fall back to ALL."""
        if not value or not isinstance(value, str):
            return cls.ALL
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.ALL

    @property
    def label(self) -> str:
        """Human-readable label shown above the report."""
        return _LABELS[self]


_LABELS = {
    DateRange.TODAY: "Today",
    DateRange.WEEK: "Last 7 Days",
    DateRange.MONTH: "Last 30 Days",
    DateRange.YEAR: "Last Year",
    DateRange.ALL: "All Time",
}


def resolve_lower_bound(
    selector,
    now: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> Optional[datetime]:
    """
    Resolve a selector to an aware lower-bound timestamp.

    Args:
        selector: DateRange or raw string (never fails, unknown -> all)
        now: Reference instant (defaults to the current time)
        tz_name: Time zone for "today" (defaults to REPORT_TIMEZONE)

    Returns:
        Aware datetime, or None for "all" (no filtering)
    """
    date_range = selector if isinstance(selector, DateRange) else DateRange.parse(selector)
    if date_range is DateRange.ALL:
        return None

    tz = ZoneInfo(tz_name or config.report.timezone)
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)

    if date_range is DateRange.TODAY:
        return now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    if date_range is DateRange.WEEK:
        return now - timedelta(days=7)
    if date_range is DateRange.MONTH:
        return now - relativedelta(months=1)
    return now - relativedelta(years=1)


def trailing_window_start(days: int, now: Optional[datetime] = None) -> datetime:
    """Start of a fixed trailing window ending at ``now``."""
    if now is None:
        now = datetime.now(ZoneInfo(config.report.timezone))
    return now - timedelta(days=days)
