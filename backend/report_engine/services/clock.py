import calendar
import logging
import os
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, List, Optional, Tuple
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "Asia/Manila")
REPORT_TZ = ZoneInfo(REPORT_TIMEZONE)

# Sales series are bucketed by Philippine calendar day regardless of REPORT_TIMEZONE.
SALES_UTC_OFFSET_HOURS = 8

DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string (or datetime/date) into an aware datetime.

    Naive values are read in the report timezone. Anything that cannot be
    parsed returns None so callers can skip the record.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug("Unparseable timestamp %r", value)
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=REPORT_TZ)
    return parsed


def is_date_only(value: Any) -> bool:
    return isinstance(value, str) and bool(DATE_ONLY_RE.match(value.strip()))


def now_local() -> datetime:
    return datetime.now(REPORT_TZ)


def to_local(dt: datetime) -> datetime:
    return dt.astimezone(REPORT_TZ)


def add_days(dt: datetime, days: int) -> datetime:
    # wall-clock arithmetic in the report timezone
    return to_local(dt) + timedelta(days=days)


def add_months(dt: datetime, months: int) -> datetime:
    """Same day next month(s), clamped to the last day of a shorter month."""
    local = to_local(dt)
    index = local.month - 1 + months
    year, month = local.year + index // 12, index % 12 + 1
    day = min(local.day, calendar.monthrange(year, month)[1])
    return local.replace(year=year, month=month, day=day)


def days_between(later: datetime, earlier: datetime) -> int:
    """Number of full days from `earlier` to `later`, truncated toward zero."""
    return int((later - earlier).total_seconds() / 86400)


def start_of_day(dt: datetime) -> datetime:
    return to_local(dt).replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    return to_local(dt).replace(hour=23, minute=59, second=59, microsecond=999999)


def start_of_week(dt: datetime) -> datetime:
    local = start_of_day(dt)
    return local - timedelta(days=local.weekday())


def end_of_week(dt: datetime) -> datetime:
    return end_of_day(start_of_week(dt) + timedelta(days=6))


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    start = datetime(year, month, 1, tzinfo=REPORT_TZ)
    end = datetime(year, month, last_day, 23, 59, 59, 999999, tzinfo=REPORT_TZ)
    return start, end


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    return (
        datetime(year, 1, 1, tzinfo=REPORT_TZ),
        datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=REPORT_TZ),
    )


def days_in_month(year: int, month: int) -> List[date]:
    last_day = calendar.monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, last_day + 1)]


def shift_to_sales_day(dt: datetime) -> datetime:
    """UTC instant plus the fixed sales offset, as a naive wall-clock value."""
    shifted = dt.astimezone(timezone.utc) + timedelta(hours=SALES_UTC_OFFSET_HOURS)
    return shifted.replace(tzinfo=None)


def parse_int(value: Any) -> Optional[int]:
    """parseInt-style leniency: leading integer of a string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if not isinstance(value, str):
        return None
    match = re.match(r"^\s*([+-]?\d+)", value)
    return int(match.group(1)) if match else None
