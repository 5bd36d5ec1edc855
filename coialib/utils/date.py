from typing import Optional, Union
from datetime import datetime, date
import logging

from dateutil.relativedelta import relativedelta
from pandas import Timestamp, isna

logger = logging.getLogger(__name__)

DATE_FMT = "%Y-%m-%d"
COMPACT_FMT = "%Y%m%d"

DateLike = Union[str, date, datetime, Timestamp]


def to_date(date_like: DateLike) -> date:
    """
    Convert a string, Timestamp or datetime to a date.
    Accepts 'YYYY-MM-DD' and 'YYYYMMDD' string formats.
    """
    if isinstance(date_like, datetime) and isna(date_like):
        raise ValueError("Cannot convert NaT to a date")
    if isinstance(date_like, Timestamp):
        return date_like.date()
    if isinstance(date_like, datetime):
        return date_like.date()
    if isinstance(date_like, date):
        return date_like
    if isinstance(date_like, str):
        text = date_like.strip()
        # ISO timestamps such as '2023-02-01T00:00:00.000Z'
        if "T" in text:
            text = text.split("T", 1)[0]
        for fmt in (DATE_FMT, COMPACT_FMT):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise ValueError(f"Unsupported date string format: {date_like!r}")
    raise TypeError(f"Unsupported type for date: {type(date_like)}")


def parse_date(date_like: Optional[DateLike]) -> Optional[date]:
    """
    Normalize a boundary value to a date, or None when it is missing or invalid.
    """
    if date_like is None or (isinstance(date_like, str) and not date_like.strip()):
        return None
    try:
        return to_date(date_like)
    except (TypeError, ValueError):
        logger.debug("Ignoring invalid date value %r", date_like)
        return None


def format_date(date_like: Optional[DateLike]) -> str:
    """
    Format a date-like into 'YYYY-MM-DD' string ('' when missing).
    """
    parsed = parse_date(date_like)
    return parsed.strftime(DATE_FMT) if parsed is not None else ""


def add_days(date_like: DateLike, days: int) -> date:
    return to_date(date_like) + relativedelta(days=days)


def same_day(a: Optional[date], b: Optional[date]) -> bool:
    if a is None or b is None:
        return False
    return a == b


def is_before(a: Optional[date], b: Optional[date]) -> bool:
    if a is None or b is None:
        return False
    return a < b


def is_after(a: Optional[date], b: Optional[date]) -> bool:
    if a is None or b is None:
        return False
    return a > b


def latest(*dates: Optional[date]) -> Optional[date]:
    """Latest of the given dates, ignoring missing ones."""
    present = [d for d in dates if d is not None]
    return max(present) if present else None
