"""Date normalization helpers."""

from .date import (
    add_days,
    format_date,
    is_after,
    is_before,
    latest,
    parse_date,
    same_day,
    to_date,
)

__all__ = [
    "add_days",
    "format_date",
    "is_after",
    "is_before",
    "latest",
    "parse_date",
    "same_day",
    "to_date",
]
