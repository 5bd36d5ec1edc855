"""
Basic types and enums used across the interest calculations.
"""

from enum import Enum
from typing import Union


class InterestType(Enum):
    """Court order interest types."""

    PREJUDGMENT = "prejudgment"
    POSTJUDGMENT = "postjudgment"

    @classmethod
    def coerce(cls, value: Union["InterestType", str]) -> "InterestType":
        """Accept an enum member or its string value ('prejudgment')."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown interest type: {value}. "
                f"Available: {[member.value for member in cls]}"
            )


class RateSourceType(Enum):
    """Supported rate data source types."""

    JSON = "json"
    CSV = "csv"
