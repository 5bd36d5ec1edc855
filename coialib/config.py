"""
Runtime configuration read from environment variables.

Environment variables:
    COIA_RATES_PATH: Rate table file (defaults to the bundled BC table)
    COIA_RATE_SOURCE: "json" or "csv" (default "json")
    COIA_RATES_END_CONVENTION: "inclusive" or "exclusive" period ends
        (defaults to the file's own declaration for JSON, "exclusive" for CSV)
    COIA_DEFAULT_JURISDICTION: Jurisdiction code (default "BC")
    COIA_MAX_DATE: Latest allowed calculation date (default "2025-06-30",
        empty to disable the check)
"""

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from coialib.conventions.types import RateSourceType
from coialib.utils.date import to_date

DEFAULT_JURISDICTION = "BC"
DEFAULT_MAX_DATE = "2025-06-30"


@dataclass(frozen=True)
class Settings:
    """Calculator settings.

    Attributes:
        rates_path: Rate table file, None for the bundled table
        rate_source: Rate source type
        rates_end_convention: Period end convention override, None to use the source default
        default_jurisdiction: Jurisdiction used when the inputs leave it blank
        max_calculation_date: Latest allowed calculation date, None for no limit
    """

    rates_path: Optional[Path] = None
    rate_source: RateSourceType = RateSourceType.JSON
    rates_end_convention: Optional[str] = None
    default_jurisdiction: str = DEFAULT_JURISDICTION
    max_calculation_date: Optional[date] = to_date(DEFAULT_MAX_DATE)


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ValueError: If a variable holds an unusable value
    """
    rates_path = os.getenv("COIA_RATES_PATH")
    source = os.getenv("COIA_RATE_SOURCE", RateSourceType.JSON.value).lower()
    try:
        rate_source = RateSourceType(source)
    except ValueError:
        raise ValueError(
            f"Unknown rate source: {source}. "
            f"Available: {[member.value for member in RateSourceType]}"
        )

    max_date = os.getenv("COIA_MAX_DATE", DEFAULT_MAX_DATE).strip()
    try:
        max_calculation_date = to_date(max_date) if max_date else None
    except (TypeError, ValueError):
        raise ValueError(f"Invalid COIA_MAX_DATE: {max_date!r}")

    return Settings(
        rates_path=Path(rates_path) if rates_path else None,
        rate_source=rate_source,
        rates_end_convention=os.getenv("COIA_RATES_END_CONVENTION") or None,
        default_jurisdiction=os.getenv("COIA_DEFAULT_JURISDICTION", DEFAULT_JURISDICTION),
        max_calculation_date=max_calculation_date,
    )
