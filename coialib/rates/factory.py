"""
Factory for creating rate sources.

Provides convenient methods for creating and configuring rate sources.
"""

import logging
from pathlib import Path
from typing import Optional

from coialib.config import Settings, load_settings
from coialib.conventions.types import RateSourceType

from .base import BaseRateSource
from .core import RateTable
from .loaders import CSVRateSource, DataFrameRateSource, JSONRateSource, bundled_rates_path

logger = logging.getLogger(__name__)


def create_rate_source(
    source_type: RateSourceType,
    **kwargs
) -> BaseRateSource:
    """
    Create rate source with appropriate configuration.

    Args:
        source_type: Type of rate source to create
        **kwargs: Configuration parameters specific to source type

    Returns:
        Configured rate source

    Examples:
        >>> # Bundled BC table
        >>> source = create_rate_source(RateSourceType.JSON)

        >>> # CSV export with published (inclusive) end dates
        >>> source = create_rate_source(
        ...     RateSourceType.CSV,
        ...     path="/path/to/rates.csv",
        ...     end_convention="inclusive"
        ... )
    """
    source_type = RateSourceType(source_type)
    if source_type == RateSourceType.JSON:
        path = kwargs.get("path") or bundled_rates_path()
        return JSONRateSource(path=Path(path), end_convention=kwargs.get("end_convention"))
    elif source_type == RateSourceType.CSV:
        if kwargs.get("frame") is not None:
            return DataFrameRateSource(
                kwargs["frame"], end_convention=kwargs.get("end_convention") or "exclusive"
            )
        path = kwargs.get("path")
        if not path:
            raise ValueError("path required for CSV rate source")
        return CSVRateSource(
            path=Path(path), end_convention=kwargs.get("end_convention") or "exclusive"
        )
    else:
        raise ValueError(f"Unsupported rate source type: {source_type}")


def load_rate_table(settings: Optional[Settings] = None) -> RateTable:
    """
    Load the configured rate table.

    Args:
        settings: Settings to use (defaults to load_settings())

    Returns:
        RateTable for every jurisdiction in the configured source
    """
    settings = settings or load_settings()
    source = create_rate_source(
        settings.rate_source,
        path=settings.rates_path,
        end_convention=settings.rates_end_convention,
    )
    table = source.load_table()
    logger.debug("Loaded rate table for %s", list(table))
    return table
