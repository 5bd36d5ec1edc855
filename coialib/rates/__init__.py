"""Rate tables and rate data loaders."""

from .base import BaseRateSource, RateSource, rows_to_periods
from .core import RatePeriod, RateTable, as_rate_table, rate_for
from .factory import create_rate_source, load_rate_table
from .loaders import CSVRateSource, DataFrameRateSource, JSONRateSource, bundled_rates_path

__all__ = [
    "BaseRateSource",
    "CSVRateSource",
    "DataFrameRateSource",
    "JSONRateSource",
    "RatePeriod",
    "RateSource",
    "RateTable",
    "as_rate_table",
    "bundled_rates_path",
    "create_rate_source",
    "load_rate_table",
    "rate_for",
    "rows_to_periods",
]
