"""Shared fixtures: rate tables and case state builders."""

from datetime import date

import pytest

from coialib.config import Settings
from coialib.rates import RatePeriod, RateTable, load_rate_table
from coialib.valuation.types import CalculatorInputs, CalculatorResults, CalculatorState


@pytest.fixture(scope="session")
def bc_table() -> RateTable:
    """Bundled BC rate table (1993-01-01 to 2025-06-30)."""
    return load_rate_table(Settings())


@pytest.fixture
def flat_table() -> RateTable:
    """Two 2023 half-years: 2%/4% then 3%/5%."""
    return RateTable(
        {
            "BC": [
                RatePeriod(date(2023, 1, 1), date(2023, 7, 1), 2.0, 4.0),
                RatePeriod(date(2023, 7, 1), date(2024, 1, 1), 3.0, 5.0),
            ]
        }
    )


@pytest.fixture
def gap_table() -> RateTable:
    """No rate published for March 2023."""
    return RateTable(
        {
            "BC": [
                RatePeriod(date(2023, 1, 1), date(2023, 3, 1), 2.0, 4.0),
                RatePeriod(date(2023, 4, 1), date(2023, 7, 1), 3.0, 5.0),
            ]
        }
    )


def make_state(damages=None, payments=None, **inputs) -> CalculatorState:
    """Case state with BC jurisdiction and the given inputs and events."""
    inputs.setdefault("jurisdiction", "BC")
    return CalculatorState(
        inputs=CalculatorInputs(**inputs),
        results=CalculatorResults(
            special_damages=list(damages or []),
            payments=list(payments or []),
        ),
    )
