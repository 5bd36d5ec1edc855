"""Unit tests for rate lookup and rate data loading."""

import json
import logging
from datetime import date

import pandas as pd
import pytest

from coialib.config import Settings, load_settings
from coialib.conventions.types import InterestType, RateSourceType
from coialib.rates import (
    CSVRateSource,
    DataFrameRateSource,
    JSONRateSource,
    RatePeriod,
    RateTable,
    create_rate_source,
    load_rate_table,
    rate_for,
    rows_to_periods,
)


# ── Fixtures ──────────────────────────────────────────────────────────────

@pytest.fixture
def adjacent_table() -> RateTable:
    """P1 ends on 2023-07-01, the day P2 starts."""
    return RateTable(
        {
            "BC": [
                RatePeriod(date(2023, 7, 1), date(2024, 1, 1), 4.95, 6.95),
                RatePeriod(date(2023, 1, 1), date(2023, 7, 1), 4.45, 6.45),
            ]
        }
    )


# ── Lookup ────────────────────────────────────────────────────────────────

class TestRateFor:
    def test_boundary_belongs_to_next_period(self, adjacent_table):
        """The shared boundary date takes the later period's rate."""
        assert rate_for(date(2023, 7, 1), "prejudgment", "BC", adjacent_table) == 4.95
        assert rate_for(date(2023, 6, 30), "prejudgment", "BC", adjacent_table) == 4.45

    def test_interest_types(self, adjacent_table):
        assert rate_for(date(2023, 3, 1), InterestType.POSTJUDGMENT, "BC", adjacent_table) == 6.45

    def test_last_period_end_is_covered(self, adjacent_table):
        assert rate_for(date(2024, 1, 1), "postjudgment", "BC", adjacent_table) == 6.95
        assert rate_for(date(2024, 1, 2), "postjudgment", "BC", adjacent_table) == 0.0

    def test_before_table(self, adjacent_table):
        assert rate_for(date(2022, 12, 31), "prejudgment", "BC", adjacent_table) == 0.0

    def test_missing_jurisdiction_warns(self, adjacent_table, caplog):
        with caplog.at_level(logging.WARNING):
            assert rate_for(date(2023, 3, 1), "prejudgment", "ON", adjacent_table) == 0.0
        assert "No interest rates found for jurisdiction ON" in caplog.text

    def test_invalid_dates(self, adjacent_table):
        assert rate_for(None, "prejudgment", "BC", adjacent_table) == 0.0
        assert rate_for("not a date", "prejudgment", "BC", adjacent_table) == 0.0

    def test_gap(self, gap_table, caplog):
        with caplog.at_level(logging.WARNING):
            assert rate_for(date(2023, 3, 15), "prejudgment", "BC", gap_table) == 0.0
        assert "No rate period covers 2023-03-15" in caplog.text

    def test_missing_rate_for_type(self):
        table = RateTable({"BC": [RatePeriod(date(2023, 1, 1), date(2023, 7, 1), 4.45, None)]})
        assert rate_for(date(2023, 3, 1), "postjudgment", "BC", table) == 0.0

    def test_plain_mapping_accepted(self):
        periods = {"BC": [RatePeriod(date(2023, 1, 1), date(2023, 7, 1), 4.45, 6.45)]}
        assert rate_for(date(2023, 3, 1), "prejudgment", "BC", periods) == 4.45


class TestRateTable:
    def test_sorts_periods(self, adjacent_table):
        starts = [p.start for p in adjacent_table["BC"]]
        assert starts == sorted(starts)

    def test_locate(self, adjacent_table):
        idx, period = adjacent_table.locate(date(2023, 7, 1), "BC")
        assert idx == 1
        assert period.prejudgment == 4.95

    def test_coverage(self, adjacent_table):
        assert adjacent_table.coverage("BC") == (date(2023, 1, 1), date(2024, 1, 1))
        assert adjacent_table.coverage("ON") is None

    def test_empty_jurisdiction_not_contained(self):
        assert "BC" not in RateTable({"BC": []})


# ── Loading ───────────────────────────────────────────────────────────────

class TestRowsToPeriods:
    def test_inclusive_ends_become_half_open(self):
        """Published ends move to the next start; the last end is kept."""
        rows = [
            {"start": "2023-07-01", "end": "2023-12-31", "prejudgment": 4.95, "postjudgment": 6.95},
            {"start": "2023-01-01", "end": "2023-06-30", "prejudgment": 4.45, "postjudgment": 6.45},
        ]
        periods = rows_to_periods(rows, "inclusive")
        assert periods[0].end == date(2023, 7, 1)
        assert periods[1].end == date(2023, 12, 31)

    def test_exclusive_ends_kept(self):
        rows = [{"start": "2023-01-01", "end": "2023-07-01", "prejudgment": 1, "postjudgment": 2}]
        assert rows_to_periods(rows)[0].end == date(2023, 7, 1)

    def test_invalid_row(self):
        with pytest.raises(ValueError, match="Invalid start/end date"):
            rows_to_periods([{"start": "bad", "end": "2023-07-01"}])
        with pytest.raises(ValueError, match="ends before it starts"):
            rows_to_periods([{"start": "2023-07-01", "end": "2023-01-01"}])
        with pytest.raises(ValueError, match="Invalid prejudgment rate"):
            rows_to_periods([{"start": "2023-01-01", "end": "2023-07-01", "prejudgment": "x"}])

    def test_gap_warning(self, caplog):
        rows = [
            {"start": "2023-01-01", "end": "2023-03-01", "prejudgment": 1, "postjudgment": 2},
            {"start": "2023-04-01", "end": "2023-07-01", "prejudgment": 1, "postjudgment": 2},
        ]
        with caplog.at_level(logging.WARNING):
            rows_to_periods(rows)
        assert "Gap in rate table" in caplog.text


class TestBundledTable:
    def test_bc_table_loaded(self, bc_table):
        periods = bc_table["BC"]
        assert len(periods) == 65
        assert bc_table.coverage("BC") == (date(1993, 1, 1), date(2025, 6, 30))

    def test_periods_are_contiguous(self, bc_table):
        periods = bc_table["BC"]
        for previous, current in zip(periods, periods[1:]):
            assert previous.end == current.start

    def test_published_rates(self, bc_table):
        assert rate_for(date(2023, 6, 30), "prejudgment", "BC", bc_table) == 4.45
        assert rate_for(date(2023, 7, 1), "prejudgment", "BC", bc_table) == 4.95
        assert rate_for(date(2025, 6, 30), "postjudgment", "BC", bc_table) == 5.45
        assert rate_for(date(1993, 1, 1), "postjudgment", "BC", bc_table) == 7.25


class TestSources:
    def test_json_bare_mapping(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(
            json.dumps(
                {"AB": [{"start": "2023-01-01", "end": "2023-07-01", "prejudgment": 1.5, "postjudgment": 2.5}]}
            )
        )
        table = JSONRateSource(path).load_table()
        assert list(table) == ["AB"]
        assert rate_for(date(2023, 2, 1), "postjudgment", "AB", table) == 2.5

    def test_json_malformed(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text("{not json")
        with pytest.raises(ValueError, match="Malformed rate file"):
            JSONRateSource(path)

    def test_json_missing_file(self, tmp_path):
        with pytest.raises(ValueError, match="Rate file not found"):
            JSONRateSource(tmp_path / "missing.json")

    def test_json_unknown_jurisdiction(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(json.dumps({"jurisdictions": {"BC": []}}))
        with pytest.raises(ValueError, match="No rates for jurisdiction ON"):
            JSONRateSource(path).load_periods("ON")

    def test_csv_source(self, tmp_path):
        path = tmp_path / "rates.csv"
        path.write_text(
            "jurisdiction,start,end,prejudgment,postjudgment\n"
            "BC,2023-01-01,2023-06-30,4.45,6.45\n"
            "BC,2023-07-01,2023-12-31,4.95,\n"
        )
        table = CSVRateSource(path, end_convention="inclusive").load_table()
        periods = table["BC"]
        assert periods[0].end == date(2023, 7, 1)
        assert periods[1].postjudgment is None
        assert rate_for(date(2023, 7, 1), "prejudgment", "BC", table) == 4.95

    def test_frame_missing_columns(self):
        with pytest.raises(ValueError, match="missing columns"):
            DataFrameRateSource(pd.DataFrame({"start": ["2023-01-01"]}))

    def test_factory_frame(self):
        frame = pd.DataFrame(
            {
                "jurisdiction": ["BC"],
                "start": [pd.Timestamp("2023-01-01")],
                "end": [pd.Timestamp("2023-07-01")],
                "prejudgment": [4.45],
                "postjudgment": [6.45],
            }
        )
        source = create_rate_source(RateSourceType.CSV, frame=frame)
        assert source.load_periods("BC")[0].start == date(2023, 1, 1)

    def test_factory_csv_requires_path(self):
        with pytest.raises(ValueError, match="path required"):
            create_rate_source(RateSourceType.CSV)


# ── Configuration ─────────────────────────────────────────────────────────

class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("COIA_RATES_PATH", "COIA_RATE_SOURCE", "COIA_MAX_DATE", "COIA_DEFAULT_JURISDICTION"):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings()
        assert settings.rates_path is None
        assert settings.rate_source is RateSourceType.JSON
        assert settings.default_jurisdiction == "BC"
        assert settings.max_calculation_date == date(2025, 6, 30)

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("COIA_RATES_PATH", str(tmp_path / "rates.csv"))
        monkeypatch.setenv("COIA_RATE_SOURCE", "CSV")
        monkeypatch.setenv("COIA_MAX_DATE", "")
        settings = load_settings()
        assert settings.rates_path == tmp_path / "rates.csv"
        assert settings.rate_source is RateSourceType.CSV
        assert settings.max_calculation_date is None

    def test_invalid_values(self, monkeypatch):
        monkeypatch.setenv("COIA_RATE_SOURCE", "postgres")
        with pytest.raises(ValueError, match="Unknown rate source"):
            load_settings()
        monkeypatch.setenv("COIA_RATE_SOURCE", "json")
        monkeypatch.setenv("COIA_MAX_DATE", "June")
        with pytest.raises(ValueError, match="Invalid COIA_MAX_DATE"):
            load_settings()

    def test_load_rate_table_from_json_path(self, tmp_path):
        path = tmp_path / "rates.json"
        path.write_text(
            json.dumps(
                {
                    "end_convention": "inclusive",
                    "jurisdictions": {
                        "BC": [{"start": "2023-01-01", "end": "2023-06-30", "prejudgment": 4.45, "postjudgment": 6.45}]
                    },
                }
            )
        )
        table = load_rate_table(Settings(rates_path=path))
        assert table.coverage("BC") == (date(2023, 1, 1), date(2023, 6, 30))
