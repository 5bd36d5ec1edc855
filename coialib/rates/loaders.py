"""
Concrete rate source implementations.

Provides loaders for the bundled JSON table, CSV exports and pandas frames.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .base import BaseRateSource

BUNDLED_RATES = "bc_rates.json"


def bundled_rates_path() -> Path:
    """Path of the rate table shipped with the package."""
    return Path(__file__).resolve().parent / "data" / BUNDLED_RATES


class JSONRateSource(BaseRateSource):
    """
    Load rate periods from a JSON file.

    Expected layout::

        {
          "end_convention": "inclusive",
          "jurisdictions": {
            "BC": [{"start": "2023-01-01", "end": "2023-06-30",
                    "prejudgment": 4.45, "postjudgment": 6.45}, ...]
          }
        }

    A bare ``{"BC": [...]}`` mapping is also accepted.
    """

    def __init__(self, path: Union[str, Path], end_convention: Optional[str] = None):
        """
        Initialize JSON rate source.

        Args:
            path: Path to the JSON rate file
            end_convention: Overrides the file's "end_convention" when given
        """
        self.path = Path(path)
        self._data = self._read()
        super().__init__(end_convention or self._data.get("end_convention", "exclusive"))

    def _read(self) -> Dict:
        if not self.path.exists():
            raise ValueError(f"Rate file not found: {self.path}")
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed rate file {self.path}: {e}")
        if not isinstance(data, dict):
            raise ValueError(f"Rate file {self.path} must contain a JSON object")
        if "jurisdictions" not in data:
            data = {"jurisdictions": data}
        return data

    def jurisdictions(self) -> List[str]:
        return list(self._data["jurisdictions"].keys())

    def _fetch_rows(self, jurisdiction: str) -> List[Dict]:
        rows = self._data["jurisdictions"].get(jurisdiction)
        if rows is None:
            raise ValueError(
                f"No rates for jurisdiction {jurisdiction} in {self.path}. "
                f"Available: {self.jurisdictions()}"
            )
        return rows


class DataFrameRateSource(BaseRateSource):
    """
    Build rate periods from a pandas DataFrame.

    Columns: jurisdiction, start, end, prejudgment, postjudgment.
    """

    COLUMNS = ["jurisdiction", "start", "end", "prejudgment", "postjudgment"]

    def __init__(self, frame: pd.DataFrame, end_convention: str = "exclusive"):
        super().__init__(end_convention)
        missing = [col for col in self.COLUMNS if col not in frame.columns]
        if missing:
            raise ValueError(f"Rate frame is missing columns: {missing}")
        self.frame = frame.copy()
        self.frame["jurisdiction"] = self.frame["jurisdiction"].astype(str).str.strip()

    def jurisdictions(self) -> List[str]:
        return list(pd.unique(self.frame["jurisdiction"]))

    def _fetch_rows(self, jurisdiction: str) -> List[Dict]:
        subset = self.frame[self.frame["jurisdiction"] == jurisdiction]
        if subset.empty:
            raise ValueError(
                f"No rates for jurisdiction {jurisdiction}. "
                f"Available: {self.jurisdictions()}"
            )
        return subset[["start", "end", "prejudgment", "postjudgment"]].to_dict("records")


class CSVRateSource(DataFrameRateSource):
    """
    Load rate periods from a CSV export of the rate table.
    """

    def __init__(self, path: Union[str, Path], end_convention: str = "exclusive"):
        self.path = Path(path)
        if not self.path.exists():
            raise ValueError(f"Rate file not found: {self.path}")
        frame = pd.read_csv(self.path, dtype={"jurisdiction": str, "start": str, "end": str})
        super().__init__(frame, end_convention)
