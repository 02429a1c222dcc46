"""
CPI-based inflation adjustment for Self-Sufficiency Standard costs.

Each publication year of the Standard is reported in that year's dollars.
To compare years side by side, every cost is converted to reference-year
dollars with

    factor = reference_cpi / cpi[source_year]

The reference CPI is usually a provisional estimate for the current year,
because the official annual average is published only after the year ends.
It should be revised once BLS publishes the final figure.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd

from sss_data.storage import CPI_U_ANNUAL_PATH

logger = logging.getLogger(__name__)


class MissingYearError(KeyError):
    """Raised when a year is not present in the CPI series."""

    def __init__(self, year: int, available=()):
        self.year = year
        self.available = sorted(available)
        super().__init__(year)

    def __str__(self):
        if self.available:
            return (
                f"No CPI value for {self.year}; series covers "
                f"{self.available[0]}-{self.available[-1]}"
            )
        return f"No CPI value for {self.year}; series is empty"


def load_cpi_series(path: Optional[Union[str, Path]] = None) -> pd.Series:
    """Load an annual CPI series from a ``year,cpi`` CSV.

    Args:
        path: CSV file to read. Defaults to the bundled CPI-U annual
            averages.

    Returns:
        Series of CPI values indexed by integer year.

    Raises:
        ValueError: If a year appears twice or a CPI value is not positive.
    """
    path = Path(path) if path is not None else CPI_U_ANNUAL_PATH
    df = pd.read_csv(path)
    df.columns = df.columns.str.strip().str.lower()
    missing = {"year", "cpi"} - set(df.columns)
    if missing:
        raise ValueError(f"{path} is missing columns: {sorted(missing)}")

    df = df.dropna(subset=["year", "cpi"])
    df["year"] = df["year"].astype(int)
    df["cpi"] = df["cpi"].astype(float)

    duplicated = df.loc[df["year"].duplicated(), "year"].unique()
    if len(duplicated):
        raise ValueError(
            f"{path} has more than one CPI value for: {sorted(duplicated)}"
        )
    non_positive = df.loc[df["cpi"] <= 0, "year"].tolist()
    if non_positive:
        raise ValueError(
            f"{path} has non-positive CPI values for: {non_positive}"
        )

    series = df.set_index("year")["cpi"].sort_index()
    series.name = "cpi"
    logger.debug(
        f"Loaded CPI series {series.index.min()}-{series.index.max()} "
        f"from {path}"
    )
    return series


class CPITable:
    """Adjustment-factor lookup against a fixed reference CPI value."""

    def __init__(
        self, cpi: Union[pd.Series, Dict[int, float]], reference_cpi: float
    ):
        if reference_cpi is None or reference_cpi <= 0:
            raise ValueError(
                f"reference_cpi must be positive, got {reference_cpi}"
            )
        if isinstance(cpi, pd.Series):
            cpi = cpi.to_dict()
        self._cpi = {int(year): float(value) for year, value in cpi.items()}
        for year, value in self._cpi.items():
            if value <= 0:
                raise ValueError(f"CPI for {year} must be positive")
        self.reference_cpi = float(reference_cpi)
        self._factors: Dict[int, float] = {}

    @classmethod
    def from_csv(
        cls, path: Optional[Union[str, Path]], reference_cpi: float
    ) -> "CPITable":
        return cls(load_cpi_series(path), reference_cpi)

    @property
    def years(self):
        return sorted(self._cpi)

    def cpi_for(self, year: int) -> float:
        try:
            return self._cpi[int(year)]
        except KeyError:
            raise MissingYearError(int(year), self._cpi) from None

    def factor_for(self, year: int) -> float:
        """Multiplier converting ``year`` dollars to reference dollars."""
        year = int(year)
        if year not in self._factors:
            self._factors[year] = self.reference_cpi / self.cpi_for(year)
        return self._factors[year]

    def factors(self, years: Iterable[int]) -> Dict[int, float]:
        return {int(year): self.factor_for(year) for year in set(years)}

    def __repr__(self):
        return (
            f"CPITable(years={self.years}, "
            f"reference_cpi={self.reference_cpi})"
        )
