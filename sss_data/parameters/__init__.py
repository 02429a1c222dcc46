"""
Pipeline settings for the Standard comparison report.

Defaults live in ``pipeline.yaml`` next to this module. A user file can
replace them, the ``SSS_REFERENCE_CPI`` environment variable overrides the
provisional reference CPI, and keyword overrides (from the command line)
take precedence over both.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Optional, Union

import yaml

from sss_data.datasets.sss.raw_sss import DEFAULT_SHEET_NAME, StandardSource
from sss_data.datasets.sss.schema import get_schema

logger = logging.getLogger(__name__)

PARAMETERS_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = PARAMETERS_DIR / "pipeline.yaml"

REFERENCE_CPI_ENV = "SSS_REFERENCE_CPI"


@dataclass
class PipelineConfig:
    reference_cpi_value: float = 305.0
    reference_year: int = 2023
    selected_counties: List[str] = field(
        default_factory=lambda: ["Wayne County", "Marquette County"]
    )
    selected_family_types: List[str] = field(
        default_factory=lambda: ["a1i0p0s0t0", "a2i1p1s0t0", "a2i0p1s1t0"]
    )
    cpi_path: Optional[Path] = None
    sources: List[StandardSource] = field(default_factory=list)
    currency_symbol: str = "$"
    sort_by: str = "family_type"

    def validate(self) -> None:
        if self.reference_cpi_value is None or self.reference_cpi_value <= 0:
            raise ValueError(
                "reference_cpi_value must be positive, got "
                f"{self.reference_cpi_value}"
            )
        if not self.selected_counties:
            raise ValueError("selected_counties must not be empty")
        if not self.selected_family_types:
            raise ValueError("selected_family_types must not be empty")


def _resolve(path, base: Path) -> Path:
    path = Path(path).expanduser()
    return path if path.is_absolute() else base / path


def _parse_source(entry, base: Path) -> StandardSource:
    if isinstance(entry, StandardSource):
        return entry
    unknown = set(entry) - {"path", "year", "sheet_name", "schema_version"}
    if unknown:
        raise ValueError(f"Unknown source settings: {sorted(unknown)}")
    return StandardSource(
        path=_resolve(entry["path"], base),
        year=int(entry["year"]),
        schema=get_schema(entry.get("schema_version", "2017")),
        sheet_name=entry.get("sheet_name", DEFAULT_SHEET_NAME),
    )


def load_pipeline_config(
    path: Optional[Union[str, Path]] = None, **overrides
) -> PipelineConfig:
    """Load pipeline settings from YAML.

    Args:
        path: YAML file to read. Defaults to the bundled ``pipeline.yaml``.
        **overrides: Settings that replace values from the file. ``None``
            values are ignored.

    Returns:
        A validated ``PipelineConfig``.

    Raises:
        ValueError: On unknown settings or invalid values.
    """
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    env_cpi = os.environ.get(REFERENCE_CPI_ENV)
    if env_cpi:
        logger.info(f"Using reference CPI {env_cpi} from {REFERENCE_CPI_ENV}")
        data["reference_cpi_value"] = float(env_cpi)

    data.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(PipelineConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown settings in {path}: {sorted(unknown)}")

    base = path.resolve().parent
    if data.get("cpi_path"):
        data["cpi_path"] = _resolve(data["cpi_path"], base)
    else:
        data.pop("cpi_path", None)
    data["sources"] = [
        _parse_source(entry, base) for entry in data.get("sources") or []
    ]
    for key in ("selected_counties", "selected_family_types"):
        if key in data:
            data[key] = list(data[key] or [])
    if "reference_cpi_value" in data:
        data["reference_cpi_value"] = float(data["reference_cpi_value"])
    if "reference_year" in data:
        data["reference_year"] = int(data["reference_year"])

    config = PipelineConfig(**data)
    config.validate()
    return config
