import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

import pandas as pd
from tqdm import tqdm

from sss_data.datasets.sss.schema import (
    NUMERIC,
    SSS_BY_FAMILY_SCHEMA,
    SchemaDescriptor,
    SchemaMismatchError,
    clean_column_name,
)

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "By Family"

NA_VALUES = ["", "N/A", "NA", "n/a", "-", "--"]


@dataclass(frozen=True)
class StandardSource:
    """One published Self-Sufficiency Standard workbook."""

    path: Path
    year: int
    schema: SchemaDescriptor = field(default=SSS_BY_FAMILY_SCHEMA)
    sheet_name: str = DEFAULT_SHEET_NAME

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path))
        object.__setattr__(self, "year", int(self.year))

    def __str__(self):
        return f"{self.path.name} ({self.year})"


def _sheet_key(name: str) -> str:
    return "".join(str(name).lower().split())


def _read_source(source: StandardSource) -> pd.DataFrame:
    if source.path.suffix.lower() == ".csv":
        return pd.read_csv(
            source.path,
            dtype=object,
            keep_default_na=False,
            na_values=NA_VALUES,
        )

    with pd.ExcelFile(source.path) as xls:
        matches = [
            name
            for name in xls.sheet_names
            if _sheet_key(name) == _sheet_key(source.sheet_name)
        ]
        if not matches:
            raise SchemaMismatchError(
                f"{source}: no sheet named {source.sheet_name!r}; "
                f"found {xls.sheet_names}"
            )
        return xls.parse(
            matches[0],
            header=0,
            dtype=object,
            keep_default_na=False,
            na_values=NA_VALUES,
        )


def _drop_blank_columns(df: pd.DataFrame) -> pd.DataFrame:
    # Excel often reports formatted but empty trailing columns.
    blank = [
        column
        for column in df.columns
        if str(column).startswith("Unnamed:") and df[column].isna().all()
    ]
    if blank:
        logger.debug(f"Dropping {len(blank)} empty unnamed columns")
        df = df.drop(columns=blank)
    return df


def _coerce_numeric(
    values: pd.Series, column: str, source: StandardSource
) -> pd.Series:
    if values.dtype == object:
        cleaned = values.map(
            lambda v: (
                str(v).replace("$", "").replace(",", "").strip()
                if isinstance(v, str)
                else v
            )
        )
    else:
        cleaned = values
    coerced = pd.to_numeric(cleaned, errors="coerce").astype("float64")
    bad = coerced.isna() & values.notna()
    if bad.any():
        examples = values[bad].astype(str).unique()[:3].tolist()
        raise SchemaMismatchError(
            f"{source}: column {column!r} is declared numeric but holds "
            f"{int(bad.sum())} non-numeric values, e.g. {examples}"
        )
    return coerced


def _coerce_text(values: pd.Series) -> pd.Series:
    return values.map(
        lambda v: v if pd.isna(v) else str(v).strip()
    ).astype(object)


def load_standard_sheet(source: StandardSource) -> pd.DataFrame:
    """Load one source's by-family sheet against its declared schema.

    Args:
        source: The workbook, publication year and expected layout.

    Returns:
        DataFrame with a leading ``year`` column followed by the schema's
        canonical columns, coerced to their declared types.

    Raises:
        SchemaMismatchError: If the file cannot be read, the sheet is
            missing, has a different number of columns than declared, or
            holds text in a numeric position.
    """
    schema = source.schema
    logger.info(f"Loading {source} with schema version {schema.version}")
    try:
        raw = _read_source(source)
    except SchemaMismatchError:
        raise
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise SchemaMismatchError(
            f"{source.path} ({source.year}): could not read source: {e}"
        ) from e
    raw = _drop_blank_columns(raw).dropna(how="all")

    if len(raw.columns) != len(schema):
        raise SchemaMismatchError(
            f"{source.path} ({source.year}): expected {len(schema)} columns "
            f"for schema version {schema.version}, found {len(raw.columns)}"
        )

    headers = [clean_column_name(column) for column in raw.columns]
    drift = [
        (header, declared.name)
        for header, declared in zip(headers, schema.fields)
        if header != declared.name
    ]
    if drift:
        logger.warning(
            f"{source}: headers differ from schema {schema.version} "
            f"(using declared names): {drift}"
        )

    columns = {}
    for position, declared in enumerate(schema.fields):
        values = raw.iloc[:, position]
        if declared.kind == NUMERIC:
            columns[declared.name] = _coerce_numeric(
                values, declared.name, source
            )
        else:
            columns[declared.name] = _coerce_text(values)

    df = pd.DataFrame(columns).reset_index(drop=True)
    df.insert(0, "year", source.year)
    logger.info(f"Loaded {len(df):,} rows from {source}")
    return df


def load_standards(
    sources: Iterable[Union[StandardSource, dict]],
) -> pd.DataFrame:
    """Load and union the Standard tables for several publication years.

    Every source must resolve to the same column layout; a failure on any
    source aborts the whole union.
    """
    sources = [
        s if isinstance(s, StandardSource) else StandardSource(**s)
        for s in sources
    ]
    if not sources:
        raise ValueError("No Self-Sufficiency Standard sources configured")

    years = [s.year for s in sources]
    repeated = sorted({y for y in years if years.count(y) > 1})
    if repeated:
        raise ValueError(f"More than one source given for years {repeated}")

    frames = []
    for source in tqdm(sources, desc="Loading SSS tables", unit="file"):
        frames.append(load_standard_sheet(source))

    expected = list(frames[0].columns)
    for source, frame in zip(sources[1:], frames[1:]):
        if list(frame.columns) != expected:
            raise SchemaMismatchError(
                f"{source}: column layout differs from {sources[0]}; "
                f"expected {expected}, found {list(frame.columns)}"
            )

    df = pd.concat(frames, ignore_index=True)
    logger.info(f"Combined {len(df):,} rows across years {sorted(years)}")
    return df
