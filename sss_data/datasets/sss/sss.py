"""
Normalize raw Self-Sufficiency Standard tables for side-by-side comparison.

The raw union has one wide row per (year, county, family type). This module
filters it to the selected counties and family types, melts the cost columns
into line-item records, labels and groups each line item, converts every
non-reference year to reference-year dollars and pivots the years back out
into columns:

    raw -> filter -> select -> long -> label/group -> decode -> adjust -> wide

Every step copies its input, so the raw union can be reused across calls.
"""

import logging
import warnings
from typing import Iterable, List

import numpy as np
import pandas as pd

from sss_data.datasets.sss.line_items import (
    FAMILY_TYPE_CODES,
    classify_line_item,
    decode_family_type,
    line_item_label,
)
from sss_data.datasets.sss.schema import (
    SSS_BY_FAMILY_SCHEMA,
    SchemaDescriptor,
    SchemaMismatchError,
)
from sss_data.utils.uprating import CPITable

logger = logging.getLogger(__name__)

ID_COLUMNS = ["year", "county", "family_type"]
WIDE_KEYS = ["county", "family_type", "line_item", "line_group"]


class EmptyFilterResult(UserWarning):
    """No rows matched the selected counties and family types."""

    pass


def filter_standard(
    raw: pd.DataFrame,
    counties: Iterable[str],
    family_types: Iterable[str],
) -> pd.DataFrame:
    counties = set(counties)
    family_types = set(family_types)
    mask = raw["county"].isin(counties) & raw["family_type"].isin(
        family_types
    )
    df = raw.loc[mask].reset_index(drop=True)
    if df.empty:
        message = (
            f"No rows matched counties {sorted(counties)} and family types "
            f"{sorted(family_types)}"
        )
        logger.warning(message)
        warnings.warn(message, EmptyFilterResult, stacklevel=2)
    else:
        logger.info(
            f"Kept {len(df):,} of {len(raw):,} rows for "
            f"{df['county'].nunique()} counties"
        )
    return df


def select_cost_columns(
    df: pd.DataFrame, schema: SchemaDescriptor = SSS_BY_FAMILY_SCHEMA
) -> pd.DataFrame:
    columns = ID_COLUMNS + schema.cost_columns
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaMismatchError(f"Standard table is missing {missing}")
    return df[columns].copy()


def to_long(
    df: pd.DataFrame, id_columns: List[str] = ID_COLUMNS
) -> pd.DataFrame:
    """One record per (row, cost column) with ``line_item`` and ``cost``."""
    value_columns = [c for c in df.columns if c not in id_columns]
    return df.melt(
        id_vars=id_columns,
        value_vars=value_columns,
        var_name="line_item",
        value_name="cost",
    )


def label_line_items(long: pd.DataFrame) -> pd.DataFrame:
    df = long.copy()
    df["line_item"] = df["line_item"].map(line_item_label)
    df["line_group"] = df["line_item"].map(
        lambda label: classify_line_item(label).value
    )
    return df


def decode_family_types(long: pd.DataFrame) -> pd.DataFrame:
    df = long.copy()
    df["family_type"] = df["family_type"].map(decode_family_type)
    return df


def adjust_for_inflation(
    long: pd.DataFrame, cpi_table: CPITable, reference_year: int
) -> pd.DataFrame:
    """Convert costs to reference-year dollars.

    Adds ``original_cost`` and ``adjustment_factor``. Reference-year rows
    keep a factor of 1.0 whatever the CPI table says.

    Raises:
        MissingYearError: If a non-reference year has no CPI value.
    """
    df = long.copy()
    df["original_cost"] = df["cost"]
    df["adjustment_factor"] = 1.0

    needs_adjustment = df["year"] != reference_year
    if not needs_adjustment.any():
        return df

    factors = cpi_table.factors(df.loc[needs_adjustment, "year"].unique())
    for year, factor in sorted(factors.items()):
        logger.info(
            f"Adjusting {year} costs to {reference_year} dollars "
            f"(factor {factor:.4f})"
        )
    df["adjustment_factor"] = np.where(
        needs_adjustment, df["year"].map(factors), 1.0
    )
    df["cost"] = df["cost"] * df["adjustment_factor"]
    return df


def to_wide(
    long: pd.DataFrame,
    sort_by: str = "family_type",
    ascending: bool = False,
) -> pd.DataFrame:
    """Pivot years into columns, one row per county/family/line item.

    Year columns are named by the year as a string, in ascending order.
    Line items keep their source column order within each group. Sorting
    by ``family_type`` orders on the family-type code, so decoded labels
    and codes left undecoded interleave by household composition.

    Raises:
        ValueError: If a key appears more than once for the same year.
    """
    if long.empty:
        return pd.DataFrame(columns=WIDE_KEYS)

    df = long.copy()
    df["line_item"] = pd.Categorical(
        df["line_item"], categories=df["line_item"].unique()
    )
    wide = df.pivot(index=WIDE_KEYS, columns="year", values="cost")
    wide = wide.reindex(columns=sorted(wide.columns))
    wide.columns = [str(year) for year in wide.columns]
    wide = wide.reset_index()
    wide["line_item"] = wide["line_item"].astype(str)

    if sort_by not in wide.columns:
        raise KeyError(f"Cannot sort report table by {sort_by!r}")
    key = _family_type_code if sort_by == "family_type" else None
    return wide.sort_values(
        sort_by, ascending=ascending, kind="stable", key=key
    ).reset_index(drop=True)


def _family_type_code(labels: pd.Series) -> pd.Series:
    return labels.map(FAMILY_TYPE_CODES).fillna(labels)


def to_line_items(
    raw: pd.DataFrame,
    counties: Iterable[str],
    family_types: Iterable[str],
    cpi_table: CPITable,
    reference_year: int,
    schema: SchemaDescriptor = SSS_BY_FAMILY_SCHEMA,
) -> pd.DataFrame:
    """Long, labelled, inflation-adjusted line items for the selection."""
    df = filter_standard(raw, counties, family_types)
    df = select_cost_columns(df, schema)
    df = to_long(df)
    df = label_line_items(df)
    df = decode_family_types(df)
    return adjust_for_inflation(df, cpi_table, reference_year)


def normalize_standard(
    raw: pd.DataFrame,
    counties: Iterable[str],
    family_types: Iterable[str],
    cpi_table: CPITable,
    reference_year: int,
    schema: SchemaDescriptor = SSS_BY_FAMILY_SCHEMA,
    sort_by: str = "family_type",
    ascending: bool = False,
) -> pd.DataFrame:
    long = to_line_items(
        raw, counties, family_types, cpi_table, reference_year, schema
    )
    return to_wide(long, sort_by=sort_by, ascending=ascending)
