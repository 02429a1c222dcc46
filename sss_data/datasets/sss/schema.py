"""
Column layout of the Self-Sufficiency Standard "By Family" sheet.

The published workbooks are read positionally: every column has a declared
type, and the canonical column name comes from the descriptor rather than
from the sheet header. A layout change upstream needs a new descriptor
version, never an inline tweak to the loader.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

TEXT = "text"
NUMERIC = "numeric"

# Headers whose normalized form is ambiguous or differs between years.
COLUMN_RENAMES = {
    "adult_s": "adults",
    "adult": "adults",
    "infant_s": "infants",
    "infant": "infants",
    "preschooler_s": "preschoolers",
    "preschooler": "preschoolers",
    "schoolager_s": "school_agers",
    "schoolager": "school_agers",
    "school_age": "school_agers",
    "school_ager_s": "school_agers",
    "teenager_s": "teenagers",
    "teenager": "teenagers",
}

FIRST_COST_COLUMN = "housing_costs"
LAST_COST_COLUMN = "emergency_savings"


class SchemaMismatchError(ValueError):
    """Raised when a source sheet does not match its declared layout."""

    pass


def clean_column_name(name) -> str:
    """Normalize a spreadsheet header to lower snake case.

    >>> clean_column_name("Child Care Costs")
    'child_care_costs'
    >>> clean_column_name("Adult(s)")
    'adults'
    """
    cleaned = re.sub(r"[^0-9a-zA-Z]+", "_", str(name).strip()).strip("_")
    cleaned = cleaned.lower()
    return COLUMN_RENAMES.get(cleaned, cleaned)


@dataclass(frozen=True)
class Field:
    name: str
    kind: str

    def __post_init__(self):
        if self.kind not in (TEXT, NUMERIC):
            raise ValueError(
                f"Field {self.name!r} has unknown kind {self.kind!r}"
            )


@dataclass(frozen=True)
class SchemaDescriptor:
    """Ordered, typed column layout for one family of source sheets."""

    version: str
    fields: Tuple[Field, ...]

    def __post_init__(self):
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(
                f"Schema {self.version} repeats columns: {duplicates}"
            )

    def __len__(self):
        return len(self.fields)

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def numeric_names(self) -> List[str]:
        return [f.name for f in self.fields if f.kind == NUMERIC]

    @property
    def text_names(self) -> List[str]:
        return [f.name for f in self.fields if f.kind == TEXT]

    @property
    def dtypes(self) -> Dict[str, str]:
        return {
            f.name: ("float64" if f.kind == NUMERIC else "object")
            for f in self.fields
        }

    @property
    def cost_columns(self) -> List[str]:
        """The contiguous block from housing costs to emergency savings."""
        names = self.names
        try:
            start = names.index(FIRST_COST_COLUMN)
            end = names.index(LAST_COST_COLUMN)
        except ValueError:
            raise SchemaMismatchError(
                f"Schema {self.version} has no "
                f"{FIRST_COST_COLUMN}..{LAST_COST_COLUMN} block"
            ) from None
        block = self.fields[start : end + 1]
        non_numeric = [f.name for f in block if f.kind != NUMERIC]
        if end < start or non_numeric:
            raise SchemaMismatchError(
                f"Schema {self.version} cost block is not contiguous "
                f"numeric columns: {non_numeric}"
            )
        return [f.name for f in block]


def _fields(kind: str, *names: str) -> Tuple[Field, ...]:
    return tuple(Field(name, kind) for name in names)


# 1 text, 5 numeric, 1 text, 2 numeric, 1 text, 14 numeric.
SSS_BY_FAMILY_SCHEMA = SchemaDescriptor(
    version="2017",
    fields=(
        _fields(TEXT, "family_type")
        + _fields(
            NUMERIC,
            "adults",
            "infants",
            "preschoolers",
            "school_agers",
            "teenagers",
        )
        + _fields(TEXT, "state")
        + _fields(NUMERIC, "state_fips", "county_fips")
        + _fields(TEXT, "county")
        + _fields(
            NUMERIC,
            "housing_costs",
            "child_care_costs",
            "food_costs",
            "transportation_costs",
            "health_care_costs",
            "miscellaneous_costs",
            "taxes",
            "earned_income_tax_credit",
            "child_care_tax_credit",
            "child_tax_credit",
            "hourly_self_sufficiency_wage",
            "monthly_self_sufficiency_wage",
            "annual_self_sufficiency_wage",
            "emergency_savings",
        )
    ),
)

SCHEMAS = {SSS_BY_FAMILY_SCHEMA.version: SSS_BY_FAMILY_SCHEMA}


def get_schema(version: str) -> SchemaDescriptor:
    try:
        return SCHEMAS[str(version)]
    except KeyError:
        raise ValueError(
            f"Unknown schema version {version!r}; "
            f"known versions: {sorted(SCHEMAS)}"
        ) from None
