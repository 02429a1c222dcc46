"""Shared fixtures: small Self-Sufficiency Standard workbooks."""

import re

import pandas as pd
import pytest

RAW_HEADERS = [
    "Family Type",
    "Adult(s)",
    "Infant(s)",
    "Preschooler(s)",
    "Schoolager(s)",
    "Teenager(s)",
    "State",
    "State FIPS",
    "County FIPS",
    "County",
    "Housing Costs",
    "Child Care Costs",
    "Food Costs",
    "Transportation Costs",
    "Health Care Costs",
    "Miscellaneous Costs",
    "Taxes",
    "Earned Income Tax Credit",
    "Child Care Tax Credit",
    "Child Tax Credit",
    "Hourly Self-Sufficiency Wage",
    "Monthly Self-Sufficiency Wage",
    "Annual Self-Sufficiency Wage",
    "Emergency Savings",
]

COUNTY_FIPS = {
    "Wayne County": 163,
    "Marquette County": 103,
    "Oakland County": 125,
}


def family_composition(code):
    counts = re.fullmatch(r"a(\d)i(\d)p(\d)s(\d)t(\d)", code).groups()
    return [int(c) for c in counts]


def make_sheet(counties, family_types, housing=1000.0):
    """Rows in published column order, one per county and family type."""
    rows = []
    for county in counties:
        for family_type in family_types:
            rows.append(
                [family_type]
                + family_composition(family_type)
                + ["MI", 26, COUNTY_FIPS.get(county, 1), county]
                + [
                    housing,  # housing
                    600.0,  # child care
                    400.0,  # food
                    300.0,  # transportation
                    250.0,  # health care
                    150.0,  # miscellaneous
                    350.0,  # taxes
                    -50.0,  # earned income tax credit
                    -40.0,  # child care tax credit
                    -100.0,  # child tax credit
                    20.5,  # hourly wage
                    3600.0,  # monthly wage
                    43200.0,  # annual wage
                    75.0,  # emergency savings
                ]
            )
    return pd.DataFrame(rows, columns=RAW_HEADERS)


@pytest.fixture
def write_workbook(tmp_path):
    def _write(df, name="sss.xlsx", sheet_name="By Family"):
        path = tmp_path / name
        with pd.ExcelWriter(path) as writer:
            pd.DataFrame({"Notes": ["Published table"]}).to_excel(
                writer, sheet_name="About", index=False
            )
            df.to_excel(writer, sheet_name=sheet_name, index=False)
        return path

    return _write


@pytest.fixture
def raw_standard():
    """Already-loaded union of two publication years."""
    frames = []
    for year in (2017, 2020):
        df = make_sheet(
            ["Wayne County", "Marquette County", "Oakland County"],
            ["a1i0p0s0t0", "a2i1p1s0t0"],
        )
        df.columns = [
            "family_type",
            "adults",
            "infants",
            "preschoolers",
            "school_agers",
            "teenagers",
            "state",
            "state_fips",
            "county_fips",
            "county",
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
        ]
        df.insert(0, "year", year)
        frames.append(df)
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def cpi_csv(tmp_path):
    path = tmp_path / "cpi.csv"
    path.write_text("year,cpi\n2017,245.0\n2020,385.0\n")
    return path


@pytest.fixture
def sheet_factory():
    return make_sheet
