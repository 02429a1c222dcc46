import html
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from sss_data.datasets.sss.sss import WIDE_KEYS

logger = logging.getLogger(__name__)

REPORT_TITLE = "Self-Sufficiency Standard comparison"
EMPTY_PLACEHOLDER = (
    "_No rows matched the selected counties and family types._"
)


@dataclass
class ReportGroup:
    county: str
    family_type: str
    table: pd.DataFrame

    @property
    def heading(self) -> str:
        return f"{self.county}: {self.family_type}"


@dataclass
class ReportTable:
    title: str
    subtitle: str
    groups: List[ReportGroup] = field(default_factory=list)
    data: pd.DataFrame = field(default_factory=pd.DataFrame)

    @property
    def is_empty(self) -> bool:
        return not self.groups


def format_currency(value, symbol: str = "$") -> str:
    """Whole-dollar currency string, e.g. ``-$1,234``."""
    if value is None or pd.isna(value):
        return ""
    # Halves round away from zero: 2.5 -> $3, -2.5 -> -$3.
    amount = Decimal(str(float(value))).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.0f}"


def year_columns(wide: pd.DataFrame) -> List[str]:
    return [c for c in wide.columns if c not in WIDE_KEYS]


def _subtitle(counties: List[str]) -> str:
    if not counties:
        return "No counties selected"
    return "Costs in reference-year dollars: " + " vs. ".join(counties)


def build_report(
    wide: pd.DataFrame,
    counties: Optional[Iterable[str]] = None,
    currency_symbol: str = "$",
) -> ReportTable:
    """Group the wide table by county and family type for display.

    Args:
        wide: Output of ``normalize_standard``.
        counties: Counties named in the subtitle. Defaults to the counties
            present in ``wide``, in table order.
        currency_symbol: Prefix for every formatted amount.

    Returns:
        A ``ReportTable``; ``wide`` itself is left untouched.
    """
    if counties is None:
        counties = list(wide["county"].unique()) if len(wide) else []
    report = ReportTable(
        title=REPORT_TITLE,
        subtitle=_subtitle(list(counties)),
        data=wide.copy(),
    )
    if wide.empty:
        logger.warning("Report table is empty")
        return report

    years = year_columns(wide)
    for (county, family_type), rows in wide.groupby(
        ["county", "family_type"], sort=False
    ):
        table = rows[["line_item", "line_group"] + years].copy()
        for year in years:
            table[year] = table[year].map(
                lambda v: format_currency(v, currency_symbol)
            )
        table = table.rename(
            columns={"line_item": "Line item", "line_group": "Group"}
        ).set_index("Line item")
        report.groups.append(ReportGroup(county, family_type, table))
    return report


def render_markdown(report: ReportTable) -> str:
    sections = [f"# {report.title}", f"_{report.subtitle}_"]
    if report.is_empty:
        sections.append(EMPTY_PLACEHOLDER)
    for group in report.groups:
        sections.append(f"## {group.heading}\n\n{group.table.to_markdown()}")
    return "\n\n".join(sections) + "\n"


def render_html(report: ReportTable) -> str:
    parts = [
        f"<h1>{html.escape(report.title)}</h1>",
        f"<p><em>{html.escape(report.subtitle)}</em></p>",
    ]
    if report.is_empty:
        parts.append(f"<p>{html.escape(EMPTY_PLACEHOLDER.strip('_'))}</p>")
    for group in report.groups:
        parts.append(f"<h2>{html.escape(group.heading)}</h2>")
        parts.append(group.table.to_html())
    return "\n".join(parts) + "\n"


def write_report(report: ReportTable, path) -> Path:
    """Write the report as Markdown, HTML or CSV, chosen by file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in (".md", ".markdown"):
        path.write_text(render_markdown(report))
    elif suffix in (".html", ".htm"):
        path.write_text(render_html(report))
    elif suffix == ".csv":
        report.data.to_csv(path, index=False)
    else:
        raise ValueError(
            f"Unsupported report format {suffix!r}; use .md, .html or .csv"
        )
    logger.info(f"Wrote report to {path}")
    return path
