"""Build the Self-Sufficiency Standard comparison report.

Usage:
    python -m sss_data.pipeline --config my_pipeline.yaml --output report.md
"""

import argparse
import logging
import sys
from typing import Optional, Sequence, Tuple

import pandas as pd

from sss_data.datasets.sss.raw_sss import load_standards
from sss_data.datasets.sss.schema import SchemaMismatchError
from sss_data.datasets.sss.sss import normalize_standard
from sss_data.evaluation.report import ReportTable, build_report, write_report
from sss_data.parameters import PipelineConfig, load_pipeline_config
from sss_data.utils.uprating import CPITable, MissingYearError

logger = logging.getLogger(__name__)


def run_pipeline(config: PipelineConfig) -> Tuple[pd.DataFrame, ReportTable]:
    """Load, normalize and lay out the configured Standard tables.

    Returns:
        The wide comparison table and its grouped report.

    Raises:
        SchemaMismatchError: If a source does not match its layout.
        MissingYearError: If a source year has no CPI value.
    """
    config.validate()
    cpi_table = CPITable.from_csv(config.cpi_path, config.reference_cpi_value)
    logger.info(
        f"Normalizing to {config.reference_year} dollars with "
        f"reference CPI {config.reference_cpi_value}"
    )

    raw = load_standards(config.sources)
    wide = normalize_standard(
        raw,
        counties=config.selected_counties,
        family_types=config.selected_family_types,
        cpi_table=cpi_table,
        reference_year=config.reference_year,
        sort_by=config.sort_by,
    )
    report = build_report(
        wide,
        counties=config.selected_counties,
        currency_symbol=config.currency_symbol,
    )
    return wide, report


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare Self-Sufficiency Standard costs across years"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Pipeline YAML file (default: bundled pipeline.yaml)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="sss_report.md",
        help="Report file, .md, .html or .csv (default: %(default)s)",
    )
    parser.add_argument(
        "--reference-cpi",
        type=float,
        default=None,
        help="Provisional CPI value for the reference year",
    )
    parser.add_argument(
        "--reference-year",
        type=int,
        default=None,
        help="Publication year to normalize to",
    )
    parser.add_argument(
        "--county",
        action="append",
        dest="counties",
        default=None,
        help="County to include (repeatable)",
    )
    parser.add_argument(
        "--family-type",
        action="append",
        dest="family_types",
        default=None,
        help="Family type code to include, e.g. a2i1p1s0t0 (repeatable)",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_pipeline_config(
            args.config,
            reference_cpi_value=args.reference_cpi,
            reference_year=args.reference_year,
            selected_counties=args.counties,
            selected_family_types=args.family_types,
        )
        _, report = run_pipeline(config)
        write_report(report, args.output)
    except (SchemaMismatchError, MissingYearError, ValueError, OSError) as e:
        logger.error(f"Pipeline aborted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
