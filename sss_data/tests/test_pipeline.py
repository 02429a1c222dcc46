"""End-to-end tests for configuration loading and the report pipeline."""

import logging

import pytest

from sss_data.datasets.sss.raw_sss import StandardSource
from sss_data.datasets.sss.schema import SchemaMismatchError
from sss_data.parameters import (
    REFERENCE_CPI_ENV,
    PipelineConfig,
    load_pipeline_config,
)
from sss_data.pipeline import main, run_pipeline
from sss_data.utils.uprating import MissingYearError

COUNTIES = ["Wayne County", "Marquette County", "Oakland County"]
FAMILY_TYPES = ["a1i0p0s0t0", "a2i1p1s0t0"]


@pytest.fixture
def sources(write_workbook, sheet_factory):
    return [
        StandardSource(
            write_workbook(
                sheet_factory(COUNTIES, FAMILY_TYPES), name="sss_2017.xlsx"
            ),
            2017,
        ),
        StandardSource(
            write_workbook(
                sheet_factory(COUNTIES, FAMILY_TYPES), name="sss_2020.xlsx"
            ),
            2020,
        ),
    ]


@pytest.fixture
def config_file(tmp_path, sources, cpi_csv):
    path = tmp_path / "pipeline.yaml"
    path.write_text(
        "reference_cpi_value: 385.0\n"
        "reference_year: 2020\n"
        "selected_counties: [Wayne County, Marquette County]\n"
        "selected_family_types: [a1i0p0s0t0, a2i1p1s0t0]\n"
        "cpi_path: cpi.csv\n"
        "sources:\n"
        "  - path: sss_2017.xlsx\n"
        "    year: 2017\n"
        "  - path: sss_2020.xlsx\n"
        "    year: 2020\n"
        "    sheet_name: By Family\n"
    )
    return path


class TestConfig:
    def test_bundled_defaults(self, monkeypatch):
        monkeypatch.delenv(REFERENCE_CPI_ENV, raising=False)
        config = load_pipeline_config()

        assert config.reference_year == 2023
        assert config.reference_cpi_value == 305.0
        assert "Wayne County" in config.selected_counties
        assert config.sources == []
        assert config.cpi_path is None

    def test_relative_paths_resolve_against_file(self, config_file):
        config = load_pipeline_config(config_file)

        assert config.cpi_path == config_file.resolve().parent / "cpi.csv"
        assert [s.year for s in config.sources] == [2017, 2020]
        assert config.sources[0].path == (
            config_file.resolve().parent / "sss_2017.xlsx"
        )

    def test_overrides_win(self, config_file, monkeypatch):
        monkeypatch.setenv(REFERENCE_CPI_ENV, "390.0")

        config = load_pipeline_config(
            config_file, reference_cpi_value=400.0, selected_counties=None
        )

        assert config.reference_cpi_value == 400.0
        assert config.selected_counties == ["Wayne County", "Marquette County"]

    def test_environment_reference_cpi(self, config_file, monkeypatch):
        monkeypatch.setenv(REFERENCE_CPI_ENV, "390.5")

        config = load_pipeline_config(config_file)

        assert config.reference_cpi_value == 390.5

    def test_unknown_setting_rejected(self, tmp_path):
        path = tmp_path / "pipeline.yaml"
        path.write_text("reference_year: 2020\ncolour: blue\n")

        with pytest.raises(ValueError, match="colour"):
            load_pipeline_config(path)

    def test_empty_selection_rejected(self, tmp_path):
        path = tmp_path / "pipeline.yaml"
        path.write_text("selected_counties: []\n")

        with pytest.raises(ValueError, match="selected_counties"):
            load_pipeline_config(path)

    def test_non_positive_reference_cpi_rejected(self):
        with pytest.raises(ValueError, match="reference_cpi_value"):
            PipelineConfig(reference_cpi_value=0).validate()


class TestRunPipeline:
    def test_end_to_end(self, config_file):
        wide, report = run_pipeline(load_pipeline_config(config_file))

        assert "Oakland County" not in set(wide["county"])
        assert list(wide.columns[-2:]) == ["2017", "2020"]
        assert len(report.groups) == 4
        housing = wide[
            (wide["county"] == "Wayne County")
            & (wide["family_type"] == "1 Adult")
            & (wide["line_item"] == "Housing")
        ].iloc[0]
        assert housing["2017"] == pytest.approx(1571.43, abs=0.01)
        assert housing["2020"] == 1000.0

    def test_missing_cpi_year(self, sources, tmp_path):
        cpi = tmp_path / "only_2020.csv"
        cpi.write_text("year,cpi\n2020,385.0\n")
        config = PipelineConfig(
            reference_cpi_value=385.0,
            reference_year=2020,
            cpi_path=cpi,
            sources=sources,
        )

        with pytest.raises(MissingYearError):
            run_pipeline(config)

    def test_schema_mismatch_stops_before_normalizing(
        self, write_workbook, sheet_factory, cpi_csv
    ):
        bad = write_workbook(
            sheet_factory(COUNTIES, FAMILY_TYPES).iloc[:, :-1],
            name="short.xlsx",
        )
        config = PipelineConfig(
            reference_cpi_value=385.0,
            reference_year=2020,
            cpi_path=cpi_csv,
            sources=[StandardSource(bad, 2017)],
        )

        with pytest.raises(SchemaMismatchError):
            run_pipeline(config)


class TestMain:
    def test_writes_markdown(self, config_file, tmp_path):
        output = tmp_path / "report.md"

        status = main(["--config", str(config_file), "--output", str(output)])

        assert status == 0
        text = output.read_text()
        assert "Wayne County" in text
        assert "$1,571" in text

    def test_county_flag_narrows_selection(self, config_file, tmp_path):
        output = tmp_path / "report.csv"

        status = main(
            [
                "--config",
                str(config_file),
                "--output",
                str(output),
                "--county",
                "Oakland County",
            ]
        )

        assert status == 0
        text = output.read_text()
        assert "Oakland County" in text
        assert "Wayne County" not in text

    def test_error_exit_status(self, config_file, tmp_path):
        status = main(
            [
                "--config",
                str(config_file),
                "--output",
                str(tmp_path / "report.md"),
                "--reference-year",
                "2017",
                "--family-type",
                "a1i0p0s0t0",
                "--reference-cpi",
                "-1",
            ]
        )

        assert status == 1


def write_config(directory, sources, cpi_path="cpi.csv"):
    lines = [
        "reference_cpi_value: 385.0",
        "reference_year: 2020",
        "selected_counties: [Wayne County]",
        "selected_family_types: [a1i0p0s0t0]",
        f"cpi_path: {cpi_path}",
        "sources:",
    ]
    for name, year in sources:
        lines += [f"  - path: {name}", f"    year: {year}"]
    path = directory / "failing.yaml"
    path.write_text("\n".join(lines) + "\n")
    return path


class TestMainFailures:
    def run(self, config, tmp_path, caplog):
        with caplog.at_level(logging.ERROR):
            return main(
                [
                    "--config",
                    str(config),
                    "--output",
                    str(tmp_path / "report.md"),
                ]
            )

    def test_missing_workbook(self, tmp_path, cpi_csv, caplog):
        config = write_config(tmp_path, [("missing_2017.xlsx", 2017)])

        status = self.run(config, tmp_path, caplog)

        assert status == 1
        assert "missing_2017.xlsx (2017)" in caplog.text
        assert not (tmp_path / "report.md").exists()

    def test_truncated_sheet(
        self, tmp_path, write_workbook, sheet_factory, cpi_csv, caplog
    ):
        write_workbook(
            sheet_factory(COUNTIES, FAMILY_TYPES).iloc[:, :-1],
            name="short_2017.xlsx",
        )
        config = write_config(tmp_path, [("short_2017.xlsx", 2017)])

        status = self.run(config, tmp_path, caplog)

        assert status == 1
        assert "short_2017.xlsx (2017)" in caplog.text
        assert "expected 24 columns" in caplog.text

    def test_cpi_missing_source_year(
        self, tmp_path, write_workbook, sheet_factory, caplog
    ):
        write_workbook(
            sheet_factory(COUNTIES, FAMILY_TYPES), name="sss_2017.xlsx"
        )
        write_workbook(
            sheet_factory(COUNTIES, FAMILY_TYPES), name="sss_2020.xlsx"
        )
        (tmp_path / "cpi_2020.csv").write_text("year,cpi\n2020,385.0\n")
        config = write_config(
            tmp_path,
            [("sss_2017.xlsx", 2017), ("sss_2020.xlsx", 2020)],
            cpi_path="cpi_2020.csv",
        )

        status = self.run(config, tmp_path, caplog)

        assert status == 1
        assert "No CPI value for 2017" in caplog.text
