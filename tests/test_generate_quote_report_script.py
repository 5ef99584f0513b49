"""
tests/test_generate_quote_report_script.py

Pytest tests for the quote report command line entry point.

Coverage:
- Successful generation writes the dashboard and returns 0
- Inverted date windows (configured or passed as flags) exit with 1
- Missing input exits with 1
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from app.config import get_quote_report_settings
from app.services.html_report_service import REPORT_FILE_NAME
from scripts.generate_quote_report import EXIT_INPUT_ERROR, main

CSV_CONTENT = (
    "InsuranceType,Status,QuoteRequestedOn,ChassisNumber\n"
    "Third Party,Success,2024-01-05 10:00:00,A1\n"
    "Comprehensive,Failed,2024-01-11 12:00:00,B1\n"
)


@pytest.fixture()
def export_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    source_dir = tmp_path / "source data"
    source_dir.mkdir()
    path = source_dir / "export.csv"
    path.write_text(CSV_CONTENT, encoding="utf-8")

    monkeypatch.setenv("QUOTE_SOURCE_DIR", str(source_dir))
    monkeypatch.delenv("REPORT_START_DATE", raising=False)
    monkeypatch.delenv("REPORT_END_DATE", raising=False)
    get_quote_report_settings.cache_clear()
    yield path
    get_quote_report_settings.cache_clear()


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class TestMain:
    def test_writes_report(self, export_path: Path, tmp_path: Path) -> None:
        output_dir = tmp_path / "out"

        exit_code = main([str(export_path), "--output-dir", str(output_dir), "--no-cleaned"])

        assert exit_code == 0
        assert (output_dir / REPORT_FILE_NAME).exists()

    def test_inverted_configured_range_is_input_error(
        self,
        export_path: Path,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setenv("REPORT_START_DATE", "2024-02-01")
        monkeypatch.setenv("REPORT_END_DATE", "2024-01-01")
        get_quote_report_settings.cache_clear()

        exit_code = main([str(export_path), "--output-dir", str(tmp_path / "out")])

        assert exit_code == EXIT_INPUT_ERROR
        assert "End date must not be before start date" in capsys.readouterr().err
        assert not (tmp_path / "out" / REPORT_FILE_NAME).exists()

    def test_inverted_flag_range_is_input_error(self, export_path: Path, tmp_path: Path) -> None:
        exit_code = main(
            [
                str(export_path),
                "--output-dir",
                str(tmp_path / "out"),
                "--start-date",
                "2024-02-01",
                "--end-date",
                "2024-01-01",
            ]
        )
        assert exit_code == EXIT_INPUT_ERROR

    def test_missing_input_is_input_error(self, export_path: Path) -> None:
        assert main(["missing.csv"]) == EXIT_INPUT_ERROR
