"""
tests/test_quote_report_service.py

Pytest tests for input resolution and the end-to-end report pipeline.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from app.config import QuoteReportSettings
from app.services.cleaned_data_writer import CLEANED_FILE_NAME
from app.services.html_report_service import REPORT_FILE_NAME
from app.services.quote_loader_service import QuoteFileNotFoundError
from app.services.quote_report_service import (
    AmbiguousQuoteInputError,
    QuoteReportService,
    resolve_input_path,
)
from app.services.report_date_range import ReportDateRange

CSV_CONTENT = (
    "InsuranceType,Status,QuoteRequestedOn,ChassisNumber,ErrorText,EstimatedValue\n"
    "Third Party,Success,2024-01-05 10:00:00,A1,,\n"
    "Third Party,Failed,2024-01-08 11:00:00,A2,Blocked,2000\n"
    "Comprehensive,Failed,2024-01-11 12:00:00,B1,null,50000\n"
)


@pytest.fixture()
def source_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "source data"
    directory.mkdir()
    return directory


@pytest.fixture()
def service(source_dir: Path) -> QuoteReportService:
    return QuoteReportService(settings=QuoteReportSettings(source_directory=source_dir))


# ---------------------------------------------------------------------------
# Input resolution
# ---------------------------------------------------------------------------


class TestResolveInputPath:
    def test_explicit_existing_path(self, tmp_path: Path, source_dir: Path) -> None:
        path = tmp_path / "export.csv"
        path.write_text(CSV_CONTENT, encoding="utf-8")
        assert resolve_input_path(str(path), source_dir) == path

    def test_name_inside_source_directory(self, source_dir: Path) -> None:
        path = source_dir / "export.csv"
        path.write_text(CSV_CONTENT, encoding="utf-8")
        assert resolve_input_path("export.csv", source_dir) == path

    def test_unknown_name(self, source_dir: Path) -> None:
        with pytest.raises(QuoteFileNotFoundError):
            resolve_input_path("missing.csv", source_dir)

    def test_single_supported_file(self, source_dir: Path) -> None:
        (source_dir / "notes.txt").write_text("ignore me", encoding="utf-8")
        path = source_dir / "export.xlsx"
        path.write_bytes(b"")
        assert resolve_input_path(None, source_dir) == path

    def test_multiple_files_are_ambiguous(self, source_dir: Path) -> None:
        (source_dir / "a.csv").write_text(CSV_CONTENT, encoding="utf-8")
        (source_dir / "b.csv").write_text(CSV_CONTENT, encoding="utf-8")
        with pytest.raises(AmbiguousQuoteInputError):
            resolve_input_path(None, source_dir)

    def test_empty_directory(self, source_dir: Path) -> None:
        with pytest.raises(QuoteFileNotFoundError):
            resolve_input_path(None, source_dir)

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(QuoteFileNotFoundError):
            resolve_input_path(None, tmp_path / "nope")


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_writes_report_next_to_input(self, service: QuoteReportService, source_dir: Path) -> None:
        path = source_dir / "export.csv"
        path.write_text(CSV_CONTENT, encoding="utf-8")

        generated = service.generate(path)

        assert generated.report_path == source_dir.resolve() / REPORT_FILE_NAME
        assert generated.cleaned_data_path == source_dir.resolve() / CLEANED_FILE_NAME
        assert generated.report.record_count == 3
        html = generated.report_path.read_text(encoding="utf-8")
        assert "Overview of Quote requests Analysis from 2024-01-05 to 2024-01-11" in html
        stats = generated.report.statistics
        assert stats.tpl_stats.fail_count == 1
        assert stats.comprehensive_error_counts == {}
        assert stats.tpl_error_counts == {"Blocked": 1}

    def test_date_range_and_output_directory(
        self, service: QuoteReportService, source_dir: Path, tmp_path: Path
    ) -> None:
        path = source_dir / "export.csv"
        path.write_text(CSV_CONTENT, encoding="utf-8")

        generated = service.generate(
            path,
            output_directory=tmp_path / "out",
            date_range=ReportDateRange(start_date=date(2024, 1, 6)),
            write_cleaned=False,
        )

        assert generated.report_path.parent == tmp_path / "out"
        assert generated.cleaned_data_path is None
        assert generated.report.loaded_row_count == 3
        assert generated.report.record_count == 2
        assert "Selected period: 2024-01-06 to" in generated.report_path.read_text(encoding="utf-8")

    def test_configured_range_is_default(self, source_dir: Path) -> None:
        settings = QuoteReportSettings(source_directory=source_dir, end_date=date(2024, 1, 5))
        service = QuoteReportService(settings=settings)

        report = service.build_report_from_bytes(CSV_CONTENT.encode("utf-8"), "export.csv")

        assert report.record_count == 1
        assert report.statistics.tpl_stats.pass_count == 1

    def test_configured_limits_reach_statistics(self, source_dir: Path) -> None:
        settings = QuoteReportSettings(source_directory=source_dir, top_requested_limit=1)
        service = QuoteReportService(settings=settings)
        content = (
            "InsuranceType,Status,ChassisNumber,ShoryMakeEn,ShoryModelEn\n"
            "Third Party,Success,A1,Toyota,Yaris\n"
            "Third Party,Success,A2,Toyota,Yaris\n"
            "Third Party,Failed,A3,Nissan,Patrol\n"
        )

        report = service.build_report_from_bytes(content.encode("utf-8"), "export.csv")

        top = report.statistics.top_requested_make_models
        assert len(top) == 1
        assert (top[0].make, top[0].model) == ("Toyota", "Yaris")

    def test_empty_export_still_renders(self, service: QuoteReportService) -> None:
        report = service.build_report_from_bytes(b"Status\n", "empty.csv")
        assert report.record_count == 0
        assert "Quote Generation Overview" in service.render_html(report)
