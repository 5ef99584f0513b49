"""
app/services/quote_report_service.py

End-to-end quote report pipeline: resolve input, load, filter by request
date, aggregate, then write the HTML dashboard (and optionally the cleaned
CSV) next to the input file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from app.config import QuoteReportSettings, get_quote_report_settings
from app.domain.quote_record import QuoteRecord
from app.domain.quote_statistics import QuoteStatistics
from app.services.cleaned_data_writer import write_cleaned_data
from app.services.html_report_service import REPORT_FILE_NAME, HtmlReportRenderer
from app.services.quote_loader_service import (
    LoadedQuotes,
    QuoteFileNotFoundError,
    QuoteLoaderService,
    is_supported_file,
)
from app.services.quote_statistics_service import QuoteStatisticsService, StatisticsLimits
from app.services.report_date_range import ReportDateRange

logger = logging.getLogger(__name__)


class AmbiguousQuoteInputError(ValueError):
    """Raised when the source directory holds more than one quote export."""


# ---------------------------------------------------------------------------
# Input resolution
# ---------------------------------------------------------------------------


def resolve_input_path(name: str | Path | None, source_directory: str | Path) -> Path:
    """
    Locate the quote export to report on.

    Resolution order
    ----------------
    1. *name* as given, when it points at an existing file.
    2. *name* inside *source_directory*.
    3. Without *name*: the single supported file in *source_directory*.

    Raises
    ------
    QuoteFileNotFoundError
        When nothing matches, the directory is missing, or it holds no
        supported file.
    AmbiguousQuoteInputError
        When several supported files are present and no *name* was given.
    """

    source_dir = Path(source_directory)
    if name is not None and str(name).strip():
        candidate = Path(name).expanduser()
        if candidate.is_file():
            return candidate
        in_source = source_dir / candidate.name
        if in_source.is_file():
            return in_source
        raise QuoteFileNotFoundError(
            f"Quote file not found: {candidate} (also looked in {source_dir})"
        )

    if not source_dir.is_dir():
        raise QuoteFileNotFoundError(f"Source data directory not found: {source_dir}")

    candidates = sorted(
        path for path in source_dir.iterdir() if path.is_file() and is_supported_file(path)
    )
    if not candidates:
        raise QuoteFileNotFoundError(f"No .csv, .xlsx or .xls file found in {source_dir}")
    if len(candidates) > 1:
        names = ", ".join(path.name for path in candidates)
        raise AmbiguousQuoteInputError(
            f"Multiple quote files found in {source_dir}: {names}. Pass the file name explicitly."
        )
    return candidates[0]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuoteReport:
    """Aggregated report for one export, after the date filter."""

    source_name: str
    records: tuple[QuoteRecord, ...]
    statistics: QuoteStatistics
    date_range: ReportDateRange
    loaded_row_count: int

    @property
    def record_count(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class GeneratedQuoteReport:
    report: QuoteReport
    report_path: Path
    cleaned_data_path: Path | None = None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class QuoteReportService:
    """
    Coordinates loader, aggregation engine and writers.
    """

    def __init__(
        self,
        *,
        loader: QuoteLoaderService | None = None,
        statistics_service: QuoteStatisticsService | None = None,
        renderer: HtmlReportRenderer | None = None,
        settings: QuoteReportSettings | None = None,
    ) -> None:
        self._settings = settings or get_quote_report_settings()
        self._loader = loader or QuoteLoaderService()
        self._statistics_service = statistics_service or QuoteStatisticsService(
            limits=StatisticsLimits(
                top_requested_make_models=self._settings.top_requested_limit,
                top_rejected_make_models=self._settings.top_rejected_make_model_limit,
                top_rejected_models=self._settings.top_rejected_model_limit,
            )
        )
        self._renderer = renderer or HtmlReportRenderer()

    @property
    def settings(self) -> QuoteReportSettings:
        return self._settings

    def default_date_range(self) -> ReportDateRange:
        return ReportDateRange(
            start_date=self._settings.start_date,
            end_date=self._settings.end_date,
        )

    def build_report(
        self,
        loaded: LoadedQuotes,
        date_range: ReportDateRange | None = None,
    ) -> QuoteReport:
        selected_range = date_range if date_range is not None else self.default_date_range()
        records = tuple(selected_range.filter(loaded.records))
        if selected_range.has_selection:
            logger.info(
                "Applied request date range %s kept=%s of %s",
                selected_range.describe(),
                len(records),
                len(loaded.records),
            )
        if not records:
            logger.warning("No quote records to report on source=%s", loaded.source_name)

        return QuoteReport(
            source_name=loaded.source_name,
            records=records,
            statistics=self._statistics_service.calculate(records),
            date_range=selected_range,
            loaded_row_count=len(loaded.records),
        )

    def build_report_from_bytes(
        self,
        content: bytes,
        filename: str,
        date_range: ReportDateRange | None = None,
    ) -> QuoteReport:
        return self.build_report(self._loader.load_bytes(content, filename), date_range)

    def render_html(self, report: QuoteReport) -> str:
        period = report.date_range.describe() if report.date_range.has_selection else None
        return self._renderer.render(report.statistics, report.records, period_label=period)

    def generate(
        self,
        input_path: str | Path,
        *,
        output_directory: str | Path | None = None,
        date_range: ReportDateRange | None = None,
        write_cleaned: bool | None = None,
    ) -> GeneratedQuoteReport:
        """
        Load *input_path* and write the dashboard.

        The output directory defaults to the configured one, then to the
        input file's directory.
        """

        source = Path(input_path)
        report = self.build_report(self._loader.load_path(source), date_range)

        target_dir = Path(
            output_directory or self._settings.output_directory or source.resolve().parent
        )
        target_dir.mkdir(parents=True, exist_ok=True)
        period = report.date_range.describe() if report.date_range.has_selection else None
        report_path = self._renderer.write(
            target_dir / REPORT_FILE_NAME,
            report.statistics,
            report.records,
            period_label=period,
        )

        cleaned_path: Path | None = None
        should_write_cleaned = (
            self._settings.write_cleaned_data if write_cleaned is None else write_cleaned
        )
        if should_write_cleaned:
            cleaned_path = write_cleaned_data(target_dir, report.records)

        return GeneratedQuoteReport(
            report=report,
            report_path=report_path,
            cleaned_data_path=cleaned_path,
        )


@lru_cache(maxsize=1)
def get_quote_report_service() -> QuoteReportService:
    return QuoteReportService()
