"""
tests/test_html_report_service.py

Pytest tests for the HTML dashboard renderer.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from app.mappers.quote_record_mapper import QuoteRecordMapper
from app.services.html_report_service import (
    HtmlReportRenderer,
    daily_request_trend,
    format_percentage,
    requested_date_range,
)
from app.services.quote_statistics_service import QuoteStatisticsService

_MAPPER = QuoteRecordMapper()


@pytest.fixture()
def records() -> list:
    return _MAPPER.map_rows(
        [
            {
                "InsuranceType": "Third Party",
                "Status": "Success",
                "Quote Requested On": "2024-01-11 09:00:00",
                "ChassisNumber": "A1",
                "ShoryMakeEn": "Toyota",
                "ShoryModelEn": "Yaris",
            },
            {
                "InsuranceType": "Comprehensive",
                "Status": "Failed",
                "Quote Requested On": "05/01/2024",
                "ErrorText": "<script>alert(1)</script>",
                "EstimatedValue": "1234.5",
                "ChassisNumber": "B2",
            },
            {"InsuranceType": "Third Party", "Status": "Skipped"},
        ]
    )


@pytest.fixture()
def html(records: list) -> str:
    statistics = QuoteStatisticsService(reference_year=2024).calculate(records)
    return HtmlReportRenderer().render(statistics, records)


class TestRequestDates:
    def test_range_uses_normalized_header_lookup(self, records: list) -> None:
        assert requested_date_range(records) == (date(2024, 1, 5), date(2024, 1, 11))

    def test_no_dates(self) -> None:
        assert requested_date_range(_MAPPER.map_rows([{"Status": "Success"}])) is None

    def test_daily_trend(self, records: list) -> None:
        assert daily_request_trend(records) == [
            (date(2024, 1, 5), 1, 0, 1),
            (date(2024, 1, 11), 1, 1, 0),
        ]


class TestRender:
    def test_header_range(self, html: str) -> None:
        assert "Overview of Quote requests Analysis from 2024-01-05 to 2024-01-11" in html

    def test_document_structure(self, html: str) -> None:
        assert html.startswith("<!DOCTYPE html>")
        assert "<title>Quote Generation Report</title>" in html
        assert "Quote Generation Overview" in html
        assert "Third Party Liability (TPL) Report" in html
        assert "Comprehensive (Comp) Report" in html

    def test_kpis(self, html: str) -> None:
        assert "Total Quotes" in html
        assert "Total Estimated Value Lost" in html
        assert "1,234.50" in html
        assert "50.0%" in html

    def test_values_are_escaped(self, html: str) -> None:
        assert "<script>" not in html
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html

    def test_period_label(self, records: list) -> None:
        statistics = QuoteStatisticsService(reference_year=2024).calculate(records)
        rendered = HtmlReportRenderer().render(statistics, records, period_label="2024-01-01 to 2024-01-31")
        assert "Selected period: 2024-01-01 to 2024-01-31" in rendered

    def test_write_creates_file(self, records: list, tmp_path: Path) -> None:
        statistics = QuoteStatisticsService(reference_year=2024).calculate(records)

        path = HtmlReportRenderer().write(tmp_path / "nested" / "report.html", statistics, records)

        assert path.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


@pytest.mark.parametrize("value, expected", [(0.0, "0.0%"), (12.345, "12.3%"), (0.05, "0.1%"), (100.0, "100.0%")])
def test_format_percentage(value: float, expected: str) -> None:
    assert format_percentage(value) == expected
