"""
tests/test_quote_report_api.py

FastAPI endpoint tests for the quote report router.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config import QuoteReportSettings
from app.main import create_app
from app.services.quote_report_service import QuoteReportService, get_quote_report_service

CSV_CONTENT = (
    b"InsuranceType,Status,QuoteRequestedOn,ChassisNumber,ErrorText,OverrideIsGccSpec\n"
    b"Third Party,Success,2024-01-05 10:00:00,A1,,1\n"
    b"Third Party,Failed,2024-01-08 11:00:00,A2,Blocked,0\n"
    b"Comprehensive,Skipped,2024-01-11 12:00:00,B1,,\n"
)


@pytest.fixture()
def client(tmp_path: Path) -> Iterator[TestClient]:
    application = create_app()
    service = QuoteReportService(settings=QuoteReportSettings(source_directory=tmp_path))
    application.dependency_overrides[get_quote_report_service] = lambda: service
    with TestClient(application) as test_client:
        yield test_client


def _upload(name: str = "quotes.csv", content: bytes = CSV_CONTENT) -> dict:
    return {"file": (name, content, "text/csv")}


class TestStatisticsEndpoint:
    def test_returns_statistics(self, client: TestClient) -> None:
        response = client.post("/quote-reports/statistics", files=_upload())

        assert response.status_code == 200
        body = response.json()
        assert body["source_name"] == "quotes.csv"
        assert body["loaded_rows"] == 3
        assert body["overall"]["pass_count"] == 1
        assert body["overall"]["fail_count"] == 1
        assert body["overall"]["skip_count"] == 1
        assert body["tpl"]["failure_percentage"] == pytest.approx(50.0)
        assert body["error_counts"]["tpl"] == {"Blocked": 1}
        labels = [row["label"] for row in body["unique_chassis_by_category"]["specification"]]
        assert labels == ["GCC", "None GCC", "Unknown"]

    def test_date_filter(self, client: TestClient) -> None:
        response = client.post(
            "/quote-reports/statistics",
            params={"start_date": "2024-01-06", "end_date": "2024-01-31"},
            files=_upload(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["reported_rows"] == 2
        assert body["start_date"] == "2024-01-06"

    def test_inverted_date_range_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/quote-reports/statistics",
            params={"start_date": "2024-02-01", "end_date": "2024-01-01"},
            files=_upload(),
        )
        assert response.status_code == 400

    def test_unsupported_extension_rejected(self, client: TestClient) -> None:
        response = client.post("/quote-reports/statistics", files=_upload(name="quotes.txt"))
        assert response.status_code == 400

    def test_unreadable_spreadsheet_rejected(self, client: TestClient) -> None:
        response = client.post(
            "/quote-reports/statistics",
            files=_upload(name="quotes.xlsx", content=b"not a workbook"),
        )
        assert response.status_code == 400


class TestHtmlEndpoint:
    def test_returns_dashboard(self, client: TestClient) -> None:
        response = client.post("/quote-reports/html", files=_upload())

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Overview of Quote requests Analysis from 2024-01-05 to 2024-01-11" in response.text


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestConfiguredDateRange:
    def test_inverted_configured_range_rejected(self, tmp_path: Path) -> None:
        application = create_app()
        settings = QuoteReportSettings(
            source_directory=tmp_path,
            start_date=date(2024, 2, 1),
            end_date=date(2024, 1, 1),
        )
        service = QuoteReportService(settings=settings)
        application.dependency_overrides[get_quote_report_service] = lambda: service

        with TestClient(application) as test_client:
            statistics = test_client.post("/quote-reports/statistics", files=_upload())
            html = test_client.post("/quote-reports/html", files=_upload())

        assert statistics.status_code == 400
        assert "End date must not be before start date" in statistics.json()["detail"]
        assert html.status_code == 400


def test_money_values_keep_two_decimals(client: TestClient) -> None:
    content = (
        b"InsuranceType,Status,ChassisNumber,EstimatedValue\n"
        b"Comprehensive,Failed,B1,1234.5\n"
        b"Comprehensive,Failed,B2,0.105\n"
    )

    response = client.post("/quote-reports/statistics", files=_upload(content=content))

    assert response.status_code == 200
    body = response.json()
    assert body["comprehensive"]["blocked_estimated_value"] == "1234.61"
    assert body["overall"]["blocked_estimated_value"] == "1234.61"
