"""
tests/test_date_normalizer.py

Pytest unit tests for the tolerant date normalizer.

Coverage
--------
- Zoned ISO timestamps converted to UTC
- Date + time and date-only patterns (day-first preference)
- Spreadsheet serial day numbers
- Time-only, blank and garbage input
- Idempotence on already-normalized values
- Date column detection
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from app.normalizers.date_normalizer import (
    format_timestamp,
    is_date_column,
    normalize_date,
    parse_date_only,
)


# ---------------------------------------------------------------------------
# normalize_date
# ---------------------------------------------------------------------------


class TestNormalizeDate:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2024-01-05T10:30:00Z", "2024-01-05 10:30:00"),
            ("2024-01-05T12:00:00+04:00", "2024-01-05 08:00:00"),
            ("2024-01-05 10:30", "2024-01-05 10:30:00"),
            ("2024-01-05T10:30:15", "2024-01-05 10:30:15"),
            ("05/01/2024 09:15:00", "2024-01-05 09:15:00"),
            ("2024-01-05", "2024-01-05 00:00:00"),
            ("20240105", "2024-01-05 00:00:00"),
            ("2024/01/05", "2024-01-05 00:00:00"),
            ("05.01.2024", "2024-01-05 00:00:00"),
        ],
    )
    def test_supported_formats(self, raw: str, expected: str) -> None:
        assert normalize_date(raw) == expected

    def test_day_first_wins_when_ambiguous(self) -> None:
        assert normalize_date("03/04/2024") == "2024-04-03 00:00:00"

    def test_month_first_used_when_day_first_is_invalid(self) -> None:
        assert normalize_date("12/31/2024") == "2024-12-31 00:00:00"

    def test_spreadsheet_serial(self) -> None:
        assert normalize_date("45000") == "2023-03-15 00:00:00"

    def test_spreadsheet_serial_with_fraction(self) -> None:
        assert normalize_date("45000.5") == "2023-03-15 12:00:00"

    def test_serial_one_is_first_of_1900(self) -> None:
        assert normalize_date("1") == "1900-01-01 00:00:00"

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "   ",
            None,
            "10:30",
            "10:30:45",
            "not a date",
            "0",
            "-5",
            # UTC conversion leaves the supported year range
            "0001-01-01T00:00:00+01:00",
            "9999-12-31T23:30:00-01:00",
        ],
    )
    def test_unusable_values_become_empty(self, raw: str | None) -> None:
        assert normalize_date(raw) == ""

    def test_surrounding_whitespace_is_ignored(self) -> None:
        assert normalize_date("  2024-01-05  ") == "2024-01-05 00:00:00"

    def test_normalized_output_is_stable(self) -> None:
        once = normalize_date("05/01/2024 09:15")
        assert normalize_date(once) == once

    def test_invalid_time_of_day_is_rejected(self) -> None:
        assert normalize_date("2024-01-05 25:00") == ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_format_timestamp_pads_year(self) -> None:
        assert format_timestamp(datetime(987, 3, 4, 5, 6, 7)) == "0987-03-04 05:06:07"

    def test_parse_date_only(self) -> None:
        assert parse_date_only("2024-02-29") == date(2024, 2, 29)
        assert parse_date_only("2023-02-29") is None

    def test_compact_format_requires_eight_digits(self) -> None:
        assert parse_date_only("2024015") is None

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("RegistrationDate", True),
            ("license issue date", True),
            ("DATE", True),
            ("QuoteRequestedOn", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_date_column(self, header: str | None, expected: bool) -> None:
        assert is_date_column(header) is expected
