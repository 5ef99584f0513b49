"""
app/services/report_date_range.py

Optional ``QuoteRequestedOn`` window applied before aggregation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

from app.domain.quote_record import QuoteRecord


class InvalidReportDateRangeError(ValueError):
    """Raised for malformed dates or an end date before the start date."""


def parse_report_date(value: str | date | None) -> date | None:
    """
    Parse a ``YYYY-MM-DD`` value; blank means "no bound".

    Raises
    ------
    InvalidReportDateRangeError
        When the text is not an ISO calendar date.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    trimmed = value.strip()
    if not trimmed:
        return None
    try:
        return datetime.strptime(trimmed, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidReportDateRangeError(
            f"Invalid report date '{value}'. Expected format YYYY-MM-DD."
        ) from exc


@dataclass(frozen=True)
class ReportDateRange:
    """Inclusive date bounds; either side may be open."""

    start_date: date | None = None
    end_date: date | None = None

    def __post_init__(self) -> None:
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise InvalidReportDateRangeError("End date must not be before start date.")

    @classmethod
    def from_values(
        cls,
        start: str | date | None = None,
        end: str | date | None = None,
    ) -> ReportDateRange:
        return cls(start_date=parse_report_date(start), end_date=parse_report_date(end))

    @property
    def has_selection(self) -> bool:
        return self.start_date is not None or self.end_date is not None

    def contains(self, value: datetime) -> bool:
        day = value.date()
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        return True

    def filter(self, records: Sequence[QuoteRecord]) -> list[QuoteRecord]:
        """
        Keep records requested inside the window.

        Without any bound every record is kept; with a bound, records lacking
        a parsable request timestamp are dropped.
        """

        if not self.has_selection:
            return list(records)
        return [
            record
            for record in records
            if record.quote_requested_on is not None and self.contains(record.quote_requested_on)
        ]

    def describe(self) -> str:
        if not self.has_selection:
            return "All dates"
        start = self.start_date.isoformat() if self.start_date else "…"
        end = self.end_date.isoformat() if self.end_date else "…"
        return f"{start} to {end}"
