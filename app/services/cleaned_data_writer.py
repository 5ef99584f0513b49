"""
app/services/cleaned_data_writer.py

CSV export of the normalized raw values behind a report.

Known quote columns come first in a fixed order, followed by any other
column in first-seen order. Headers that differ only by case, spaces or
underscores are merged. Date columns are written in normalized form.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Final, Sequence

from app.domain.quote_record import QuoteRecord
from app.normalizers.date_normalizer import is_date_column, normalize_date

logger = logging.getLogger(__name__)

CLEANED_FILE_NAME: Final[str] = "quote_generation_cleaned.csv"

DEFAULT_COLUMN_ORDER: tuple[str, ...] = (
    "QuoteRequestedOn",
    "Status",
    "ReferenceNumber",
    "InsurancePurpose",
    "ICName",
    "ShoryMakeEn",
    "ShoryModelEn",
    "OverrideIsGccSpec",
    "Age",
    "LicenseIssueDate",
    "BodyCategory",
    "ChassisNumber",
    "InsuranceType",
    "ManufactureYear",
    "RegistrationDate",
    "QuotationNo",
    "EstimatedValue",
    "InsuranceExpiryDate",
    "ErrorText",
)


def _column_key(header: str) -> str:
    return "".join(ch.lower() for ch in header if not ch.isspace() and ch != "_")


def determine_headers(records: Sequence[QuoteRecord]) -> list[str]:
    headers: dict[str, str] = {}
    for header in DEFAULT_COLUMN_ORDER:
        headers.setdefault(_column_key(header), header)
    for record in records:
        for header in record.raw_values:
            if header:
                headers.setdefault(_column_key(header), header)
    return list(headers.values())


def cleaned_row(record: QuoteRecord, headers: Sequence[str]) -> list[str]:
    by_key: dict[str, str] = {}
    for key, value in record.raw_values.items():
        if key:
            by_key.setdefault(_column_key(key), value)

    row: list[str] = []
    for header in headers:
        value = by_key.get(_column_key(header), "")
        row.append(normalize_date(value) if is_date_column(header) else value)
    return row


def write_cleaned_data(output_directory: str | Path, records: Sequence[QuoteRecord]) -> Path:
    """
    Write ``quote_generation_cleaned.csv`` into *output_directory*.

    The directory is created when missing. Returns the written path.
    """

    directory = Path(output_directory)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / CLEANED_FILE_NAME
    headers = determine_headers(records)

    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(headers)
        for record in records:
            writer.writerow(cleaned_row(record, headers))

    logger.info("Wrote cleaned quote data path=%s rows=%s", target, len(records))
    return target
