"""
app/services/quote_loader_service.py

Reads quote exports (CSV or spreadsheet) into raw rows and quote records.

CSV handling
------------
* Encoding: a BOM-detected codec first, then UTF-8, UTF-16, UTF-16-LE,
  UTF-16-BE and Latin-1; the first codec that decodes cleanly wins.
* Separator: a leading ``sep=X`` directive line, otherwise whichever of
  ``, ; TAB |`` occurs most often (outside quotes) in the first non-empty
  line; comma when none occurs.
* Blank rows and the directive row are skipped.

Spreadsheet handling
--------------------
Every sheet is read as text. The header row is the row, across all sheets,
with the most recognized quote columns; rows below it become raw rows.

Any column whose header mentions "date" goes through ``normalize_date``.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Final, Sequence

import pandas as pd

from app.domain.quote_record import QuoteRecord
from app.mappers.quote_record_mapper import QuoteRecordMapper
from app.normalizers.date_normalizer import is_date_column, normalize_date
from app.normalizers.identifier_normalizer import normalize_header_key

logger = logging.getLogger(__name__)

CSV_EXTENSIONS: Final[frozenset[str]] = frozenset({".csv"})
EXCEL_EXTENSIONS: Final[frozenset[str]] = frozenset({".xlsx", ".xls"})
SUPPORTED_EXTENSIONS: Final[frozenset[str]] = CSV_EXTENSIONS | EXCEL_EXTENSIONS

DEFAULT_CSV_SEPARATOR: Final[str] = ","
CSV_SEPARATOR_CANDIDATES: tuple[str, ...] = (",", ";", "\t", "|")
CSV_ENCODING_CANDIDATES: tuple[str, ...] = ("utf-8", "utf-16", "utf-16-le", "utf-16-be", "latin-1")
SEPARATOR_DIRECTIVE: Final[str] = "sep="
BOM: Final[str] = "\ufeff"

RECOGNIZED_COLUMNS: tuple[str, ...] = (
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
    "ChassisNo",
    "Chassis No",
    "VehicleIdentificationNumber",
    "VIN",
    "InsuranceType",
    "ManufactureYear",
    "RegistrationDate",
    "QuotationNo",
    "QuotationNumber",
    "QuoteNumber",
    "QuoteNo",
    "Quote #",
    "Quotation #",
    "EstimatedValue",
    "InsuranceExpiryDate",
    "ErrorText",
)

_RECOGNIZED_KEYS: Final[frozenset[str]] = frozenset(
    normalize_header_key(column) for column in RECOGNIZED_COLUMNS
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class QuoteFileNotFoundError(FileNotFoundError):
    """Raised when the requested quote export does not exist."""


class UnsupportedQuoteFileError(ValueError):
    """Raised for file extensions other than .csv / .xlsx / .xls."""


class QuoteFileReadError(ValueError):
    """Raised when a supported file cannot be decoded or parsed."""


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadedQuotes:
    """Raw rows and their normalized records, index-aligned."""

    source_name: str
    headers: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    records: tuple[QuoteRecord, ...]


@dataclass(frozen=True)
class _HeaderCandidate:
    sheet_name: str
    row_index: int
    headers: dict[int, str]
    recognized_count: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def strip_bom(value: str) -> str:
    return value[1:] if value.startswith(BOM) else value


def is_supported_file(name: str | Path) -> bool:
    return Path(name).suffix.lower() in SUPPORTED_EXTENSIONS


def count_recognized_columns(headers: Sequence[str]) -> int:
    return sum(1 for header in headers if normalize_header_key(header) in _RECOGNIZED_KEYS)


def detect_bom_encoding(content: bytes) -> str | None:
    if content.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    if content.startswith((b"\xfe\xff", b"\xff\xfe")):
        return "utf-16"
    return None


def decode_csv_bytes(content: bytes) -> str:
    """
    Decode *content* with the first candidate codec that fits.

    Text containing NUL characters is treated as a wrong guess, so UTF-16
    data without a BOM is not mistaken for UTF-8.
    """

    candidates: list[str] = []
    bom_encoding = detect_bom_encoding(content)
    if bom_encoding is not None:
        candidates.append(bom_encoding)
    candidates.extend(codec for codec in CSV_ENCODING_CANDIDATES if codec not in candidates)

    for codec in candidates:
        try:
            text = content.decode(codec)
        except UnicodeDecodeError:
            logger.debug("CSV content is not valid %s", codec)
            continue
        if "\x00" in text:
            continue
        return strip_bom(text)
    raise QuoteFileReadError("Unable to decode CSV content with any supported encoding.")


def count_unquoted(line: str, separator: str) -> int:
    count = 0
    in_quotes = False
    index = 0
    while index < len(line):
        char = line[index]
        if char == '"':
            if in_quotes and index + 1 < len(line) and line[index + 1] == '"':
                index += 2
                continue
            in_quotes = not in_quotes
        elif not in_quotes and char == separator:
            count += 1
        index += 1
    return count


def detect_separator(text: str) -> str:
    """Separator from a ``sep=X`` directive or the first non-empty line."""

    for line in text.splitlines():
        trimmed = strip_bom(line).strip()
        if not trimmed:
            continue
        if trimmed.lower().startswith(SEPARATOR_DIRECTIVE):
            if len(trimmed) > len(SEPARATOR_DIRECTIVE):
                return trimmed[len(SEPARATOR_DIRECTIVE)]
            continue
        best_separator = DEFAULT_CSV_SEPARATOR
        best_score = 0
        for separator in CSV_SEPARATOR_CANDIDATES:
            score = count_unquoted(strip_bom(line), separator)
            if score > best_score:
                best_separator, best_score = separator, score
        return best_separator
    return DEFAULT_CSV_SEPARATOR


def _is_blank_row(values: Sequence[str | None]) -> bool:
    return all(value is None or not str(value).strip() for value in values)


def _is_separator_directive(values: Sequence[str]) -> bool:
    # "sep=;" parsed with ";" yields ["sep=", ""].
    if not values or not strip_bom(values[0]).strip().lower().startswith(SEPARATOR_DIRECTIVE):
        return False
    return _is_blank_row(values[1:])


def build_raw_row(headers: dict[int, str], values: Sequence[str | None]) -> dict[str, str]:
    """Map positional *values* onto *headers*, normalizing date columns."""

    row: dict[str, str] = {}
    for index, header in headers.items():
        raw = values[index] if index < len(values) else None
        value = "" if raw is None else strip_bom(str(raw)).strip()
        if is_date_column(header):
            value = normalize_date(value)
        row[header] = value
    return row


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------


def read_csv_rows(content: bytes) -> tuple[tuple[str, ...], list[dict[str, str]]]:
    text = decode_csv_bytes(content)
    separator = detect_separator(text)
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=separator)

    headers: dict[int, str] | None = None
    rows: list[dict[str, str]] = []
    try:
        for values in reader:
            if _is_blank_row(values):
                continue
            if headers is None:
                if _is_separator_directive(values):
                    continue
                headers = {
                    index: strip_bom(value).strip()
                    for index, value in enumerate(values)
                    if strip_bom(value).strip()
                }
                continue
            rows.append(build_raw_row(headers, values))
    except csv.Error as exc:
        raise QuoteFileReadError(f"Invalid CSV format: {exc}") from exc

    logger.debug("Parsed CSV separator=%r rows=%s", separator, len(rows))
    return tuple((headers or {}).values()), rows


def _cell_text(value: object) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def read_excel_rows(content: bytes) -> tuple[tuple[str, ...], list[dict[str, str]]]:
    try:
        sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, header=None, dtype=str)
    except (ValueError, OSError, ImportError, zipfile.BadZipFile) as exc:
        raise QuoteFileReadError(f"Unable to read spreadsheet: {exc}") from exc

    grids = {
        str(name): [[_cell_text(value) for value in row] for row in frame.itertuples(index=False)]
        for name, frame in sheets.items()
    }

    best: _HeaderCandidate | None = None
    for sheet_name, grid in grids.items():
        for row_index, values in enumerate(grid):
            headers = {index: value for index, value in enumerate(values) if value}
            if not headers:
                continue
            recognized = count_recognized_columns(list(headers.values()))
            if best is None or recognized > best.recognized_count:
                best = _HeaderCandidate(sheet_name, row_index, headers, recognized)

    if best is None:
        logger.warning("Spreadsheet contains no non-empty rows")
        return (), []

    logger.debug(
        "Selected sheet=%r header_row=%s recognized_columns=%s",
        best.sheet_name,
        best.row_index,
        best.recognized_count,
    )
    rows = [
        build_raw_row(best.headers, values)
        for values in grids[best.sheet_name][best.row_index + 1 :]
        if not _is_blank_row(values)
    ]
    return tuple(best.headers.values()), rows


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class QuoteLoaderService:
    """
    Loads quote exports from disk or from uploaded bytes.
    """

    def __init__(self, *, mapper: QuoteRecordMapper | None = None) -> None:
        self._mapper = mapper or QuoteRecordMapper()

    def load_path(self, path: str | Path) -> LoadedQuotes:
        file_path = Path(path)
        if not file_path.is_file():
            raise QuoteFileNotFoundError(f"Quote file not found: {file_path}")
        if not is_supported_file(file_path):
            raise UnsupportedQuoteFileError(f"Unsupported file format: {file_path}")
        try:
            content = file_path.read_bytes()
        except OSError as exc:
            raise QuoteFileReadError(f"Unable to read quote file: {file_path}") from exc
        return self.load_bytes(content, file_path.name)

    def load_bytes(self, content: bytes, filename: str) -> LoadedQuotes:
        """
        Parse *content* according to the extension of *filename*.
        """

        suffix = Path(filename).suffix.lower()
        if suffix in CSV_EXTENSIONS:
            headers, rows = read_csv_rows(content)
        elif suffix in EXCEL_EXTENSIONS:
            headers, rows = read_excel_rows(content)
        else:
            raise UnsupportedQuoteFileError(f"Unsupported file format: {filename}")

        records = tuple(self._mapper.map_rows(rows))
        logger.info("Loaded quote file name=%s rows=%s", filename, len(records))
        return LoadedQuotes(
            source_name=filename,
            headers=headers,
            rows=tuple(rows),
            records=records,
        )


@lru_cache(maxsize=1)
def get_quote_loader_service() -> QuoteLoaderService:
    return QuoteLoaderService()
