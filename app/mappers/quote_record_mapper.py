"""
app/mappers/quote_record_mapper.py

Raw export row -> ``QuoteRecord`` mapping.

Rows come from heterogeneous exports, so identifier columns are resolved
through ordered alias lists and every numeric / date parse degrades to an
absent or default value instead of raising.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Final, Mapping, Sequence

from app.domain.quote_record import GccSpecification, QuoteOutcome, QuoteRecord, RawValues
from app.normalizers.identifier_normalizer import (
    canonicalize_chassis,
    canonicalize_eid,
    clean_categorical,
    is_likely_eid_header,
    is_null_literal,
    normalize_header_key,
)

logger = logging.getLogger(__name__)

STATUS_COLUMN: Final[str] = "Status"
ERROR_TEXT_COLUMN: Final[str] = "ErrorText"
QUOTATION_NO_COLUMN: Final[str] = "QuotationNo"
OVERRIDE_GCC_COLUMN: Final[str] = "OverrideIsGccSpec"

DEFAULT_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "quote_number": (
        "QuotationNo",
        "QuotationNumber",
        "QuoteNumber",
        "QuoteNo",
        "Quote #",
        "Quotation #",
    ),
    "policy_number": (
        "PolicyNumber",
        "PolicyNo",
        "Policy #",
        "Policy No",
        "PolicyNo.",
        "Policy",
        "Policy Reference",
        "PolicyRef",
    ),
    "policy_premium": (
        "PolicyPremium",
        "Policy Premium",
        "TotalPremium",
        "Total Premium",
        "GrossPremium",
        "Gross Premium",
    ),
    "chassis_number": (
        "ChassisNumber",
        "ChassisNo",
        "Chassis No",
        "VehicleIdentificationNumber",
        "VIN",
    ),
    "eid": (
        "EID",
        "EIDNumber",
        "EID No",
        "EID#",
        "EmiratesID",
        "Emirates ID",
        "EmiratesIDNumber",
        "Emirates ID Number",
        "Emirates ID No",
        "EmiratesIDNo",
        "NationalID",
        "National ID",
        "NationalIDNumber",
        "CustomerEID",
        "Customer EID",
    ),
}

QUOTE_REQUESTED_ON_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_NON_MONETARY_CHARS = re.compile(r"[^0-9.\-]")


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------


def first_matching_value(
    values: RawValues,
    aliases: Sequence[str],
    normalizer: Callable[[str], Any] | None = None,
) -> Any | None:
    """
    Return the first alias value that is present and usable.

    Parameters
    ----------
    values:
        Case-insensitive raw row.
    aliases:
        Accepted header spellings, in priority order.
    normalizer:
        Optional cleaner applied to each candidate; a None result means
        "not usable" and the next alias is tried. Without a normalizer,
        null literals are skipped and the trimmed text is returned.
    """

    for alias in aliases:
        raw = values.get_ignore_case(alias)
        if normalizer is None:
            if not is_null_literal(raw):
                return raw.strip()
            continue
        cleaned = normalizer(raw)
        if cleaned is not None:
            return cleaned
    return None


def parse_integer(value: str | None) -> int | None:
    if value is None:
        return None
    trimmed = value.strip()
    if not _INTEGER_PATTERN.match(trimmed):
        return None
    return int(trimmed)


def parse_decimal(value: str | None) -> Decimal | None:
    """Finite Decimal from *value*, or None."""

    if value is None or not value.strip():
        return None
    try:
        parsed = Decimal(value.strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def parse_estimated_value(value: str | None) -> Decimal:
    """Decimal with thousands separators removed; zero when unparsable."""

    if value is None:
        return Decimal("0")
    parsed = parse_decimal(value.replace(",", ""))
    return parsed if parsed is not None else Decimal("0")


def parse_monetary_value(value: str | None) -> Decimal | None:
    """Keep only digits, ``.`` and ``-`` before parsing; None when unusable."""

    if value is None:
        return None
    return parse_decimal(_NON_MONETARY_CHARS.sub("", value))


def parse_quote_requested_on(value: str | None) -> datetime | None:
    if value is None or not value.strip():
        return None
    trimmed = value.strip()
    for fmt in QUOTE_REQUESTED_ON_FORMATS:
        try:
            return datetime.strptime(trimmed, fmt)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(trimmed)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        return None
    return parsed


# ---------------------------------------------------------------------------
# Mapper
# ---------------------------------------------------------------------------


class QuoteRecordMapper:
    """
    Builds immutable quote records from raw, loosely-typed export rows.
    """

    def __init__(self, *, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        merged = dict(DEFAULT_FIELD_ALIASES)
        for name, spellings in (aliases or {}).items():
            merged[name] = tuple(spellings)
        self._aliases: dict[str, tuple[str, ...]] = merged

    def map_row(self, row: Mapping[str, Any]) -> QuoteRecord:
        """
        Normalize one raw row.

        Edge cases
        ----------
        * Blank / ``"null"`` status text falls back to error text, then to
          quotation number, then to Skipped.
        * The resolved status label and GCC label are written back into the
          stored raw values.
        """

        normalized = self._trim_row(row)
        status_key = self._find_key(normalized, STATUS_COLUMN) or STATUS_COLUMN
        normalized.setdefault(status_key, "")

        lookup = RawValues(normalized)
        error_text = lookup.get_ignore_case(ERROR_TEXT_COLUMN)
        quotation_number = lookup.get_ignore_case(QUOTATION_NO_COLUMN)
        outcome = determine_outcome(
            lookup.get_ignore_case(STATUS_COLUMN), error_text, quotation_number
        )
        normalized[status_key] = outcome.label
        self._rewrite_override_spec(normalized)

        values = RawValues(normalized)
        return QuoteRecord(
            raw_values=values,
            outcome=outcome,
            insurance_type=values.get_ignore_case("InsuranceType"),
            insurance_purpose=clean_categorical(values.get_ignore_case("InsurancePurpose")),
            insurance_company_name=clean_categorical(values.get_ignore_case("ICName")),
            error_text=error_text,
            quote_number=first_matching_value(values, self._aliases["quote_number"]),
            policy_number=first_matching_value(values, self._aliases["policy_number"]),
            manufacture_year=parse_integer(values.get_ignore_case("ManufactureYear")),
            estimated_value=parse_estimated_value(values.get_ignore_case("EstimatedValue")),
            chassis_number=first_matching_value(
                values, self._aliases["chassis_number"], canonicalize_chassis
            ),
            policy_premium=first_matching_value(
                values, self._aliases["policy_premium"], parse_monetary_value
            ),
            eid=self._extract_eid(values),
            body_category=clean_categorical(values.get_ignore_case("BodyCategory")),
            override_specification=clean_categorical(values.get_ignore_case(OVERRIDE_GCC_COLUMN)),
            model=clean_categorical(values.get_ignore_case("ShoryModelEn")),
            make=clean_categorical(values.get_ignore_case("ShoryMakeEn")),
            driver_age=parse_integer(values.get_ignore_case("Age")),
            quote_requested_on=parse_quote_requested_on(values.get_ignore_case("QuoteRequestedOn")),
        )

    def map_rows(self, rows: Sequence[Mapping[str, Any]]) -> list[QuoteRecord]:
        records = [self.map_row(row) for row in rows]
        logger.debug("Mapped %s raw rows into quote records", len(records))
        return records

    def _extract_eid(self, values: RawValues) -> str | None:
        eid = first_matching_value(values, self._aliases["eid"], canonicalize_eid)
        if eid is not None:
            return eid
        for header, value in values.items():
            if not header.strip() or not is_likely_eid_header(normalize_header_key(header)):
                continue
            eid = canonicalize_eid(value)
            if eid is not None:
                return eid
        return None

    @staticmethod
    def _trim_row(row: Mapping[str, Any]) -> dict[str, str]:
        trimmed: dict[str, str] = {}
        for key, value in row.items():
            if key is None:
                continue
            trimmed[str(key).strip()] = "" if value is None else str(value).strip()
        return trimmed

    @staticmethod
    def _find_key(values: Mapping[str, str], column: str) -> str | None:
        target = column.lower()
        for key in values:
            if key.lower() == target:
                return key
        return None

    def _rewrite_override_spec(self, values: dict[str, str]) -> None:
        key = self._find_key(values, OVERRIDE_GCC_COLUMN)
        if key is None:
            return
        replacement = _GCC_FLAG_LABELS.get(values[key].strip())
        if replacement is not None:
            values[key] = replacement


_GCC_FLAG_LABELS: Final[dict[str, str]] = {
    "1": GccSpecification.GCC.label,
    "0": GccSpecification.NON_GCC.label,
}


def determine_outcome(
    status_value: str | None,
    error_text: str | None,
    quotation_number: str | None,
) -> QuoteOutcome:
    """
    Resolve the outcome: recognized status text, then error text present
    (Failure), then quotation number present (Success), else Skipped.
    """

    parsed = QuoteOutcome.from_status_value(status_value)
    if parsed is not None:
        return parsed
    if not is_null_literal(error_text):
        return QuoteOutcome.FAILURE
    if not is_null_literal(quotation_number):
        return QuoteOutcome.SUCCESS
    return QuoteOutcome.SKIPPED


_DEFAULT_MAPPER = QuoteRecordMapper()


def quote_record_from_values(values: Mapping[str, Any]) -> QuoteRecord:
    """Map one raw row with the default alias configuration."""

    return _DEFAULT_MAPPER.map_row(values)
