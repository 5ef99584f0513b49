"""
app/domain/quote_record.py

Typed, immutable quote-attempt record and its closed classification types.

A ``QuoteRecord`` is built once from a raw export row (see
``app.mappers.quote_record_mapper``) and never mutated afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Final

from app.normalizers.identifier_normalizer import clean_categorical, is_null_literal

UNKNOWN_LABEL: Final[str] = "Unknown"

CHINESE_LABEL: Final[str] = "Chinese Quotes"
NON_CHINESE_LABEL: Final[str] = "Non-Chinese Quotes"
ELECTRIC_LABEL: Final[str] = "Electric Vehicles"
NON_ELECTRIC_LABEL: Final[str] = "Non-Electric Vehicles"
ELECTRIC_FUEL_TYPE: Final[str] = "ELECTRIC POWER"

_TRUTHY_FLAGS: Final[frozenset[str]] = frozenset({"1", "true", "yes"})


# ---------------------------------------------------------------------------
# Closed classification types
# ---------------------------------------------------------------------------


class QuoteOutcome(str, Enum):
    """Outcome of one quote attempt; the value is the canonical status label."""

    SUCCESS = "Success"
    FAILURE = "Failed"
    SKIPPED = "Skipped"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_status_value(cls, status_value: str | None) -> QuoteOutcome | None:
        """
        Classify free-form status text.

        Matching is case-insensitive against a fixed label set per outcome,
        with a few prefix rules (``"Successfully quoted"`` is a success).
        Returns None when the text is blank, ``"null"`` or unrecognized.
        """

        if status_value is None:
            return None
        normalized = str(status_value).strip().lower()
        if not normalized or normalized == "null":
            return None
        for outcome in (cls.SUCCESS, cls.FAILURE, cls.SKIPPED):
            labels, prefixes = _STATUS_VOCABULARY[outcome]
            if normalized in labels or normalized.startswith(prefixes):
                return outcome
        return None


_STATUS_VOCABULARY: Final[dict[QuoteOutcome, tuple[frozenset[str], tuple[str, ...]]]] = {
    QuoteOutcome.SUCCESS: (
        frozenset(
            {"success", "successful", "pass", "passed", "approved", "complete", "completed", "done"}
        ),
        ("success", "pass"),
    ),
    QuoteOutcome.FAILURE: (
        frozenset({"fail", "failed", "failure", "error", "declined", "rejected", "denied"}),
        ("fail", "error", "declin", "reject"),
    ),
    QuoteOutcome.SKIPPED: (
        frozenset(
            {
                "skip",
                "skipped",
                "pending",
                "not processed",
                "incomplete",
                "cancelled",
                "canceled",
                "void",
                "abandoned",
            }
        ),
        ("skip", "pending", "cancel", "void"),
    ),
}


class GroupType(Enum):
    """Insurance-type groups reported side by side."""

    TPL = ("Third Party", "Third Party Liability (TPL)", "TPL")
    COMPREHENSIVE = ("Comprehensive", "Comprehensive (Comp)", "Comp")

    def __init__(self, canonical_value: str, display_name: str, short_label: str) -> None:
        self.canonical_value = canonical_value
        self.display_name = display_name
        self.short_label = short_label

    def matches(self, insurance_type: str | None) -> bool:
        if insurance_type is None:
            return False
        return self.canonical_value.lower() == insurance_type.strip().lower()

    @classmethod
    def from_insurance_type(cls, insurance_type: str | None) -> GroupType | None:
        for group in cls:
            if group.matches(insurance_type):
                return group
        return None


class GccSpecification(str, Enum):
    """Tri-state GCC vehicle specification flag."""

    GCC = "GCC"
    NON_GCC = "None GCC"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def classify(cls, value: str | None) -> GccSpecification:
        """
        Classify an ``OverrideIsGccSpec`` value.

        ``"1"`` and GCC spellings map to GCC, ``"0"`` and non-GCC spellings
        map to None GCC, everything else (blank included) is Unknown.
        """

        if value is None:
            return cls.UNKNOWN
        condensed = "".join(
            ch for ch in str(value).strip().lower() if ch not in {" ", "-", "_"}
        )
        if condensed in _GCC_SPELLINGS:
            return cls.GCC
        if condensed in _NON_GCC_SPELLINGS:
            return cls.NON_GCC
        return cls.UNKNOWN


_GCC_SPELLINGS: Final[frozenset[str]] = frozenset({"1", "gcc", "gccspec", "gccspecification"})
_NON_GCC_SPELLINGS: Final[frozenset[str]] = frozenset(
    {"0", "nongcc", "nonegcc", "nongccspec", "nonegccspec"}
)


# ---------------------------------------------------------------------------
# Raw values
# ---------------------------------------------------------------------------


class RawValues(Mapping[str, str]):
    """
    Read-only, insertion-ordered column mapping with case-insensitive lookup.

    When two headers differ only by case, the first one wins for lookups.
    """

    __slots__ = ("_items", "_folded")

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(values or {})
        self._folded: dict[str, str] = {}
        for key, value in self._items.items():
            self._folded.setdefault(key.lower(), value)

    def __getitem__(self, key: str) -> str:
        if key in self._items:
            return self._items[key]
        return self._folded[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._folded

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"RawValues({self._items!r})"

    def get_ignore_case(self, key: str) -> str:
        """Value for *key* regardless of case; empty string when absent."""

        return self._folded.get(key.lower(), "")

    def to_dict(self) -> dict[str, str]:
        return dict(self._items)


# ---------------------------------------------------------------------------
# Quote record
# ---------------------------------------------------------------------------


def _label_or_unknown(value: str | None) -> str:
    return value if value else UNKNOWN_LABEL


@dataclass(frozen=True, eq=False)
class QuoteRecord:
    """
    One normalized insurance quote attempt.

    Identifiers (chassis, EID) are stored canonicalized. Categorical fields
    are None when the source cell was blank or ``"null"``; the matching
    ``*_label`` properties fall back to ``"Unknown"``.
    """

    raw_values: RawValues = field(repr=False)
    outcome: QuoteOutcome
    insurance_type: str = ""
    insurance_purpose: str | None = None
    insurance_company_name: str | None = None
    error_text: str = ""
    quote_number: str | None = None
    policy_number: str | None = None
    manufacture_year: int | None = None
    estimated_value: Decimal = Decimal("0")
    chassis_number: str | None = None
    policy_premium: Decimal | None = None
    eid: str | None = None
    body_category: str | None = None
    override_specification: str | None = None
    model: str | None = None
    make: str | None = None
    driver_age: int | None = None
    quote_requested_on: datetime | None = None

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> QuoteRecord:
        """Build a record from one raw export row."""

        from app.mappers.quote_record_mapper import quote_record_from_values

        return quote_record_from_values(values)

    # -- outcome -------------------------------------------------------------

    @property
    def status(self) -> str:
        return self.outcome.label

    @property
    def is_successful(self) -> bool:
        return self.outcome is QuoteOutcome.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.outcome is QuoteOutcome.FAILURE

    @property
    def is_skipped(self) -> bool:
        return self.outcome is QuoteOutcome.SKIPPED

    @property
    def is_processed(self) -> bool:
        """Success or failure; skipped attempts are not processed."""

        return self.outcome is not QuoteOutcome.SKIPPED

    @property
    def has_error(self) -> bool:
        return not is_null_literal(self.error_text)

    @property
    def has_quote_number(self) -> bool:
        return not is_null_literal(self.quote_number)

    @property
    def has_policy_number(self) -> bool:
        return not is_null_literal(self.policy_number)

    @property
    def failure_reason(self) -> str:
        return self.failure_error_text or UNKNOWN_LABEL

    @property
    def failure_error_text(self) -> str | None:
        """Trimmed error text, or None when it is blank / ``"null"``."""

        return clean_categorical(self.error_text)

    # -- grouping --------------------------------------------------------------

    def belongs_to(self, group: GroupType) -> bool:
        return group.matches(self.insurance_type)

    @property
    def group(self) -> GroupType | None:
        return GroupType.from_insurance_type(self.insurance_type)

    # -- labels ----------------------------------------------------------------

    @property
    def insurance_purpose_label(self) -> str:
        return _label_or_unknown(self.insurance_purpose)

    @property
    def insurance_company_label(self) -> str:
        return _label_or_unknown(self.insurance_company_name)

    @property
    def body_category_label(self) -> str:
        return _label_or_unknown(self.body_category)

    @property
    def override_specification_label(self) -> str:
        return _label_or_unknown(self.override_specification)

    @property
    def make_label(self) -> str:
        return _label_or_unknown(self.make)

    @property
    def model_label(self) -> str:
        return _label_or_unknown(self.model)

    @property
    def manufacture_year_label(self) -> str:
        if self.manufacture_year is None:
            return UNKNOWN_LABEL
        return str(self.manufacture_year)

    @property
    def gcc_specification(self) -> GccSpecification:
        return GccSpecification.classify(self.override_specification)

    @property
    def gcc_specification_label(self) -> str:
        return self.gcc_specification.label

    # -- derived classifiers ---------------------------------------------------

    @property
    def is_chinese_quote(self) -> bool:
        value = self.raw_values.get_ignore_case("IsChinese").strip().lower()
        return value in _TRUTHY_FLAGS

    @property
    def is_electric_vehicle(self) -> bool:
        value = self.raw_values.get_ignore_case("FuelType").strip()
        return value.upper() == ELECTRIC_FUEL_TYPE

    @property
    def chinese_classification_label(self) -> str:
        return CHINESE_LABEL if self.is_chinese_quote else NON_CHINESE_LABEL

    @property
    def electric_classification_label(self) -> str:
        return ELECTRIC_LABEL if self.is_electric_vehicle else NON_ELECTRIC_LABEL

    @property
    def chinese_electric_segment_label(self) -> str:
        origin = "Chinese" if self.is_chinese_quote else "Non-Chinese"
        drive = "Electric" if self.is_electric_vehicle else "Non-Electric"
        return f"{origin} · {drive}"
