"""
app/services/quote_statistics_service.py

Deterministic aggregation engine for normalized quote records.

The service is stateless: every accumulator lives inside a single
``calculate`` call, and each aggregate is an independent read-only pass
over the same immutable record list. Ordering rules (tie-breaks, bucket
order, placeholders) are fixed so repeated calls yield identical output.

Request key
-----------
Rows describing the same customer request are collapsed with a composite
key, first available wins::

    EID + chassis  >  chassis only  >  EID only  >  quote number  >  row position

A request counts as successful if any of its rows succeeded and as failed
if any of its rows failed; one request may count as both.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Final

from app.domain.quote_record import UNKNOWN_LABEL, GroupType, QuoteRecord
from app.domain.quote_statistics import (
    NO_DATA_LABEL,
    OTHER_UNKNOWN_LABEL,
    BucketStats,
    CategoryCount,
    EidChassisSummary,
    GroupStats,
    MakeModelChassisSummary,
    ModelChassisSummary,
    OutcomeBreakdown,
    QuoteStatistics,
    SalesConversionStats,
    TrendPoint,
    UniqueChassisSummary,
    UniqueRequestSummary,
    numeric_label_key,
    percentage,
    round_money,
    sort_counts,
)
from app.normalizers.identifier_normalizer import NULL_LITERAL, canonicalize_chassis, canonicalize_eid

logger = logging.getLogger(__name__)

DEFAULT_TOP_REQUESTED_LIMIT: Final[int] = 20
DEFAULT_TOP_REJECTED_MAKE_MODEL_LIMIT: Final[int] = 20
DEFAULT_TOP_REJECTED_MODEL_LIMIT: Final[int] = 10

BEFORE_2000_LABEL: Final[str] = "<2000"
FIRST_LISTED_YEAR: Final[int] = 2000

Classifier = Callable[[QuoteRecord], str]


# ---------------------------------------------------------------------------
# Fixed buckets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RangeBucket:
    """Inclusive integer band with a display label."""

    start: int
    end: int
    label: str

    def contains(self, value: int) -> bool:
        return self.start <= value <= self.end


def _age_band(start: int, end: int) -> RangeBucket:
    return RangeBucket(start, end, f"{start}–{end}")


def _value_band(start: int, end: int) -> RangeBucket:
    return RangeBucket(start, end, f"{start:,}–{end:,}")


AGE_RANGES: tuple[RangeBucket, ...] = (
    _age_band(18, 24),
    _age_band(25, 29),
    _age_band(30, 34),
    _age_band(35, 39),
    _age_band(40, 44),
    _age_band(45, 49),
    _age_band(50, 54),
    _age_band(55, 59),
    _age_band(60, 64),
    _age_band(65, 70),
)

VALUE_RANGES: tuple[RangeBucket, ...] = (
    _value_band(5_000, 49_999),
    _value_band(50_000, 99_999),
    _value_band(100_000, 149_999),
    _value_band(150_000, 199_999),
    _value_band(200_000, 249_999),
    _value_band(250_000, 299_999),
    _value_band(300_000, 349_999),
    _value_band(350_000, 399_999),
    _value_band(400_000, 449_999),
    _value_band(450_000, 500_000),
)


def find_bucket(buckets: Sequence[RangeBucket], value: int | None) -> RangeBucket | None:
    if value is None:
        return None
    for bucket in buckets:
        if bucket.contains(value):
            return bucket
    return None


def build_request_key(record: QuoteRecord, position: int) -> str:
    """
    Composite deduplication key for one record.

    *position* is the record's index in the input sequence and only feeds
    the fallback key, so rows without any identifier are never merged.
    """

    chassis = canonicalize_chassis(record.chassis_number)
    eid = canonicalize_eid(record.eid)
    if eid and chassis:
        return f"EID:{eid}::CH:{chassis}"
    if chassis:
        return f"CHASSIS_ONLY:{chassis}"
    if eid:
        return f"EID_ONLY:{eid}"
    quote_number = (record.quote_number or "").strip().upper()
    if quote_number:
        return f"QUOTE:{quote_number}"
    return f"FALLBACK:{position}"


# ---------------------------------------------------------------------------
# Accumulators (scoped to one calculate call)
# ---------------------------------------------------------------------------


class _OutcomeCounter:
    __slots__ = ("success", "failure")

    def __init__(self) -> None:
        self.success = 0
        self.failure = 0

    def record(self, record: QuoteRecord) -> None:
        if record.is_successful:
            self.success += 1
        elif record.is_failure:
            self.failure += 1

    @property
    def total(self) -> int:
        return self.success + self.failure

    def to_bucket(self, label: str) -> BucketStats:
        return BucketStats(label=label, success_count=self.success, failure_count=self.failure)


class _SalesCounter:
    __slots__ = ("total_requests", "successful_quotes", "sold_policies", "premium")

    def __init__(self) -> None:
        self.total_requests = 0
        self.successful_quotes = 0
        self.sold_policies = 0
        self.premium = Decimal("0")

    def record(self, record: QuoteRecord) -> None:
        if record.is_successful:
            self.total_requests += 1
            self.successful_quotes += 1
        elif record.is_failure:
            self.total_requests += 1

        if record.has_policy_number:
            self.sold_policies += 1
            if record.policy_premium is not None:
                self.premium += record.policy_premium
            # A policy implies a completed quote even without a recognized status.
            if record.is_skipped:
                self.total_requests += 1
                self.successful_quotes += 1

    def to_stats(self, label: str) -> SalesConversionStats:
        return SalesConversionStats(
            label=label,
            total_requests=self.total_requests,
            successful_quotes=self.successful_quotes,
            sold_policies=self.sold_policies,
            total_premium=round_money(self.premium),
        )


class _ChassisOutcomes:
    """Per-chassis success / failure flags for one (make, model) pair."""

    __slots__ = ("flags",)

    def __init__(self) -> None:
        self.flags: dict[str, list[bool]] = {}

    def record(self, chassis: str, record: QuoteRecord) -> None:
        flags = self.flags.setdefault(chassis, [False, False])
        if record.is_successful:
            flags[0] = True
        if record.is_failure:
            flags[1] = True

    def to_summary(self, make: str, model: str) -> MakeModelChassisSummary:
        return MakeModelChassisSummary(
            make=make,
            model=model,
            unique_chassis_count=len(self.flags),
            successful_unique_chassis_count=sum(1 for success, _ in self.flags.values() if success),
            failed_unique_chassis_count=sum(1 for _, failure in self.flags.values() if failure),
        )


class _TrendRequest:
    __slots__ = ("label", "failed")

    def __init__(self) -> None:
        self.label: str | None = None
        self.failed = False

    def record(self, candidate: str, record: QuoteRecord) -> None:
        if self.label is None or (self.label == UNKNOWN_LABEL and candidate != UNKNOWN_LABEL):
            self.label = candidate
        if record.is_failure:
            self.failed = True


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StatisticsLimits:
    """Top-N list sizes."""

    top_requested_make_models: int = DEFAULT_TOP_REQUESTED_LIMIT
    top_rejected_make_models: int = DEFAULT_TOP_REJECTED_MAKE_MODEL_LIMIT
    top_rejected_models: int = DEFAULT_TOP_REJECTED_MODEL_LIMIT


class QuoteStatisticsService:
    """
    Stateless aggregation engine: quote records in, ``QuoteStatistics`` out.

    Parameters
    ----------
    limits:
        Top-N sizes for make/model and model rankings.
    reference_year:
        Year used to close the fixed manufacture-year buckets
        (``2000 .. reference_year + 1``). Defaults to the current year at
        calculation time.
    """

    def __init__(
        self,
        *,
        limits: StatisticsLimits | None = None,
        reference_year: int | None = None,
    ) -> None:
        self._limits = limits or StatisticsLimits()
        self._reference_year = reference_year

    def calculate(self, records: Sequence[QuoteRecord] | None) -> QuoteStatistics:
        """
        Aggregate *records* into a full ``QuoteStatistics`` value.

        Raises
        ------
        ValueError
            When *records* is None.
        """

        if records is None:
            raise ValueError("records must not be None")

        all_records = tuple(records)
        tpl = tuple(record for record in all_records if record.belongs_to(GroupType.TPL))
        comp = tuple(record for record in all_records if record.belongs_to(GroupType.COMPREHENSIVE))
        reference_year = self._reference_year or date.today().year
        limits = self._limits

        logger.info(
            "Calculating quote statistics records=%s tpl=%s comprehensive=%s",
            len(all_records),
            len(tpl),
            len(comp),
        )

        return QuoteStatistics(
            tpl_stats=build_group_stats(GroupType.TPL, tpl),
            comprehensive_stats=build_group_stats(GroupType.COMPREHENSIVE, comp),
            overall_unique_requests=unique_request_summary(all_records),
            tpl_unique_requests=unique_request_summary(tpl),
            comprehensive_unique_requests=unique_request_summary(comp),
            unique_chassis=unique_chassis_summary(all_records),
            tpl_unique_chassis=unique_chassis_summary(tpl),
            comprehensive_unique_chassis=unique_chassis_summary(comp),
            tpl_eid_chassis=eid_chassis_summary(tpl),
            tpl_body_category_outcomes=outcome_breakdown(tpl, _body_category),
            tpl_specification_outcomes=outcome_breakdown(tpl, _specification),
            tpl_chinese_outcomes=outcome_breakdown(tpl, _chinese),
            tpl_electric_outcomes=outcome_breakdown(tpl, _electric),
            tpl_chinese_electric_outcomes=outcome_breakdown(tpl, _chinese_electric),
            comprehensive_body_category_outcomes=outcome_breakdown(comp, _body_category),
            comprehensive_specification_outcomes=outcome_breakdown(comp, _specification),
            tpl_age_range_stats=age_range_stats(tpl),
            comprehensive_age_range_stats=age_range_stats(comp),
            tpl_manufacture_year_stats=manufacture_year_stats(tpl, reference_year),
            comprehensive_manufacture_year_stats=manufacture_year_stats(comp, reference_year),
            comprehensive_estimated_value_stats=estimated_value_stats(comp),
            tpl_sales_by_body_type=sales_by_body_type(tpl),
            tpl_sales_by_age_range=sales_by_age_range(tpl),
            tpl_sales_by_chinese_classification=sales_by_classifier(tpl, _chinese),
            tpl_sales_by_fuel_type=sales_by_classifier(tpl, _electric),
            comprehensive_sales_by_body_type=sales_by_body_type(comp),
            comprehensive_sales_by_age_range=sales_by_age_range(comp),
            comprehensive_sales_by_chinese_classification=sales_by_classifier(comp, _chinese),
            comprehensive_sales_by_fuel_type=sales_by_classifier(comp, _electric),
            tpl_top_rejected_models=top_rejected_models(tpl, limits.top_rejected_models),
            top_requested_make_models=top_make_models(all_records, limits.top_requested_make_models),
            tpl_top_requested_make_models=top_make_models(tpl, limits.top_requested_make_models),
            comprehensive_top_requested_make_models=top_make_models(
                comp, limits.top_requested_make_models
            ),
            comprehensive_top_rejected_make_models=top_rejected_make_models(
                comp, limits.top_rejected_make_models
            ),
            tpl_error_counts=error_counts(tpl, exclude_null_label=False),
            comprehensive_error_counts=error_counts(comp, exclude_null_label=True),
            unique_chassis_by_specification=unique_chassis_counts(all_records, _specification),
            unique_chassis_by_insurance_purpose=unique_chassis_counts(all_records, _insurance_purpose),
            unique_chassis_by_body_type=unique_chassis_counts(all_records, _body_category),
            manufacture_year_trend=request_trend(all_records, _trend_year_label),
            customer_age_trend=request_trend(all_records, _trend_age_label),
        )


# ---------------------------------------------------------------------------
# Classifiers
# ---------------------------------------------------------------------------


def _body_category(record: QuoteRecord) -> str:
    return record.body_category_label


def _specification(record: QuoteRecord) -> str:
    return record.gcc_specification_label


def _insurance_purpose(record: QuoteRecord) -> str:
    return record.insurance_purpose_label


def _chinese(record: QuoteRecord) -> str:
    return record.chinese_classification_label


def _electric(record: QuoteRecord) -> str:
    return record.electric_classification_label


def _chinese_electric(record: QuoteRecord) -> str:
    return record.chinese_electric_segment_label


def _trend_year_label(record: QuoteRecord) -> str:
    return record.manufacture_year_label


def _trend_age_label(record: QuoteRecord) -> str:
    if record.driver_age is None or record.driver_age <= 0:
        return UNKNOWN_LABEL
    return str(record.driver_age)


def _label(classifier: Classifier, record: QuoteRecord, default: str = UNKNOWN_LABEL) -> str:
    value = classifier(record)
    return value if value and value.strip() else default


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


def build_group_stats(group: GroupType, records: Sequence[QuoteRecord]) -> GroupStats:
    """Totals, failure percentage, failure breakdowns and blocked value."""

    pass_count = sum(1 for record in records if record.is_successful)
    fail_count = sum(1 for record in records if record.is_failure)
    skip_count = sum(1 for record in records if record.is_skipped)
    failed = [record for record in records if record.is_failure]

    reasons: dict[str, int] = {}
    by_year: dict[str, int] = {}
    blocked = Decimal("0")
    for record in failed:
        reasons[record.failure_reason] = reasons.get(record.failure_reason, 0) + 1
        year = record.manufacture_year_label
        by_year[year] = by_year.get(year, 0) + 1
        blocked += record.estimated_value

    return GroupStats(
        group_name=group.display_name,
        short_label=group.short_label,
        total_quotes=pass_count + fail_count + skip_count,
        pass_count=pass_count,
        fail_count=fail_count,
        skip_count=skip_count,
        failure_percentage=percentage(fail_count, pass_count + fail_count),
        failure_reasons=sort_counts(reasons),
        failures_by_manufacture_year=dict(
            sorted(by_year.items(), key=lambda item: (numeric_label_key(item[0]), item[0]))
        ),
        blocked_estimated_value=round_money(blocked),
    )


def unique_request_summary(records: Sequence[QuoteRecord]) -> UniqueRequestSummary:
    keys: set[str] = set()
    success_keys: set[str] = set()
    failure_keys: set[str] = set()
    for position, record in enumerate(records):
        key = build_request_key(record, position)
        keys.add(key)
        if record.is_successful:
            success_keys.add(key)
        elif record.is_failure:
            failure_keys.add(key)
    return UniqueRequestSummary(
        total_requests=len(keys),
        success_count=len(success_keys),
        failure_count=len(failure_keys),
    )


def unique_chassis_summary(records: Sequence[QuoteRecord]) -> UniqueChassisSummary:
    chassis_values: set[str] = set()
    success_values: set[str] = set()
    failure_values: set[str] = set()
    for record in records:
        chassis = canonicalize_chassis(record.chassis_number)
        if chassis is None:
            continue
        chassis_values.add(chassis)
        if record.is_successful:
            success_values.add(chassis)
        elif record.is_failure:
            failure_values.add(chassis)
    return UniqueChassisSummary(
        total=len(chassis_values),
        success_count=len(success_values),
        failure_count=len(failure_values),
    )


def eid_chassis_summary(records: Sequence[QuoteRecord]) -> EidChassisSummary:
    total = 0
    pairs: set[str] = set()
    for record in records:
        eid = canonicalize_eid(record.eid)
        chassis = canonicalize_chassis(record.chassis_number)
        if eid is None or chassis is None:
            continue
        total += 1
        pairs.add(f"{eid}::{chassis}")
    return EidChassisSummary(
        total_requests=total,
        unique_requests=len(pairs),
        duplicate_requests=max(0, total - len(pairs)),
    )


def outcome_breakdown(
    records: Sequence[QuoteRecord],
    classifier: Classifier,
) -> dict[str, OutcomeBreakdown]:
    """Success / failure per label; total desc, then label asc."""

    counters: dict[str, _OutcomeCounter] = {}
    for record in records:
        if not record.is_processed:
            continue
        counters.setdefault(_label(classifier, record), _OutcomeCounter()).record(record)

    ordered = sorted(counters.items(), key=lambda item: (-item[1].total, item[0]))
    return {
        label: OutcomeBreakdown(success_count=counter.success, failure_count=counter.failure)
        for label, counter in ordered
    }


def _banded_stats(
    records: Sequence[QuoteRecord],
    bands: Sequence[RangeBucket],
    value_of: Callable[[QuoteRecord], int | None],
) -> tuple[BucketStats, ...]:
    counters = {band.label: _OutcomeCounter() for band in bands}
    other = _OutcomeCounter()
    for record in records:
        if not record.is_processed:
            continue
        band = find_bucket(bands, value_of(record))
        (counters[band.label] if band is not None else other).record(record)

    results = [counters[band.label].to_bucket(band.label) for band in bands]
    if other.total > 0:
        results.append(other.to_bucket(OTHER_UNKNOWN_LABEL))
    return tuple(results)


def age_range_stats(records: Sequence[QuoteRecord]) -> tuple[BucketStats, ...]:
    return _banded_stats(records, AGE_RANGES, lambda record: record.driver_age)


def _positive_whole_value(record: QuoteRecord) -> int | None:
    if record.estimated_value <= 0:
        return None
    return int(record.estimated_value)


def estimated_value_stats(records: Sequence[QuoteRecord]) -> tuple[BucketStats, ...]:
    return _banded_stats(records, VALUE_RANGES, _positive_whole_value)


def manufacture_year_stats(
    records: Sequence[QuoteRecord],
    reference_year: int,
) -> tuple[BucketStats, ...]:
    """
    ``<2000``, one bucket per year 2000 .. reference_year + 1, later years
    ascending, then ``Unknown`` when any record lacks a year.
    """

    last_listed_year = reference_year + 1
    before_2000 = _OutcomeCounter()
    listed = {year: _OutcomeCounter() for year in range(FIRST_LISTED_YEAR, last_listed_year + 1)}
    future: dict[int, _OutcomeCounter] = {}
    unknown = _OutcomeCounter()

    for record in records:
        if not record.is_processed:
            continue
        year = record.manufacture_year
        if year is None:
            counter = unknown
        elif year < FIRST_LISTED_YEAR:
            counter = before_2000
        elif year <= last_listed_year:
            counter = listed[year]
        else:
            counter = future.setdefault(year, _OutcomeCounter())
        counter.record(record)

    results = [before_2000.to_bucket(BEFORE_2000_LABEL)]
    results.extend(counter.to_bucket(str(year)) for year, counter in listed.items())
    results.extend(future[year].to_bucket(str(year)) for year in sorted(future))
    if unknown.total > 0:
        results.append(unknown.to_bucket(UNKNOWN_LABEL))
    return tuple(results)


def _with_placeholder(rows: list[SalesConversionStats]) -> tuple[SalesConversionStats, ...]:
    if not rows:
        return (SalesConversionStats(label=NO_DATA_LABEL),)
    return tuple(rows)


def sales_by_body_type(records: Sequence[QuoteRecord]) -> tuple[SalesConversionStats, ...]:
    counters: dict[str, _SalesCounter] = {}
    for record in records:
        counters.setdefault(record.body_category_label, _SalesCounter()).record(record)

    ordered = sorted(counters.items(), key=lambda item: (-item[1].total_requests, item[0]))
    rows = [counter.to_stats(label) for label, counter in ordered]
    return _with_placeholder([row for row in rows if row.has_data])


def sales_by_age_range(records: Sequence[QuoteRecord]) -> tuple[SalesConversionStats, ...]:
    counters = {band.label: _SalesCounter() for band in AGE_RANGES}
    other = _SalesCounter()
    for record in records:
        band = find_bucket(AGE_RANGES, record.driver_age)
        (counters[band.label] if band is not None else other).record(record)

    rows = [counters[band.label].to_stats(band.label) for band in AGE_RANGES]
    rows.append(other.to_stats(OTHER_UNKNOWN_LABEL))
    return _with_placeholder([row for row in rows if row.has_data])


def sales_by_classifier(
    records: Sequence[QuoteRecord],
    classifier: Classifier,
) -> tuple[SalesConversionStats, ...]:
    """Sales per classifier label, in first-seen order."""

    counters: dict[str, _SalesCounter] = {}
    for record in records:
        counters.setdefault(_label(classifier, record, NO_DATA_LABEL), _SalesCounter()).record(record)
    rows = [counter.to_stats(label) for label, counter in counters.items()]
    return _with_placeholder([row for row in rows if row.has_data])


def _make_model_accumulators(records: Iterable[QuoteRecord]) -> dict[tuple[str, str], _ChassisOutcomes]:
    accumulators: dict[tuple[str, str], _ChassisOutcomes] = {}
    for record in records:
        chassis = canonicalize_chassis(record.chassis_number)
        if chassis is None:
            continue
        key = (record.make_label, record.model_label)
        accumulators.setdefault(key, _ChassisOutcomes()).record(chassis, record)
    return accumulators


def top_make_models(records: Sequence[QuoteRecord], limit: int) -> tuple[MakeModelChassisSummary, ...]:
    """Make/model pairs by distinct chassis; unique desc, make asc, model asc."""

    if limit <= 0:
        return ()
    summaries = [
        accumulator.to_summary(make, model)
        for (make, model), accumulator in _make_model_accumulators(records).items()
    ]
    summaries.sort(key=lambda summary: (-summary.unique_chassis_count, summary.make, summary.model))
    return tuple(summaries[:limit])


def top_rejected_make_models(
    records: Sequence[QuoteRecord],
    limit: int,
) -> tuple[MakeModelChassisSummary, ...]:
    """Pairs with at least one failed chassis; failed desc, unique desc, make, model."""

    if limit <= 0:
        return ()
    processed = (record for record in records if record.is_processed)
    summaries = [
        accumulator.to_summary(make, model)
        for (make, model), accumulator in _make_model_accumulators(processed).items()
    ]
    rejected = [summary for summary in summaries if summary.failed_unique_chassis_count > 0]
    rejected.sort(
        key=lambda summary: (
            -summary.failed_unique_chassis_count,
            -summary.unique_chassis_count,
            summary.make,
            summary.model,
        )
    )
    return tuple(rejected[:limit])


def top_rejected_models(records: Sequence[QuoteRecord], limit: int) -> tuple[ModelChassisSummary, ...]:
    if limit <= 0:
        return ()
    chassis_by_model: dict[str, set[str]] = {}
    for record in records:
        if not record.is_failure or not record.model:
            continue
        chassis = canonicalize_chassis(record.chassis_number)
        if chassis is None:
            continue
        chassis_by_model.setdefault(record.model, set()).add(chassis)

    summaries = [
        ModelChassisSummary(model=model, unique_chassis_count=len(chassis))
        for model, chassis in chassis_by_model.items()
    ]
    summaries.sort(key=lambda summary: (-summary.unique_chassis_count, summary.model))
    return tuple(summaries[:limit])


def error_counts(records: Sequence[QuoteRecord], *, exclude_null_label: bool) -> dict[str, int]:
    """
    Failed records grouped by their trimmed error text (blank text skipped).

    With *exclude_null_label*, the literal text ``"null"`` is dropped too.
    """

    counts: dict[str, int] = {}
    for record in records:
        if not record.is_failure:
            continue
        text = record.error_text.strip()
        if not text:
            continue
        if exclude_null_label and text.lower() == NULL_LITERAL:
            continue
        counts[text] = counts.get(text, 0) + 1
    return sort_counts(counts)


def unique_chassis_counts(
    records: Sequence[QuoteRecord],
    classifier: Classifier,
) -> tuple[CategoryCount, ...]:
    """Distinct chassis per label; count desc, label asc."""

    chassis_by_label: dict[str, set[str]] = {}
    for record in records:
        chassis = canonicalize_chassis(record.chassis_number)
        if chassis is None:
            continue
        chassis_by_label.setdefault(_label(classifier, record), set()).add(chassis)

    if not chassis_by_label:
        return (CategoryCount(label=NO_DATA_LABEL, count=0),)
    counts = [CategoryCount(label=label, count=len(chassis)) for label, chassis in chassis_by_label.items()]
    counts.sort(key=lambda item: (-item.count, item.label))
    return tuple(counts)


def request_trend(
    records: Sequence[QuoteRecord],
    label_of: Classifier,
) -> tuple[TrendPoint, ...]:
    """
    Deduplicated requests per label, with how many of them failed.

    Labels sort numerically; ``Unknown`` and other text labels come last.
    """

    requests: dict[str, _TrendRequest] = {}
    for position, record in enumerate(records):
        key = build_request_key(record, position)
        requests.setdefault(key, _TrendRequest()).record(label_of(record), record)

    if not requests:
        return (TrendPoint(label=NO_DATA_LABEL, quoted_count=0, failed_count=0),)

    totals: dict[str, list[int]] = {}
    for request in requests.values():
        counter = totals.setdefault(request.label or UNKNOWN_LABEL, [0, 0])
        counter[0] += 1
        if request.failed:
            counter[1] += 1

    ordered = sorted(totals.items(), key=lambda item: (numeric_label_key(item[0]), item[0]))
    return tuple(
        TrendPoint(label=label, quoted_count=quoted, failed_count=failed)
        for label, (quoted, failed) in ordered
    )
