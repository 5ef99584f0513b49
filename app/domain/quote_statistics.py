"""
app/domain/quote_statistics.py

Immutable aggregation results produced by ``QuoteStatisticsService``.

All mappings are insertion-ordered in their reporting order; tuples hold
ranked or bucketed rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

NO_DATA_LABEL: Final[str] = "No Data"
UNKNOWN_LABEL: Final[str] = "Unknown"
OTHER_UNKNOWN_LABEL: Final[str] = "Other / Unknown"

_CENT: Final[Decimal] = Decimal("0.01")


def percentage(part: int, whole: int) -> float:
    """``part / whole * 100``, or 0.0 when *whole* is zero."""

    if whole <= 0:
        return 0.0
    return part * 100.0 / whole


def round_money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def numeric_label_key(label: str) -> tuple[int, int]:
    """Sort key placing numeric labels first (ascending), others last."""

    try:
        return (0, int(label))
    except (TypeError, ValueError):
        return (1, 0)


def sort_counts(counts: dict[str, int]) -> dict[str, int]:
    """Order a label -> count mapping by count desc, then label asc."""

    return dict(sorted(counts.items(), key=lambda item: (-item[1], item[0])))


# ---------------------------------------------------------------------------
# Per-group stats
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GroupStats:
    """Totals and failure breakdowns for one insurance-type group."""

    group_name: str
    short_label: str
    total_quotes: int = 0
    pass_count: int = 0
    fail_count: int = 0
    skip_count: int = 0
    failure_percentage: float = 0.0
    failure_reasons: dict[str, int] = field(default_factory=dict)
    failures_by_manufacture_year: dict[str, int] = field(default_factory=dict)
    blocked_estimated_value: Decimal = Decimal("0.00")

    @property
    def processed_count(self) -> int:
        return self.pass_count + self.fail_count

    def top_failure_reasons(self, limit: int) -> list[tuple[str, int]]:
        if limit <= 0:
            return []
        return list(self.failure_reasons.items())[:limit]


# ---------------------------------------------------------------------------
# Dedup summaries
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class UniqueRequestSummary:
    total_requests: int = 0
    success_count: int = 0
    failure_count: int = 0


@dataclass(frozen=True)
class UniqueChassisSummary:
    total: int = 0
    success_count: int = 0
    failure_count: int = 0


@dataclass(frozen=True)
class EidChassisSummary:
    """TPL rows carrying both EID and chassis, and how many are repeats."""

    total_requests: int = 0
    unique_requests: int = 0
    duplicate_requests: int = 0


# ---------------------------------------------------------------------------
# Outcome breakdowns and buckets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutcomeBreakdown:
    success_count: int = 0
    failure_count: int = 0

    @property
    def processed_total(self) -> int:
        return self.success_count + self.failure_count


@dataclass(frozen=True)
class BucketStats:
    """
    Success / failure counts for one fixed bucket (age band, year, value band).

    Ratios are percentages of the bucket's own processed total.
    """

    label: str
    success_count: int = 0
    failure_count: int = 0

    @property
    def processed_total(self) -> int:
        return self.success_count + self.failure_count

    @property
    def success_ratio(self) -> float:
        return percentage(self.success_count, self.processed_total)

    @property
    def failure_ratio(self) -> float:
        return percentage(self.failure_count, self.processed_total)


@dataclass(frozen=True)
class SalesConversionStats:
    """Quote-to-policy conversion for one segment."""

    label: str
    total_requests: int = 0
    successful_quotes: int = 0
    sold_policies: int = 0
    total_premium: Decimal = Decimal("0.00")

    @property
    def has_data(self) -> bool:
        return self.total_requests > 0 or self.sold_policies > 0

    @property
    def quote_ratio(self) -> float:
        return percentage(self.successful_quotes, self.total_requests)

    @property
    def conversion_ratio(self) -> float:
        return percentage(self.sold_policies, self.successful_quotes)


# ---------------------------------------------------------------------------
# Ranked rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelChassisSummary:
    model: str
    unique_chassis_count: int


@dataclass(frozen=True)
class MakeModelChassisSummary:
    make: str
    model: str
    unique_chassis_count: int
    successful_unique_chassis_count: int = 0
    failed_unique_chassis_count: int = 0


@dataclass(frozen=True)
class CategoryCount:
    label: str
    count: int


@dataclass(frozen=True)
class TrendPoint:
    label: str
    quoted_count: int
    failed_count: int


# ---------------------------------------------------------------------------
# Full result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuoteStatistics:
    """
    Complete aggregation result for one quote export.

    Overall pass / fail / skip figures are derived from the two group stats,
    so records outside both groups only show up in the unique-chassis,
    request, make/model, category and trend aggregates.
    """

    tpl_stats: GroupStats
    comprehensive_stats: GroupStats

    overall_unique_requests: UniqueRequestSummary = field(default_factory=UniqueRequestSummary)
    tpl_unique_requests: UniqueRequestSummary = field(default_factory=UniqueRequestSummary)
    comprehensive_unique_requests: UniqueRequestSummary = field(default_factory=UniqueRequestSummary)

    unique_chassis: UniqueChassisSummary = field(default_factory=UniqueChassisSummary)
    tpl_unique_chassis: UniqueChassisSummary = field(default_factory=UniqueChassisSummary)
    comprehensive_unique_chassis: UniqueChassisSummary = field(default_factory=UniqueChassisSummary)
    tpl_eid_chassis: EidChassisSummary = field(default_factory=EidChassisSummary)

    tpl_body_category_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)
    tpl_specification_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)
    tpl_chinese_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)
    tpl_electric_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)
    tpl_chinese_electric_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)
    comprehensive_body_category_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)
    comprehensive_specification_outcomes: dict[str, OutcomeBreakdown] = field(default_factory=dict)

    tpl_age_range_stats: tuple[BucketStats, ...] = ()
    comprehensive_age_range_stats: tuple[BucketStats, ...] = ()
    tpl_manufacture_year_stats: tuple[BucketStats, ...] = ()
    comprehensive_manufacture_year_stats: tuple[BucketStats, ...] = ()
    comprehensive_estimated_value_stats: tuple[BucketStats, ...] = ()

    tpl_sales_by_body_type: tuple[SalesConversionStats, ...] = ()
    tpl_sales_by_age_range: tuple[SalesConversionStats, ...] = ()
    tpl_sales_by_chinese_classification: tuple[SalesConversionStats, ...] = ()
    tpl_sales_by_fuel_type: tuple[SalesConversionStats, ...] = ()
    comprehensive_sales_by_body_type: tuple[SalesConversionStats, ...] = ()
    comprehensive_sales_by_age_range: tuple[SalesConversionStats, ...] = ()
    comprehensive_sales_by_chinese_classification: tuple[SalesConversionStats, ...] = ()
    comprehensive_sales_by_fuel_type: tuple[SalesConversionStats, ...] = ()

    tpl_top_rejected_models: tuple[ModelChassisSummary, ...] = ()
    top_requested_make_models: tuple[MakeModelChassisSummary, ...] = ()
    tpl_top_requested_make_models: tuple[MakeModelChassisSummary, ...] = ()
    comprehensive_top_requested_make_models: tuple[MakeModelChassisSummary, ...] = ()
    comprehensive_top_rejected_make_models: tuple[MakeModelChassisSummary, ...] = ()

    tpl_error_counts: dict[str, int] = field(default_factory=dict)
    comprehensive_error_counts: dict[str, int] = field(default_factory=dict)

    unique_chassis_by_specification: tuple[CategoryCount, ...] = ()
    unique_chassis_by_insurance_purpose: tuple[CategoryCount, ...] = ()
    unique_chassis_by_body_type: tuple[CategoryCount, ...] = ()

    manufacture_year_trend: tuple[TrendPoint, ...] = ()
    customer_age_trend: tuple[TrendPoint, ...] = ()

    # -- derived overall figures ----------------------------------------------

    @property
    def overall_total_quotes(self) -> int:
        return self.tpl_stats.total_quotes + self.comprehensive_stats.total_quotes

    @property
    def overall_pass_count(self) -> int:
        return self.tpl_stats.pass_count + self.comprehensive_stats.pass_count

    @property
    def overall_fail_count(self) -> int:
        return self.tpl_stats.fail_count + self.comprehensive_stats.fail_count

    @property
    def overall_skip_count(self) -> int:
        return self.tpl_stats.skip_count + self.comprehensive_stats.skip_count

    @property
    def overall_processed_quotes(self) -> int:
        return self.overall_pass_count + self.overall_fail_count

    @property
    def overall_failure_percentage(self) -> float:
        return percentage(self.overall_fail_count, self.overall_processed_quotes)

    @property
    def overall_blocked_estimated_value(self) -> Decimal:
        return round_money(
            self.tpl_stats.blocked_estimated_value
            + self.comprehensive_stats.blocked_estimated_value
        )

    @property
    def combined_failure_reasons(self) -> dict[str, int]:
        combined: dict[str, int] = {}
        for stats in (self.tpl_stats, self.comprehensive_stats):
            for reason, count in stats.failure_reasons.items():
                combined[reason] = combined.get(reason, 0) + count
        return sort_counts(combined)

    def top_failure_reasons(self, limit: int) -> list[tuple[str, int]]:
        if limit <= 0:
            return []
        return list(self.combined_failure_reasons.items())[:limit]

    @property
    def combined_failures_by_manufacture_year(self) -> dict[str, int]:
        combined: dict[str, int] = {}
        for stats in (self.tpl_stats, self.comprehensive_stats):
            for year, count in stats.failures_by_manufacture_year.items():
                combined[year] = combined.get(year, 0) + count
        return dict(sorted(combined.items(), key=lambda item: (numeric_label_key(item[0]), item[0])))
