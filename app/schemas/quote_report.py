"""
app/schemas/quote_report.py

Response schemas for quote report endpoints.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class GroupStatsResponse(BaseModel):
    """
    Totals and failure breakdowns for one insurance-type group.
    """

    group_name: str
    short_label: str
    total_quotes: int = Field(..., ge=0)
    pass_count: int = Field(..., ge=0)
    fail_count: int = Field(..., ge=0)
    skip_count: int = Field(..., ge=0)
    failure_percentage: float = Field(..., ge=0.0, le=100.0)
    blocked_estimated_value: Decimal
    failure_reasons: dict[str, int] = Field(default_factory=dict)
    failures_by_manufacture_year: dict[str, int] = Field(default_factory=dict)


class OverallStatsResponse(BaseModel):
    total_quotes: int = Field(..., ge=0)
    pass_count: int = Field(..., ge=0)
    fail_count: int = Field(..., ge=0)
    skip_count: int = Field(..., ge=0)
    failure_percentage: float = Field(..., ge=0.0, le=100.0)
    blocked_estimated_value: Decimal
    failure_reasons: dict[str, int] = Field(default_factory=dict)


class UniqueCountsResponse(BaseModel):
    total: int = Field(..., ge=0)
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)


class EidChassisResponse(BaseModel):
    total_requests: int = Field(..., ge=0)
    unique_requests: int = Field(..., ge=0)
    duplicate_requests: int = Field(..., ge=0)


class OutcomeBreakdownResponse(BaseModel):
    label: str
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)


class BucketStatsResponse(BaseModel):
    label: str
    success_count: int = Field(..., ge=0)
    failure_count: int = Field(..., ge=0)
    success_ratio: float
    failure_ratio: float


class SalesConversionResponse(BaseModel):
    label: str
    total_requests: int = Field(..., ge=0)
    successful_quotes: int = Field(..., ge=0)
    sold_policies: int = Field(..., ge=0)
    total_premium: Decimal
    quote_ratio: float
    conversion_ratio: float


class MakeModelResponse(BaseModel):
    make: str
    model: str
    unique_chassis_count: int = Field(..., ge=0)
    successful_unique_chassis_count: int = Field(default=0, ge=0)
    failed_unique_chassis_count: int = Field(default=0, ge=0)


class CategoryCountResponse(BaseModel):
    label: str
    count: int = Field(..., ge=0)


class TrendPointResponse(BaseModel):
    label: str
    quoted_count: int = Field(..., ge=0)
    failed_count: int = Field(..., ge=0)


class QuoteStatisticsResponse(BaseModel):
    """
    API response model for one aggregated quote export.
    """

    source_name: str
    loaded_rows: int = Field(..., ge=0)
    reported_rows: int = Field(..., ge=0)
    start_date: date | None = None
    end_date: date | None = None

    overall: OverallStatsResponse
    tpl: GroupStatsResponse
    comprehensive: GroupStatsResponse

    unique_requests: dict[str, UniqueCountsResponse]
    unique_chassis: dict[str, UniqueCountsResponse]
    tpl_eid_chassis: EidChassisResponse

    outcome_breakdowns: dict[str, list[OutcomeBreakdownResponse]]
    bucket_stats: dict[str, list[BucketStatsResponse]]
    sales_conversion: dict[str, list[SalesConversionResponse]]

    tpl_top_rejected_models: list[CategoryCountResponse]
    top_requested_make_models: dict[str, list[MakeModelResponse]]
    comprehensive_top_rejected_make_models: list[MakeModelResponse]

    error_counts: dict[str, dict[str, int]]
    unique_chassis_by_category: dict[str, list[CategoryCountResponse]]
    trends: dict[str, list[TrendPointResponse]]
