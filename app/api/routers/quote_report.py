"""
app/api/routers/quote_report.py

Quote report HTTP endpoints.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status
from fastapi.responses import HTMLResponse

from app.api.dependencies import get_quote_upload, get_report_date_range
from app.domain.quote_statistics import (
    BucketStats,
    CategoryCount,
    GroupStats,
    MakeModelChassisSummary,
    OutcomeBreakdown,
    SalesConversionStats,
    TrendPoint,
)
from app.schemas.quote_report import (
    BucketStatsResponse,
    CategoryCountResponse,
    EidChassisResponse,
    GroupStatsResponse,
    MakeModelResponse,
    OutcomeBreakdownResponse,
    OverallStatsResponse,
    QuoteStatisticsResponse,
    SalesConversionResponse,
    TrendPointResponse,
    UniqueCountsResponse,
)
from app.services.quote_loader_service import QuoteFileReadError, UnsupportedQuoteFileError
from app.services.quote_report_service import (
    QuoteReport,
    QuoteReportService,
    get_quote_report_service,
)
from app.services.report_date_range import InvalidReportDateRangeError, ReportDateRange

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quote-reports", tags=["quote-reports"])


def _build_report(
    file: UploadFile,
    date_range: ReportDateRange | None,
    report_service: QuoteReportService,
) -> QuoteReport:
    try:
        content = file.file.read()
        return report_service.build_report_from_bytes(
            content,
            file.filename or "",
            date_range,
        )
    except (UnsupportedQuoteFileError, InvalidReportDateRangeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except QuoteFileReadError as exc:
        logger.warning("Rejected unreadable quote upload name=%s: %s", file.filename, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    finally:
        file.file.close()


@router.post("/statistics", response_model=QuoteStatisticsResponse)
def quote_statistics(
    file: UploadFile = Depends(get_quote_upload),
    date_range: ReportDateRange | None = Depends(get_report_date_range),
    report_service: QuoteReportService = Depends(get_quote_report_service),
) -> QuoteStatisticsResponse:
    """
    Aggregate one uploaded quote export and return the statistics as JSON.
    """

    report = _build_report(file, date_range, report_service)
    return to_statistics_response(report)


@router.post("/html", response_class=HTMLResponse)
def quote_report_html(
    file: UploadFile = Depends(get_quote_upload),
    date_range: ReportDateRange | None = Depends(get_report_date_range),
    report_service: QuoteReportService = Depends(get_quote_report_service),
) -> HTMLResponse:
    """
    Aggregate one uploaded quote export and return the HTML dashboard.
    """

    report = _build_report(file, date_range, report_service)
    return HTMLResponse(content=report_service.render_html(report))


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------


def _group(stats: GroupStats) -> GroupStatsResponse:
    return GroupStatsResponse(
        group_name=stats.group_name,
        short_label=stats.short_label,
        total_quotes=stats.total_quotes,
        pass_count=stats.pass_count,
        fail_count=stats.fail_count,
        skip_count=stats.skip_count,
        failure_percentage=stats.failure_percentage,
        blocked_estimated_value=stats.blocked_estimated_value,
        failure_reasons=dict(stats.failure_reasons),
        failures_by_manufacture_year=dict(stats.failures_by_manufacture_year),
    )


def _breakdowns(rows: Mapping[str, OutcomeBreakdown]) -> list[OutcomeBreakdownResponse]:
    return [
        OutcomeBreakdownResponse(
            label=label,
            success_count=row.success_count,
            failure_count=row.failure_count,
        )
        for label, row in rows.items()
    ]


def _buckets(rows: Iterable[BucketStats]) -> list[BucketStatsResponse]:
    return [
        BucketStatsResponse(
            label=row.label,
            success_count=row.success_count,
            failure_count=row.failure_count,
            success_ratio=row.success_ratio,
            failure_ratio=row.failure_ratio,
        )
        for row in rows
    ]


def _sales(rows: Iterable[SalesConversionStats]) -> list[SalesConversionResponse]:
    return [
        SalesConversionResponse(
            label=row.label,
            total_requests=row.total_requests,
            successful_quotes=row.successful_quotes,
            sold_policies=row.sold_policies,
            total_premium=row.total_premium,
            quote_ratio=row.quote_ratio,
            conversion_ratio=row.conversion_ratio,
        )
        for row in rows
    ]


def _make_models(rows: Iterable[MakeModelChassisSummary]) -> list[MakeModelResponse]:
    return [
        MakeModelResponse(
            make=row.make,
            model=row.model,
            unique_chassis_count=row.unique_chassis_count,
            successful_unique_chassis_count=row.successful_unique_chassis_count,
            failed_unique_chassis_count=row.failed_unique_chassis_count,
        )
        for row in rows
    ]


def _categories(rows: Iterable[CategoryCount]) -> list[CategoryCountResponse]:
    return [CategoryCountResponse(label=row.label, count=row.count) for row in rows]


def _trend(rows: Iterable[TrendPoint]) -> list[TrendPointResponse]:
    return [
        TrendPointResponse(label=row.label, quoted_count=row.quoted_count, failed_count=row.failed_count)
        for row in rows
    ]


def to_statistics_response(report: QuoteReport) -> QuoteStatisticsResponse:
    """
    Convert a ``QuoteReport`` into its JSON response model.
    """

    statistics = report.statistics
    return QuoteStatisticsResponse(
        source_name=report.source_name,
        loaded_rows=report.loaded_row_count,
        reported_rows=report.record_count,
        start_date=report.date_range.start_date,
        end_date=report.date_range.end_date,
        overall=OverallStatsResponse(
            total_quotes=statistics.overall_total_quotes,
            pass_count=statistics.overall_pass_count,
            fail_count=statistics.overall_fail_count,
            skip_count=statistics.overall_skip_count,
            failure_percentage=statistics.overall_failure_percentage,
            blocked_estimated_value=statistics.overall_blocked_estimated_value,
            failure_reasons=statistics.combined_failure_reasons,
        ),
        tpl=_group(statistics.tpl_stats),
        comprehensive=_group(statistics.comprehensive_stats),
        unique_requests={
            scope: UniqueCountsResponse(
                total=summary.total_requests,
                success_count=summary.success_count,
                failure_count=summary.failure_count,
            )
            for scope, summary in (
                ("overall", statistics.overall_unique_requests),
                ("tpl", statistics.tpl_unique_requests),
                ("comprehensive", statistics.comprehensive_unique_requests),
            )
        },
        unique_chassis={
            scope: UniqueCountsResponse(
                total=summary.total,
                success_count=summary.success_count,
                failure_count=summary.failure_count,
            )
            for scope, summary in (
                ("overall", statistics.unique_chassis),
                ("tpl", statistics.tpl_unique_chassis),
                ("comprehensive", statistics.comprehensive_unique_chassis),
            )
        },
        tpl_eid_chassis=EidChassisResponse(
            total_requests=statistics.tpl_eid_chassis.total_requests,
            unique_requests=statistics.tpl_eid_chassis.unique_requests,
            duplicate_requests=statistics.tpl_eid_chassis.duplicate_requests,
        ),
        outcome_breakdowns={
            "tpl_body_category": _breakdowns(statistics.tpl_body_category_outcomes),
            "tpl_specification": _breakdowns(statistics.tpl_specification_outcomes),
            "tpl_chinese": _breakdowns(statistics.tpl_chinese_outcomes),
            "tpl_electric": _breakdowns(statistics.tpl_electric_outcomes),
            "tpl_chinese_electric": _breakdowns(statistics.tpl_chinese_electric_outcomes),
            "comprehensive_body_category": _breakdowns(statistics.comprehensive_body_category_outcomes),
            "comprehensive_specification": _breakdowns(statistics.comprehensive_specification_outcomes),
        },
        bucket_stats={
            "tpl_age_range": _buckets(statistics.tpl_age_range_stats),
            "comprehensive_age_range": _buckets(statistics.comprehensive_age_range_stats),
            "tpl_manufacture_year": _buckets(statistics.tpl_manufacture_year_stats),
            "comprehensive_manufacture_year": _buckets(statistics.comprehensive_manufacture_year_stats),
            "comprehensive_estimated_value": _buckets(statistics.comprehensive_estimated_value_stats),
        },
        sales_conversion={
            "tpl_body_type": _sales(statistics.tpl_sales_by_body_type),
            "tpl_age_range": _sales(statistics.tpl_sales_by_age_range),
            "tpl_chinese": _sales(statistics.tpl_sales_by_chinese_classification),
            "tpl_fuel_type": _sales(statistics.tpl_sales_by_fuel_type),
            "comprehensive_body_type": _sales(statistics.comprehensive_sales_by_body_type),
            "comprehensive_age_range": _sales(statistics.comprehensive_sales_by_age_range),
            "comprehensive_chinese": _sales(statistics.comprehensive_sales_by_chinese_classification),
            "comprehensive_fuel_type": _sales(statistics.comprehensive_sales_by_fuel_type),
        },
        tpl_top_rejected_models=[
            CategoryCountResponse(label=row.model, count=row.unique_chassis_count)
            for row in statistics.tpl_top_rejected_models
        ],
        top_requested_make_models={
            "overall": _make_models(statistics.top_requested_make_models),
            "tpl": _make_models(statistics.tpl_top_requested_make_models),
            "comprehensive": _make_models(statistics.comprehensive_top_requested_make_models),
        },
        comprehensive_top_rejected_make_models=_make_models(
            statistics.comprehensive_top_rejected_make_models
        ),
        error_counts={
            "tpl": dict(statistics.tpl_error_counts),
            "comprehensive": dict(statistics.comprehensive_error_counts),
        },
        unique_chassis_by_category={
            "specification": _categories(statistics.unique_chassis_by_specification),
            "insurance_purpose": _categories(statistics.unique_chassis_by_insurance_purpose),
            "body_type": _categories(statistics.unique_chassis_by_body_type),
        },
        trends={
            "manufacture_year": _trend(statistics.manufacture_year_trend),
            "customer_age": _trend(statistics.customer_age_trend),
        },
    )
