"""
app/services/html_report_service.py

Self-contained HTML dashboard for a ``QuoteStatistics`` result.

Presentation only: every figure comes from the statistics value or the
record list, nothing is recalculated beyond the per-day request trend and
the requested-date header range.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Final

from app.domain.quote_record import GroupType, QuoteRecord
from app.domain.quote_statistics import (
    BucketStats,
    CategoryCount,
    GroupStats,
    MakeModelChassisSummary,
    OutcomeBreakdown,
    QuoteStatistics,
    SalesConversionStats,
    TrendPoint,
)
from app.mappers.quote_record_mapper import parse_quote_requested_on
from app.normalizers.date_normalizer import parse_date_only
from app.normalizers.identifier_normalizer import normalize_header_key

logger = logging.getLogger(__name__)

REPORT_FILE_NAME: Final[str] = "quote_generation_report.html"
REPORT_TITLE: Final[str] = "Quote Generation Report"
_REQUEST_DATE_KEYS: Final[tuple[str, ...]] = ("quoterequestedon", "requestdate", "createdon")
_FAILED_ROW_LIMIT: Final[int] = 200

_STYLE: Final[str] = """
body { font-family: Arial, Helvetica, sans-serif; margin: 0; color: #212529; background: #f8f9fa; }
header { background: #0d6efd; color: #fff; padding: 24px 32px; }
header h1 { margin: 0 0 4px 0; font-size: 26px; }
section { background: #fff; margin: 20px 32px; padding: 16px 24px; border-radius: 8px;
          box-shadow: 0 1px 3px rgba(0,0,0,.08); }
h2 { font-size: 20px; margin-top: 0; }
h3 { font-size: 16px; margin-bottom: 6px; }
.kpis { display: flex; flex-wrap: wrap; gap: 12px; }
.kpi { flex: 1 1 160px; border: 1px solid #dee2e6; border-radius: 6px; padding: 10px 14px; }
.kpi .label { font-size: 12px; text-transform: uppercase; color: #6c757d; }
.kpi .value { font-size: 22px; font-weight: bold; }
.kpi.danger .value { color: #dc3545; }
.kpi.success .value { color: #198754; }
table { border-collapse: collapse; width: 100%; margin-bottom: 12px; font-size: 13px; }
th, td { border: 1px solid #dee2e6; padding: 4px 8px; text-align: left; }
th { background: #e9ecef; }
td.num { text-align: right; }
.grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(360px, 1fr)); gap: 16px; }
.empty { color: #6c757d; font-style: italic; }
"""


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def escape(value: object) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def format_integer(value: int) -> str:
    return f"{value:,}"


def format_percentage(value: float) -> str:
    rounded = Decimal(str(value)).quantize(Decimal("0.1"), rounding="ROUND_HALF_UP")
    return f"{rounded}%"


def format_currency(value: Decimal) -> str:
    return f"{value:,.2f}"


# ---------------------------------------------------------------------------
# Request dates
# ---------------------------------------------------------------------------


def requested_date(record: QuoteRecord) -> date | None:
    """
    Request date of *record*, tolerant of header spelling ("Quote Requested On").
    """

    if record.quote_requested_on is not None:
        return record.quote_requested_on.date()
    for header, value in record.raw_values.items():
        if normalize_header_key(header) not in _REQUEST_DATE_KEYS or not value.strip():
            continue
        parsed = parse_quote_requested_on(value)
        if parsed is not None:
            return parsed.date()
        day = parse_date_only(value.strip())
        if day is not None:
            return day
    return None


def requested_date_range(records: Iterable[QuoteRecord]) -> tuple[date, date] | None:
    days = [day for day in (requested_date(record) for record in records) if day is not None]
    if not days:
        return None
    return min(days), max(days)


def daily_request_trend(records: Iterable[QuoteRecord]) -> list[tuple[date, int, int, int]]:
    """(day, total, success, failure) per request day, ascending."""

    counts: dict[date, list[int]] = {}
    for record in records:
        day = requested_date(record)
        if day is None:
            continue
        bucket = counts.setdefault(day, [0, 0, 0])
        bucket[0] += 1
        if record.is_successful:
            bucket[1] += 1
        elif record.is_failure:
            bucket[2] += 1
    return [(day, *counts[day]) for day in sorted(counts)]


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------


class HtmlReportRenderer:
    """
    Renders the quote dashboard as one HTML document (inline CSS, no scripts).
    """

    def render(
        self,
        statistics: QuoteStatistics,
        records: Sequence[QuoteRecord],
        *,
        period_label: str | None = None,
    ) -> str:
        parts: list[str] = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '<meta charset="utf-8">',
            '<meta name="viewport" content="width=device-width, initial-scale=1">',
            f"<title>{REPORT_TITLE}</title>",
            f"<style>{_STYLE}</style>",
            "</head>",
            "<body>",
            self._header(records, period_label),
            self._overview(statistics),
            self._group_section(statistics.tpl_stats, statistics, GroupType.TPL),
            self._group_section(statistics.comprehensive_stats, statistics, GroupType.COMPREHENSIVE),
            self._failure_reasons(statistics),
            self._make_models(statistics),
            self._categories_and_trends(statistics),
            self._daily_trend(records),
            self._failed_records(records),
            "</body>",
            "</html>",
        ]
        return "\n".join(parts) + "\n"

    def write(
        self,
        output_path: str | Path,
        statistics: QuoteStatistics,
        records: Sequence[QuoteRecord],
        *,
        period_label: str | None = None,
    ) -> Path:
        target = Path(output_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            self.render(statistics, records, period_label=period_label),
            encoding="utf-8",
        )
        logger.info("Wrote HTML quote report path=%s", target)
        return target

    # -- sections --------------------------------------------------------------

    def _header(self, records: Sequence[QuoteRecord], period_label: str | None) -> str:
        date_range = requested_date_range(records)
        if date_range is not None:
            subtitle = (
                "Overview of Quote requests Analysis from "
                f"{date_range[0].isoformat()} to {date_range[1].isoformat()}"
            )
        else:
            subtitle = "Overview of Quote requests Analysis"
        period = f"<div>Selected period: {escape(period_label)}</div>" if period_label else ""
        return f"<header><h1>{REPORT_TITLE}</h1><div>{escape(subtitle)}</div>{period}</header>"

    def _overview(self, statistics: QuoteStatistics) -> str:
        kpis = "".join(
            [
                _kpi("Total Quotes", format_integer(statistics.overall_total_quotes)),
                _kpi("Pass Count", format_integer(statistics.overall_pass_count), "success"),
                _kpi("Fail Count", format_integer(statistics.overall_fail_count), "danger"),
                _kpi("Skipped", format_integer(statistics.overall_skip_count)),
                _kpi("Fail %", format_percentage(statistics.overall_failure_percentage), "danger"),
                _kpi(
                    "Total Estimated Value Lost",
                    format_currency(statistics.overall_blocked_estimated_value),
                ),
            ]
        )
        requests = _table(
            ("Scope", "Unique Requests", "Successful", "Failed"),
            [
                (label, summary.total_requests, summary.success_count, summary.failure_count)
                for label, summary in (
                    ("Overall", statistics.overall_unique_requests),
                    ("TPL", statistics.tpl_unique_requests),
                    ("Comp", statistics.comprehensive_unique_requests),
                )
            ],
        )
        chassis = _table(
            ("Scope", "Unique Chassis", "With Success", "With Failure"),
            [
                (label, summary.total, summary.success_count, summary.failure_count)
                for label, summary in (
                    ("Overall", statistics.unique_chassis),
                    ("TPL", statistics.tpl_unique_chassis),
                    ("Comp", statistics.comprehensive_unique_chassis),
                )
            ],
        )
        eid = statistics.tpl_eid_chassis
        eid_table = _table(
            ("TPL EID + Chassis Requests", "Unique", "Duplicate"),
            [(eid.total_requests, eid.unique_requests, eid.duplicate_requests)],
        )
        return (
            '<section id="home"><h2>Quote Generation Overview</h2>'
            f'<div class="kpis">{kpis}</div>'
            f'<div class="grid"><div><h3>Unique Requests</h3>{requests}</div>'
            f"<div><h3>Unique Chassis</h3>{chassis}</div>"
            f"<div><h3>Duplicate Requests</h3>{eid_table}</div></div></section>"
        )

    def _group_section(self, stats: GroupStats, statistics: QuoteStatistics, group: GroupType) -> str:
        is_tpl = group is GroupType.TPL
        section_id = "tpl" if is_tpl else "comp"
        summary = _table(
            ("Total", "Pass", "Fail", "Skip", "Fail %", "Blocked Value"),
            [
                (
                    stats.total_quotes,
                    stats.pass_count,
                    stats.fail_count,
                    stats.skip_count,
                    format_percentage(stats.failure_percentage),
                    format_currency(stats.blocked_estimated_value),
                )
            ],
        )
        if is_tpl:
            breakdowns = [
                ("Body Category", statistics.tpl_body_category_outcomes),
                ("Specification", statistics.tpl_specification_outcomes),
                ("Chinese Classification", statistics.tpl_chinese_outcomes),
                ("Fuel Classification", statistics.tpl_electric_outcomes),
                ("Chinese × Electric", statistics.tpl_chinese_electric_outcomes),
            ]
            buckets = [
                ("Age Range", statistics.tpl_age_range_stats),
                ("Manufacture Year", statistics.tpl_manufacture_year_stats),
            ]
            sales = [
                ("Sales by Body Type", statistics.tpl_sales_by_body_type),
                ("Sales by Age Range", statistics.tpl_sales_by_age_range),
                ("Sales by Chinese Classification", statistics.tpl_sales_by_chinese_classification),
                ("Sales by Fuel Type", statistics.tpl_sales_by_fuel_type),
            ]
            errors = statistics.tpl_error_counts
        else:
            breakdowns = [
                ("Body Category", statistics.comprehensive_body_category_outcomes),
                ("Specification", statistics.comprehensive_specification_outcomes),
            ]
            buckets = [
                ("Age Range", statistics.comprehensive_age_range_stats),
                ("Manufacture Year", statistics.comprehensive_manufacture_year_stats),
                ("Estimated Value", statistics.comprehensive_estimated_value_stats),
            ]
            sales = [
                ("Sales by Body Type", statistics.comprehensive_sales_by_body_type),
                ("Sales by Age Range", statistics.comprehensive_sales_by_age_range),
                (
                    "Sales by Chinese Classification",
                    statistics.comprehensive_sales_by_chinese_classification,
                ),
                ("Sales by Fuel Type", statistics.comprehensive_sales_by_fuel_type),
            ]
            errors = statistics.comprehensive_error_counts

        blocks = [f"<div><h3>{escape(title)}</h3>{_breakdown_table(rows)}</div>" for title, rows in breakdowns]
        blocks += [f"<div><h3>{escape(title)}</h3>{_bucket_table(rows)}</div>" for title, rows in buckets]
        blocks += [f"<div><h3>{escape(title)}</h3>{_sales_table(rows)}</div>" for title, rows in sales]
        blocks.append(f"<div><h3>Error Counts</h3>{_counts_table('Error', errors)}</div>")
        if is_tpl:
            blocks.append(
                "<div><h3>Top Rejected Models (Unique Chassis)</h3>"
                + _table(
                    ("Model", "Unique Chassis"),
                    [(row.model, row.unique_chassis_count) for row in statistics.tpl_top_rejected_models],
                )
                + "</div>"
            )
        else:
            blocks.append(
                "<div><h3>Top Rejected Make / Models</h3>"
                + _make_model_table(statistics.comprehensive_top_rejected_make_models)
                + "</div>"
            )
        return (
            f'<section id="{section_id}"><h2>{escape(stats.group_name)} Report</h2>{summary}'
            f'<div class="grid">{"".join(blocks)}</div></section>'
        )

    def _failure_reasons(self, statistics: QuoteStatistics) -> str:
        return (
            '<section id="failures"><h2>Failure Reasons</h2><div class="grid">'
            f"<div><h3>Combined Failure Reasons</h3>"
            f"{_counts_table('Reason', statistics.combined_failure_reasons)}</div>"
            f"<div><h3>Failures by Manufacture Year</h3>"
            f"{_counts_table('Year', statistics.combined_failures_by_manufacture_year)}</div>"
            "</div></section>"
        )

    def _make_models(self, statistics: QuoteStatistics) -> str:
        return (
            '<section id="make-models"><h2>Top Requested Make / Models</h2><div class="grid">'
            f"<div><h3>Overall</h3>{_make_model_table(statistics.top_requested_make_models)}</div>"
            f"<div><h3>TPL</h3>{_make_model_table(statistics.tpl_top_requested_make_models)}</div>"
            f"<div><h3>Comp</h3>"
            f"{_make_model_table(statistics.comprehensive_top_requested_make_models)}</div>"
            "</div></section>"
        )

    def _categories_and_trends(self, statistics: QuoteStatistics) -> str:
        return (
            '<section id="categories"><h2>Unique Chassis and Trends</h2><div class="grid">'
            f"<div><h3>By Specification</h3>"
            f"{_category_table(statistics.unique_chassis_by_specification)}</div>"
            f"<div><h3>By Insurance Purpose</h3>"
            f"{_category_table(statistics.unique_chassis_by_insurance_purpose)}</div>"
            f"<div><h3>By Body Type</h3>{_category_table(statistics.unique_chassis_by_body_type)}</div>"
            f"<div><h3>Manufacture Year Trend</h3>{_trend_table(statistics.manufacture_year_trend)}</div>"
            f"<div><h3>Customer Age Trend</h3>{_trend_table(statistics.customer_age_trend)}</div>"
            "</div></section>"
        )

    def _daily_trend(self, records: Sequence[QuoteRecord]) -> str:
        rows = daily_request_trend(records)
        if not rows:
            body = '<p class="empty">No quote request dates available for trend analysis.</p>'
        else:
            body = _table(
                ("Date", "Requests", "Successful", "Failed"),
                [(day.strftime("%b %d, %Y"), total, success, failure) for day, total, success, failure in rows],
            )
        return f'<section id="daily-trend"><h2>Daily Request &amp; Outcome Trend</h2>{body}</section>'

    def _failed_records(self, records: Sequence[QuoteRecord]) -> str:
        failed = [record for record in records if record.is_failure][:_FAILED_ROW_LIMIT]
        table = _table(
            ("Type", "Quote #", "Make", "Model", "Year", "Estimated Value", "Reason"),
            [
                (
                    record.insurance_type or "Unknown",
                    record.quote_number or "",
                    record.make_label,
                    record.model_label,
                    record.manufacture_year_label,
                    format_currency(record.estimated_value),
                    record.failure_reason,
                )
                for record in failed
            ],
        )
        return f'<section id="failed-records"><h2>Failed Quotes</h2>{table}</section>'


# ---------------------------------------------------------------------------
# Table helpers
# ---------------------------------------------------------------------------


def _kpi(label: str, value: str, modifier: str = "") -> str:
    return (
        f'<div class="kpi {modifier}"><div class="label">{escape(label)}</div>'
        f'<div class="value">{escape(value)}</div></div>'
    )


def _cell(value: object) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f'<td class="num">{format_integer(value)}</td>'
    return f"<td>{escape(value)}</td>"


def _table(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    body = "".join("<tr>" + "".join(_cell(value) for value in row) + "</tr>" for row in rows)
    if not body:
        return '<p class="empty">No data</p>'
    head = "".join(f"<th>{escape(header)}</th>" for header in headers)
    return f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"


def _counts_table(label: str, counts: Mapping[str, int]) -> str:
    return _table((label, "Count"), list(counts.items()))


def _breakdown_table(rows: Mapping[str, OutcomeBreakdown]) -> str:
    return _table(
        ("Label", "Success", "Failure", "Total"),
        [(label, row.success_count, row.failure_count, row.processed_total) for label, row in rows.items()],
    )


def _bucket_table(rows: Sequence[BucketStats]) -> str:
    return _table(
        ("Bucket", "Success", "Failure", "Success %", "Failure %"),
        [
            (
                row.label,
                row.success_count,
                row.failure_count,
                format_percentage(row.success_ratio),
                format_percentage(row.failure_ratio),
            )
            for row in rows
        ],
    )


def _sales_table(rows: Sequence[SalesConversionStats]) -> str:
    return _table(
        ("Segment", "Requests", "Quoted", "Sold", "Quote %", "Conversion %", "Premium"),
        [
            (
                row.label,
                row.total_requests,
                row.successful_quotes,
                row.sold_policies,
                format_percentage(row.quote_ratio),
                format_percentage(row.conversion_ratio),
                format_currency(row.total_premium),
            )
            for row in rows
        ],
    )


def _make_model_table(rows: Sequence[MakeModelChassisSummary]) -> str:
    return _table(
        ("Make", "Model", "Unique Chassis", "Successful", "Failed"),
        [
            (
                row.make,
                row.model,
                row.unique_chassis_count,
                row.successful_unique_chassis_count,
                row.failed_unique_chassis_count,
            )
            for row in rows
        ],
    )


def _category_table(rows: Sequence[CategoryCount]) -> str:
    return _table(("Category", "Unique Chassis"), [(row.label, row.count) for row in rows])


def _trend_table(rows: Sequence[TrendPoint]) -> str:
    return _table(
        ("Label", "Requests", "Failed"),
        [(row.label, row.quoted_count, row.failed_count) for row in rows],
    )
