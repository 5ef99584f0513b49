"""
app/services package marker.
"""

from app.services.quote_loader_service import (
    LoadedQuotes,
    QuoteFileNotFoundError,
    QuoteFileReadError,
    QuoteLoaderService,
    UnsupportedQuoteFileError,
    get_quote_loader_service,
)
from app.services.quote_report_service import (
    AmbiguousQuoteInputError,
    GeneratedQuoteReport,
    QuoteReport,
    QuoteReportService,
    get_quote_report_service,
    resolve_input_path,
)
from app.services.quote_statistics_service import QuoteStatisticsService, StatisticsLimits
from app.services.report_date_range import InvalidReportDateRangeError, ReportDateRange

__all__ = [
    "AmbiguousQuoteInputError",
    "GeneratedQuoteReport",
    "InvalidReportDateRangeError",
    "LoadedQuotes",
    "QuoteFileNotFoundError",
    "QuoteFileReadError",
    "QuoteLoaderService",
    "QuoteReport",
    "QuoteReportService",
    "QuoteStatisticsService",
    "ReportDateRange",
    "StatisticsLimits",
    "UnsupportedQuoteFileError",
    "get_quote_loader_service",
    "get_quote_report_service",
    "resolve_input_path",
]
