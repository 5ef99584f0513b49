"""
Generate the quote HTML dashboard from a CSV / spreadsheet export.

Usage:
    python scripts/generate_quote_report.py [input] [--output-dir DIR]
        [--start-date YYYY-MM-DD] [--end-date YYYY-MM-DD] [--no-cleaned] [--json]

Without *input* the single supported file in the configured source data
directory (``QUOTE_SOURCE_DIR``) is used.

Exit codes: 0 success, 1 input problem, 2 generation failure.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from app.api.routers.quote_report import to_statistics_response
from app.config import get_quote_report_settings
from app.services.quote_loader_service import (
    QuoteFileNotFoundError,
    QuoteFileReadError,
    UnsupportedQuoteFileError,
)
from app.services.quote_report_service import (
    AmbiguousQuoteInputError,
    QuoteReportService,
    resolve_input_path,
)
from app.services.report_date_range import (
    InvalidReportDateRangeError,
    ReportDateRange,
)

logger = logging.getLogger("generate_quote_report")

EXIT_INPUT_ERROR = 1
EXIT_GENERATION_ERROR = 2


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate the quote generation HTML report.")
    parser.add_argument("input", nargs="?", default=None, help="Quote export (.csv, .xlsx, .xls).")
    parser.add_argument("--output-dir", default=None, help="Directory for the generated files.")
    parser.add_argument("--start-date", default=None, help="Inclusive request date start (YYYY-MM-DD).")
    parser.add_argument("--end-date", default=None, help="Inclusive request date end (YYYY-MM-DD).")
    parser.add_argument(
        "--no-cleaned",
        action="store_true",
        help="Skip writing quote_generation_cleaned.csv.",
    )
    parser.add_argument("--json", action="store_true", help="Print the statistics as JSON.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = get_quote_report_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    service = QuoteReportService(settings=settings)
    try:
        input_path = resolve_input_path(args.input, settings.source_directory)
        if args.start_date is None and args.end_date is None:
            date_range = service.default_date_range()
        else:
            date_range = ReportDateRange.from_values(
                args.start_date or settings.start_date,
                args.end_date or settings.end_date,
            )
    except (QuoteFileNotFoundError, AmbiguousQuoteInputError, InvalidReportDateRangeError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR

    try:
        generated = service.generate(
            input_path,
            output_directory=args.output_dir,
            date_range=date_range,
            write_cleaned=False if args.no_cleaned else None,
        )
    except (QuoteFileNotFoundError, UnsupportedQuoteFileError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INPUT_ERROR
    except (QuoteFileReadError, OSError) as exc:
        logger.exception("Quote report generation failed input=%s", input_path)
        print(f"Failed to generate report: {exc}", file=sys.stderr)
        return EXIT_GENERATION_ERROR

    if args.json:
        payload = to_statistics_response(generated.report).model_dump(mode="json")
        print(json.dumps(payload, indent=2))
    else:
        print(f"Report written to {generated.report_path}")
        if generated.cleaned_data_path is not None:
            print(f"Cleaned data written to {generated.cleaned_data_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
