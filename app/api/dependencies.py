"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from datetime import date

from fastapi import File, HTTPException, Query, UploadFile, status

from app.services.quote_loader_service import is_supported_file
from app.services.report_date_range import InvalidReportDateRangeError, ReportDateRange

QUOTE_FILE_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_quote_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a quote export (.csv, .xlsx or .xls).

    The extension decides how the file is parsed, so it is required even
    when the MIME type looks right.
    """

    filename = (file.filename or "").strip()
    content_type = (file.content_type or "").strip().lower()

    if not filename or not is_supported_file(filename):
        detail = "Only .csv, .xlsx and .xls files are allowed."
        if content_type in QUOTE_FILE_CONTENT_TYPES:
            detail = "Uploaded file name must end with .csv, .xlsx or .xls."
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    return file


def get_report_date_range(
    start_date: date | None = Query(default=None, description="Inclusive QuoteRequestedOn start (YYYY-MM-DD)"),
    end_date: date | None = Query(default=None, description="Inclusive QuoteRequestedOn end (YYYY-MM-DD)"),
) -> ReportDateRange | None:
    """
    Build the optional request-date window; None defers to configuration.
    """

    if start_date is None and end_date is None:
        return None
    try:
        return ReportDateRange(start_date=start_date, end_date=end_date)
    except InvalidReportDateRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
