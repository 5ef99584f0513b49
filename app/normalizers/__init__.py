"""
app/normalizers package marker.
"""

from app.normalizers.date_normalizer import (
    DATE_FORMATS,
    OUTPUT_FORMAT,
    format_timestamp,
    is_date_column,
    normalize_date,
    parse_date_only,
)
from app.normalizers.identifier_normalizer import (
    canonicalize_chassis,
    canonicalize_eid,
    clean_categorical,
    is_likely_eid_header,
    is_null_literal,
    normalize_header_key,
)

__all__ = [
    "DATE_FORMATS",
    "OUTPUT_FORMAT",
    "canonicalize_chassis",
    "canonicalize_eid",
    "clean_categorical",
    "format_timestamp",
    "is_date_column",
    "is_likely_eid_header",
    "is_null_literal",
    "normalize_date",
    "normalize_header_key",
    "parse_date_only",
]
