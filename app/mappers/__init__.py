"""
app/mappers package marker.
"""

from app.mappers.quote_record_mapper import (
    DEFAULT_FIELD_ALIASES,
    QuoteRecordMapper,
    determine_outcome,
    first_matching_value,
    quote_record_from_values,
)

__all__ = [
    "DEFAULT_FIELD_ALIASES",
    "QuoteRecordMapper",
    "determine_outcome",
    "first_matching_value",
    "quote_record_from_values",
]
