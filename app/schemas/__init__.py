"""
app/schemas package marker.
"""

from app.schemas.quote_report import (
    GroupStatsResponse,
    QuoteStatisticsResponse,
)

__all__ = [
    "GroupStatsResponse",
    "QuoteStatisticsResponse",
]
