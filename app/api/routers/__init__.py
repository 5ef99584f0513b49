"""
app/api/routers package marker.
"""

from app.api.routers.quote_report import router as quote_report_router

__all__ = [
    "quote_report_router",
]
