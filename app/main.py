from __future__ import annotations

import logging

from fastapi import FastAPI

from app.config import get_quote_report_settings


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = get_quote_report_settings().log_level
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Quote Report API",
        version="1.0.0",
    )

    from app.api.routers import quote_report_router

    application.include_router(quote_report_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    logging.getLogger(__name__).info("Quote report API initialised")
    return application


app = create_app()
