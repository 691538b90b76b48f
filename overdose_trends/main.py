from __future__ import annotations

import logging

from fastapi import FastAPI

from overdose_trends.capabilities import get_capability_report
from overdose_trends.config import get_dashboard_settings
from overdose_trends.logging_utils import configure_logging
from overdose_trends.schemas.series import HealthResponse


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging()
    settings = get_dashboard_settings()
    logging.getLogger(__name__).info(
        "Starting overdose trends API schema_mode=%s",
        settings.schema_mode.value,
    )

    application = FastAPI(
        title="Overdose Trends API",
        version="1.0.0",
    )

    from overdose_trends.api.routers import series_router  # noqa: PLC0415

    application.include_router(series_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        report = get_capability_report()
        return HealthResponse(
            status="ok" if report.available else "degraded",
            capabilities=report.as_dict(),
        )

    return application


app = create_app()
