from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from loguru import logger

from fortnite_coach.api.pages import render_error
from fortnite_coach.api.pages import router as pages_router
from fortnite_coach.api.stats import router as stats_router
from fortnite_coach.core.cache import TTLCache
from fortnite_coach.core.logger import setup_logger
from fortnite_coach.core.settings import Settings, get_settings
from fortnite_coach.integrations.fortnite.client import FortniteApiClient
from fortnite_coach.services.feedback_generator import (
    FULL_FEEDBACK_MAX_TOKENS,
    QUICK_FEEDBACK_MAX_TOKENS,
    FeedbackGenerator,
    build_llm,
)
from fortnite_coach.services.stats_service import StatsService


def build_services(settings: Settings, cache: TTLCache | None = None) -> tuple[StatsService, FeedbackGenerator]:
    """Wire the stats pipeline and feedback generator around one shared cache."""
    cache = cache or TTLCache()
    client = FortniteApiClient(
        api_key=settings.fortnite_api_key,
        base_url=settings.fortnite_api_base_url,
        timeout=settings.http_timeout_seconds,
    )
    stats_service = StatsService(client=client, cache=cache)
    feedback_generator = FeedbackGenerator(
        cache=cache,
        llm=build_llm(settings, FULL_FEEDBACK_MAX_TOKENS),
        quick_llm=build_llm(settings, QUICK_FEEDBACK_MAX_TOKENS),
    )
    return stats_service, feedback_generator


def create_app(
    settings: Settings | None = None,
    *,
    stats_service: StatsService | None = None,
    feedback_generator: FeedbackGenerator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Loading settings here means a missing API key stops the process before it
    accepts any request.
    """
    if stats_service is None or feedback_generator is None:
        settings = settings or get_settings()
        setup_logger(level=settings.log_level, log_file=settings.log_file)
        default_stats, default_feedback = build_services(settings)
        stats_service = stats_service or default_stats
        feedback_generator = feedback_generator or default_feedback

    app = FastAPI(title="Fortnite Stats Coach")
    app.state.stats_service = stats_service
    app.state.feedback_generator = feedback_generator

    app.include_router(pages_router)
    app.include_router(stats_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests."""
        logger.debug(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
        return response

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> HTMLResponse:
        logger.opt(exception=exc).error(f"Unhandled error for {request.method} {request.url.path}")
        return HTMLResponse(render_error(), status_code=500)

    logger.info("FastAPI application initialized")
    return app
