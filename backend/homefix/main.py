# backend/homefix/main.py
"""
HomeFix API application.

Run locally with ``uvicorn homefix.main:app --reload`` from ``backend/``.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI, Response

from . import __version__
from .core.config import settings
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes import bookings, notifications, reviews, technicians

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(f"Starting HomeFix API {__version__} ({settings.environment})")
    if settings.environment == "local":
        init_db()
    if not settings.redis_url:
        logger.warning("REDIS_URL not set: locks fail open and realtime events are not delivered")
    yield
    logger.info("HomeFix API shutting down")


def create_app() -> FastAPI:
    app = FastAPI(title="HomeFix API", version=__version__, lifespan=lifespan)
    register_error_handlers(app)

    app.include_router(bookings.router)
    app.include_router(reviews.router)
    app.include_router(technicians.router)
    app.include_router(notifications.router)

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        return {"status": "ok", "version": __version__}

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return app


app = create_app()
