"""Stockhub API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map StockhubError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database and event broadcaster initialized on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Schema auto-creation is a convenience for SQLite/dev; production runs alembic
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockhub.api.error_handlers import register_error_handlers
from stockhub.api.routes import events, exchanges, health, stocks
from stockhub.config import get_settings
from stockhub.infrastructure.broadcast import init_broadcaster
from stockhub.infrastructure.database import init_db
from stockhub.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
    )
    if settings.auto_create_schema:
        manager.create_schema()
    init_broadcaster(settings.event_queue_size)
    logger.info("Stockhub API started")
    yield
    logger.info("Stockhub API shutting down")
    manager.dispose()


settings = get_settings()
app = FastAPI(
    title="Stockhub API", version=settings.service_version, lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(stocks.router)
app.include_router(exchanges.router)
app.include_router(events.router)

register_error_handlers(app)
