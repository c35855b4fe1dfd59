"""roomstate API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map RoomStateError → structured JSON responses
    - Database initialized on startup and disposed on shutdown via lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from roomstate import __version__
from roomstate.api.error_handlers import register_error_handlers
from roomstate.api.routes import health
from roomstate.config import get_settings
from roomstate.infrastructure import database
from roomstate.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        isolation_level=settings.database_isolation_level,
    )
    logger.info(f"roomstate started for {settings.server_name}")
    yield
    if database.db_manager:
        await database.db_manager.dispose()
    logger.info("roomstate shutting down")


app = FastAPI(title="roomstate", version=__version__, lifespan=lifespan)

app.include_router(health.router)
register_error_handlers(app)
