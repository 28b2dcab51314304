"""cmasapp API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CmasError → problem+json responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup, disposed on shutdown via lifespan
    - Every request produces one access log line (observability.log_requests)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py and are registered once here
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cmasapp import __version__
from cmasapp.api.error_handlers import register_error_handlers
from cmasapp.api.routes import users
from cmasapp.config import get_settings
from cmasapp.infrastructure.database import init_db
from cmasapp.infrastructure.observability import log_requests, setup_logging

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
    )
    if settings.database_create_schema:
        await manager.create_schema()
    logger.info("cmasapp API started")
    yield
    await manager.dispose()
    logger.info("cmasapp API shutting down")


app = FastAPI(title="cmasapp API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(log_requests)
app.include_router(users.router)

register_error_handlers(app)
