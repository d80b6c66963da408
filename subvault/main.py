"""SubVault API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one router per resource
    - Global error handlers map SubVaultError to structured JSON responses
    - CORS and rate limits configured from settings
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - The default per-IP limit is a router dependency; /unlock is decorated
      with its own stricter limit instead
    - Local SQLite deployments create tables on startup
      (DATABASE_AUTO_CREATE); managed databases run Alembic migrations
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from subvault.api.error_handlers import register_error_handlers
from subvault.api.routes import (
    ai, analytics, auth, credentials, health, notifications, subscriptions,
    tags, vault,
)
from subvault.config import get_settings
from subvault.infrastructure.database import init_db
from subvault.infrastructure.observability import setup_logging
from subvault.infrastructure.rate_limit import enforce_default_limit, limiter

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
    if settings.database_auto_create:
        await manager.create_all()
    logger.info("SubVault API started")
    yield
    logger.info("SubVault API shutting down")
    await manager.dispose()


settings = get_settings()
app = FastAPI(
    title="SubVault API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

app.state.limiter = limiter
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

register_error_handlers(app)

# /unlock carries its own stricter limit; /verify opts in per route
app.include_router(auth.router)

default_limit = [Depends(enforce_default_limit)]
app.include_router(health.router, dependencies=default_limit)
app.include_router(vault.router, dependencies=default_limit)
app.include_router(subscriptions.router, dependencies=default_limit)
app.include_router(credentials.router, dependencies=default_limit)
app.include_router(tags.router, dependencies=default_limit)
app.include_router(notifications.router, dependencies=default_limit)
app.include_router(analytics.router, dependencies=default_limit)
app.include_router(ai.router, dependencies=default_limit)
