"""FastAPI application for the DevHub content platform.

Provides REST API endpoints for:
- Accounts and session tokens
- Blog posts and their comments
- Forum threads, replies and moderation
- Public user profiles
- Contact intake and admin triage

Build the app with :func:`create_app`; ``devhub serve`` runs it through
uvicorn's factory mode.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devhub import __version__
from devhub.config import Settings
from devhub.notifications.mailer import Mailer
from devhub.services import Services
from web.backend.app.errors import install_error_handlers
from web.backend.app.routers import auth, blog, contact, forum, user

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, mailer: Optional[Mailer] = None) -> FastAPI:
    """Build the API around a fresh service container.

    ``settings`` defaults to :meth:`Settings.from_env`. ``mailer`` overrides
    the one the settings would select (tests pass a fake here).
    """
    settings = settings or Settings.from_env()
    services = Services.build(settings, mailer=mailer)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        purged = services.users.purge_expired_sessions()
        logger.info("DevHub API starting (data dir %s, %d expired sessions purged)", settings.data_dir, purged)
        yield
        services.close()

    app = FastAPI(
        title="DevHub API",
        description=(
            "REST API for the DevHub community platform. "
            "Provides endpoints for accounts, blog posts, forum threads, "
            "user profiles and contact messages."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services

    # -----------------------------------------------------------------------
    # CORS middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # -----------------------------------------------------------------------
    # Include routers
    # -----------------------------------------------------------------------
    app.include_router(auth.router)
    app.include_router(blog.router)
    app.include_router(forum.router)
    app.include_router(user.router)
    app.include_router(contact.router)

    # -----------------------------------------------------------------------
    # Root and health-check endpoints
    # -----------------------------------------------------------------------

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "DevHub API",
            "version": __version__,
            "description": "Community platform REST API",
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app
