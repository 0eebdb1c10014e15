"""FastAPI application definition.

Run via: uvicorn --factory taskhub.entrypoints.api.app:create_app
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskhub import __version__
from taskhub.config import Settings

from .deps import AppServices, lifespan
from .errors import install_error_handlers
from .routes import api_router


def create_app(
    settings: Settings | None = None,
    services: AppServices | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use. Read from the environment when omitted.
        services: Pre-wired services. When given, no database is connected.

    Returns:
        The configured FastAPI app.
    """
    settings = settings or (services.settings if services else Settings.from_env())

    app = FastAPI(
        title="taskhub",
        description="Team task management",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,  # Prevent 307 redirects that lose auth headers
    )
    app.state.settings = settings
    app.state.services = services

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # Include API routes
    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
