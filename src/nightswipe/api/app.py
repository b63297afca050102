"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from nightswipe.api.admin import router as admin_router
from nightswipe.api.errors import register_error_handlers
from nightswipe.api.sessions import router as session_router
from nightswipe.app_logging import configure_logging
from nightswipe.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("NightSwipe API starting (%s)", container.settings.environment)
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="NightSwipe API", lifespan=lifespan)
    app.state.container = container

    register_error_handlers(app)
    app.include_router(session_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok", "service": "NightSwipe API"}

    return app
