"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .api import api_router
from .web import web_router
from .middleware.logging import LoggingMiddleware
from ..config import Config
from ..database.base import LinkStoreBase
from ..reaper import Reaper
from ..service import LinkService


def create_app(
    store: LinkStoreBase,
    service: LinkService,
    config: Config,
    reaper: Optional[Reaper] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        store: Link store instance
        service: Link service instance
        config: Configuration instance
        reaper: Optional reaper, started and stopped with the app

    Returns:
        Configured FastAPI app
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if reaper is not None:
            reaper.start()
        try:
            yield
        finally:
            if reaper is not None:
                reaper.stop(timeout=config.reaper_interval_seconds * 2)

    app = FastAPI(
        title="Short Links",
        description="Short links with TTL and click-budget expiry",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # Store instances in app state for access in routes
    app.state.store = store
    app.state.service = service
    app.state.config = config
    app.state.reaper = reaper

    app.add_middleware(LoggingMiddleware)

    # API first so /api/... never matches the /{code} redirect
    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(web_router, tags=["Redirect"])

    return app
