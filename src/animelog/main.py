"""FastAPI application factory and uvicorn entry point."""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from animelog import __version__
from animelog.api import api_router
from animelog.api.exception_handlers import register_exception_handlers
from animelog.config import Settings, get_settings
from animelog.infrastructure.lifecycle import lifespan
from animelog.infrastructure.observability import RequestLoggingMiddleware

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Explicit settings (tests); defaults to the cached env settings
    """
    settings = settings or get_settings()

    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.state.settings = settings

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)
    app.include_router(api_router, prefix="/api")

    # Hey future me - cover files are plain static files, the paths stored in db.json point here.
    # check_dir=False because the lifespan creates the directory, which runs AFTER this.
    app.mount(
        settings.storage.covers_url_prefix,
        StaticFiles(directory=settings.storage.covers_dir, check_dir=False),
        name="anime-covers",
    )
    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "animelog.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
