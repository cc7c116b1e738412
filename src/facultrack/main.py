"""FastAPI application entrypoint for Facultrack."""

from fastapi import FastAPI

from . import __version__
from .api.v1.router import api_router
from .core.config import get_settings
from .core.database import init_db
from .core.logging import configure_logging
from .jobs import register_scheduler


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Facultrack API", version=__version__)
    app.include_router(api_router, prefix="/api/v1")

    if settings.init_db_on_startup:
        @app.on_event("startup")
        def _init_db() -> None:
            init_db()

    register_scheduler(app)
    return app


app = create_app()
