"""FastAPI application factory and lifespan for the weather cache."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .api.router import api_router
from .config import Settings, settings as default_settings
from .services.notifications import ChangeNotifier
from .services.store import open_store

# Configure logging for our app (uvicorn only configures its own loggers)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:     %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    cfg = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the store for the lifetime of the app."""
        logger.info("Database: %s", cfg.db_path)
        app.state.settings = cfg
        app.state.notifier = ChangeNotifier()
        app.state.store = open_store(cfg, notifier=app.state.notifier)
        yield
        logger.info("Shutting down...")
        app.state.store.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Weather Cache",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(api_router)
    return app


def run() -> None:
    import uvicorn

    uvicorn.run(create_app(), host=default_settings.host, port=default_settings.port)


if __name__ == "__main__":
    run()
