"""FastAPI application entrypoint and configuration.

This module provides the main FastAPI application factory that configures
logging, sets up CORS middleware, includes the vector tile router, and
exposes a health check endpoint for monitoring.

Example:
    The application can be run with uvicorn:
        $ uvicorn tile_api.main:app --reload

    Or imported and used programmatically:
        >>> from tile_api.main import app
        >>> # Use app in ASGI server
"""

import datetime

import fastapi
from fastapi.middleware import cors

from tile_api.api import tiles
from tile_api.core import config, logging_config


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Configures logging from settings, sets up CORS middleware, includes the
    tile router, and adds a health check endpoint. CORS origins are
    configured from settings and allow every origin by default so web map
    clients on other hosts can fetch tiles.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    logging_config.configure_logging(settings.log_level)

    app = fastapi.FastAPI(title="Open Data Hub Vector Tile API", version="0.1.0")

    app.include_router(tiles.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health() -> dict[str, str]:  # type: ignore[misc]
        """Health check endpoint for monitoring and load balancers.

        Returns:
            Dictionary with status "healthy" and the current UTC time.
        """
        return {
            "status": "healthy",
            "timestamp": datetime.datetime.now(datetime.UTC).isoformat(),
        }

    return app


app = create_app()
