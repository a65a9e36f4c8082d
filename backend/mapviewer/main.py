"""FastAPI application entrypoint and configuration.

This module provides the main FastAPI application factory that sets up
CORS middleware, includes the map page and layer registry routers, and
exposes a health check endpoint for monitoring.

Example:
    The application can be run with uvicorn:
        $ uvicorn mapviewer.main:app --reload

    Or imported and used programmatically:
        >>> from mapviewer.main import app
        >>> # Use app in ASGI server
"""

import fastapi
from fastapi.middleware import cors

from mapviewer.api import layers, viewer
from mapviewer.core import config


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application.

    Sets up CORS middleware and includes the map page (``/``), health
    check (``/health``) and layer registry (``/api/layers``) routers. CORS
    origins are configured from settings.

    Returns:
        Configured FastAPI application instance ready for ASGI server.
    """
    settings = config.get_settings()
    app = fastapi.FastAPI(title=settings.title, version="0.1.0")

    app.include_router(viewer.router)
    app.include_router(layers.router)

    app.add_middleware(
        cors.CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = create_app()
