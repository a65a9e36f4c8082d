"""The composed map page and the health check."""

import fastapi
from fastapi import responses

from mapviewer.core import config, errors
from mapviewer.services import composer

router = fastapi.APIRouter(tags=["viewer"])


@router.get("/", response_class=responses.HTMLResponse)
async def index(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> responses.HTMLResponse:
    """Compose every configured layer and return the map page.

    Layers that fail to load are left out of the page and announced by an
    alert when it opens.

    Raises:
        HTTPException: 500 if the layer configuration file is unusable.
    """
    try:
        map_viewer, _ = await composer.compose_map(settings)
    except errors.ConfigError as exc:
        raise fastapi.HTTPException(status_code=500, detail=str(exc)) from exc

    return responses.HTMLResponse(map_viewer.render())


@router.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint for monitoring and load balancers.

    Returns:
        Dictionary with status "ok" if the service is running.
    """
    return {"status": "ok"}
