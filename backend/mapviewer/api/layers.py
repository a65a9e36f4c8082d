"""Layer registry query endpoints.

This module exposes the outcome of a composition run: the registered
layers in configuration order, the entries that failed, and the bounds of
a single layer. Bounds are ``[[south, west], [north, east]]`` in
latitude/longitude.

Example:
    List the registered layers:
        >>> response = client.get("/api/layers")
        >>> response.json()
        >>> # [{"name": "Districts", "kind": "shapefile", "visible": false,
        >>> #   "bounds": [[63.28, 10.0], [63.47, 10.69]]}, ...]

    Get the bounds of one layer:
        >>> client.get("/api/layers/Districts/bounds").json()
        >>> # {"bounds": [[63.28, 10.0], [63.47, 10.69]]}
"""

from typing import Any

import fastapi

from mapviewer.core import bounds as geo_bounds
from mapviewer.core import config, errors
from mapviewer.services import composer, registry

router = fastapi.APIRouter(prefix="/api/layers", tags=["layers"])


async def _get_registry(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
) -> registry.LayerRegistry:
    """Run a composition and return its registry.

    Nothing is cached between requests. Each call re-reads the layer
    configuration, then fetches and decodes every layer again.

    Raises:
        HTTPException: 500 if the layer configuration file is unusable.
    """
    try:
        _, layer_registry = await composer.compose_map(settings)
    except errors.ConfigError as exc:
        raise fastapi.HTTPException(status_code=500, detail=str(exc)) from exc
    return layer_registry


def _pairs(bounds: geo_bounds.Bounds | None) -> list[list[float]] | None:
    return bounds.to_pairs() if bounds is not None else None


@router.get("")
async def list_layers(
    layer_registry: registry.LayerRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> list[dict[str, Any]]:
    """List registered layers in configuration order.

    Composes the map afresh for this request.

    Returns:
        One dictionary per layer with its name, resolved kind, initial
        visibility and bounds (None for kinds without bounds).
    """
    return [
        {
            "name": name,
            "kind": layer.kind.value,
            "visible": layer_registry.configs[name].visible,
            "bounds": _pairs(layer.bounds),
        }
        for name, layer in layer_registry.layers.items()
    ]


@router.get("/failures")
async def list_failures(
    layer_registry: registry.LayerRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> list[dict[str, str]]:
    """List the entries that could not be loaded, with their error.

    Composes the map afresh for this request.
    """
    return [
        {
            "name": failure.name,
            "source": failure.source,
            "message": failure.message,
        }
        for failure in layer_registry.failures
    ]


@router.get("/{name}/bounds")
async def get_layer_bounds(
    name: str,
    layer_registry: registry.LayerRegistry = fastapi.Depends(_get_registry),  # noqa: B008
) -> dict[str, list[list[float]] | None]:
    """Get the bounds of a registered layer.

    Composes the map afresh for this request.

    Raises:
        HTTPException: If the layer is not registered (404 status code).
    """
    layer = layer_registry.layers.get(name)
    if layer is None:
        raise fastapi.HTTPException(
            status_code=404,
            detail="Layer not found",
        )

    return {"bounds": _pairs(layer.bounds)}
