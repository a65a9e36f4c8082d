"""Static image overlays (PNG/JPEG) placed on configured bounds."""

from __future__ import annotations

from typing import TYPE_CHECKING

import folium
from loguru import logger

from mapviewer.core import bounds as geo_bounds
from mapviewer.core import errors, models
from mapviewer.services import fetch

if TYPE_CHECKING:
    from mapviewer.core import config

DEFAULT_OPACITY = 0.6


def _image_source(locator: str, settings: config.Settings) -> str:
    """URL for remote images, existing local path for embedded ones."""
    if fetch.is_remote(locator):
        return fetch.encode_locator(locator)

    path = settings.resolve_local(locator)
    if not path.is_file():
        raise errors.FetchError(f"Image {path} does not exist")
    return str(path)


async def load_image_layer(
    layer_config: models.LayerConfig,
    settings: config.Settings,
) -> models.LoadedLayer:
    """Load an image overlay entry.

    ``bounds`` is checked before anything else, so an entry without it
    fails without touching the file. Local images are embedded in the
    page; remote ones are referenced by their encoded URL.

    Returns:
        Non-interactive overlay whose bounds are the configured bounds.

    Raises:
        ConfigError: If ``bounds`` or ``file`` is missing.
        FetchError: If a local image does not exist.
    """
    if not layer_config.bounds:
        raise errors.ConfigError(
            "Image overlay requires 'bounds': [[S,W],[N,E]]"
        )
    if not layer_config.file:
        raise errors.ConfigError(
            f"Image layer {layer_config.name!r} requires 'file'"
        )

    extent = geo_bounds.Bounds.from_pairs(layer_config.bounds)
    overlay = folium.raster_layers.ImageOverlay(
        image=_image_source(layer_config.file, settings),
        bounds=extent.to_pairs(),
        name=layer_config.name,
        opacity=(
            layer_config.opacity
            if layer_config.opacity is not None
            else DEFAULT_OPACITY
        ),
        interactive=False,
    )
    logger.info(f"Loaded image layer {layer_config.name!r}")
    return models.LoadedLayer(
        name=layer_config.name,
        kind=models.LayerKind.IMAGE,
        handle=overlay,
        bounds=extent,
    )
