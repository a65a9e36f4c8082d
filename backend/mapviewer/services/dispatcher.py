"""Routing of layer entries to the loader of their kind.

Each ``LayerKind`` has exactly one loader, registered when the dispatcher
is built. Supporting a new kind means adding an enum member and
registering its loader; the dispatch path itself does not change.

Example:
    >>> from mapviewer.services.dispatcher import LayerDispatcher
    >>> dispatcher = LayerDispatcher(settings)
    >>> layer = await dispatcher.dispatch(layer_config)

    Replace a loader, e.g. in tests:
        >>> dispatcher.register(LayerKind.XYZ, fake_loader)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING

from mapviewer.core import models
from mapviewer.services import (
    load_image,
    load_raster,
    load_tiles,
    load_vector,
    resolver,
)

if TYPE_CHECKING:
    from mapviewer.core import config

Loader = Callable[
    [models.LayerConfig, "config.Settings"],
    Awaitable[models.LoadedLayer],
]


def default_loaders() -> dict[models.LayerKind, Loader]:
    return {
        models.LayerKind.SHAPEFILE: load_vector.load_shapefile_layer,
        models.LayerKind.GEOTIFF: load_raster.load_geotiff_layer,
        models.LayerKind.IMAGE: load_image.load_image_layer,
        models.LayerKind.XYZ: load_tiles.load_xyz_layer,
        models.LayerKind.WMS: load_tiles.load_wms_layer,
    }


class LayerDispatcher:
    """Resolves an entry's kind and runs the one loader registered for it."""

    def __init__(
        self,
        settings: config.Settings,
        loaders: Mapping[models.LayerKind, Loader] | None = None,
    ) -> None:
        self._settings = settings
        self._loaders = dict(default_loaders() if loaders is None else loaders)

    def register(self, kind: models.LayerKind, loader: Loader) -> None:
        """Add or replace the loader for ``kind``."""
        self._loaders[kind] = loader

    async def dispatch(
        self,
        layer_config: models.LayerConfig,
    ) -> models.LoadedLayer:
        """Load one entry with the loader of its resolved kind.

        No fallback and no retry: whatever the loader raises propagates
        unchanged.

        Raises:
            LoadError: Raised by the selected loader.
            KeyError: If no loader is registered for the resolved kind.
        """
        kind = resolver.resolve_kind(layer_config.kind, layer_config.file)
        loader = self._loaders[kind]
        return await loader(layer_config, self._settings)
