"""Remote tile layers: XYZ tile grids and WMS map services.

Neither kind knows its extent, so both report no bounds.

Example:
    >>> from mapviewer.core.models import LayerConfig
    >>> layer = await load_xyz_layer(
    ...     LayerConfig(type="xyz", name="OpenTopo",
    ...                 url="https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
    ...                 maxZoom=17),
    ...     settings,
    ... )
    >>> layer.bounds is None
    True
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import folium

from mapviewer.core import errors, models

if TYPE_CHECKING:
    from mapviewer.core import config

XYZ_MAX_ZOOM = 20
XYZ_OPACITY = 0.8
WMS_FORMAT = "image/png"
WMS_OPACITY = 0.6


def _require_url(layer_config: models.LayerConfig) -> str:
    if not layer_config.url:
        raise errors.ConfigError(
            f"Tile layer {layer_config.name!r} requires 'url'"
        )
    return layer_config.url


async def load_xyz_layer(
    layer_config: models.LayerConfig,
    settings: config.Settings,
) -> models.LoadedLayer:
    """Wrap an XYZ URL template in a tile layer overlay.

    Custom tiles need an attribution, so the layer name stands in when
    none is configured.
    """
    tiles = folium.TileLayer(
        tiles=_require_url(layer_config),
        attr=layer_config.attribution or layer_config.name,
        name=layer_config.name,
        max_zoom=(
            layer_config.max_zoom
            if layer_config.max_zoom is not None
            else XYZ_MAX_ZOOM
        ),
        overlay=True,
        control=True,
        opacity=(
            layer_config.opacity
            if layer_config.opacity is not None
            else XYZ_OPACITY
        ),
    )
    return models.LoadedLayer(
        name=layer_config.name,
        kind=models.LayerKind.XYZ,
        handle=tiles,
    )


async def load_wms_layer(
    layer_config: models.LayerConfig,
    settings: config.Settings,
) -> models.LoadedLayer:
    """Wrap a WMS endpoint and its layer names in a WMS tile layer."""
    url = _require_url(layer_config)
    if not layer_config.layers:
        raise errors.ConfigError(
            f"WMS layer {layer_config.name!r} requires 'layers'"
        )

    wms = folium.WmsTileLayer(
        url=url,
        layers=layer_config.layers,
        fmt=layer_config.image_format or WMS_FORMAT,
        transparent=(
            layer_config.transparent
            if layer_config.transparent is not None
            else True
        ),
        attr=layer_config.attribution or "",
        name=layer_config.name,
        overlay=True,
        control=True,
        opacity=(
            layer_config.opacity
            if layer_config.opacity is not None
            else WMS_OPACITY
        ),
    )
    return models.LoadedLayer(
        name=layer_config.name,
        kind=models.LayerKind.WMS,
        handle=wms,
    )
