"""Zipped shapefile layers.

The archive is fetched, decoded with geopandas through GDAL's ``/vsizip/``
handler, reprojected to EPSG:4326 and turned into a folium FeatureGroup
holding one GeoJson layer per feature. Every feature gets a popup table of
its properties; features carrying the configured label field also get a
label tooltip.

Styling defaults:
    - lines and polygons: colour ``#0077b6``, weight 2, no fill,
      fill opacity 0.2.
    - points: default marker, or with ``pointAsCircles`` a filled circle
      marker of radius 6 and fill opacity 0.8.

Example:
    >>> from mapviewer.core.models import LayerConfig
    >>> from mapviewer.services import load_vector
    >>> layer = await load_vector.load_shapefile_layer(
    ...     LayerConfig(file="data/Districts.zip", name="Districts",
    ...                 label_field="Dist_name"),
    ...     settings,
    ... )
    >>> layer.bounds  # extent of every decoded geometry
    Bounds(south=63.28, west=10.0, north=63.47, east=10.69)
"""

from __future__ import annotations

import asyncio
import html
import pathlib
import tempfile
import zipfile
from typing import TYPE_CHECKING, Any

import folium
import geopandas
import pandas as pd
import pyogrio.errors
from loguru import logger

from mapviewer.core import bounds as geo_bounds
from mapviewer.core import errors, models
from mapviewer.services import fetch

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from mapviewer.core import config

DEFAULT_WEIGHT = 2
DEFAULT_FILL_OPACITY = 0.2
DEFAULT_POINT_RADIUS = 6
DEFAULT_POINT_FILL_OPACITY = 0.8
LABEL_OPACITY = 0.9
WGS84_EPSG = 4326

_POINT_TYPES = {"Point", "MultiPoint"}
_MACOS_METADATA = "__MACOSX/"
_JSON_SCALARS = (str, int, float, bool)


def props_table(properties: Mapping[str, Any]) -> str:
    """Render feature properties as an HTML key/value table.

    Rows follow the iteration order of ``properties``; missing values are
    left blank.
    """
    rows = "".join(
        '<tr><th style="text-align:left; padding-right:6px;">'
        f"{html.escape(str(key))}</th>"
        f"<td>{html.escape('' if value is None else str(value))}</td></tr>"
        for key, value in properties.items()
    )
    return f"<table>{rows}</table>"


def _shapefile_members(archive: pathlib.Path) -> list[str]:
    """Paths of every ``.shp`` inside the archive, at any depth."""
    try:
        with zipfile.ZipFile(archive) as zipped:
            names = zipped.namelist()
    except zipfile.BadZipFile as exc:
        raise errors.DecodeError(
            f"Cannot decode shapefile archive: {exc}"
        ) from exc

    members = [
        name
        for name in names
        if name.lower().endswith(".shp")
        and not name.startswith(_MACOS_METADATA)
    ]
    if not members:
        raise errors.DecodeError("Shapefile archive contains no .shp file")
    return members


def _to_wgs84(frame: geopandas.GeoDataFrame) -> geopandas.GeoDataFrame:
    if frame.crs is None:
        return frame.set_crs(epsg=WGS84_EPSG)
    if frame.crs.to_epsg() != WGS84_EPSG:
        return frame.to_crs(epsg=WGS84_EPSG)
    return frame


def decode_archive(payload: bytes) -> geopandas.GeoDataFrame:
    """Decode a zipped shapefile into a GeoDataFrame in EPSG:4326.

    Every shapefile in the archive is read, including those inside
    folders, and their features are concatenated in archive order.

    Raises:
        DecodeError: If the payload is not a zip, holds no shapefile, or
            GDAL cannot open one of its shapefiles.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        archive = pathlib.Path(tmpdir) / "layer.zip"
        archive.write_bytes(payload)
        frames = []
        for member in _shapefile_members(archive):
            try:
                frame = geopandas.read_file(f"/vsizip/{archive}/{member}")
            except (
                pyogrio.errors.DataSourceError,
                pyogrio.errors.DataLayerError,
            ) as exc:
                raise errors.DecodeError(
                    f"Cannot decode shapefile {member}: {exc}"
                ) from exc
            frames.append(_to_wgs84(frame))

    if len(frames) == 1:
        return frames[0]
    return geopandas.GeoDataFrame(
        pd.concat(frames, ignore_index=True),
        geometry="geometry",
        crs=f"EPSG:{WGS84_EPSG}",
    )


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, _JSON_SCALARS):
        return value
    return str(value)


def _style_function(
    layer_config: models.LayerConfig,
) -> Callable[[dict[str, Any]], dict[str, Any]]:
    style = {
        "color": layer_config.swatch_color,
        "weight": (
            layer_config.weight
            if layer_config.weight is not None
            else DEFAULT_WEIGHT
        ),
        "fill": layer_config.fill,
        "fillOpacity": (
            layer_config.fill_opacity
            if layer_config.fill_opacity is not None
            else DEFAULT_FILL_OPACITY
        ),
    }
    return lambda _feature: style


def _point_marker(
    layer_config: models.LayerConfig,
) -> folium.CircleMarker | None:
    if not layer_config.point_as_circles:
        return None

    return folium.CircleMarker(
        radius=(
            layer_config.point_radius
            if layer_config.point_radius is not None
            else DEFAULT_POINT_RADIUS
        ),
        color=layer_config.swatch_color,
        weight=(
            layer_config.weight
            if layer_config.weight is not None
            else DEFAULT_WEIGHT
        ),
        fill=True,
        fill_opacity=(
            layer_config.fill_opacity
            if layer_config.fill_opacity is not None
            else DEFAULT_POINT_FILL_OPACITY
        ),
    )


def _label(
    properties: Mapping[str, Any],
    layer_config: models.LayerConfig,
) -> folium.Tooltip | None:
    field = layer_config.label_field
    if not field or properties.get(field) is None:
        return None

    return folium.Tooltip(
        str(properties[field]),
        sticky=not layer_config.label_permanent,
        permanent=layer_config.label_permanent,
        direction="top",
        opacity=LABEL_OPACITY,
    )


def _feature_layer(
    feature: dict[str, Any],
    layer_config: models.LayerConfig,
) -> folium.GeoJson:
    properties = {
        key: _jsonable(value)
        for key, value in (feature.get("properties") or {}).items()
    }
    feature = {**feature, "properties": properties}
    is_point = feature["geometry"]["type"] in _POINT_TYPES

    return folium.GeoJson(
        feature,
        style_function=None if is_point else _style_function(layer_config),
        marker=_point_marker(layer_config) if is_point else None,
        popup=folium.Popup(props_table(properties), max_width=400),
        tooltip=_label(properties, layer_config),
        control=False,
    )


def build_layer(
    frame: geopandas.GeoDataFrame,
    layer_config: models.LayerConfig,
) -> models.LoadedLayer:
    """Turn decoded features into a FeatureGroup named after the entry."""
    group = folium.FeatureGroup(name=layer_config.name)
    for feature in frame.iterfeatures(na="null", drop_id=False):
        if feature.get("geometry") is None:
            continue
        _feature_layer(feature, layer_config).add_to(group)

    extent = geo_bounds.Bounds.from_bbox(frame.total_bounds)
    return models.LoadedLayer(
        name=layer_config.name,
        kind=models.LayerKind.SHAPEFILE,
        handle=group,
        bounds=extent if extent.is_valid() else None,
    )


def _decode_and_build(
    payload: bytes,
    layer_config: models.LayerConfig,
) -> models.LoadedLayer:
    return build_layer(decode_archive(payload), layer_config)


async def load_shapefile_layer(
    layer_config: models.LayerConfig,
    settings: config.Settings,
) -> models.LoadedLayer:
    """Load a zipped shapefile entry.

    Args:
        layer_config: Entry with ``file`` pointing at the archive.
        settings: Application settings used to locate the file.

    Returns:
        LoadedLayer whose bounds are the extent of the decoded geometry,
        or None when the archive holds no geometry.

    Raises:
        ConfigError: If ``file`` is missing.
        FetchError: If the archive cannot be retrieved.
        DecodeError: If the archive cannot be decoded.
    """
    if not layer_config.file:
        raise errors.ConfigError(
            f"Shapefile layer {layer_config.name!r} requires 'file'"
        )

    payload = await fetch.fetch_bytes(layer_config.file, settings)
    layer = await asyncio.to_thread(_decode_and_build, payload, layer_config)
    logger.info(f"Loaded shapefile layer {layer_config.name!r}")
    return layer
