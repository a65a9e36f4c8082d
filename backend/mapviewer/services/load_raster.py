"""Single-band GeoTIFF layers (Cloud Optimized GeoTIFFs included).

The raster is fetched as bytes, opened from memory with rasterio and read
through rio-tiler at ``Settings.raster_resolution`` samples on its longest
side. Band 0 is coloured with the configured palette and placed on the map
as an image overlay covering the raster's geographic extent.

The loaded layer reports no bounds, so rasters never move the initial
view.

Example:
    >>> from mapviewer.core.models import LayerConfig
    >>> from mapviewer.services import load_raster
    >>> layer = await load_raster.load_geotiff_layer(
    ...     LayerConfig(type="geotiff", file="data/dtm.tif", name="DTM",
    ...                 colormap="fire"),
    ...     settings,
    ... )
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import TYPE_CHECKING

import folium
import numpy as np
import rasterio
import rasterio.errors
import rasterio.io
import rasterio.warp
from loguru import logger
from rio_tiler import errors as rio_tiler_errors
from rio_tiler import io as rio_tiler_io

from mapviewer.core import bounds as geo_bounds
from mapviewer.core import errors, models
from mapviewer.services import fetch
from mapviewer.utils import colormap

if TYPE_CHECKING:
    from mapviewer.core import config

DEFAULT_OPACITY = 0.6
FALLBACK_MIN = 0.0
FALLBACK_MAX = 1.0
WGS84 = "EPSG:4326"


@dataclasses.dataclass
class RasterData:
    """Decoded raster samples and per-band statistics.

    Attributes:
        bands: Masked array of shape ``(bands, rows, cols)``.
        mins: Minimum of each band.
        maxs: Maximum of each band.
        bounds: Geographic extent of the samples.
    """

    bands: np.ma.MaskedArray
    mins: list[float]
    maxs: list[float]
    bounds: geo_bounds.Bounds


def _band_range(band: np.ma.MaskedArray) -> tuple[float, float]:
    """Min/max of the valid samples, falling back to 0/1 without any."""
    valid = band.compressed()
    valid = valid[np.isfinite(valid)]
    if valid.size == 0:
        return FALLBACK_MIN, FALLBACK_MAX
    return float(valid.min()), float(valid.max())


def decode_raster(payload: bytes, resolution: int) -> RasterData:
    """Decode GeoTIFF bytes into samples, statistics and extent.

    Args:
        payload: Raw bytes of the raster.
        resolution: Longest side, in samples, of the returned bands.

    Raises:
        DecodeError: If the bytes are not a raster rasterio can read.
    """
    try:
        with (
            rasterio.io.MemoryFile(payload) as memfile,
            memfile.open() as dataset,
            rio_tiler_io.Reader(memfile.name, dataset=dataset) as src,
        ):
            image = src.preview(max_size=resolution)
    except (
        rasterio.errors.RasterioError,
        rio_tiler_errors.RioTilerError,
    ) as exc:
        raise errors.DecodeError(f"Cannot decode raster: {exc}") from exc

    bands = np.ma.masked_invalid(np.ma.asarray(image.array, dtype="float64"))
    ranges = [_band_range(band) for band in bands]
    crs = image.crs or WGS84
    west, south, east, north = rasterio.warp.transform_bounds(
        crs, WGS84, *image.bounds
    )
    return RasterData(
        bands=bands,
        mins=[low for low, _ in ranges],
        maxs=[high for _, high in ranges],
        bounds=geo_bounds.Bounds(south, west, north, east),
    )


def build_layer(
    raster: RasterData,
    layer_config: models.LayerConfig,
) -> models.LoadedLayer:
    """Colour band 0 and wrap it in an image overlay."""
    rgba = colormap.colorize(
        raster.bands[0],
        raster.mins[0],
        raster.maxs[0],
        layer_config.colormap,
    )
    overlay = folium.raster_layers.ImageOverlay(
        image=rgba,
        bounds=raster.bounds.to_pairs(),
        name=layer_config.name,
        opacity=(
            layer_config.opacity
            if layer_config.opacity is not None
            else DEFAULT_OPACITY
        ),
    )
    return models.LoadedLayer(
        name=layer_config.name,
        kind=models.LayerKind.GEOTIFF,
        handle=overlay,
    )


def _decode_and_build(
    payload: bytes,
    layer_config: models.LayerConfig,
    resolution: int,
) -> models.LoadedLayer:
    return build_layer(decode_raster(payload, resolution), layer_config)


async def load_geotiff_layer(
    layer_config: models.LayerConfig,
    settings: config.Settings,
) -> models.LoadedLayer:
    """Load a single-band raster entry.

    Raises:
        ConfigError: If ``file`` is missing.
        FetchError: If the raster cannot be retrieved.
        DecodeError: If the bytes cannot be decoded.
    """
    if not layer_config.file:
        raise errors.ConfigError(
            f"GeoTIFF layer {layer_config.name!r} requires 'file'"
        )

    payload = await fetch.fetch_bytes(layer_config.file, settings)
    layer = await asyncio.to_thread(
        _decode_and_build,
        payload,
        layer_config,
        settings.raster_resolution,
    )
    logger.info(f"Loaded raster layer {layer_config.name!r}")
    return layer
