"""Data models for layer entries and loaded layers.

This module defines the core data structures used throughout the
application. ``LayerConfig`` is one entry of the layer configuration file,
``LoadedLayer`` is what a loader hands back to the registry, and
``LayerFailure`` records an entry that could not be loaded.

Example:
    Creating a LayerConfig for a zipped shapefile:
        >>> from mapviewer.core.models import LayerConfig
        >>> layer = LayerConfig(
        ...     file="data/Districts.zip",
        ...     name="Districts",
        ...     color="#0ea5e9",
        ...     fill=True,
        ...     fill_opacity=0.1,
        ...     label_field="Dist_name",
        ...     visible=False,
        ... )

    Entries read from JSON use camelCase keys:
        >>> LayerConfig.model_validate(
        ...     {"type": "xyz", "name": "OpenTopo", "url": "https://...",
        ...      "maxZoom": 17}
        ... ).max_zoom
        17
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Any

import pydantic
from pydantic import alias_generators

from mapviewer.core import bounds as geo_bounds

DEFAULT_COLOR = "#0077b6"


class LayerKind(enum.StrEnum):
    """Kind of data source behind a layer entry."""

    SHAPEFILE = "shapefile"
    GEOTIFF = "geotiff"
    IMAGE = "image"
    XYZ = "xyz"
    WMS = "wms"


class LayerConfig(pydantic.BaseModel):
    """One entry of the layer configuration.

    Attributes:
        name: Display name, unique key of the registry and legend label.
        file: Source locator, a local path or a remote URL.
        kind: Explicit kind tag (JSON key ``type``), case-insensitive.
        url: Tile URL template or WMS endpoint.
        color: Stroke colour, also used as the legend swatch.
        weight: Stroke weight.
        fill: Whether polygons are filled.
        fill_opacity: Fill opacity.
        point_as_circles: Render point features as circle markers.
        point_radius: Radius of circle markers.
        label_field: Feature property shown as a label.
        label_permanent: Keep labels visible instead of on hover.
        opacity: Layer opacity for raster, image and tile layers.
        bounds: ``[[south, west], [north, east]]`` for image overlays.
        visible: Whether the layer is shown at startup.
        max_zoom: Maximum zoom of an XYZ layer.
        layers: WMS layer names.
        image_format: WMS image format (JSON key ``format``).
        transparent: WMS transparency.
        colormap: Raster palette, ``"grayscale"`` or ``"fire"``.
        attribution: Attribution text of tile layers.
    """

    model_config = pydantic.ConfigDict(
        alias_generator=alias_generators.to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    name: str
    file: str | None = None
    kind: str | None = pydantic.Field(default=None, alias="type")
    url: str | None = None
    color: str | None = None
    weight: float | None = None
    fill: bool = False
    fill_opacity: float | None = None
    point_as_circles: bool = False
    point_radius: float | None = None
    label_field: str | None = None
    label_permanent: bool = False
    opacity: float | None = None
    bounds: tuple[tuple[float, float], tuple[float, float]] | None = None
    visible: bool = True
    max_zoom: int | None = None
    layers: str | None = None
    image_format: str | None = pydantic.Field(default=None, alias="format")
    transparent: bool | None = None
    colormap: str | None = None
    attribution: str | None = None

    @pydantic.field_validator("visible", mode="before")
    @classmethod
    def null_is_visible(cls, value: Any) -> Any:
        return True if value is None else value

    @pydantic.field_validator(
        "fill", "point_as_circles", "label_permanent", mode="before"
    )
    @classmethod
    def null_is_off(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def swatch_color(self) -> str:
        return self.color or DEFAULT_COLOR

    @property
    def source(self) -> str:
        """Locator used when reporting this entry."""
        return self.file or self.url or self.name


@dataclasses.dataclass
class LoadedLayer:
    """A renderable layer produced by a loader.

    Attributes:
        name: Name of the entry the layer was loaded from.
        kind: Kind the entry was resolved to.
        handle: The folium layer added to the map.
        bounds: Geographic extent, None when the kind cannot report one.
    """

    name: str
    kind: LayerKind
    handle: Any
    bounds: geo_bounds.Bounds | None = None


@dataclasses.dataclass
class LayerFailure:
    name: str
    source: str
    message: str


@dataclasses.dataclass
class RejectedEntry:
    """A configuration entry that failed validation.

    It keeps its place in the configuration order so the failure is
    reported where the layer would have been loaded.

    Attributes:
        name: The entry's ``name``, or its position when it has none.
        source: The entry's ``file`` or ``url``, falling back to the name.
        error: Why the entry was rejected.
    """

    name: str
    source: str
    error: Exception
