"""Tests for the layer entry model and its JSON key mapping.

Covers camelCase keys, the ``type`` and ``format`` aliases, defaults, and
the derived ``swatch_color`` and ``source`` properties.
"""

from __future__ import annotations

import pydantic
import pytest

from mapviewer.core import models


def test_layer_config_defaults() -> None:
    """Test LayerConfig defaults for a bare entry."""
    layer = models.LayerConfig(name="Districts", file="data/Districts.zip")
    assert layer.kind is None
    assert layer.visible is True
    assert layer.fill is False
    assert layer.point_as_circles is False
    assert layer.label_permanent is False
    assert layer.bounds is None
    assert layer.swatch_color == models.DEFAULT_COLOR


def test_layer_config_camel_case_keys() -> None:
    layer = models.LayerConfig.model_validate(
        {
            "file": "data/Districts.zip",
            "name": "Districts",
            "fillOpacity": 0.1,
            "labelField": "Dist_name",
            "labelPermanent": True,
            "pointAsCircles": True,
            "pointRadius": 4,
        }
    )
    assert layer.fill_opacity == 0.1
    assert layer.label_field == "Dist_name"
    assert layer.label_permanent is True
    assert layer.point_as_circles is True
    assert layer.point_radius == 4


def test_layer_config_type_and_format_aliases() -> None:
    layer = models.LayerConfig.model_validate(
        {
            "type": "wms",
            "url": "https://ahocevar.com/geoserver/wms",
            "name": "States",
            "layers": "topp:states",
            "format": "image/jpeg",
            "maxZoom": 17,
        }
    )
    assert layer.kind == "wms"
    assert layer.image_format == "image/jpeg"
    assert layer.max_zoom == 17


def test_layer_config_bounds_pairs() -> None:
    layer = models.LayerConfig.model_validate(
        {
            "type": "image",
            "file": "overlay.png",
            "name": "Overlay",
            "bounds": [[63.35, 10.25], [63.5, 10.55]],
        }
    )
    assert layer.bounds == ((63.35, 10.25), (63.5, 10.55))


def test_layer_config_is_frozen() -> None:
    layer = models.LayerConfig(name="Districts")
    with pytest.raises(pydantic.ValidationError):
        layer.name = "Other"  # type: ignore[misc]


def test_layer_config_source_fallbacks() -> None:
    assert models.LayerConfig(name="a", file="a.zip").source == "a.zip"
    assert (
        models.LayerConfig(name="b", url="https://tiles/{z}").source
        == "https://tiles/{z}"
    )
    assert models.LayerConfig(name="c").source == "c"


def test_layer_config_swatch_uses_color() -> None:
    layer = models.LayerConfig(name="City", color="rgba(233, 14, 14, 1)")
    assert layer.swatch_color == "rgba(233, 14, 14, 1)"


def test_layer_config_null_flags() -> None:
    """A null visibility means visible; other null flags mean off."""
    layer = models.LayerConfig.model_validate(
        {
            "name": "Districts",
            "visible": None,
            "fill": None,
            "pointAsCircles": None,
            "labelPermanent": None,
        }
    )
    assert layer.visible is True
    assert layer.fill is False
    assert layer.point_as_circles is False
    assert layer.label_permanent is False
