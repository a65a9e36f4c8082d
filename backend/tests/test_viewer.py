"""Tests for the folium presentation shell.

Maps are rendered to HTML in memory; tile providers are resolved from the
bundled xyzservices catalogue, so no network access is needed.
"""

from __future__ import annotations

import dataclasses
import pathlib

import folium
import pytest

from mapviewer.core import bounds as geo_bounds
from mapviewer.core import config
from mapviewer.services import viewer


@pytest.fixture
def map_viewer() -> viewer.MapViewer:
    return viewer.MapViewer(config.Settings(title="Trondheim"))


def _children(map_viewer: viewer.MapViewer, kind: type) -> list[object]:
    return [
        child
        for child in map_viewer.map._children.values()
        if isinstance(child, kind)
    ]


def test_base_layers_first_shown(map_viewer: viewer.MapViewer) -> None:
    assert list(map_viewer.base_layers) == list(config.DEFAULT_BASE_LAYERS)
    shown = [tiles.show for tiles in map_viewer.base_layers.values()]
    assert shown == [True, False, False]
    assert all(not tiles.overlay for tiles in map_viewer.base_layers.values())


def test_render_contains_scale_and_legend(map_viewer: viewer.MapViewer) -> None:
    map_viewer.add_legend_row("Districts", "#0ea5e9")
    rendered = map_viewer.render()

    assert "<title>Trondheim</title>" in rendered
    assert "L.control.scale" in rendered
    assert "Districts" in rendered
    assert "#0ea5e9" in rendered


def test_legend_escapes_labels() -> None:
    legend = viewer.Legend()
    legend.add_row("<b>Roads</b>", "red")
    assert "&lt;b&gt;Roads&lt;/b&gt;" in legend.html
    assert "background:red" in legend.html


def test_alert_is_rendered_as_script(map_viewer: viewer.MapViewer) -> None:
    map_viewer.alert("Could not load layer: B\nFailed to fetch B.zip: 404")
    rendered = map_viewer.render()

    assert map_viewer.alerts == [
        "Could not load layer: B\nFailed to fetch B.zip: 404"
    ]
    assert 'alert("Could not load layer: B\\nFailed to fetch B.zip: 404");' in (
        rendered
    )


def test_alert_cannot_close_script_tag(map_viewer: viewer.MapViewer) -> None:
    map_viewer.alert("</script><script>evil()</script>")
    rendered = map_viewer.render()
    assert "</script><script>evil()" not in rendered


def test_alert_renders_template_syntax_verbatim(
    map_viewer: viewer.MapViewer,
) -> None:
    map_viewer.alert("Invalid entry {{ name }} {% if x %} {# note")
    rendered = map_viewer.render()
    assert (
        'alert("Invalid entry \\u007b\\u007b name }} '
        '\\u007b% if x %} \\u007b# note");'
    ) in rendered


def test_js_string_escapes_markup() -> None:
    assert viewer.js_string("a<b>&{c}") == '"a\\u003cb\\u003e\\u0026\\u007bc}"'


def test_fit_bounds_pads(map_viewer: viewer.MapViewer) -> None:
    map_viewer.fit_bounds(geo_bounds.Bounds(0.0, 0.0, 1.0, 1.0), 0.08)

    assert map_viewer.view_bounds is not None
    assert dataclasses.astuple(map_viewer.view_bounds) == pytest.approx(
        (-0.08, -0.08, 1.08, 1.08)
    )
    assert "fitBounds" in map_viewer.render()


def test_add_and_remove_layer(map_viewer: viewer.MapViewer) -> None:
    group = folium.FeatureGroup(name="Districts")
    map_viewer.add_layer(group)
    assert map_viewer.is_rendered(group)
    assert group.get_name() in map_viewer.map._children

    map_viewer.remove_layer(group)
    assert not map_viewer.is_rendered(group)
    rendered = map_viewer.render()
    assert group.get_name() not in rendered
    assert "Districts" not in rendered


def test_layer_control_attaches_hidden_overlays(
    map_viewer: viewer.MapViewer,
) -> None:
    shown = folium.FeatureGroup(name="Shown")
    hidden = folium.FeatureGroup(name="Hidden")
    map_viewer.add_layer(shown)

    map_viewer.add_layer_control(
        map_viewer.base_layers,
        {"Shown": shown, "Hidden": hidden},
    )

    assert shown.show is True
    assert hidden.show is False
    assert hidden.get_name() in map_viewer.map._children
    assert len(_children(map_viewer, folium.LayerControl)) == 1


def test_about_panel_only_when_configured() -> None:
    plain = viewer.MapViewer(config.Settings())
    assert _children(plain, viewer.AboutPanel) == []

    with_about = viewer.MapViewer(
        config.Settings(about_html="<p>Trondheim open data</p>")
    )
    assert len(_children(with_about, viewer.AboutPanel)) == 1
    assert "<p>Trondheim open data</p>" in with_about.render()


def test_save_writes_html(
    map_viewer: viewer.MapViewer,
    tmp_path: pathlib.Path,
) -> None:
    target = tmp_path / "map.html"
    map_viewer.save(target)
    assert "leaflet" in target.read_text(encoding="utf-8").lower()
