"""Folium presentation shell: map, base layers, legend, alerts, controls.

``MapViewer`` is what the registry renders into. It wraps a ``folium.Map``
opened on the configured initial view with a metric scale bar, the
configured base maps and a legend control, and it renders the whole page
as standalone HTML.

Example:
    >>> from mapviewer.services.viewer import MapViewer
    >>> viewer = MapViewer(settings)
    >>> await registry.load_all(configs, viewer)
    >>> html = viewer.render()
"""

from __future__ import annotations

import html
import json
from typing import TYPE_CHECKING, Any

import branca.element
import folium
from loguru import logger

if TYPE_CHECKING:
    import pathlib
    from collections.abc import Mapping

    from mapviewer.core import bounds as geo_bounds
    from mapviewer.core import config

# Characters that would end the script tag or open a Jinja block when the
# rendered macro is templated again by branca.
_JS_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026", "{": "\\u007b"}


def js_string(value: str) -> str:
    """Quote ``value`` as a JavaScript string literal safe to embed."""
    literal = json.dumps(value)
    for char, escape in _JS_ESCAPES.items():
        literal = literal.replace(char, escape)
    return literal


class Legend(branca.element.MacroElement):
    """Bottom-right legend control with one swatch row per layer."""

    _template = branca.element.Template(
        """
        {% macro header(this, kwargs) %}
        <style>
            .legend {
                background: white;
                padding: 6px 8px;
                border-radius: 4px;
                box-shadow: 0 0 6px rgba(0, 0, 0, 0.3);
                line-height: 18px;
            }
            .legend .swatch {
                display: inline-block;
                width: 12px;
                height: 12px;
                margin-right: 6px;
                border: 1px solid #555;
                vertical-align: middle;
            }
        </style>
        {% endmacro %}

        {% macro script(this, kwargs) %}
        var {{ this.get_name() }} = L.control(
            {position: {{ this.position|tojson }}}
        );
        {{ this.get_name() }}.onAdd = function () {
            var div = L.DomUtil.create("div", "leaflet-control legend");
            div.innerHTML = {{ this.html_literal }};
            return div;
        };
        {{ this.get_name() }}.addTo({{ this._parent.get_name() }});
        {% endmacro %}
        """
    )

    def __init__(self, position: str = "bottomright") -> None:
        super().__init__()
        self._name = "Legend"
        self.position = position
        self.rows: list[tuple[str, str]] = []

    def add_row(self, label: str, color: str) -> None:
        self.rows.append((label, color))

    @property
    def html(self) -> str:
        rows = "".join(
            '<div class="row"><span class="swatch" '
            f'style="background:{html.escape(color, quote=True)}"></span> '
            f"{html.escape(label)}</div>"
            for label, color in self.rows
        )
        return f"<strong>Legend</strong><div class='legend-rows'>{rows}</div>"

    @property
    def html_literal(self) -> str:
        return js_string(self.html)


class ScaleBar(branca.element.MacroElement):
    _template = branca.element.Template(
        """
        {% macro script(this, kwargs) %}
        L.control.scale({metric: true, imperial: false})
            .addTo({{ this._parent.get_name() }});
        {% endmacro %}
        """
    )

    def __init__(self) -> None:
        super().__init__()
        self._name = "ScaleBar"


class Alert(branca.element.MacroElement):
    """A blocking ``alert()`` shown when the page opens."""

    _template = branca.element.Template(
        """
        {% macro script(this, kwargs) %}
        alert({{ this.literal }});
        {% endmacro %}
        """
    )

    def __init__(self, message: str) -> None:
        super().__init__()
        self._name = "Alert"
        self.message = message
        self.literal = js_string(message)


class AboutPanel(branca.element.MacroElement):
    """An "About" button toggling a panel of trusted HTML."""

    _template = branca.element.Template(
        """
        {% macro header(this, kwargs) %}
        <style>
            .about-button {
                position: absolute; top: 10px; right: 60px; z-index: 1000;
            }
            .about-panel {
                position: absolute; top: 40px; right: 10px; z-index: 1000;
                max-width: 320px; background: white; padding: 8px 12px;
                border-radius: 4px; box-shadow: 0 0 6px rgba(0, 0, 0, 0.3);
            }
        </style>
        {% endmacro %}

        {% macro html(this, kwargs) %}
        <button id="{{ this.get_name() }}_open" class="about-button">
            About
        </button>
        <div id="{{ this.get_name() }}_panel" class="about-panel" hidden>
            <button id="{{ this.get_name() }}_close">&times;</button>
            {{ this.content }}
        </div>
        {% endmacro %}

        {% macro script(this, kwargs) %}
        (function () {
            var panel = document.getElementById(
                "{{ this.get_name() }}_panel");
            document.getElementById("{{ this.get_name() }}_open")
                .addEventListener("click", function () {
                    panel.hidden = !panel.hidden;
                });
            document.getElementById("{{ this.get_name() }}_close")
                .addEventListener("click", function () {
                    panel.hidden = true;
                });
        })();
        {% endmacro %}
        """
    )

    def __init__(self, content: str) -> None:
        super().__init__()
        self._name = "AboutPanel"
        self.content = content


class MapViewer:
    """Folium map implementing the registry's presentation shell.

    Attributes:
        map: The underlying ``folium.Map``.
        base_layers: Base tile layers by display name.
        legend: Legend control rows are added to.
        alerts: Messages shown as blocking alerts when the page loads.
        view_bounds: Padded bounds the view was framed on, if any.
    """

    def __init__(self, settings: config.Settings) -> None:
        self.map = folium.Map(
            location=list(settings.initial_center),
            zoom_start=settings.initial_zoom,
            tiles=None,
        )
        self.map.get_root().title = settings.title
        ScaleBar().add_to(self.map)

        self.base_layers: dict[str, folium.TileLayer] = {}
        for index, (label, provider) in enumerate(
            settings.base_layers.items()
        ):
            tiles = folium.TileLayer(
                tiles=provider,
                name=label,
                overlay=False,
                control=True,
                show=index == 0,
            )
            tiles.add_to(self.map)
            self.base_layers[label] = tiles

        self.legend = Legend()
        self.legend.add_to(self.map)
        if settings.about_html:
            AboutPanel(settings.about_html).add_to(self.map)

        self.alerts: list[str] = []
        self.view_bounds: geo_bounds.Bounds | None = None
        self._rendered: set[str] = set()

    def is_rendered(self, handle: Any) -> bool:
        return handle.get_name() in self._rendered

    def add_layer(self, handle: Any) -> None:
        handle.add_to(self.map)
        self._rendered.add(handle.get_name())

    def remove_layer(self, handle: Any) -> None:
        self.map._children.pop(handle.get_name(), None)
        self._rendered.discard(handle.get_name())

    def fit_bounds(
        self,
        bounds: geo_bounds.Bounds,
        padding_fraction: float,
    ) -> None:
        """Frame the view on ``bounds`` grown by ``padding_fraction``."""
        self.view_bounds = bounds.pad(padding_fraction)
        self.map.fit_bounds(self.view_bounds.to_pairs())

    def add_layer_control(
        self,
        base_layers: Mapping[str, Any],
        overlays: Mapping[str, Any],
    ) -> None:
        """Add the expanded layer-toggle control.

        Overlays that were never rendered are attached hidden so they can
        still be switched on from the control.
        """
        for name, handle in base_layers.items():
            if handle.get_name() not in self.map._children:
                logger.warning(f"Base layer {name!r} was not on the map")
                handle.add_to(self.map)

        for handle in overlays.values():
            if not self.is_rendered(handle):
                handle.show = False
                handle.add_to(self.map)

        folium.LayerControl(collapsed=False).add_to(self.map)

    def add_legend_row(self, label: str, color: str) -> None:
        self.legend.add_row(label, color)

    def alert(self, message: str) -> None:
        self.alerts.append(message)
        Alert(message).add_to(self.map)

    def render(self) -> str:
        return self.map.get_root().render()

    def save(self, path: pathlib.Path) -> None:
        self.map.save(str(path))
