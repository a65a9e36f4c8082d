"""Batch driver turning the configured entries into registered layers.

``LayerRegistry`` walks the entries strictly in configuration order,
awaiting each load before starting the next, so legend rows, bounds merges
and the layer control always follow the file. A failing entry is logged,
alerted and skipped; it never stops the batch.

For every entry:
    1. an entry rejected by validation is reported;
    2. a name already registered is reported as a ConfigError;
    3. the dispatcher loads the layer; failures are reported;
    4. the layer is registered under its name;
    5. unless ``visible`` is false, the layer is rendered and its bounds,
       when it has valid ones, widen the global bounds;
    6. a legend row is added, whatever the visibility.

Afterwards the view is framed on the padded global bounds, if any, and the
layer control is built from the registered layers.

Example:
    >>> registry = LayerRegistry(LayerDispatcher(settings))
    >>> await registry.load_all(configs, viewer)
    >>> list(registry.layers)
    ["Trondheim's Urban Area", "Trondheim's Districts"]
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from loguru import logger

from mapviewer.core import bounds as geo_bounds
from mapviewer.core import errors, models

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from mapviewer.services import dispatcher as layer_dispatcher

DEFAULT_PADDING = 0.08


class PresentationShellProtocol(Protocol):
    """What the registry needs from the map, legend and alert UI."""

    base_layers: Mapping[str, Any]

    def add_layer(self, handle: Any) -> None: ...

    def remove_layer(self, handle: Any) -> None: ...

    def fit_bounds(
        self,
        bounds: geo_bounds.Bounds,
        padding_fraction: float,
    ) -> None: ...

    def add_layer_control(
        self,
        base_layers: Mapping[str, Any],
        overlays: Mapping[str, Any],
    ) -> None: ...

    def add_legend_row(self, label: str, color: str) -> None: ...

    def alert(self, message: str) -> None: ...


class LayerRegistry:
    """Owns the layers, global bounds and failures of one batch.

    Attributes:
        layers: Loaded layers by name, in configuration order.
        configs: Entries the registered layers were loaded from, by name.
        bounds: Extent of every rendered layer that reported bounds.
        failures: Entries that could not be loaded, in order.
    """

    def __init__(
        self,
        dispatcher: layer_dispatcher.LayerDispatcher,
        padding: float = DEFAULT_PADDING,
    ) -> None:
        self._dispatcher = dispatcher
        self._padding = padding
        self.layers: dict[str, models.LoadedLayer] = {}
        self.configs: dict[str, models.LayerConfig] = {}
        self.bounds = geo_bounds.GlobalBounds()
        self.failures: list[models.LayerFailure] = []

    def _report(
        self,
        name: str,
        source: str,
        exc: Exception,
        shell: PresentationShellProtocol,
    ) -> None:
        logger.error(f"Failed to load {source}: {exc}")
        self.failures.append(
            models.LayerFailure(name=name, source=source, message=str(exc))
        )
        shell.alert(f"Could not load layer: {name}\n{exc}")

    async def _load_one(
        self,
        layer_config: models.LayerConfig | models.RejectedEntry,
        shell: PresentationShellProtocol,
    ) -> None:
        if isinstance(layer_config, models.RejectedEntry):
            self._report(
                layer_config.name,
                layer_config.source,
                layer_config.error,
                shell,
            )
            return

        if layer_config.name in self.layers:
            self._report(
                layer_config.name,
                layer_config.source,
                errors.ConfigError(
                    f"Duplicate layer name {layer_config.name!r}"
                ),
                shell,
            )
            return

        try:
            layer = await self._dispatcher.dispatch(layer_config)
        except Exception as exc:  # noqa: BLE001
            self._report(layer_config.name, layer_config.source, exc, shell)
            return

        self.layers[layer_config.name] = layer
        self.configs[layer_config.name] = layer_config

        if layer_config.visible:
            shell.add_layer(layer.handle)
            if layer.bounds is not None:
                self.bounds.extend(layer.bounds)

        shell.add_legend_row(layer_config.name, layer_config.swatch_color)

    async def load_all(
        self,
        configs: Iterable[models.LayerConfig | models.RejectedEntry],
        shell: PresentationShellProtocol,
    ) -> None:
        """Load every entry in order and hand the result to ``shell``.

        Entries rejected while reading the configuration are reported in
        their place, like any other failed load.
        """
        for layer_config in configs:
            await self._load_one(layer_config, shell)

        if self.bounds.is_valid() and self.bounds.bounds is not None:
            shell.fit_bounds(self.bounds.bounds, self._padding)

        shell.add_layer_control(
            shell.base_layers,
            {name: layer.handle for name, layer in self.layers.items()},
        )
        logger.info(
            f"Registered {len(self.layers)} layers, "
            f"{len(self.failures)} failed"
        )
