"""One full run: configuration file in, composed map out.

Every call builds a fresh viewer, dispatcher and registry, so no layer
state outlives the run that produced it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from mapviewer.core import layer_config
from mapviewer.services import dispatcher, registry, viewer

if TYPE_CHECKING:
    from mapviewer.core import config


async def compose_map(
    settings: config.Settings,
) -> tuple[viewer.MapViewer, registry.LayerRegistry]:
    """Load every configured layer into a new map.

    Args:
        settings: Application settings naming the layer configuration file.

    Returns:
        The rendered-into viewer and the registry holding the loaded
        layers, global bounds and failures.

    Raises:
        ConfigError: If the layer configuration file is unreadable or
            invalid. Failures of single layers never raise.
    """
    configs = layer_config.load_layer_configs(settings.layer_config_path)
    map_viewer = viewer.MapViewer(settings)
    layer_registry = registry.LayerRegistry(
        dispatcher.LayerDispatcher(settings),
        padding=settings.fit_padding,
    )
    await layer_registry.load_all(configs, map_viewer)
    return map_viewer, layer_registry
