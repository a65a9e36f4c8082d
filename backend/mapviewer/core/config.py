"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the location of the layer configuration file, the directory local layer
files are resolved against, the initial map view, the base maps offered in
the layer control, and the tuning knobs of the layer loaders.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from mapviewer.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.layer_config_path)

    Environment variables can override defaults:
        >>> LAYER_CONFIG_PATH=/srv/maps/layers.json
        >>> DATA_ROOT=/srv/maps
        >>> INITIAL_ZOOM=10
"""

import functools
import pathlib

import pydantic_settings

DEFAULT_BASE_LAYERS = {
    "OpenStreetMap": "OpenStreetMap.Mapnik",
    "Esri World Street Map": "Esri.WorldStreetMap",
    "Carto Light": "CartoDB.Positron",
}


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        layer_config_path: JSON file holding the ordered layer entries.
        data_root: Directory relative local layer paths are resolved
            against.
        title: Title of the rendered page and of the API.
        initial_center: (lat, lon) the map opens on before any fitting.
        initial_zoom: Zoom level the map opens on.
        base_layers: Display name to tile provider name, in control order.
            The first entry is shown at startup.
        fit_padding: Fraction each side of the combined layer bounds is
            grown by before the view is framed.
        raster_resolution: Longest side, in samples, a raster is read at.
            Larger is sharper, smaller renders faster.
        about_html: Optional HTML for the about panel.
        allow_origins: List of allowed CORS origins (["*"] allows all).

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     layer_config_path=Path("/srv/maps/layers.json"),
            ...     initial_center=(59.91, 10.75),
            ...     raster_resolution=512,
            ... )
    """

    layer_config_path: pathlib.Path = pathlib.Path("layers.json")
    data_root: pathlib.Path = pathlib.Path(".")
    title: str = "Map Viewer"
    initial_center: tuple[float, float] = (63.4305, 10.3951)
    initial_zoom: int = 12
    base_layers: dict[str, str] = DEFAULT_BASE_LAYERS
    fit_padding: float = 0.08
    raster_resolution: int = 256
    about_html: str | None = None
    allow_origins: list[str] = ["*"]

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def resolve_local(self, locator: str) -> pathlib.Path:
        """Resolve a local layer path against ``data_root``.

        Absolute paths are returned unchanged.
        """
        path = pathlib.Path(locator).expanduser()
        if path.is_absolute():
            return path
        return self.data_root / path


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        The settings are cached, so multiple calls return the same instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2  # Same instance
    """
    return Settings()
