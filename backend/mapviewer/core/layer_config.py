"""Reading the ordered list of layer entries from a JSON file.

The file must hold a JSON array; anything else is a ConfigError for the
whole file. Each element is then validated on its own, so an invalid
entry becomes a ``RejectedEntry`` in its place and the valid entries
around it still load.

Example:
    >>> entries = parse_layer_configs(
    ...     '[{"name": "A", "file": "a.zip"}, {"name": "B", "weight": "x"}]'
    ... )
    >>> [type(entry).__name__ for entry in entries]
    ['LayerConfig', 'RejectedEntry']
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pydantic
from loguru import logger

from mapviewer.core import errors
from mapviewer.core import models

if TYPE_CHECKING:
    import pathlib

LayerEntry = models.LayerConfig | models.RejectedEntry

_ENTRY_LIST = pydantic.TypeAdapter(list[Any])


def _describe(entry: Any, index: int) -> tuple[str, str]:
    """Name and source to report for an entry that did not validate."""
    fallback = f"entry {index}"
    if not isinstance(entry, dict):
        return fallback, fallback

    name = entry.get("name")
    name = name if isinstance(name, str) and name else fallback
    source = entry.get("file") or entry.get("url")
    return name, source if isinstance(source, str) else name


def _validate_entry(entry: Any, index: int) -> LayerEntry:
    try:
        return models.LayerConfig.model_validate(entry)
    except pydantic.ValidationError as exc:
        name, source = _describe(entry, index)
        logger.warning(f"Layer entry {name!r} is invalid")
        return models.RejectedEntry(
            name=name,
            source=source,
            error=errors.ConfigError(f"Invalid layer entry {name!r}: {exc}"),
        )


def parse_layer_configs(payload: str | bytes) -> list[LayerEntry]:
    """Validate a JSON array of layer entries, keeping their order.

    Returns:
        One item per array element: the validated ``LayerConfig``, or a
        ``RejectedEntry`` carrying a ConfigError for elements that do not
        validate.

    Raises:
        ConfigError: If the payload is not valid JSON or not an array.
    """
    try:
        raw_entries = _ENTRY_LIST.validate_json(payload)
    except pydantic.ValidationError as exc:
        raise errors.ConfigError(f"Invalid layer configuration: {exc}") from exc

    return [
        _validate_entry(entry, index)
        for index, entry in enumerate(raw_entries)
    ]


def load_layer_configs(path: pathlib.Path) -> list[LayerEntry]:
    """Read and validate the layer configuration file at ``path``.

    Args:
        path: JSON file containing an array of layer entries.

    Returns:
        Layer entries in file order, invalid ones as ``RejectedEntry``.

    Raises:
        ConfigError: If the file cannot be read or is not a JSON array.
    """
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise errors.ConfigError(
            f"Cannot read layer configuration {path}: {exc}"
        ) from exc

    configs = parse_layer_configs(payload)
    logger.info(f"Read {len(configs)} layer entries from {path}")
    return configs
