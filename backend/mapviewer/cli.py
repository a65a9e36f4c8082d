"""Command-line rendering of the composed map to an HTML file.

Example:
    $ mapviewer-render --layers layers.json --output map.html
"""

from __future__ import annotations

import argparse
import asyncio
import pathlib
import sys

from loguru import logger

from mapviewer.core import config, errors
from mapviewer.services import composer


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compose the configured layers into a Leaflet map page."
    )
    parser.add_argument(
        "--layers",
        type=pathlib.Path,
        default=None,
        help="Layer configuration JSON (defaults to LAYER_CONFIG_PATH).",
    )
    parser.add_argument(
        "--data-root",
        type=pathlib.Path,
        default=None,
        help="Directory relative layer files are resolved against.",
    )
    parser.add_argument(
        "--output",
        type=pathlib.Path,
        default=pathlib.Path("map.html"),
        help="HTML file to write.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    overrides: dict[str, pathlib.Path] = {}
    if args.layers is not None:
        overrides["layer_config_path"] = args.layers
    if args.data_root is not None:
        overrides["data_root"] = args.data_root
    settings = config.get_settings().model_copy(update=overrides)

    try:
        map_viewer, layer_registry = asyncio.run(
            composer.compose_map(settings)
        )
    except errors.ConfigError as exc:
        logger.error(str(exc))
        return 2

    map_viewer.save(args.output)
    logger.info(f"Wrote {args.output}")
    return 1 if layer_registry.failures else 0


if __name__ == "__main__":
    sys.exit(main())
