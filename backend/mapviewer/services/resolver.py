"""Resolution of the data-source kind of a layer entry.

An explicit ``type`` tag always wins. Without one, the extension of the
source locator decides, and anything unrecognised is treated as a zipped
shapefile.

Example:
    >>> from mapviewer.services.resolver import resolve_kind
    >>> resolve_kind(None, "data/Districts.zip")
    <LayerKind.SHAPEFILE: 'shapefile'>
    >>> resolve_kind(None, "x.TIF")
    <LayerKind.GEOTIFF: 'geotiff'>
    >>> resolve_kind("xyz", "anything.zip")
    <LayerKind.XYZ: 'xyz'>
"""

from __future__ import annotations

import urllib.parse

from mapviewer.core import models

_EXTENSIONS = {
    ".tif": models.LayerKind.GEOTIFF,
    ".tiff": models.LayerKind.GEOTIFF,
    ".png": models.LayerKind.IMAGE,
    ".jpg": models.LayerKind.IMAGE,
    ".jpeg": models.LayerKind.IMAGE,
    ".zip": models.LayerKind.SHAPEFILE,
}


def _kind_from_tag(tag: str) -> models.LayerKind:
    try:
        return models.LayerKind(tag.strip().lower())
    except ValueError:
        return models.LayerKind.SHAPEFILE


def _kind_from_locator(locator: str) -> models.LayerKind:
    path = urllib.parse.urlsplit(locator).path.lower()
    for extension, kind in _EXTENSIONS.items():
        if path.endswith(extension):
            return kind
    return models.LayerKind.SHAPEFILE


def resolve_kind(
    explicit_kind: str | None,
    locator: str | None,
) -> models.LayerKind:
    """Return the kind of a layer entry. Never raises.

    Args:
        explicit_kind: The entry's ``type`` tag, compared case-insensitively.
        locator: The entry's source locator, inspected only when no tag is
            given.
    """
    if explicit_kind:
        return _kind_from_tag(explicit_kind)
    return _kind_from_locator(locator or "")
