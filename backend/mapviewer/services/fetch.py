"""Retrieval of layer assets from local disk or over HTTP.

Remote locators are percent-encoded the way a browser encodes a URI, so
file names with spaces work, and downloaded with ``httpx``. Local paths
are resolved against ``Settings.data_root`` and read in a worker thread.

Example:
    >>> from mapviewer.services import fetch
    >>> fetch.encode_locator("data/City Centre.zip")
    'data/City%20Centre.zip'
    >>> payload = await fetch.fetch_bytes("data/Districts.zip", settings)
"""

from __future__ import annotations

import asyncio
import urllib.parse
from typing import TYPE_CHECKING

import httpx
from loguru import logger

from mapviewer.core import errors

if TYPE_CHECKING:
    from mapviewer.core import config

# URI syntax characters plus "%", so existing escapes survive.
_URI_SAFE = ";,/?:@&=+$-_.!~*'()#%"
_REMOTE_SCHEMES = {"http", "https"}


def is_remote(locator: str) -> bool:
    return urllib.parse.urlsplit(locator).scheme.lower() in _REMOTE_SCHEMES


def encode_locator(locator: str) -> str:
    """Percent-encode characters such as spaces, keeping URI syntax."""
    return urllib.parse.quote(locator, safe=_URI_SAFE)


async def _download(locator: str) -> bytes:
    url = encode_locator(locator)
    async with httpx.AsyncClient(follow_redirects=True) as client:
        try:
            response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.warning(f"Request for {url} failed: {exc}")
            raise errors.FetchError(f"Failed to fetch {locator}: {exc}") from exc

    if not response.is_success:
        raise errors.FetchError(
            f"Failed to fetch {locator}: {response.status_code}"
        )
    return response.content


async def fetch_bytes(locator: str, settings: config.Settings) -> bytes:
    """Return the raw bytes behind a layer locator.

    Args:
        locator: Remote ``http(s)`` URL or local path.
        settings: Application settings; ``data_root`` anchors local paths.

    Returns:
        The asset's bytes.

    Raises:
        FetchError: On transport errors, non-success HTTP statuses, or a
            local file that is missing or unreadable.
    """
    if is_remote(locator):
        return await _download(locator)

    path = settings.resolve_local(locator)
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise errors.FetchError(f"Failed to read {path}: {exc}") from exc
