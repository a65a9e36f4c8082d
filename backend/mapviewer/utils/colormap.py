"""Colouring of single-band raster samples.

``color_for`` maps one sample to an opaque RGBA colour, or to None for
samples that must stay transparent. ``colorize`` applies it to a whole
band and produces the RGBA image handed to the map.

Palettes:
    - ``"fire"``: black -> red -> yellow -> white.
    - anything else, including None: grayscale.

Example:
    >>> from mapviewer.utils.colormap import color_for
    >>> color_for(5, 0, 10, "grayscale")
    (127, 127, 127, 255)
    >>> color_for(None, 0, 10, "grayscale") is None
    True
"""

from __future__ import annotations

import math

import numpy as np

RGBA = tuple[int, int, int, int]

FIRE = "fire"
TRANSPARENT: RGBA = (0, 0, 0, 0)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def color_for(
    sample: float | None,
    vmin: float,
    vmax: float,
    palette: str | None = None,
) -> RGBA | None:
    """Map a sample to an opaque colour.

    The sample is normalised against ``vmin``/``vmax``; spans narrower than
    one are treated as one so a flat raster never divides by zero.

    Args:
        sample: Raw sample value; None or NaN means no data.
        vmin: Minimum of the band.
        vmax: Maximum of the band.
        palette: ``"fire"`` or anything else for grayscale.

    Returns:
        ``(r, g, b, 255)`` or None when the sample has no data.
    """
    if sample is None or math.isnan(sample):
        return None

    t = _clamp((sample - vmin) / max(vmax - vmin, 1))
    if palette == FIRE:
        r = math.floor(255 * min(1.0, t * 2))
        g = math.floor(255 * _clamp((t - 0.5) * 2))
        b = math.floor(255 * max(0.0, (t - 0.85) * 6))
        return (r, g, b, 255)

    gray = math.floor(255 * t)
    return (gray, gray, gray, 255)


def colorize(
    band: np.ma.MaskedArray,
    vmin: float,
    vmax: float,
    palette: str | None = None,
) -> np.ndarray:
    """Colour every sample of a 2-D band.

    Masked samples and samples without a colour are fully transparent.

    Returns:
        ``uint8`` array of shape ``(rows, cols, 4)``.
    """
    samples = np.ma.asarray(band, dtype="float64").filled(np.nan)
    rgba = np.zeros((*samples.shape, 4), dtype=np.uint8)
    for index, sample in np.ndenumerate(samples):
        rgba[index] = color_for(float(sample), vmin, vmax, palette) or TRANSPARENT
    return rgba
