"""Tests for colouring raster samples."""

from __future__ import annotations

import math

import numpy as np
import pytest

from mapviewer.utils import colormap


@pytest.mark.parametrize(
    ("sample", "expected"),
    [
        (5, (127, 127, 127, 255)),
        (0, (0, 0, 0, 255)),
        (10, (255, 255, 255, 255)),
        (-3, (0, 0, 0, 255)),
        (42, (255, 255, 255, 255)),
    ],
)
def test_grayscale(sample: float, expected: tuple[int, int, int, int]) -> None:
    assert colormap.color_for(sample, 0, 10, "grayscale") == expected


def test_missing_samples_have_no_color() -> None:
    assert colormap.color_for(None, 0, 10, "grayscale") is None
    assert colormap.color_for(math.nan, 0, 10, "fire") is None


def test_unknown_palette_is_grayscale() -> None:
    assert colormap.color_for(5, 0, 10, "viridis") == (127, 127, 127, 255)
    assert colormap.color_for(5, 0, 10) == (127, 127, 127, 255)


@pytest.mark.parametrize(
    ("sample", "expected"),
    [
        (0, (0, 0, 0, 255)),
        (5, (255, 0, 0, 255)),
        (10, (255, 255, 229, 255)),
    ],
)
def test_fire(sample: float, expected: tuple[int, int, int, int]) -> None:
    assert colormap.color_for(sample, 0, 10, "fire") == expected


def test_narrow_span_is_treated_as_one() -> None:
    """A flat band never divides by zero."""
    assert colormap.color_for(5, 5, 5, "grayscale") == (0, 0, 0, 255)
    assert colormap.color_for(0.5, 0, 0.5, "grayscale") == (127, 127, 127, 255)


def test_colorize_masks_missing_samples() -> None:
    band = np.ma.masked_array(
        [[0.0, 5.0], [10.0, np.nan]],
        mask=[[False, True], [False, False]],
    )
    rgba = colormap.colorize(band, 0, 10, "grayscale")
    assert rgba.dtype == np.uint8
    assert rgba.shape == (2, 2, 4)
    assert tuple(rgba[0, 0]) == (0, 0, 0, 255)
    assert tuple(rgba[0, 1]) == (0, 0, 0, 0)
    assert tuple(rgba[1, 0]) == (255, 255, 255, 255)
    assert tuple(rgba[1, 1]) == (0, 0, 0, 0)
