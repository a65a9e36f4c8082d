"""Geographic bounding boxes in latitude/longitude.

``Bounds`` is an immutable box given as ``(south, west, north, east)``.
``GlobalBounds`` is the running box the registry widens as layers load;
it starts empty and never shrinks.

Example:
    Merge two layer extents and pad the result before framing the map:
        >>> from mapviewer.core.bounds import Bounds, GlobalBounds
        >>> total = GlobalBounds()
        >>> total.extend(Bounds.from_pairs([[0, 0], [1, 1]]))
        >>> total.extend(Bounds.from_pairs([[1, 1], [2, 2]]))
        >>> total.bounds.to_pairs()
        [[0.0, 0.0], [2.0, 2.0]]
        >>> total.bounds.pad(0.5).to_pairs()
        [[-1.0, -1.0], [3.0, 3.0]]
"""

from __future__ import annotations

import dataclasses
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

LatLngPairs = list[list[float]]


@dataclasses.dataclass(frozen=True)
class Bounds:
    """A latitude/longitude box.

    Attributes:
        south: Minimum latitude.
        west: Minimum longitude.
        north: Maximum latitude.
        east: Maximum longitude.
    """

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_pairs(cls, pairs: Sequence[Sequence[float]]) -> Bounds:
        """Build from ``[[south, west], [north, east]]``."""
        (south, west), (north, east) = pairs
        return cls(float(south), float(west), float(north), float(east))

    @classmethod
    def from_bbox(cls, bbox: Sequence[float]) -> Bounds:
        """Build from ``(minx, miny, maxx, maxy)`` in lon/lat order."""
        minx, miny, maxx, maxy = bbox
        return cls(float(miny), float(minx), float(maxy), float(maxx))

    def to_pairs(self) -> LatLngPairs:
        return [[self.south, self.west], [self.north, self.east]]

    def is_valid(self) -> bool:
        values = (self.south, self.west, self.north, self.east)
        if not all(math.isfinite(value) for value in values):
            return False
        return self.south <= self.north and self.west <= self.east

    def union(self, other: Bounds) -> Bounds:
        return Bounds(
            min(self.south, other.south),
            min(self.west, other.west),
            max(self.north, other.north),
            max(self.east, other.east),
        )

    def contains(self, other: Bounds) -> bool:
        return (
            self.south <= other.south
            and self.west <= other.west
            and self.north >= other.north
            and self.east >= other.east
        )

    def pad(self, ratio: float) -> Bounds:
        """Grow every side by ``ratio`` times the box height or width."""
        height_buffer = abs(self.north - self.south) * ratio
        width_buffer = abs(self.east - self.west) * ratio
        return Bounds(
            self.south - height_buffer,
            self.west - width_buffer,
            self.north + height_buffer,
            self.east + width_buffer,
        )


class GlobalBounds:
    """Smallest box containing every extent merged so far."""

    def __init__(self) -> None:
        self._bounds: Bounds | None = None

    @property
    def bounds(self) -> Bounds | None:
        return self._bounds

    def is_valid(self) -> bool:
        return self._bounds is not None and self._bounds.is_valid()

    def extend(self, bounds: Bounds) -> None:
        """Widen the box to contain ``bounds``; invalid boxes are ignored."""
        if not bounds.is_valid():
            return
        if self._bounds is None:
            self._bounds = bounds
        else:
            self._bounds = self._bounds.union(bounds)
