"""Web Mercator tile addressing helpers.

This module converts XYZ tile addresses into bounding boxes expressed in
EPSG:3857 (Web Mercator) metres. The conversion uses the spherical
"origin shift" convention shared by Google/OSM style tile pyramids, where
tile ``(0, 0)`` sits in the north-west corner of the world.

Example:
    Compute the bounds of the single zoom-0 tile:
        >>> from tile_api.services.tile_math import tile_bounds
        >>> tile_bounds(0, 0, 0).as_tuple()
        (-20037508.342789244, -20037508.342789244, 20037508.342789244, 20037508.342789244)
"""

from __future__ import annotations

import dataclasses
import math

EARTH_RADIUS = 6378137.0
ORIGIN_SHIFT = math.pi * EARTH_RADIUS
MAX_ZOOM = 22


@dataclasses.dataclass(frozen=True)
class BoundingBox:
    """Rectangular tile extent in EPSG:3857 metres.

    Attributes:
        xmin: Western edge.
        ymin: Southern edge.
        xmax: Eastern edge.
        ymax: Northern edge.
    """

    xmin: float
    ymin: float
    xmax: float
    ymax: float

    def as_tuple(self) -> tuple[float, float, float, float]:
        """Return the box as ``(xmin, ymin, xmax, ymax)``."""
        return (self.xmin, self.ymin, self.xmax, self.ymax)


@dataclasses.dataclass(frozen=True)
class TileAddress:
    """Address of a single tile in the XYZ quad-tree.

    Attributes:
        zoom: Zoom level (0 is the whole world in one tile).
        x: Column index, counted from the west.
        y: Row index, counted from the north.
    """

    zoom: int
    x: int
    y: int

    def bounds(self) -> BoundingBox:
        """Return the Web Mercator bounds of this tile."""
        return tile_bounds(self.x, self.y, self.zoom)

    def __str__(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"


def tile_bounds(x: int, y: int, zoom: int) -> BoundingBox:
    """Convert a tile address into its EPSG:3857 bounding box.

    The function is total for any ``zoom >= 0``. It does not range-check
    ``x`` or ``y``; callers validate them first (see
    ``tile_api.services.validation``).

    Args:
        x: Tile column.
        y: Tile row.
        zoom: Zoom level.

    Returns:
        BoundingBox covering the tile.

    Example:
        Neighbouring tiles share an edge:
            >>> left = tile_bounds(2621, 6333, 14)
            >>> right = tile_bounds(2622, 6333, 14)
            >>> left.xmax == right.xmin
            True
    """
    tile_size = 2.0 * ORIGIN_SHIFT / 2**zoom

    xmin = x * tile_size - ORIGIN_SHIFT
    xmax = (x + 1) * tile_size - ORIGIN_SHIFT
    ymin = ORIGIN_SHIFT - (y + 1) * tile_size
    ymax = ORIGIN_SHIFT - y * tile_size

    return BoundingBox(xmin=xmin, ymin=ymin, xmax=xmax, ymax=ymax)
