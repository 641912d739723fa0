"""Geometry helpers: ray-casting containment and slippy-map tile math."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

Point = Tuple[float, float]
Ring = Tuple[Point, ...]
BBoxTuple = Tuple[float, float, float, float]


class TileProjectionError(ValueError):
    """Raised when a coordinate cannot be projected onto a tile grid."""


@dataclass(frozen=True, slots=True)
class Polygon:
    """Exterior ring plus optional holes, all as (lng, lat) pairs.

    ``bbox`` is (min_lng, min_lat, max_lng, max_lat) of the exterior ring.
    """

    exterior: Ring
    holes: Tuple[Ring, ...] = ()
    bbox: BBoxTuple = (0.0, 0.0, 0.0, 0.0)

    @classmethod
    def build(cls, exterior: Iterable[Sequence[float]], holes: Iterable[Iterable[Sequence[float]]] = ()) -> "Polygon":
        """Widen coordinates to float and precompute the bounding box."""

        ring = _to_ring(exterior)
        hole_rings = tuple(_to_ring(hole) for hole in holes)
        return cls(exterior=ring, holes=hole_rings, bbox=ring_bbox(ring))


def _to_ring(points: Iterable[Sequence[float]]) -> Ring:
    return tuple((float(point[0]), float(point[1])) for point in points)


def ring_bbox(ring: Sequence[Point]) -> BBoxTuple:
    """Return (min_lng, min_lat, max_lng, max_lat) for a ring."""

    lngs = [lng for lng, _ in ring]
    lats = [lat for _, lat in ring]
    return (min(lngs), min(lats), max(lngs), max(lats))


def point_in_bbox(point: Point, bbox: BBoxTuple) -> bool:
    """Return True if point lies within bbox (min_lng, min_lat, max_lng, max_lat)."""
    lng, lat = point
    min_lng, min_lat, max_lng, max_lat = bbox
    return min_lng <= lng <= max_lng and min_lat <= lat <= max_lat


def ring_contains(ring: Sequence[Point], point: Point) -> bool:
    """Even-odd ray casting test against an implicitly closed ring.

    An edge only counts when the point's latitude lies in
    ``[min(y1, y2), max(y1, y2))``, so horizontal edges never count and a
    vertex shared by two edges is crossed exactly once.
    """

    lng, lat = point
    inside = False
    j = len(ring) - 1
    for i in range(len(ring)):
        xi, yi = ring[i]
        xj, yj = ring[j]

        if (yi > lat) != (yj > lat):
            intersection_lng = xi + (lat - yi) * (xj - xi) / (yj - yi)
            if lng < intersection_lng:
                inside = not inside
        j = i

    return inside


def polygon_contains(polygon: Polygon, point: Point) -> bool:
    """Inside the exterior ring and outside every hole."""
    if not point_in_bbox(point, polygon.bbox):
        return False
    if not ring_contains(polygon.exterior, point):
        return False
    return not any(ring_contains(hole, point) for hole in polygon.holes)


def multipolygon_contains(polygons: Iterable[Polygon], point: Point) -> bool:
    return any(polygon_contains(polygon, point) for polygon in polygons)


def project_to_tile(lng: float, lat: float, zoom: int) -> Tuple[int, int]:
    """Convert a coordinate to Web-Mercator slippy tile indices at ``zoom``.

    Fractional tile positions are truncated toward zero, so index
    construction and querying agree on the same key.

    >>> project_to_tile(116.3883, 39.9289, 7)
    (105, 48)
    """

    if zoom < 0:
        raise TileProjectionError(f"Zoom must be non-negative; got {zoom}")

    lat_rad = math.radians(lat)
    try:
        n = 2.0**zoom
        xtile = (lng + 180.0) / 360.0 * n
        ytile = (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n
    except (OverflowError, ValueError) as exc:
        raise TileProjectionError(f"Cannot project ({lng}, {lat}) at zoom {zoom}") from exc

    if not (math.isfinite(xtile) and math.isfinite(ytile)):
        raise TileProjectionError(f"Cannot project ({lng}, {lat}) at zoom {zoom}")

    return int(xtile), int(ytile)
