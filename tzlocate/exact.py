"""Exact region table: linear scan of named multi-polygons."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .datatypes import RegionSnapshot
from .geo import Point, Polygon, multipolygon_contains
from .logging_utils import get_logger, timed_event
from .snapshot import SnapshotSource, coerce_snapshot

logger = get_logger("tzlocate.exact")


@dataclass(frozen=True, slots=True)
class Region:
    """A named multi-polygon."""

    name: str
    polygons: Tuple[Polygon, ...]

    def contains(self, point: Point) -> bool:
        return multipolygon_contains(self.polygons, point)


class ExactIndex:
    """Ordered region table answering "which region contains this point".

    Table order is the snapshot order and doubles as the tie-break rule for
    overlapping regions: ``lookup_first`` returns the earliest match.
    """

    __slots__ = ("_regions", "_data_version", "_reduced")

    def __init__(self, regions: Tuple[Region, ...], data_version: str = "", reduced: bool = False) -> None:
        self._regions = tuple(regions)
        self._data_version = data_version
        self._reduced = reduced

    @classmethod
    def from_snapshot(cls, source: SnapshotSource) -> "ExactIndex":
        """Build an index from a decoded region snapshot.

        Raises ``SnapshotError`` when the snapshot fails validation.
        """

        snapshot = coerce_snapshot(RegionSnapshot, source)
        with timed_event(logger, "exact_index_built", version=snapshot.version) as extra:
            regions = tuple(
                Region(
                    name=record.name,
                    polygons=tuple(
                        Polygon.build(polygon.exterior_ring, polygon.holes) for polygon in record.polygons
                    ),
                )
                for record in snapshot.timezones
            )
            extra["regions"] = len(regions)
            extra["polygons"] = sum(len(region.polygons) for region in regions)
        return cls(regions, data_version=snapshot.version, reduced=snapshot.reduced)

    @property
    def data_version(self) -> str:
        return self._data_version

    @property
    def reduced(self) -> bool:
        """Whether the backing geometry is the simplified dataset."""
        return self._reduced

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def lookup_first(self, lng: float, lat: float) -> Optional[str]:
        """Return the first region (in table order) containing the point."""

        point = (lng, lat)
        for region in self._regions:
            if region.contains(point):
                return region.name
        return None

    def lookup_all(self, lng: float, lat: float) -> List[str]:
        """Return every region containing the point, in table order."""

        point = (lng, lat)
        return [region.name for region in self._regions if region.contains(point)]

    def list_all_names(self) -> List[str]:
        return [region.name for region in self._regions]

    def get_region(self, name: str) -> Optional[Region]:
        """Return the first region registered under ``name``."""

        for region in self._regions:
            if region.name == name:
                return region
        return None
