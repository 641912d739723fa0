"""Approximate finder backed by a pre-aggregated slippy tile pyramid."""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

from .datatypes import TileSnapshot
from .geo import TileProjectionError, project_to_tile
from .logging_utils import get_logger, timed_event
from .snapshot import SnapshotSource, coerce_snapshot

logger = get_logger("tzlocate.fuzzy")

TileKey = Tuple[int, int, int]


class FuzzyIndex:
    """Map of (x, y, zoom) tile keys to sorted region names.

    Lookups probe zoom levels from ``agg_zoom`` up to, but excluding,
    ``idx_zoom``. Coarse tiles are only present where a large area maps to
    a single region, so most queries resolve on the first probes.
    """

    __slots__ = ("_tiles", "_agg_zoom", "_idx_zoom", "_data_version")

    def __init__(
        self,
        tiles: Mapping[TileKey, Tuple[str, ...]],
        *,
        agg_zoom: int,
        idx_zoom: int,
        data_version: str = "",
    ) -> None:
        if agg_zoom > idx_zoom:
            raise ValueError(f"agg_zoom ({agg_zoom}) must not exceed idx_zoom ({idx_zoom})")
        self._tiles: Dict[TileKey, Tuple[str, ...]] = {key: tuple(sorted(names)) for key, names in tiles.items()}
        self._agg_zoom = agg_zoom
        self._idx_zoom = idx_zoom
        self._data_version = data_version

    @classmethod
    def from_snapshot(cls, source: SnapshotSource) -> "FuzzyIndex":
        """Build the pyramid; names sharing a key accumulate in sorted order."""

        snapshot = coerce_snapshot(TileSnapshot, source)
        with timed_event(
            logger,
            "fuzzy_index_built",
            version=snapshot.version,
            agg_zoom=snapshot.agg_zoom,
            idx_zoom=snapshot.idx_zoom,
        ) as extra:
            grouped: Dict[TileKey, List[str]] = {}
            for item in snapshot.keys:
                grouped.setdefault((item.x, item.y, item.z), []).append(item.name)
            index = cls(
                {key: tuple(names) for key, names in grouped.items()},
                agg_zoom=snapshot.agg_zoom,
                idx_zoom=snapshot.idx_zoom,
                data_version=snapshot.version,
            )
            extra["tiles"] = len(index)
        return index

    @classmethod
    def empty(cls, data_version: str = "") -> "FuzzyIndex":
        """An index that never matches."""
        return cls({}, agg_zoom=0, idx_zoom=0, data_version=data_version)

    @property
    def agg_zoom(self) -> int:
        return self._agg_zoom

    @property
    def idx_zoom(self) -> int:
        return self._idx_zoom

    @property
    def data_version(self) -> str:
        return self._data_version

    def __len__(self) -> int:
        return len(self._tiles)

    def names_at(self, x: int, y: int, z: int) -> Optional[Tuple[str, ...]]:
        """Return the names stored for a tile, or None when the tile is absent."""
        return self._tiles.get((x, y, z))

    def _probe(self, lng: float, lat: float, zoom: int) -> Optional[Tuple[str, ...]]:
        try:
            x, y = project_to_tile(lng, lat, zoom)
        except TileProjectionError:
            return None
        return self._tiles.get((x, y, zoom))

    def lookup_first(self, lng: float, lat: float) -> Optional[str]:
        """Return the first name of the coarsest tile covering the point."""

        for zoom in range(self._agg_zoom, self._idx_zoom):
            names = self._probe(lng, lat, zoom)
            if names:
                return names[0]
        return None

    def lookup_all(self, lng: float, lat: float) -> List[str]:
        """Collect names from every zoom level covering the point, coarse first."""

        found: List[str] = []
        for zoom in range(self._agg_zoom, self._idx_zoom):
            names = self._probe(lng, lat, zoom)
            if names:
                found.extend(names)
        return found

    def list_all_names(self) -> List[str]:
        """Sorted unique names referenced by any tile."""
        return sorted({name for names in self._tiles.values() for name in names})
