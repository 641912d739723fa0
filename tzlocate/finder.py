"""Composite finder combining the tile pyramid and the exact region table."""

from __future__ import annotations

from itertools import product
from typing import List, Optional, Tuple

from .datatypes import ResolvedConfig
from .exact import ExactIndex
from .fuzzy import FuzzyIndex
from .logging_utils import get_logger
from .snapshot import SnapshotSource, load_region_snapshot, load_tile_snapshot

logger = get_logger("tzlocate.finder")

_LNG_DELTAS = (0.0, -0.001, 0.001)
_LAT_DELTAS = (0.0, -0.001, 0.001)

# Longitude delta is the outer loop; (0, 0) always comes first.
PROBE_OFFSETS: Tuple[Tuple[float, float], ...] = tuple(product(_LNG_DELTAS, _LAT_DELTAS))


class DefaultFinder:
    """Resolve a coordinate to a region name, fuzzy index first.

    The simplified region geometry leaves thin uncovered slivers along
    borders, so each query walks ``PROBE_OFFSETS`` and at every offset asks
    the fuzzy index and then the exact index. The first non-empty answer
    wins; the order is (fuzzy, offset 0), (exact, offset 0),
    (fuzzy, offset 1), and so on.
    """

    __slots__ = ("_exact", "_fuzzy")

    def __init__(self, exact: ExactIndex, fuzzy: Optional[FuzzyIndex] = None) -> None:
        self._exact = exact
        self._fuzzy = fuzzy if fuzzy is not None else FuzzyIndex.empty(exact.data_version)

    @classmethod
    def from_snapshots(
        cls,
        regions: SnapshotSource,
        tiles: Optional[SnapshotSource] = None,
    ) -> "DefaultFinder":
        exact = ExactIndex.from_snapshot(regions)
        fuzzy = FuzzyIndex.from_snapshot(tiles) if tiles is not None else None
        return cls(exact, fuzzy)

    @property
    def exact(self) -> ExactIndex:
        return self._exact

    @property
    def fuzzy(self) -> FuzzyIndex:
        return self._fuzzy

    def resolve_one(self, lng: float, lat: float) -> Optional[str]:
        """Return the best single region name, or None when nothing matches."""

        for dlng, dlat in PROBE_OFFSETS:
            probe_lng = lng + dlng
            probe_lat = lat + dlat
            name = self._fuzzy.lookup_first(probe_lng, probe_lat)
            if name is None:
                name = self._exact.lookup_first(probe_lng, probe_lat)
            if name is not None:
                if dlng or dlat:
                    _log_offset(lng, lat, dlng, dlat)
                return name
        return None

    def resolve_all(self, lng: float, lat: float) -> List[str]:
        """Return every name found at the first probe that matches anything."""

        for dlng, dlat in PROBE_OFFSETS:
            probe_lng = lng + dlng
            probe_lat = lat + dlat
            names = self._fuzzy.lookup_all(probe_lng, probe_lat)
            if not names:
                names = self._exact.lookup_all(probe_lng, probe_lat)
            if names:
                if dlng or dlat:
                    _log_offset(lng, lat, dlng, dlat)
                return names
        return []

    def list_region_names(self) -> List[str]:
        return self._exact.list_all_names()

    def data_version(self) -> str:
        return self._exact.data_version


def _log_offset(lng: float, lat: float, dlng: float, dlat: float) -> None:
    logger.debug(
        "probe_offset_resolved",
        extra={"event": "probe_offset_resolved", "lng": lng, "lat": lat, "dlng": dlng, "dlat": dlat},
    )


def build_finder(config: ResolvedConfig) -> DefaultFinder:
    """Load the configured snapshots and build a finder from them."""

    regions = load_region_snapshot(config.region_snapshot_path)
    tiles = load_tile_snapshot(config.tile_snapshot_path) if config.tile_snapshot_path else None
    finder = DefaultFinder.from_snapshots(regions, tiles)
    if tiles is not None and tiles.version != regions.version:
        logger.warning(
            "snapshot_version_mismatch",
            extra={
                "event": "snapshot_version_mismatch",
                "region_version": regions.version,
                "tile_version": tiles.version,
            },
        )
    return finder
