"""Typed models for decoded snapshots and runtime configuration."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Coordinate = Tuple[float, float]

MIN_RING_POINTS = 3
# Deepest zoom whose tile grid a snapshot may describe.
MAX_TILE_ZOOM = 30


def _validate_ring(ring: List[Coordinate]) -> List[Coordinate]:
    if len(ring) < MIN_RING_POINTS:
        msg = f"Ring must have at least {MIN_RING_POINTS} points; got {len(ring)}"
        raise ValueError(msg)
    for lng, lat in ring:
        if not (math.isfinite(lng) and math.isfinite(lat)):
            msg = f"Ring point must be finite; got ({lng}, {lat})"
            raise ValueError(msg)
        if not -180 <= lng <= 180:
            msg = f"Longitude must be between -180 and 180 degrees; got {lng}"
            raise ValueError(msg)
        if not -90 <= lat <= 90:
            msg = f"Latitude must be between -90 and 90 degrees; got {lat}"
            raise ValueError(msg)
    return ring


class PolygonRecord(BaseModel):
    """One decoded polygon: exterior ring of (lng, lat) pairs plus holes."""

    model_config = ConfigDict(frozen=True)

    exterior_ring: List[Coordinate]
    holes: List[List[Coordinate]] = Field(default_factory=list)

    @field_validator("exterior_ring")
    @classmethod
    def _validate_exterior(cls, value: List[Coordinate]) -> List[Coordinate]:  # noqa: N805
        return _validate_ring(value)

    @field_validator("holes")
    @classmethod
    def _validate_holes(cls, value: List[List[Coordinate]]) -> List[List[Coordinate]]:  # noqa: N805
        for hole in value:
            _validate_ring(hole)
        return value


class RegionRecord(BaseModel):
    """A named multi-polygon, e.g. ``Asia/Shanghai``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    polygons: List[PolygonRecord] = Field(min_length=1)


class RegionSnapshot(BaseModel):
    """Decoded region table; ``timezones`` order is the lookup order."""

    model_config = ConfigDict(frozen=True)

    version: str = ""
    reduced: bool = False
    timezones: List[RegionRecord] = Field(default_factory=list)


class TileKeyRecord(BaseModel):
    """One (name, x, y, z) entry of the tile pyramid."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    x: int
    y: int
    z: int

    @model_validator(mode="after")
    def _validate_tile_range(self) -> "TileKeyRecord":
        """Ensure the tile exists on the grid of its zoom level."""
        if not 0 <= self.z <= MAX_TILE_ZOOM:
            raise ValueError(f"Tile zoom must be between 0 and {MAX_TILE_ZOOM}; got {self.z}")
        side = 2**self.z
        if not (0 <= self.x < side and 0 <= self.y < side):
            msg = f"Tile ({self.x}, {self.y}) lies outside the zoom {self.z} grid"
            raise ValueError(msg)
        return self


class TileSnapshot(BaseModel):
    """Decoded tile pyramid spanning ``[agg_zoom, idx_zoom)``."""

    model_config = ConfigDict(frozen=True)

    version: str = ""
    idx_zoom: int = Field(ge=0, le=MAX_TILE_ZOOM)
    agg_zoom: int = Field(ge=0, le=MAX_TILE_ZOOM)
    keys: List[TileKeyRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_pyramid(self) -> "TileSnapshot":
        """Check zoom bounds and reject repeated entries."""
        if self.agg_zoom > self.idx_zoom:
            msg = f"agg_zoom ({self.agg_zoom}) must not exceed idx_zoom ({self.idx_zoom})"
            raise ValueError(msg)

        seen: Set[Tuple[str, int, int, int]] = set()
        for key in self.keys:
            if not self.agg_zoom <= key.z < self.idx_zoom:
                msg = (
                    f"Tile {key.name!r} at zoom {key.z} lies outside "
                    f"[{self.agg_zoom}, {self.idx_zoom})"
                )
                raise ValueError(msg)
            entry = (key.name, key.x, key.y, key.z)
            if entry in seen:
                raise ValueError(f"Duplicate tile entry {entry}")
            seen.add(entry)
        return self


class ResolvedConfig(BaseModel):
    """Runtime configuration resolved from env/CLI."""

    model_config = ConfigDict(frozen=True)

    region_snapshot_path: Path
    tile_snapshot_path: Optional[Path]
    log_level: str
    host: str
    port: int
    raw_cli: Dict[str, Any] = Field(default_factory=dict)
    raw_env: Dict[str, Any] = Field(default_factory=dict)

    def redacted_dict(self) -> Dict[str, Any]:
        """Return a sanitized dict for logging."""
        return {
            "region_snapshot_path": str(self.region_snapshot_path),
            "tile_snapshot_path": str(self.tile_snapshot_path) if self.tile_snapshot_path else None,
            "log_level": self.log_level,
            "host": self.host,
            "port": self.port,
        }
