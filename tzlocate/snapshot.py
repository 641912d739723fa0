"""Loading of decoded region/tile snapshots from JSON or YAML documents."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ValidationError

from .datatypes import RegionSnapshot, TileSnapshot
from .logging_utils import get_logger

logger = get_logger("tzlocate.snapshot")

ModelT = TypeVar("ModelT", bound=BaseModel)
SnapshotSource = Union[BaseModel, Mapping[str, Any]]

_YAML_SUFFIXES = {".yml", ".yaml"}


class SnapshotError(ValueError):
    """Raised when a snapshot is missing, unreadable or malformed."""


def coerce_snapshot(model: Type[ModelT], source: SnapshotSource) -> ModelT:
    """Return ``source`` as a validated ``model`` instance."""

    if isinstance(source, model):
        return source
    if isinstance(source, BaseModel):
        source = source.model_dump()
    try:
        return model.model_validate(source)
    except ValidationError as exc:
        logger.warning(
            "snapshot_rejected",
            extra={"event": "snapshot_rejected", "model": model.__name__, "errors": exc.error_count()},
        )
        raise SnapshotError(f"Invalid {model.__name__}: {exc}") from exc


def _read_document(path: Path) -> Any:
    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}")

    content = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in _YAML_SUFFIXES:
            data = yaml.safe_load(content)
        else:
            data = json.loads(content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Unable to parse snapshot {path}: {exc}") from exc

    if not isinstance(data, Mapping):
        raise SnapshotError(f"Snapshot {path} must contain a mapping at the top level")
    return data


def load_region_snapshot(path: Path) -> RegionSnapshot:
    """Read and validate a region snapshot document."""

    snapshot = coerce_snapshot(RegionSnapshot, _read_document(Path(path)))
    logger.info(
        "region_snapshot_loaded",
        extra={
            "event": "region_snapshot_loaded",
            "path": str(path),
            "version": snapshot.version,
            "regions": len(snapshot.timezones),
            "reduced": snapshot.reduced,
        },
    )
    return snapshot


def load_tile_snapshot(path: Path) -> TileSnapshot:
    """Read and validate a tile pyramid document."""

    snapshot = coerce_snapshot(TileSnapshot, _read_document(Path(path)))
    logger.info(
        "tile_snapshot_loaded",
        extra={
            "event": "tile_snapshot_loaded",
            "path": str(path),
            "version": snapshot.version,
            "keys": len(snapshot.keys),
        },
    )
    return snapshot
