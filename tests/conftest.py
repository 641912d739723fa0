"""Shared snapshot fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from tests.sample_data import region_snapshot_payload, tile_snapshot_payload
from tzlocate.exact import ExactIndex
from tzlocate.finder import DefaultFinder
from tzlocate.fuzzy import FuzzyIndex


@pytest.fixture
def region_payload() -> Dict[str, Any]:
    return region_snapshot_payload()


@pytest.fixture
def tile_payload() -> Dict[str, Any]:
    return tile_snapshot_payload()


@pytest.fixture
def exact_index(region_payload: Dict[str, Any]) -> ExactIndex:
    return ExactIndex.from_snapshot(region_payload)


@pytest.fixture
def fuzzy_index(tile_payload: Dict[str, Any]) -> FuzzyIndex:
    return FuzzyIndex.from_snapshot(tile_payload)


@pytest.fixture
def finder(exact_index: ExactIndex, fuzzy_index: FuzzyIndex) -> DefaultFinder:
    return DefaultFinder(exact_index, fuzzy_index)


@pytest.fixture
def snapshot_files(tmp_path: Path, region_payload: Dict[str, Any], tile_payload: Dict[str, Any]) -> Dict[str, Path]:
    regions = tmp_path / "regions.json"
    tiles = tmp_path / "tiles.json"
    regions.write_text(json.dumps(region_payload), encoding="utf-8")
    tiles.write_text(json.dumps(tile_payload), encoding="utf-8")
    return {"regions": regions, "tiles": tiles}
