"""Offline coordinate to timezone lookup."""

from . import (
    config,
    datatypes,
    exact,
    finder,
    fuzzy,
    geo,
    logging_utils,
    snapshot,
)
from .exact import ExactIndex
from .finder import DefaultFinder, build_finder
from .fuzzy import FuzzyIndex
from .geo import project_to_tile
from .snapshot import SnapshotError

__all__ = [
    "config",
    "datatypes",
    "exact",
    "finder",
    "fuzzy",
    "geo",
    "logging_utils",
    "snapshot",
    "DefaultFinder",
    "ExactIndex",
    "FuzzyIndex",
    "SnapshotError",
    "build_finder",
    "project_to_tile",
]
