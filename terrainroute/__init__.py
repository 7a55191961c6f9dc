"""terrainroute package initialisation helpers."""

from __future__ import annotations

from .core import (
    Coordinate,
    CostField,
    SearchEngine,
    SearchResult,
    SearchStatus,
    SearchTask,
    find_path,
)
from .settings import settings  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "settings",
    "Coordinate",
    "CostField",
    "SearchEngine",
    "SearchResult",
    "SearchStatus",
    "SearchTask",
    "find_path",
]
