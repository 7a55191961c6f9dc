"""
terrainroute core module.

包含网格坐标、成本场、节点注册表、open set、双向 A* 引擎与后台执行包装。
"""

from .astar import SearchEngine, SearchSnapshot, SearchState
from .cost import CostField, load_cost_field, make_demo_field
from .grid import Coordinate, octile_distance
from .planner import find_path, find_path_blocking
from .result import SearchResult, SearchStatus
from .runner import SearchTask

__all__ = [
    "Coordinate",
    "CostField",
    "SearchEngine",
    "SearchResult",
    "SearchSnapshot",
    "SearchState",
    "SearchStatus",
    "SearchTask",
    "find_path",
    "find_path_blocking",
    "load_cost_field",
    "make_demo_field",
    "octile_distance",
]
