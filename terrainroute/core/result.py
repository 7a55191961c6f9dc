"""搜索结果：状态 + （仅在找到路径时）从起点到终点的坐标序列。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .grid import Coordinate, is_adjacent


class SearchStatus(str, Enum):
    PATH_FOUND = "path_found"
    # open set 耗尽仍未相遇
    FRONTIER_EXHAUSTED = "frontier_exhausted"
    START_BLOCKED = "start_blocked"
    END_BLOCKED = "end_blocked"


@dataclass(frozen=True)
class SearchResult:
    status: SearchStatus
    path: Optional[tuple[Coordinate, ...]] = None
    cost: Optional[float] = None
    expanded: int = 0

    def __post_init__(self) -> None:
        if self.status is SearchStatus.PATH_FOUND:
            if not self.path:
                raise ValueError("PathFound result requires a non-empty path")
            for a, b in zip(self.path, self.path[1:]):
                if not is_adjacent(a, b):
                    raise ValueError(f"path steps {tuple(a)} -> {tuple(b)} are not 8-adjacent")
        elif self.path is not None:
            raise ValueError(f"{self.status.value} result must not carry a path")

    @property
    def path_found(self) -> bool:
        return self.status is SearchStatus.PATH_FOUND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "path": [list(p) for p in self.path] if self.path is not None else None,
            "cost": self.cost,
            "expanded": self.expanded,
        }

    def __str__(self) -> str:
        path_length = len(self.path) if self.path is not None else 0
        return f"PathFound: {self.path_found} | Status: {self.status.value} | PathLength: {path_length}"


__all__ = ["SearchStatus", "SearchResult"]
