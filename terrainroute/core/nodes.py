"""
搜索节点与节点注册表。

每个搜索回合中，每个坐标至多对应一个 SearchNode，由 NodeRegistry 按需创建。
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Dict, Iterator, Optional

from ..exceptions import NodeLookupError, SearchInvariantError
from .grid import Coordinate, octile_distance

UNVISITED = math.inf


class Origin(str, Enum):
    """节点归属：哪一侧的搜索先到达它。"""

    START = "start"
    END = "end"

    @property
    def opposite(self) -> "Origin":
        return Origin.END if self is Origin.START else Origin.START


class SearchNode:
    """
    单个坐标的搜索状态。

    g_cost 从本侧锚点量起，f_cost 每次由 g_cost + h_cost 现算，不单独缓存。
    parent 是只用于回溯路径的单向链表指针。
    """

    __slots__ = ("position", "h_cost", "g_cost", "closed", "parent", "origin")

    def __init__(self, position: Coordinate, h_cost: float) -> None:
        self.position = position
        self.h_cost = h_cost
        self.g_cost = UNVISITED
        self.closed = False
        self.parent: Optional[SearchNode] = None
        self.origin: Optional[Origin] = None

    @property
    def f_cost(self) -> float:
        return self.g_cost + self.h_cost

    def iter_chain(self, limit: int) -> Iterator["SearchNode"]:
        """沿 parent 指针从自身走到根；步数超过 limit 视为成环。"""
        node: Optional[SearchNode] = self
        steps = 0
        while node is not None:
            steps += 1
            if steps > limit:
                raise SearchInvariantError(
                    "back-pointer chain longer than registry",
                    f"walk from {tuple(self.position)} exceeded {limit} nodes",
                )
            yield node
            node = node.parent

    def final_ancestor(self, limit: int) -> "SearchNode":
        """返回回溯链的根（通常是锚点）。"""
        root = self
        for root in self.iter_chain(limit):
            pass
        return root

    def __repr__(self) -> str:
        origin = self.origin.value if self.origin else None
        return (
            f"SearchNode(pos={tuple(self.position)}, g={self.g_cost:.4f}, "
            f"h={self.h_cost:.4f}, closed={self.closed}, origin={origin})"
        )


class NodeRegistry:
    """按坐标惰性创建并持有 SearchNode；归一个 SearchEngine 回合独占。"""

    def __init__(self, heuristic: Callable[[Coordinate, Coordinate], float] = octile_distance) -> None:
        self._heuristic = heuristic
        self._nodes: Dict[Coordinate, SearchNode] = {}

    def get_or_create(self, pos: Coordinate, heuristic_target: Coordinate) -> SearchNode:
        node = self._nodes.get(pos)
        if node is None:
            node = SearchNode(pos, self._heuristic(pos, heuristic_target))
            self._nodes[pos] = node
        return node

    def get(self, pos: Coordinate) -> SearchNode:
        try:
            return self._nodes[pos]
        except KeyError:
            raise NodeLookupError(pos) from None

    def find(self, pos: Coordinate) -> Optional[SearchNode]:
        return self._nodes.get(pos)

    def __contains__(self, pos: Coordinate) -> bool:
        return pos in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SearchNode]:
        return iter(list(self._nodes.values()))


__all__ = ["UNVISITED", "Origin", "SearchNode", "NodeRegistry"]
