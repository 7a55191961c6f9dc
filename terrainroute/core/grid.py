"""
网格坐标工具模块。

提供格点坐标、八邻域偏移、步长代价与八方向（octile）启发函数。
"""

from __future__ import annotations

import math
from typing import Iterator, NamedTuple

# 正交 / 对角单步代价（速度倍率为 1 时）
ORTHOGONAL_COST = 1.0
DIAGONAL_COST = math.sqrt(2.0)

# 固定顺序的八邻域偏移；顺序决定同代价时的选择，保证结果可复现
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


class Coordinate(NamedTuple):
    """格点坐标 (x, y)；可哈希、可排序，是 NodeRegistry 的唯一键。"""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> "Coordinate":
        return Coordinate(self.x + dx, self.y + dy)

    def neighbors(self) -> Iterator["Coordinate"]:
        """按 NEIGHBOR_OFFSETS 顺序产出 8 个相邻坐标（不做边界检查）。"""
        for dx, dy in NEIGHBOR_OFFSETS:
            yield Coordinate(self.x + dx, self.y + dy)


def as_coordinate(value) -> Coordinate:
    """把 (x, y) 二元组或 Coordinate 规整为 Coordinate。"""
    if isinstance(value, Coordinate):
        return value
    x, y = value
    return Coordinate(int(x), int(y))


def step_cost(a: Coordinate, b: Coordinate) -> float:
    """相邻两格之间的基础步长：正交 1，对角 sqrt(2)。"""
    if a.x != b.x and a.y != b.y:
        return DIAGONAL_COST
    return ORTHOGONAL_COST


def octile_distance(a: Coordinate, b: Coordinate) -> float:
    """
    八方向距离启发函数。

    h = (dx + dy) + (D2 - 2 * D1) * min(dx, dy)，D1 = 1，D2 = sqrt(2)。
    速度倍率不超过 1 时可采纳。
    """
    dx = abs(a.x - b.x)
    dy = abs(a.y - b.y)
    return ORTHOGONAL_COST * (dx + dy) + (DIAGONAL_COST - 2 * ORTHOGONAL_COST) * min(dx, dy)


def chebyshev_distance(a: Coordinate, b: Coordinate) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))


def is_adjacent(a: Coordinate, b: Coordinate) -> bool:
    """两格是否八邻接（Chebyshev 距离为 1）。"""
    return chebyshev_distance(a, b) == 1


__all__ = [
    "ORTHOGONAL_COST",
    "DIAGONAL_COST",
    "NEIGHBOR_OFFSETS",
    "Coordinate",
    "as_coordinate",
    "step_cost",
    "octile_distance",
    "chebyshev_distance",
    "is_adjacent",
]
