"""
去重最小优先队列（open set）。

heapq + 坐标索引 + 惰性删除：
  - 每个坐标在一个 frontier 中至多有一个有效条目；
  - 降低优先级时旧条目作废，压入新条目；
  - 同优先级按插入序号出队，保证结果可复现。
"""

from __future__ import annotations

import heapq
import itertools
from typing import Dict, List, Optional

from .grid import Coordinate
from .nodes import SearchNode


class _Entry:
    __slots__ = ("priority", "seq", "node", "valid")

    def __init__(self, priority: float, seq: int, node: SearchNode) -> None:
        self.priority = priority
        self.seq = seq
        self.node = node
        self.valid = True

    def __lt__(self, other: "_Entry") -> bool:
        return (self.priority, self.seq) < (other.priority, other.seq)


class Frontier:
    """按总估计代价排序、支持插入去重与原地降键的 open set。"""

    def __init__(self, name: str = "frontier") -> None:
        self.name = name
        self._heap: List[_Entry] = []
        self._index: Dict[Coordinate, _Entry] = {}
        self._counter = itertools.count()

    def insert_or_decrease(self, node: SearchNode, priority: float) -> bool:
        """
        不存在则插入；已存在且新优先级更低则降键；否则不变。

        Returns:
            队列是否发生变化
        """
        entry = self._index.get(node.position)
        if entry is not None:
            if priority >= entry.priority:
                return False
            entry.valid = False
        fresh = _Entry(priority, next(self._counter), node)
        self._index[node.position] = fresh
        heapq.heappush(self._heap, fresh)
        return True

    def try_pop(self) -> Optional[SearchNode]:
        """弹出优先级最小的节点；队列为空返回 None。"""
        while self._heap:
            entry = heapq.heappop(self._heap)
            if not entry.valid:
                continue
            del self._index[entry.node.position]
            return entry.node
        return None

    def contains(self, pos: Coordinate) -> bool:
        return pos in self._index

    def snapshot(self) -> List[SearchNode]:
        """
        只读快照：调用时刻在队列中的节点，按出队顺序排列。

        dict.copy() 是单个 C 层操作，工作线程同时写入也不会让这里的遍历失效。
        """
        entries = list(self._index.copy().values())
        entries.sort()
        return [entry.node for entry in entries]

    def __len__(self) -> int:
        return len(self._index)

    def __bool__(self) -> bool:
        return bool(self._index)

    def __repr__(self) -> str:
        return f"Frontier(name={self.name!r}, size={len(self)})"


__all__ = ["Frontier"]
