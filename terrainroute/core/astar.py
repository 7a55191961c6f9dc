"""
双向 A* 路由算法模块。

起点侧与终点侧各持有一个 open set，共享同一个节点注册表：
  - 每一轮两侧各弹出一个最优节点；
  - 弹出的节点已被另一侧触及（仍在对侧队列中、恰为对侧本轮节点、或归属对侧）即视为相遇；
  - 相遇时取本侧回溯链，拼上对侧代价最小邻居的反转回溯链，得到起点到终点的路径；
  - 否则两侧各自松弛八邻域并关闭当前节点。

归属对侧的节点不改写其 g/parent（两侧 g 的量起锚点不同，不可比较），
只以本侧估计代价作为"接触点"压入本侧队列。

代价一律按起点 -> 终点的行进方向计：每一步除以被进入格的速度倍率。
终点侧的 g 因此是"从该格走到终点"的代价，拼接后的链代价即返回路径的代价。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..exceptions import SearchInvariantError
from ..logging_config import get_logger
from .chain import Chain, append_chain, chain_from_node, reverse_chain
from .cost import CostField
from .frontier import Frontier
from .grid import Coordinate, as_coordinate, octile_distance, step_cost
from .nodes import NodeRegistry, Origin, SearchNode
from .result import SearchResult, SearchStatus

logger = get_logger(__name__)


class SearchState(str, Enum):
    INIT = "init"
    RUNNING = "running"
    PATH_FOUND = "path_found"
    FRONTIER_EXHAUSTED = "frontier_exhausted"
    START_BLOCKED = "start_blocked"
    END_BLOCKED = "end_blocked"

    @property
    def terminal(self) -> bool:
        return self not in (SearchState.INIT, SearchState.RUNNING)


@dataclass(frozen=True)
class SearchSnapshot:
    """供可视化读取的搜索现场拷贝；允许是"撕裂"的，不能作为同步依据。"""

    state: SearchState
    start_open: tuple[Coordinate, ...]
    end_open: tuple[Coordinate, ...]
    current_start: Optional[Coordinate]
    current_end: Optional[Coordinate]
    node_count: int
    expanded: int


class SearchEngine:
    """一次 start -> end 查询的双向 A*；用完即弃。"""

    def __init__(self, start, end, field: CostField) -> None:
        self.start = as_coordinate(start)
        self.end = as_coordinate(end)
        self.field = field

        # 越界端点属于调用方错误，直接抛 GridBoundsError
        start_speed = field.speed_at(self.start)
        end_speed = field.speed_at(self.end)

        self.registry = NodeRegistry()
        self.start_frontier = Frontier("start")
        self.end_frontier = Frontier("end")
        self.current_start: Optional[SearchNode] = None
        self.current_end: Optional[SearchNode] = None
        self.expanded = 0
        self.state = SearchState.INIT
        self._result: Optional[SearchResult] = None

        self.start_anchor = self._seed_anchor(self.start, self.end, Origin.START, self.start_frontier)
        self.end_anchor: Optional[SearchNode] = None

        if start_speed <= 0:
            self._finish(SearchResult(SearchStatus.START_BLOCKED))
        elif end_speed <= 0:
            self._finish(SearchResult(SearchStatus.END_BLOCKED))
        elif self.start == self.end:
            self._finish(SearchResult(SearchStatus.PATH_FOUND, path=(self.start,), cost=0.0))
        else:
            self.end_anchor = self._seed_anchor(self.end, self.start, Origin.END, self.end_frontier)
            logger.debug(
                "search %s -> %s seeded on %dx%d grid",
                tuple(self.start),
                tuple(self.end),
                field.width,
                field.height,
            )

    # ------------------------------------------------------------------
    # 公共接口
    # ------------------------------------------------------------------

    @property
    def result(self) -> Optional[SearchResult]:
        return self._result

    @property
    def is_terminal(self) -> bool:
        return self.state.terminal

    def step(self) -> Optional[SearchResult]:
        """执行主循环的一轮；到达终态时返回结果，否则返回 None。"""
        if self._result is not None:
            return self._result
        if self.state is SearchState.INIT:
            self.state = SearchState.RUNNING
            logger.info("search %s -> %s started", tuple(self.start), tuple(self.end))

        if not self.start_frontier or not self.end_frontier:
            return self._finish(SearchResult(SearchStatus.FRONTIER_EXHAUSTED, expanded=self.expanded))

        cur_start = self.start_frontier.try_pop()
        cur_end = self.end_frontier.try_pop()
        self.current_start, self.current_end = cur_start, cur_end

        chain = self._check_termination(cur_start, cur_end)
        if chain is not None:
            if chain.root != self.start:
                chain = reverse_chain(chain)
            return self._finish(
                SearchResult(
                    SearchStatus.PATH_FOUND,
                    path=chain.positions,
                    cost=chain.cost,
                    expanded=self.expanded,
                )
            )

        self._relax(cur_start, Origin.START, self.start_frontier, self.end)
        self._relax(cur_end, Origin.END, self.end_frontier, self.start)
        cur_start.closed = True
        cur_end.closed = True
        self.expanded += 2
        return None

    def run_to_completion(self, should_stop: Optional[Callable[[], bool]] = None) -> Optional[SearchResult]:
        """
        反复调用 step() 直到终态。

        should_stop 每轮检查一次，返回 True 时立即退出并返回 None（不产生结果）。
        """
        while True:
            if should_stop is not None and should_stop():
                return None
            result = self.step()
            if result is not None:
                return result

    def snapshot(self) -> SearchSnapshot:
        current_start = self.current_start
        current_end = self.current_end
        return SearchSnapshot(
            state=self.state,
            start_open=tuple(node.position for node in self.start_frontier.snapshot()),
            end_open=tuple(node.position for node in self.end_frontier.snapshot()),
            current_start=current_start.position if current_start is not None else None,
            current_end=current_end.position if current_end is not None else None,
            node_count=len(self.registry),
            expanded=self.expanded,
        )

    # ------------------------------------------------------------------
    # 内部实现
    # ------------------------------------------------------------------

    def _seed_anchor(self, pos: Coordinate, target: Coordinate, origin: Origin, frontier: Frontier) -> SearchNode:
        anchor = self.registry.get_or_create(pos, target)
        anchor.g_cost = 0.0
        anchor.origin = origin
        frontier.insert_or_decrease(anchor, anchor.f_cost)
        return anchor

    def _finish(self, result: SearchResult) -> SearchResult:
        self._result = result
        self.state = SearchState(result.status.value)
        logger.info(
            "search %s -> %s finished: %s (expanded=%d, nodes=%d)",
            tuple(self.start),
            tuple(self.end),
            result,
            result.expanded,
            len(self.registry),
        )
        return result

    def _frontier_for(self, side: Origin) -> Frontier:
        return self.start_frontier if side is Origin.START else self.end_frontier

    def _check_termination(self, cur_start: SearchNode, cur_end: SearchNode) -> Optional[Chain]:
        # a / b：一侧直接弹出了对侧锚点
        if cur_start is self.end_anchor:
            logger.debug("start side reached end anchor")
            return self._splice_at(cur_start)
        if cur_end is self.start_anchor:
            logger.debug("end side reached start anchor")
            return self._splice_at(cur_end)
        # c / d：两侧搜索相遇
        if self._has_met(cur_start, Origin.START, cur_end):
            return self._splice_at(cur_start)
        if self._has_met(cur_end, Origin.END, cur_start):
            return self._splice_at(cur_end)
        return None

    def _has_met(self, node: SearchNode, side: Origin, other_current: SearchNode) -> bool:
        other = side.opposite
        return (
            node is other_current
            or node.origin is other
            or self._frontier_for(other).contains(node.position)
        )

    def _splice_at(self, node: SearchNode) -> Chain:
        """以 node 为相遇点拼接两侧回溯链；结果链从 node 归属侧的锚点开始。"""
        limit = len(self.registry)
        partner = node.origin.opposite
        meet = self._best_partner_neighbor(node, partner)
        if meet is None:
            raise SearchInvariantError(
                "meeting node has no neighbour owned by the opposite search",
                f"node {tuple(node.position)} (origin={node.origin.value}), partner={partner.value}",
            )
        anchor = self.start_anchor if node.origin is Origin.START else self.end_anchor
        if node.final_ancestor(limit) is not anchor:
            raise SearchInvariantError(
                "meeting node chain does not end at its anchor",
                f"node {tuple(node.position)} (origin={node.origin.value})",
            )
        own = chain_from_node(node, limit)
        other = reverse_chain(chain_from_node(meet, limit))
        entered = meet if node.origin is Origin.START else node
        join_cost = step_cost(node.position, meet.position) / self.field.speed_at(entered.position)
        logger.debug(
            "frontiers met at %s via %s (own=%d, partner=%d links)",
            tuple(node.position),
            tuple(meet.position),
            len(own),
            len(other),
        )
        return append_chain(own, other, join_cost)

    def _best_partner_neighbor(self, node: SearchNode, partner: Origin) -> Optional[SearchNode]:
        best: Optional[SearchNode] = None
        for pos in node.position.neighbors():
            if not self.field.is_traversable(pos):
                continue
            candidate = self.registry.find(pos)
            if candidate is None or candidate.origin is not partner:
                continue
            if best is None or candidate.g_cost < best.g_cost:
                best = candidate
        return best

    def _relax(self, current: SearchNode, side: Origin, frontier: Frontier, target: Coordinate) -> None:
        for pos in current.position.neighbors():
            if not self.field.in_bounds(pos):
                continue
            speed = self.field.speed_at(pos)
            if speed <= 0:
                continue
            neighbor = self.registry.find(pos)
            if neighbor is not None and neighbor.closed:
                continue

            entered_speed = speed if side is Origin.START else self.field.speed_at(current.position)
            candidate = current.g_cost + step_cost(current.position, pos) / entered_speed
            if neighbor is not None and neighbor.origin is side.opposite:
                # 对侧节点：只登记为本侧接触点
                frontier.insert_or_decrease(neighbor, candidate + octile_distance(pos, target))
                continue

            if neighbor is None:
                neighbor = self.registry.get_or_create(pos, target)
            if candidate < neighbor.g_cost:
                neighbor.g_cost = candidate
                neighbor.parent = current
                neighbor.origin = side
                frontier.insert_or_decrease(neighbor, neighbor.f_cost)


__all__ = ["SearchState", "SearchSnapshot", "SearchEngine"]
