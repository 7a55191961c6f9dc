"""
回溯链的纯函数操作。

Chain 是从根到末端的 (坐标, 累计代价) 不可变序列，由节点的 parent 指针拷贝而来。
反转与拼接只生成新 Chain，不改动搜索中仍在使用的节点指针。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from ..exceptions import SearchInvariantError
from .grid import Coordinate, is_adjacent
from .nodes import SearchNode


class ChainLink(NamedTuple):
    position: Coordinate
    g_cost: float


@dataclass(frozen=True)
class Chain:
    """links[0] 为根（代价 0 的锚点），links[-1] 为末端。"""

    links: tuple[ChainLink, ...]

    def __post_init__(self) -> None:
        if not self.links:
            raise ValueError("a chain needs at least one link")

    @property
    def root(self) -> Coordinate:
        return self.links[0].position

    @property
    def tip(self) -> Coordinate:
        return self.links[-1].position

    @property
    def cost(self) -> float:
        """末端相对根的累计代价。"""
        return self.links[-1].g_cost - self.links[0].g_cost

    @property
    def positions(self) -> tuple[Coordinate, ...]:
        return tuple(link.position for link in self.links)

    def __len__(self) -> int:
        return len(self.links)


def chain_from_node(node: SearchNode, limit: int) -> Chain:
    """
    沿 parent 指针把节点的回溯链拷贝成 Chain（根在前）。

    limit 为允许的最大步数（一般取注册表大小），超出说明指针成环。
    """
    collected = [ChainLink(n.position, n.g_cost) for n in node.iter_chain(limit)]
    collected.reverse()
    return Chain(tuple(collected))


def reverse_chain(chain: Chain) -> Chain:
    """
    反转链：原末端成为新根，每个节点代价改写为 (原末端代价 - 原代价)。

    总代价不变；反转两次得到原链。
    """
    tip_cost = chain.links[-1].g_cost
    return Chain(tuple(ChainLink(link.position, tip_cost - link.g_cost) for link in reversed(chain.links)))


def append_chain(head: Chain, tail: Chain, join_cost: float) -> Chain:
    """
    把 tail 接到 head 的末端之后。

    tail 的每个节点代价加上 head 末端代价与连接边代价 join_cost（tail 根代价视为 0）。
    head 末端与 tail 根必须八邻接。
    """
    if not is_adjacent(head.tip, tail.root):
        raise SearchInvariantError(
            "cannot splice non-adjacent chains",
            f"head tip {tuple(head.tip)}, tail root {tuple(tail.root)}",
        )
    offset = head.links[-1].g_cost + join_cost - tail.links[0].g_cost
    shifted = tuple(ChainLink(link.position, link.g_cost + offset) for link in tail.links)
    return Chain(head.links + shifted)


__all__ = ["ChainLink", "Chain", "chain_from_node", "reverse_chain", "append_chain"]
