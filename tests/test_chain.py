"""
回溯链（Chain）纯函数的测试模块。
"""

import math

import pytest

from terrainroute.core.chain import Chain, ChainLink, append_chain, chain_from_node, reverse_chain
from terrainroute.core.grid import Coordinate
from terrainroute.core.nodes import NodeRegistry
from terrainroute.exceptions import SearchInvariantError

SQRT2 = math.sqrt(2.0)


def _link_chain(*items):
    return Chain(tuple(ChainLink(Coordinate(*pos), g) for pos, g in items))


def _registry_chain():
    """(0,0) -> (1,1) -> (2,1)，代价依次 0, sqrt2, sqrt2+1。"""
    registry = NodeRegistry()
    target = Coordinate(5, 5)
    root = registry.get_or_create(Coordinate(0, 0), target)
    mid = registry.get_or_create(Coordinate(1, 1), target)
    tip = registry.get_or_create(Coordinate(2, 1), target)
    root.g_cost, mid.g_cost, tip.g_cost = 0.0, SQRT2, SQRT2 + 1.0
    mid.parent = root
    tip.parent = mid
    return registry, tip


def test_chain_from_node_is_root_first():
    registry, tip = _registry_chain()
    chain = chain_from_node(tip, len(registry))
    assert chain.positions == (Coordinate(0, 0), Coordinate(1, 1), Coordinate(2, 1))
    assert chain.root == Coordinate(0, 0)
    assert chain.tip == Coordinate(2, 1)
    assert chain.cost == pytest.approx(SQRT2 + 1.0)
    assert len(chain) == 3


def test_chain_copy_does_not_touch_nodes():
    registry, tip = _registry_chain()
    reverse_chain(chain_from_node(tip, len(registry)))
    assert tip.parent is not None and tip.parent.position == Coordinate(1, 1)
    assert tip.parent.parent.parent is None


def test_reverse_chain_rebases_costs():
    chain = _link_chain(((0, 0), 0.0), ((1, 0), 1.0), ((2, 1), 1.0 + SQRT2))
    reversed_chain = reverse_chain(chain)

    assert reversed_chain.positions == (Coordinate(2, 1), Coordinate(1, 0), Coordinate(0, 0))
    assert [link.g_cost for link in reversed_chain.links] == pytest.approx([0.0, SQRT2, 1.0 + SQRT2])
    assert reversed_chain.cost == pytest.approx(chain.cost), "reversal must preserve total cost"


def test_reverse_twice_is_identity():
    chain = _link_chain(((0, 0), 0.0), ((1, 1), SQRT2), ((2, 2), 2.5 * SQRT2), ((3, 2), 2.5 * SQRT2 + 2.0))
    twice = reverse_chain(reverse_chain(chain))
    assert twice.positions == chain.positions
    assert [link.g_cost for link in twice.links] == pytest.approx([link.g_cost for link in chain.links])


def test_single_link_chain():
    chain = _link_chain(((4, 4), 0.0))
    assert reverse_chain(chain).positions == (Coordinate(4, 4),)
    assert chain.cost == 0.0


def test_empty_chain_rejected():
    with pytest.raises(ValueError):
        Chain(())


def test_append_chain_offsets_tail_costs():
    head = _link_chain(((0, 0), 0.0), ((1, 0), 1.0))
    # 终点侧回溯链：(3,0) 为锚点，(2,0) 代价 1；反转后以 (2,0) 为根
    tail = reverse_chain(_link_chain(((3, 0), 0.0), ((2, 0), 1.0)))

    spliced = append_chain(head, tail, join_cost=1.0)

    assert spliced.positions == tuple(Coordinate(x, 0) for x in range(4))
    assert [link.g_cost for link in spliced.links] == pytest.approx([0.0, 1.0, 2.0, 3.0])
    assert spliced.cost == pytest.approx(head.cost + 1.0 + tail.cost)


def test_splice_then_reverse_keeps_cost():
    head = _link_chain(((0, 0), 0.0), ((1, 1), SQRT2))
    tail = _link_chain(((2, 1), 0.0), ((3, 1), 2.0))
    spliced = append_chain(head, tail, join_cost=2.0)
    assert reverse_chain(spliced).cost == pytest.approx(spliced.cost)
    assert reverse_chain(spliced).root == Coordinate(3, 1)


def test_append_non_adjacent_chains_raises():
    head = _link_chain(((0, 0), 0.0))
    tail = _link_chain(((2, 0), 0.0))
    with pytest.raises(SearchInvariantError) as excinfo:
        append_chain(head, tail, join_cost=1.0)
    assert excinfo.value.code == "invariant_violation"
