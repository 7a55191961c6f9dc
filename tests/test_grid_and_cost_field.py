"""
网格坐标与成本场的测试模块。
"""

import math

import numpy as np
import pytest

from terrainroute.core.cost import CostField, load_cost_field, make_demo_field
from terrainroute.core.grid import (
    DIAGONAL_COST,
    Coordinate,
    as_coordinate,
    chebyshev_distance,
    is_adjacent,
    octile_distance,
    step_cost,
)
from terrainroute.exceptions import GridBoundsError, TerrainRouteError


def test_octile_distance_matches_formula():
    """h = (dx+dy) + (sqrt2 - 2) * min(dx, dy)。"""
    a = Coordinate(0, 0)
    assert octile_distance(a, Coordinate(0, 0)) == 0.0
    assert octile_distance(a, Coordinate(3, 0)) == pytest.approx(3.0)
    assert octile_distance(a, Coordinate(2, 2)) == pytest.approx(2 * math.sqrt(2))
    assert octile_distance(a, Coordinate(5, 2)) == pytest.approx(3 + 2 * math.sqrt(2))
    assert octile_distance(Coordinate(5, 2), a) == octile_distance(a, Coordinate(5, 2)), "heuristic should be symmetric"


def test_step_cost_and_adjacency():
    c = Coordinate(4, 4)
    assert step_cost(c, Coordinate(5, 4)) == 1.0
    assert step_cost(c, Coordinate(5, 5)) == DIAGONAL_COST
    assert is_adjacent(c, Coordinate(3, 5))
    assert not is_adjacent(c, c), "a cell is not its own neighbour"
    assert not is_adjacent(c, Coordinate(6, 4))
    assert chebyshev_distance(c, Coordinate(1, 6)) == 3


def test_coordinate_neighbors_are_eight_distinct_cells():
    c = Coordinate(1, 1)
    neighbors = list(c.neighbors())
    assert len(neighbors) == 8
    assert len(set(neighbors)) == 8
    assert c not in neighbors
    assert all(is_adjacent(c, n) for n in neighbors)


def test_as_coordinate_accepts_tuples():
    assert as_coordinate((2, 3)) == Coordinate(2, 3)
    assert as_coordinate(Coordinate(1, 1)) is not None
    assert as_coordinate([4, 5]).y == 5


def test_cost_field_indexing_is_x_column_y_row():
    """speeds 数组行为 y、列为 x。"""
    field = CostField.from_array([[1.0, 0.5, 0.0], [0.25, 1.0, 1.0]])
    assert field.width == 3
    assert field.height == 2
    assert field.shape == (3, 2)
    assert field.speed_at(Coordinate(1, 0)) == 0.5
    assert field.speed_at(Coordinate(0, 1)) == 0.25
    assert not field.is_traversable(Coordinate(2, 0))
    assert field.is_traversable(Coordinate(2, 1))


def test_out_of_bounds_access_raises():
    """越界访问是编程错误：speed_at 抛出，is_traversable 返回 False。"""
    field = CostField.from_array(np.ones((2, 2)))
    for pos in [Coordinate(-1, 0), Coordinate(2, 0), Coordinate(0, 2), Coordinate(0, -1)]:
        with pytest.raises(GridBoundsError):
            field.speed_at(pos)
        assert not field.is_traversable(pos)

    with pytest.raises(IndexError):
        field.speed_at(Coordinate(5, 5))

    with pytest.raises(TerrainRouteError) as excinfo:
        field.speed_at(Coordinate(5, 5))
    assert excinfo.value.code == "out_of_bounds"


def test_cost_field_is_read_only():
    field = CostField.from_array(np.ones((3, 3)))
    with pytest.raises(ValueError):
        field.speeds[0, 0] = 0.0


def test_cost_field_copies_input():
    data = np.ones((2, 2))
    field = CostField.from_array(data)
    data[0, 0] = 0.0
    assert field.speed_at(Coordinate(0, 0)) == 1.0, "later caller writes must not leak into the field"


@pytest.mark.parametrize(
    "bad",
    [
        np.ones(4),
        np.ones((0, 3)),
        [[1.0, -0.5]],
        [[1.0, float("nan")]],
        [[1.0, float("inf")]],
    ],
)
def test_invalid_grids_rejected(bad):
    with pytest.raises(ValueError):
        CostField.from_array(bad)


def test_speeds_above_one_are_clamped_by_default():
    field = CostField.from_array([[2.0, 1.0, 0.5]])
    assert field.speed_at(Coordinate(0, 0)) == 1.0
    assert field.speed_at(Coordinate(2, 0)) == 0.5


def test_clamping_can_be_disabled():
    field = CostField.from_array([[2.0, 1.0]], clamp=False)
    assert field.speed_at(Coordinate(0, 0)) == 2.0


def test_demo_field_layout():
    """
    demo 成本场：中间一道墙，只留一个缺口，另有慢速带。
    """
    field = make_demo_field(width=20, height=12)
    wall_x = 10
    blocked = [y for y in range(field.height) if not field.is_traversable(Coordinate(wall_x, y))]
    assert len(blocked) == field.height - 1, "wall should have exactly one gap"
    assert field.is_traversable(Coordinate(wall_x, field.height - 3))
    assert field.speed_at(Coordinate(0, 3)) == 0.5
    assert field.speed_at(Coordinate(0, 0)) == 1.0


def test_demo_field_too_small():
    with pytest.raises(ValueError):
        make_demo_field(width=3, height=3)


def test_load_cost_field_from_npy_and_text(tmp_path):
    grid = np.array([[1.0, 0.0], [0.5, 1.0]])
    npy_path = tmp_path / "grid.npy"
    np.save(npy_path, grid)
    from_npy = load_cost_field(npy_path)
    assert np.array_equal(from_npy.speeds, grid)

    csv_path = tmp_path / "grid.csv"
    csv_path.write_text("1,0\n0.5,1\n", encoding="utf-8")
    from_csv = load_cost_field(csv_path)
    assert np.array_equal(from_csv.speeds, grid)

    txt_path = tmp_path / "grid.txt"
    txt_path.write_text("1 0 1\n", encoding="utf-8")
    from_txt = load_cost_field(txt_path)
    assert from_txt.shape == (3, 1), "a single text row should still load as a 2-D grid"
