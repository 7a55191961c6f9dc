from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def pytest_configure(config):
    # 确保本仓库根目录排在 sys.path 最前
    if str(PROJECT_ROOT) in sys.path:
        sys.path.remove(str(PROJECT_ROOT))
    sys.path.insert(0, str(PROJECT_ROOT))


def make_field(rows):
    from terrainroute.core.cost import CostField

    return CostField.from_array(np.array(rows, dtype=float))


@pytest.fixture
def uniform_3x3():
    return make_field(np.ones((3, 3)))


@pytest.fixture
def open_field():
    """20x12 全通行网格。"""
    return make_field(np.ones((12, 20)))


@pytest.fixture
def demo_field():
    from terrainroute.core.cost import make_demo_field

    return make_demo_field()
