"""
成本场（速度倍率网格）模块。

CostField 是只读的二维速度倍率网格：
  - 数组形状为 (height, width)，按 speeds[y, x] 取值；
  - 0 表示不可通行，(0, 1] 为通行速度倍率；
  - 越界访问属于编程错误，抛出 GridBoundsError，不做夹取。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from ..exceptions import GridBoundsError
from ..logging_config import get_logger
from ..settings import settings
from .grid import Coordinate

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class CostField:
    """只读速度倍率网格。用 CostField.from_array() 构造以获得校验与夹取。"""

    speeds: np.ndarray  # float64, shape = (height, width), 不可写

    @classmethod
    def from_array(cls, data, clamp: Optional[bool] = None) -> "CostField":
        """
        从二维数组构建 CostField。

        Args:
            data: 二维数组或嵌套列表，行为 y、列为 x
            clamp: 是否把 > 1 的倍率夹到 1；None 时取 settings.CLAMP_SPEEDS

        Raises:
            ValueError: 非二维、空网格、含 NaN / inf / 负值
        """
        speeds = np.array(data, dtype=float)
        if speeds.ndim != 2:
            raise ValueError(f"cost grid must be 2-D, got shape {speeds.shape}")
        if speeds.size == 0:
            raise ValueError("cost grid must not be empty")
        if not np.all(np.isfinite(speeds)):
            raise ValueError("cost grid contains NaN or infinite speed multipliers")
        if np.any(speeds < 0):
            raise ValueError("cost grid contains negative speed multipliers")

        if clamp is None:
            clamp = settings.CLAMP_SPEEDS
        too_fast = int(np.count_nonzero(speeds > 1.0))
        if too_fast:
            if clamp:
                logger.warning("clamping %d speed multipliers above 1.0", too_fast)
                speeds = np.minimum(speeds, 1.0)
            else:
                logger.warning(
                    "%d speed multipliers above 1.0; octile heuristic is no longer admissible",
                    too_fast,
                )

        speeds.setflags(write=False)
        return cls(speeds=speeds)

    @property
    def width(self) -> int:
        return int(self.speeds.shape[1])

    @property
    def height(self) -> int:
        return int(self.speeds.shape[0])

    @property
    def shape(self) -> tuple[int, int]:
        """返回 (width, height)。"""
        return self.width, self.height

    def in_bounds(self, pos: Coordinate) -> bool:
        return 0 <= pos[0] < self.width and 0 <= pos[1] < self.height

    def speed_at(self, pos: Coordinate) -> float:
        if not self.in_bounds(pos):
            raise GridBoundsError(pos, self.shape)
        return float(self.speeds[pos[1], pos[0]])

    def is_traversable(self, pos: Coordinate) -> bool:
        return self.in_bounds(pos) and self.speeds[pos[1], pos[0]] > 0


def make_demo_field(width: int = 40, height: int = 24) -> CostField:
    """
    生成一个确定性的 demo 成本场，用于本地演示 / 测试。

    约定：
      - 全图速度倍率 1.0；
      - x = width // 2 处有一道竖墙（倍率 0），只在 y = height - 3 留一个缺口；
      - y 位于 [height // 4, height // 2) 的横带为慢速区（倍率 0.5）。
    """
    if width < 5 or height < 5:
        raise ValueError("demo field needs at least 5x5 cells")
    speeds = np.ones((height, width), dtype=float)
    speeds[height // 4 : height // 2, :] = 0.5
    wall_x = width // 2
    speeds[:, wall_x] = 0.0
    speeds[height - 3, wall_x] = 1.0
    return CostField.from_array(speeds)


def load_cost_field(path: str | Path, clamp: Optional[bool] = None) -> CostField:
    """
    从文件读取成本场。

    - ``.npy``：numpy.load；
    - 其他后缀：按逗号 / 空白分隔的文本，numpy.loadtxt。
    """
    path = Path(path)
    if path.suffix.lower() == ".npy":
        data = np.load(path, allow_pickle=False)
    else:
        text = path.read_text(encoding="utf-8")
        delimiter = "," if "," in text else None
        data = np.loadtxt(path, delimiter=delimiter, ndmin=2)
    logger.debug("loaded cost grid %s with shape %s", path, getattr(data, "shape", None))
    return CostField.from_array(data, clamp=clamp)


__all__ = ["CostField", "make_demo_field", "load_cost_field"]
