"""
阻塞式规划入口。

find_path() 在后台线程运行 SearchTask 并等待结果；超过 timeout 时取消任务并返回 None。
"""

from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Optional

from ..logging_config import get_logger
from ..settings import settings
from .astar import SearchEngine
from .cost import CostField
from .result import SearchResult
from .runner import SearchTask

logger = get_logger(__name__)

_USE_SETTINGS = object()


def find_path(
    field: CostField,
    start,
    end,
    timeout=_USE_SETTINGS,
) -> Optional[SearchResult]:
    """
    用双向 A* 计算 start -> end 的路径。

    两侧搜索首次相遇即停止，返回的路径合法且代价与路径一致，但不保证全局最小。

    Args:
        field: 成本场
        start, end: (x, y) 坐标
        timeout: 秒；None 表示不限时；缺省取 settings.SEARCH_TIMEOUT_S

    Returns:
        SearchResult；超时被取消时返回 None
    """
    if timeout is _USE_SETTINGS:
        timeout = settings.SEARCH_TIMEOUT_S

    task = SearchTask.create(start, end, field)
    future = task.run()
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        task.cancel()
        logger.warning("%s: no result within %.3fs, search cancelled", task.id, timeout)
        return None


def find_path_blocking(field: CostField, start, end) -> SearchResult:
    """在当前线程直接运行搜索（不启动工作线程），适合脚本与测试。"""
    engine = SearchEngine(start, end, field)
    return engine.run_to_completion()


__all__ = ["find_path", "find_path_blocking"]
