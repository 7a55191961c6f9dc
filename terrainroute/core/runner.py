"""
后台执行包装：在独立工作线程上跑 SearchEngine 主循环。

- run() 只能调用一次，重复调用抛 SearchAlreadyStartedError（引擎状态不变）；
- cancel() 协作式取消，工作线程每轮主循环检查一次；取消后不产生任何结果；
- 完成信号是一个 concurrent.futures.Future，至多兑现一次。
"""

from __future__ import annotations

import itertools
import threading
from concurrent.futures import Future
from typing import Callable, Optional

from ..exceptions import SearchAlreadyStartedError
from ..logging_config import get_logger, search_context
from .astar import SearchEngine, SearchSnapshot
from .cost import CostField
from .result import SearchResult

logger = get_logger(__name__)

_TASK_IDS = itertools.count(1)


class SearchTask:
    """一次性后台搜索任务。"""

    def __init__(self, engine: SearchEngine, name: Optional[str] = None) -> None:
        self.engine = engine
        self.id = name or f"search-{next(_TASK_IDS)}"
        self._future: Future = Future()
        self._cancel_event = threading.Event()
        self._lock = threading.RLock()  # 回调在持锁时触发，允许回调内再次调用 cancel()
        self._thread: Optional[threading.Thread] = None
        self._started = False

    @classmethod
    def create(cls, start, end, field: CostField, name: Optional[str] = None) -> "SearchTask":
        return cls(SearchEngine(start, end, field), name=name)

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def run(self) -> Future:
        """启动搜索并返回完成 Future。端点阻塞或起终点相同时同步兑现，不启动线程。"""
        with self._lock:
            if self._started:
                logger.error("%s: run() rejected, search already started", self.id)
                raise SearchAlreadyStartedError(f"task {self.id}")
            self._started = True

        if self.engine.is_terminal:
            self._deliver(self.engine.result)
            return self._future

        self._thread = threading.Thread(target=self._worker, name=f"terrainroute-{self.id}", daemon=True)
        self._thread.start()
        return self._future

    def cancel(self) -> bool:
        """
        请求取消。可重复调用，完成后调用为 no-op。

        Returns:
            取消是否生效（结果已送达时为 False）
        """
        with self._lock:
            if self._future.done():
                return self._future.cancelled()
            self._cancel_event.set()
            cancelled = self._future.cancel()
        if cancelled:
            logger.info("%s: cancellation requested", self.id)
        return cancelled

    def add_done_callback(self, callback: Callable[[SearchResult], None]) -> None:
        """
        注册完成回调，恰好收到一次 SearchResult。

        取消或内部错误时不会调用。完成后注册的回调立即在当前线程调用。
        """

        def _relay(future: Future) -> None:
            if future.cancelled() or future.exception() is not None:
                return
            callback(future.result())

        self._future.add_done_callback(_relay)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    # ------------------------------------------------------------------
    # 状态
    # ------------------------------------------------------------------

    @property
    def future(self) -> Future:
        return self._future

    @property
    def started(self) -> bool:
        return self._started

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._future.cancelled()

    @property
    def done(self) -> bool:
        return self._future.done()

    def snapshot(self) -> SearchSnapshot:
        return self.engine.snapshot()

    # ------------------------------------------------------------------
    # 工作线程
    # ------------------------------------------------------------------

    def _worker(self) -> None:
        with search_context(self.id):
            try:
                result = self.engine.run_to_completion(self._should_stop)
            except Exception as exc:
                logger.exception("%s: search aborted by internal error", self.id)
                with self._lock:
                    if not self._future.done():
                        self._future.set_exception(exc)
                return

            if result is None:
                logger.info("%s: search cancelled after %d expansions", self.id, self.engine.expanded)
                return
            self._deliver(result)

    def _should_stop(self) -> bool:
        return self._cancel_event.is_set() or self._future.cancelled()

    def _deliver(self, result: SearchResult) -> None:
        with self._lock:
            if self._cancel_event.is_set() or self._future.done():
                return
            self._future.set_result(result)


__all__ = ["SearchTask"]
