from __future__ import annotations

import logging
import os
import sys
import threading
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from .settings import Settings, settings


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


_RESOLVED_LEVEL = _resolve_level(settings.LOG_LEVEL)

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(search_id)s | terrainroute.%(module)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LOG_FILENAME = "terrainroute_runs.log"

_buffer_lock = threading.Lock()
_log_buffer: deque[str] = deque(maxlen=max(1, settings.LOG_BUFFER))
_search_context = threading.local()


class SearchIdFilter(logging.Filter):
    """Inject the id of the search running on the current thread into each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.search_id = getattr(_search_context, "search_id", "-")
        return True


class _BufferingHandler(logging.Handler):
    """Capture log records into an in-memory ring buffer."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        message = self.format(record)
        with _buffer_lock:
            _log_buffer.append(message)


_logging_configured = False
_config_lock = threading.Lock()


def _configure_logging() -> None:
    global _logging_configured
    with _config_lock:
        if _logging_configured:
            return

        formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)
        search_filter = SearchIdFilter()

        stream_handler = logging.StreamHandler(sys.__stderr__)
        stream_handler.setFormatter(formatter)
        stream_handler.setLevel(_RESOLVED_LEVEL)
        stream_handler.addFilter(search_filter)

        buffer_handler = _BufferingHandler()
        buffer_handler.addFilter(search_filter)

        # 只挂在包级 logger 上，不改动宿主应用的 root logger
        package_logger = logging.getLogger("terrainroute")
        package_logger.setLevel(_RESOLVED_LEVEL)
        package_logger.addHandler(stream_handler)
        package_logger.addHandler(buffer_handler)
        package_logger.propagate = False

        _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured with the unified terrainroute format."""
    _configure_logging()
    return logging.getLogger(name)


@contextmanager
def search_context(search_id: str) -> Iterator[None]:
    """Tag every record emitted on this thread with ``search_id`` while active."""
    previous = getattr(_search_context, "search_id", "-")
    _search_context.search_id = search_id
    try:
        yield
    finally:
        _search_context.search_id = previous


def get_recent_output(limit: int = 200) -> List[str]:
    """Return the most recent log lines up to ``limit`` entries."""
    if limit <= 0:
        return []
    with _buffer_lock:
        return list(_log_buffer)[-limit:]


def export_recent_output(limit: int = 200) -> str:
    """Render recent log lines as a single newline-delimited string."""
    return "\n".join(get_recent_output(limit))


def configure_logging(log_dir: Optional[str | Path] = None) -> Path:
    """可选入口：把 terrainroute 日志额外写入 ``<log_dir>/terrainroute_runs.log``。

    log_dir 缺省取 settings.LOG_DIR。重复调用不会追加重复的文件 handler。
    返回日志文件路径。
    """
    _configure_logging()

    target_dir = Path(log_dir if log_dir is not None else settings.LOG_DIR)
    os.makedirs(target_dir, exist_ok=True)
    log_path = target_dir / _LOG_FILENAME

    package_logger = logging.getLogger("terrainroute")
    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == os.path.abspath(log_path):
            return log_path

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(_RESOLVED_LEVEL)
    file_handler.addFilter(SearchIdFilter())
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    package_logger.addHandler(file_handler)
    return log_path


def apply_settings(cfg: Settings) -> None:
    """按运行期配置（如 CLI 的 --config）重设包 logger 级别与环形缓冲容量。"""
    global _RESOLVED_LEVEL, _log_buffer
    _configure_logging()

    _RESOLVED_LEVEL = _resolve_level(cfg.LOG_LEVEL)
    package_logger = logging.getLogger("terrainroute")
    package_logger.setLevel(_RESOLVED_LEVEL)
    for handler in package_logger.handlers:
        # 环形缓冲始终收 DEBUG，由 logger 级别统一过滤
        if not isinstance(handler, _BufferingHandler):
            handler.setLevel(_RESOLVED_LEVEL)

    capacity = max(1, cfg.LOG_BUFFER)
    with _buffer_lock:
        if _log_buffer.maxlen != capacity:
            _log_buffer = deque(_log_buffer, maxlen=capacity)


__all__ = [
    "get_logger",
    "search_context",
    "get_recent_output",
    "export_recent_output",
    "apply_settings",
    "configure_logging",
]
