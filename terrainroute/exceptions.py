from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class TerrainRouteError(Exception):
    """Business-level exception carrying a stable error code for callers."""

    code: str
    message: str
    detail: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.__str__())

    def __str__(self) -> str:  # pragma: no cover - trivial
        base = f"[{self.code}] {self.message}"
        if self.detail:
            return f"{base}: {self.detail}"
        return base

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class GridBoundsError(TerrainRouteError, IndexError):
    """A coordinate outside the cost grid was accessed."""

    def __init__(self, position, shape: tuple[int, int]) -> None:
        width, height = shape
        super().__init__(
            code="out_of_bounds",
            message=f"coordinate {tuple(position)} outside grid",
            detail=f"width={width}, height={height}",
        )


class NodeLookupError(TerrainRouteError, KeyError):
    """NodeRegistry.get() on a coordinate that was never materialised."""

    def __init__(self, position) -> None:
        super().__init__(code="node_missing", message=f"no search node at {tuple(position)}")


class SearchAlreadyStartedError(TerrainRouteError, RuntimeError):
    """run() called on a search that has already been started."""

    def __init__(self, detail: Optional[str] = None) -> None:
        super().__init__(
            code="already_started",
            message="search has already been started; run() may only be called once",
            detail=detail,
        )


class SearchInvariantError(TerrainRouteError, RuntimeError):
    """Internal logic error; the search episode cannot produce a trustworthy result."""

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(code="invariant_violation", message=message, detail=detail)


__all__ = [
    "TerrainRouteError",
    "GridBoundsError",
    "NodeLookupError",
    "SearchAlreadyStartedError",
    "SearchInvariantError",
]
