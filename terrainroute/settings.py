"""Centralised environment-driven settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import TerrainRouteError


class Settings(BaseSettings):
    """Application settings sourced from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TERRAINROUTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid",
    )

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "./logs"
    LOG_BUFFER: int = 500
    # 速度倍率上限为 1，保证八方向启发式可采纳
    CLAMP_SPEEDS: bool = True
    SEARCH_TIMEOUT_S: Optional[float] = None


def format_validation_error(err: ValidationError) -> str:
    parts: List[str] = []
    for issue in err.errors():
        location = ".".join(str(item) for item in issue.get("loc", ()))
        message = issue.get("msg", "")
        parts.append(f"- field `{location}`: {message}")
    return "\n".join(parts) if parts else str(err)


def load_settings(path: str | Path | None = None) -> Settings:
    """
    读取配置：环境变量为底，YAML 文件（可选）覆盖其上。

    YAML 顶层必须是 mapping，键名大小写不敏感（``log_level`` 与 ``LOG_LEVEL`` 等价）。
    """
    overrides: Dict[str, Any] = {}
    source = "environment"
    if path is not None:
        source = str(path)
        yaml_path = Path(path)
        try:
            data = yaml.safe_load(yaml_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise TerrainRouteError("config_invalid", f"cannot read config {source}", str(exc)) from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise TerrainRouteError("config_invalid", f"config {source} must be a mapping")
        overrides = {str(key).upper(): value for key, value in data.items()}

    try:
        return Settings(**overrides)
    except ValidationError as err:
        raise TerrainRouteError(
            "config_invalid",
            f"validation failed for {source}",
            format_validation_error(err),
        ) from err


settings = Settings()

__all__ = ["Settings", "settings", "load_settings", "format_validation_error"]
