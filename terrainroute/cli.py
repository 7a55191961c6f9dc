#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence, Tuple

from .core.cost import CostField, load_cost_field, make_demo_field
from .core.planner import find_path
from .core.result import SearchResult
from .exceptions import TerrainRouteError
from .logging_config import apply_settings, configure_logging, get_logger
from .settings import Settings, load_settings

logger = get_logger(__name__)

EXIT_PATH_FOUND = 0
EXIT_NO_PATH = 1
EXIT_CANCELLED = 2
EXIT_INVALID = 3


def _parse_xy(value: str) -> Tuple[int, int]:
    parts = value.split(",", 1)
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Invalid x,y pair: {value!r}")
    try:
        return int(parts[0].strip()), int(parts[1].strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid x,y pair: {value!r}") from exc


def _add_common(sub: argparse.ArgumentParser) -> None:
    sub.add_argument("--timeout", type=float, default=None, help="秒；超时取消搜索（缺省取 SEARCH_TIMEOUT_S）")
    sub.add_argument("--json", action="store_true", dest="as_json", help="以 JSON 输出结果")
    sub.add_argument("--config", default=None, help="可选 YAML 配置文件")
    sub.add_argument("--log-file", action="store_true", dest="log_file", help="同时写入 LOG_DIR 下的日志文件")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="terrainroute", description="terrainroute CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    route_plan = subparsers.add_parser("route.plan", help="在速度倍率网格上规划路径（双向 A*）")
    route_plan.add_argument("grid", help="网格文件（.npy 或逗号/空白分隔文本，行=y，列=x）")
    route_plan.add_argument("--start", type=_parse_xy, required=True, help="起点 x,y")
    route_plan.add_argument("--end", type=_parse_xy, required=True, help="终点 x,y")
    _add_common(route_plan)

    route_demo = subparsers.add_parser("route.demo", help="在内置 demo 网格上规划（穿过墙上缺口）")
    route_demo.add_argument("--width", type=int, default=40)
    route_demo.add_argument("--height", type=int, default=24)
    _add_common(route_demo)

    return parser


def _emit(result: Optional[SearchResult], as_json: bool) -> int:
    if result is None:
        if as_json:
            print(json.dumps({"status": "cancelled", "path": None, "cost": None}))
        else:
            print("search cancelled: no result within timeout")
        return EXIT_CANCELLED

    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False))
    else:
        print(result)
        if result.path_found:
            print(f"cost: {result.cost:.4f}  expanded: {result.expanded}")
            print(" ".join(f"{p.x},{p.y}" for p in result.path))
    return EXIT_PATH_FOUND if result.path_found else EXIT_NO_PATH


def _plan(field: CostField, start, end, cfg: Settings, args: argparse.Namespace) -> int:
    timeout = args.timeout if args.timeout is not None else cfg.SEARCH_TIMEOUT_S
    logger.info("planning %s -> %s on %dx%d grid", start, end, field.width, field.height)
    result = find_path(field, start, end, timeout=timeout)
    return _emit(result, args.as_json)


def handle_route_plan(args: argparse.Namespace, cfg: Settings) -> int:
    field = load_cost_field(args.grid, clamp=cfg.CLAMP_SPEEDS)
    return _plan(field, args.start, args.end, cfg, args)


def handle_route_demo(args: argparse.Namespace, cfg: Settings) -> int:
    field = make_demo_field(args.width, args.height)
    start = (1, 1)
    end = (field.width - 2, 1)
    return _plan(field, start, end, cfg, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        cfg = load_settings(args.config)
        apply_settings(cfg)
        if args.log_file:
            configure_logging(cfg.LOG_DIR)
        if args.command == "route.plan":
            return handle_route_plan(args, cfg)
        if args.command == "route.demo":
            return handle_route_demo(args, cfg)
    except TerrainRouteError as err:
        logger.error("%s", err)
        print(f"error: {err}", file=sys.stderr)
        return EXIT_INVALID
    except (OSError, ValueError) as err:
        logger.error("invalid input: %s", err)
        print(f"error: {err}", file=sys.stderr)
        return EXIT_INVALID
    parser.print_help()
    return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
