"""Command-line launcher for the arena server."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys

from snake_arena.config import WorldConfig

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snake-arena",
        description="Authoritative multiplayer snake arena server.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    serve_p = sub.add_parser("serve", help="Run the arena server.")
    serve_p.add_argument("--host", type=str, default="0.0.0.0")
    serve_p.add_argument("--port", type=int, default=3000)
    serve_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON world config file.",
    )
    serve_p.add_argument("--tick-rate", type=int, default=None)
    serve_p.add_argument("--arena-size", type=float, default=None)
    serve_p.add_argument("--food-count", type=int, default=None)
    serve_p.add_argument("--max-players", type=int, default=None)
    serve_p.add_argument("--seed", type=int, default=None)
    serve_p.add_argument(
        "--log-level", type=str, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )

    config_p = sub.add_parser(
        "dump-config", help="Write the default world config as JSON.",
    )
    config_p.add_argument("output", help="Destination JSON path.")

    return parser


def _load_config(args: argparse.Namespace) -> WorldConfig:
    config = WorldConfig.load(args.config) if args.config else WorldConfig()

    flag_map = {
        "tick_rate": "tick_rate",
        "arena_size": "arena_size",
        "food_count": "food_count",
        "max_players": "max_players",
        "seed": "seed",
    }
    overrides = {
        field: getattr(args, flag)
        for flag, field in flag_map.items()
        if getattr(args, flag) is not None
    }
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from snake_arena.server.app import create_app

    try:
        config = _load_config(args)
    except (OSError, ValueError, TypeError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    logger.info("Starting arena server on %s:%d", args.host, args.port)
    uvicorn.run(
        create_app(config),
        host=args.host,
        port=args.port,
        log_level=args.log_level.lower(),
    )
    return 0


def _run_dump_config(args: argparse.Namespace) -> int:
    WorldConfig().save(args.output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``snake-arena`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(args, "log_level", "INFO"),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "serve": _run_serve,
        "dump-config": _run_dump_config,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
