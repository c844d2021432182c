#!/usr/bin/env python3
"""
Command-line entry point for the Graph Subscriptions deployment tasks
"""

import sys
import logging
from typing import List, Optional

from dotenv import load_dotenv

from .config import Settings
from .runtime import RuntimeEnvironment
from .tasks import registry

logger = logging.getLogger(__name__)


def resolve_log_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name!r}")
    return level


def setup_logging(settings: Settings):
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))

    logging.basicConfig(
        level=resolve_log_level(settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Parses the command line, runs the selected task and returns the exit status."""
    load_dotenv()

    parser = registry.build_parser(prog="graph-subscriptions")
    args = parser.parse_args(argv)
    if not args.task:
        parser.print_help()
        return 2

    try:
        settings = Settings.from_env()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if args.rpc_url:
        settings.rpc_url = args.rpc_url
    setup_logging(settings)

    task_args = {
        name: value for name, value in vars(args).items()
        if name not in ('task', 'rpc_url')
    }
    env = RuntimeEnvironment(settings)
    try:
        registry.run_task(args.task, task_args, env)
    except Exception as e:
        logger.error(f"Task {args.task} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
