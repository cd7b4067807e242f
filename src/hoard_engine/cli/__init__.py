"""Unified CLI for hoard.

Usage:
    hoard validate
    hoard envs
    hoard paths [HOARD ...]

Global options:
    --config-file PATH   configuration file (default: <config dir>/config.yml)
    --hoards-root PATH   archive directory (default: <data dir>/hoards)

Set HOARD_LOG_LEVEL=DEBUG to see how each environment and pile was decided.
"""

import argparse
import logging
import os
import sys

from hoard_engine.cli.envs import cmd_envs
from hoard_engine.cli.paths import cmd_paths
from hoard_engine.cli.validate import cmd_validate


def _setup_logging() -> None:
    log_level = os.environ.get("HOARD_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hoard",
        description="Resolve where each hoard's files live on this machine",
    )
    parser.add_argument(
        "-c", "--config-file", default=None,
        help="Path to the configuration file",
    )
    parser.add_argument(
        "-r", "--hoards-root", default=None,
        help="Directory hoards are backed up into",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("validate", help="Load and resolve the configuration")

    sub.add_parser("envs", help="Show which environments apply to this machine")

    paths = sub.add_parser("paths", help="Show the resolved path of every pile")
    paths.add_argument(
        "hoards", nargs="*",
        help="Hoards to show (default: all)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    _setup_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    dispatch = {
        "validate": cmd_validate,
        "envs": cmd_envs,
        "paths": cmd_paths,
    }

    handler = dispatch.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
