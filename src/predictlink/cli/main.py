# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""
PredictLink CLI.

Commands:
  predictlink config                   Show effective settings
  predictlink state init PATH          Write an empty state snapshot
  predictlink state inspect PATH       Summarize a snapshot
  predictlink state migrate PATH       Upgrade a snapshot's schema version
  predictlink demo                     Run an end-to-end resolution scenario
"""

from __future__ import annotations

import argparse
import sys

from .. import __version__
from ..core.logging import configure_logging
from .commands import COMMAND_MODULES


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="predictlink",
        description="PredictLink oracle core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  predictlink config --json               Settings as JSON
  predictlink state init state.json       Fresh snapshot
  predictlink state inspect state.json    Counts, totals and conservation check
  predictlink state migrate old.json -o new.json
  predictlink demo --save demo.json       Run the scenario and keep its state
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_format=args.json or None)

    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
