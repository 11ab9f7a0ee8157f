# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""``predictlink config``: print the effective settings."""

from __future__ import annotations

import argparse

from ...core.config import get_config
from ..output import output_result


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``config`` command."""
    config_parser = subparsers.add_parser(
        "config",
        help="Show effective settings (defaults, .env and PREDICTLINK_ variables)",
    )
    config_parser.set_defaults(func=cmd_config)


def cmd_config(args: argparse.Namespace) -> int:
    settings = get_config()
    output_result(settings.model_dump(mode="json"), as_json=args.json)
    return 0
