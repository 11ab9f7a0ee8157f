# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Output formatting for CLI commands.

Commands hand a plain dict to ``output_result``; ``--json`` prints it as
JSON, otherwise it is rendered as indented ``key: value`` lines.
"""

from __future__ import annotations

import json
import sys
from typing import Any


def output_result(data: Any, as_json: bool = False) -> None:
    """Print a command result as JSON or as readable text."""
    if as_json:
        print(json.dumps(data, indent=2, default=str, sort_keys=True))
    else:
        print("\n".join(format_text(data)))


def format_text(data: Any, indent: int = 0) -> list[str]:
    pad = "  " * indent
    if isinstance(data, dict):
        lines = []
        for key, value in data.items():
            if isinstance(value, dict | list) and value:
                lines.append(f"{pad}{key}:")
                lines.extend(format_text(value, indent + 1))
            else:
                lines.append(f"{pad}{key}: {_scalar(value)}")
        return lines
    if isinstance(data, list):
        lines = []
        for item in data:
            if isinstance(item, dict):
                nested = format_text(item, indent + 1)
                lines.append(f"{pad}- {nested[0].strip()}" if nested else f"{pad}-")
                lines.extend(nested[1:])
            else:
                lines.append(f"{pad}- {_scalar(item)}")
        return lines
    return [f"{pad}{_scalar(data)}"]


def _scalar(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, dict | list):
        return "{}" if isinstance(value, dict) else "[]"
    return str(value)


def output_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)
