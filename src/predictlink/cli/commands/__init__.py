# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""CLI command modules for PredictLink.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import config_cmd, demo, state
from .config_cmd import cmd_config
from .demo import cmd_demo, run_demo
from .state import cmd_state_init, cmd_state_inspect, cmd_state_migrate

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    config_cmd,
    state,
    demo,
]

__all__ = [
    "COMMAND_MODULES",
    "cmd_config",
    "cmd_demo",
    "cmd_state_init",
    "cmd_state_inspect",
    "cmd_state_migrate",
    "run_demo",
]
