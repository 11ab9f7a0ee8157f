# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Versioned state snapshots."""

from .migrations import CURRENT_SCHEMA_VERSION, migrate, migration
from .snapshot import export_state, import_state, load_snapshot, load_state, save_state

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "export_state",
    "import_state",
    "load_snapshot",
    "load_state",
    "migrate",
    "migration",
    "save_state",
]
