# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""PredictLink CLI - inspect configuration, manage state snapshots, run the demo."""

from .main import app, main

__all__ = ["main", "app"]
