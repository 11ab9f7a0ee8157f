# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Reward distributor."""

from .distributor import RewardDistributor
from .models import Participant, RewardParameters, RewardPool

__all__ = [
    "Participant",
    "RewardDistributor",
    "RewardParameters",
    "RewardPool",
]
