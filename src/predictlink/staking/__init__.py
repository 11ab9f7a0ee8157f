# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Bond ledger (long-term staking)."""

from .models import SlashResult, Stake, StakingParameters
from .service import BondLedger

__all__ = [
    "BondLedger",
    "SlashResult",
    "Stake",
    "StakingParameters",
]
