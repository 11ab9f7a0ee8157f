# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Dispute arbitration by committee vote."""

from .committee import ArbitrationCommittee
from .enums import CaseStatus, DisputeOutcome, VoteChoice
from .models import (
    Appeal,
    ArbitrationCase,
    ArbitrationParameters,
    ArbitratorReputation,
    ReputationConstants,
    Vote,
)

__all__ = [
    "Appeal",
    "ArbitrationCase",
    "ArbitrationCommittee",
    "ArbitrationParameters",
    "ArbitratorReputation",
    "CaseStatus",
    "DisputeOutcome",
    "ReputationConstants",
    "Vote",
    "VoteChoice",
]
