# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Slashing governor."""

from .enums import DEFAULT_REASON_RATES, SlashingReason, SlashingStatus
from .governor import SlashingGovernor, derive_request_id
from .models import SlashingParameters, SlashingRecord, SlashingRequest, UserSlashingHistory

__all__ = [
    "DEFAULT_REASON_RATES",
    "SlashingGovernor",
    "SlashingParameters",
    "SlashingReason",
    "SlashingRecord",
    "SlashingRequest",
    "SlashingStatus",
    "UserSlashingHistory",
    "derive_request_id",
]
