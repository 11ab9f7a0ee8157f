# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Enums and the request transition table for the slashing governor."""

from enum import StrEnum

from ..core.state_machine import TransitionTable


class SlashingStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXECUTED = "executed"


class SlashingReason(StrEnum):
    FALSE_PROPOSAL = "false_proposal"
    FRIVOLOUS_DISPUTE = "frivolous_dispute"
    DOWNTIME = "downtime"
    MALICIOUS_BEHAVIOR = "malicious_behavior"
    COLLUSION = "collusion"
    DATA_MANIPULATION = "data_manipulation"
    PROTOCOL_VIOLATION = "protocol_violation"


class SlashingAction(StrEnum):
    APPROVE = "approve"
    REACH_QUORUM = "reach_quorum"
    EXECUTE = "execute"
    REJECT = "reject"


# Base rate per reason, in bps of the requested base amount
DEFAULT_REASON_RATES: dict[SlashingReason, int] = {
    SlashingReason.FALSE_PROPOSAL: 10_000,
    SlashingReason.FRIVOLOUS_DISPUTE: 5_000,
    SlashingReason.DOWNTIME: 100,
    SlashingReason.MALICIOUS_BEHAVIOR: 10_000,
    SlashingReason.COLLUSION: 10_000,
    SlashingReason.DATA_MANIPULATION: 10_000,
    SlashingReason.PROTOCOL_VIOLATION: 3_000,
}


REQUEST_TRANSITIONS: TransitionTable[SlashingStatus, SlashingAction] = TransitionTable(
    "SlashingRequest",
    {
        (SlashingStatus.PENDING, SlashingAction.APPROVE): SlashingStatus.PENDING,
        (SlashingStatus.PENDING, SlashingAction.REACH_QUORUM): SlashingStatus.APPROVED,
        (SlashingStatus.APPROVED, SlashingAction.APPROVE): SlashingStatus.APPROVED,
        (SlashingStatus.APPROVED, SlashingAction.REACH_QUORUM): SlashingStatus.APPROVED,
        (SlashingStatus.APPROVED, SlashingAction.EXECUTE): SlashingStatus.EXECUTED,
        (SlashingStatus.PENDING, SlashingAction.REJECT): SlashingStatus.REJECTED,
        (SlashingStatus.APPROVED, SlashingAction.REJECT): SlashingStatus.REJECTED,
    },
)
