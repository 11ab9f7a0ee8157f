# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Enums for the resolution lifecycle."""

from enum import StrEnum

from ..arbitration.enums import DisputeOutcome


class EventStatus(StrEnum):
    CREATED = "created"  # Awaiting a proposal
    LIVENESS = "liveness"  # Proposal open to challenge
    DISPUTED = "disputed"  # At least one dispute unresolved
    RESOLVED = "resolved"  # Outcome final, bond not yet distributed
    SETTLED = "settled"  # Bond distributed, immutable
    CANCELLED = "cancelled"  # Proposal overturned, event closed


class EventAction(StrEnum):
    PROPOSE = "propose"
    DISPUTE = "dispute"
    RESTORE = "restore"
    CANCEL = "cancel"
    REOPEN = "reopen"
    EXPIRE = "expire"
    FINALIZE = "finalize"
    SETTLE = "settle"


class ProposalStatus(StrEnum):
    ACTIVE = "active"
    CHALLENGED = "challenged"
    FINALIZED = "finalized"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ProposalAction(StrEnum):
    CHALLENGE = "challenge"
    CLEAR = "clear"
    REJECT = "reject"
    FINALIZE = "finalize"
    EXPIRE = "expire"


__all__ = [
    "DisputeOutcome",
    "EventAction",
    "EventStatus",
    "ProposalAction",
    "ProposalStatus",
]
