# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Enums for dispute arbitration."""

from enum import StrEnum

from ..core.state_machine import TransitionTable


class DisputeOutcome(StrEnum):
    """Outcome of a dispute, shared with the resolution lifecycle."""

    PENDING = "pending"
    UPHELD = "upheld"  # Dispute accepted: the proposal was wrong
    REJECTED = "rejected"  # Dispute dismissed: the proposal stands
    VOIDED = "voided"  # Proposal expired before the dispute was decided


class VoteChoice(StrEnum):
    UPHELD = "upheld"
    REJECTED = "rejected"

    @property
    def outcome(self) -> DisputeOutcome:
        return DisputeOutcome(self.value)


class CaseStatus(StrEnum):
    VOTING = "voting"
    RESOLVED = "resolved"
    FINALIZED = "finalized"
    CLOSED = "closed"


class CaseAction(StrEnum):
    RESOLVE = "resolve"
    APPEAL = "appeal"
    FINALIZE = "finalize"
    CLOSE = "close"


CASE_TRANSITIONS: TransitionTable[CaseStatus, CaseAction] = TransitionTable(
    "ArbitrationCase",
    {
        (CaseStatus.VOTING, CaseAction.RESOLVE): CaseStatus.RESOLVED,
        (CaseStatus.RESOLVED, CaseAction.APPEAL): CaseStatus.VOTING,
        (CaseStatus.RESOLVED, CaseAction.FINALIZE): CaseStatus.FINALIZED,
        (CaseStatus.VOTING, CaseAction.CLOSE): CaseStatus.CLOSED,
        (CaseStatus.RESOLVED, CaseAction.CLOSE): CaseStatus.CLOSED,
    },
)
