# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Transition tables for events and proposals.

Event:
    CREATED   --propose-->  LIVENESS
    LIVENESS  --dispute-->  DISPUTED   (also DISPUTED --dispute--> DISPUTED)
    DISPUTED  --restore-->  LIVENESS   (every dispute rejected)
    DISPUTED  --cancel-->   CANCELLED  (dispute upheld)
    DISPUTED  --reopen-->   CREATED    (dispute upheld, event reopened)
    LIVENESS  --expire-->   CREATED    (also from DISPUTED)
    LIVENESS  --finalize--> RESOLVED
    RESOLVED  --settle-->   SETTLED

Proposal:
    ACTIVE     --challenge--> CHALLENGED (also CHALLENGED --challenge--> CHALLENGED)
    CHALLENGED --clear-->     ACTIVE
    CHALLENGED --reject-->    REJECTED
    ACTIVE     --finalize-->  FINALIZED
    ACTIVE     --expire-->    EXPIRED    (also from CHALLENGED)
"""

from ..core.state_machine import TransitionTable
from .enums import EventAction, EventStatus, ProposalAction, ProposalStatus

EVENT_TRANSITIONS: TransitionTable[EventStatus, EventAction] = TransitionTable(
    "Event",
    {
        (EventStatus.CREATED, EventAction.PROPOSE): EventStatus.LIVENESS,
        (EventStatus.LIVENESS, EventAction.DISPUTE): EventStatus.DISPUTED,
        (EventStatus.DISPUTED, EventAction.DISPUTE): EventStatus.DISPUTED,
        (EventStatus.DISPUTED, EventAction.RESTORE): EventStatus.LIVENESS,
        (EventStatus.DISPUTED, EventAction.CANCEL): EventStatus.CANCELLED,
        (EventStatus.DISPUTED, EventAction.REOPEN): EventStatus.CREATED,
        (EventStatus.LIVENESS, EventAction.EXPIRE): EventStatus.CREATED,
        (EventStatus.DISPUTED, EventAction.EXPIRE): EventStatus.CREATED,
        (EventStatus.LIVENESS, EventAction.FINALIZE): EventStatus.RESOLVED,
        (EventStatus.RESOLVED, EventAction.SETTLE): EventStatus.SETTLED,
    },
)

PROPOSAL_TRANSITIONS: TransitionTable[ProposalStatus, ProposalAction] = TransitionTable(
    "Proposal",
    {
        (ProposalStatus.ACTIVE, ProposalAction.CHALLENGE): ProposalStatus.CHALLENGED,
        (ProposalStatus.CHALLENGED, ProposalAction.CHALLENGE): ProposalStatus.CHALLENGED,
        (ProposalStatus.CHALLENGED, ProposalAction.CLEAR): ProposalStatus.ACTIVE,
        (ProposalStatus.CHALLENGED, ProposalAction.REJECT): ProposalStatus.REJECTED,
        (ProposalStatus.ACTIVE, ProposalAction.FINALIZE): ProposalStatus.FINALIZED,
        (ProposalStatus.ACTIVE, ProposalAction.EXPIRE): ProposalStatus.EXPIRED,
        (ProposalStatus.CHALLENGED, ProposalAction.EXPIRE): ProposalStatus.EXPIRED,
    },
)

# Proposal statuses that count as "active" for the one-active-proposal rule
OPEN_PROPOSAL_STATUSES = frozenset({ProposalStatus.ACTIVE, ProposalStatus.CHALLENGED})
