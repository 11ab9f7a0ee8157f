# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Resolution lifecycle: events, proposals and disputes."""

from .enums import DisputeOutcome, EventStatus, ProposalStatus
from .lifecycle import ResolutionLifecycle
from .models import Dispute, Event, Proposal, ResolutionParameters
from .transitions import EVENT_TRANSITIONS, PROPOSAL_TRANSITIONS
from .validators import compute_outcome_hash

__all__ = [
    "Dispute",
    "DisputeOutcome",
    "EVENT_TRANSITIONS",
    "Event",
    "EventStatus",
    "PROPOSAL_TRANSITIONS",
    "Proposal",
    "ProposalStatus",
    "ResolutionLifecycle",
    "ResolutionParameters",
    "compute_outcome_hash",
]
