# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Data models for dispute arbitration."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from pydantic import Field

from ..core.component import ComponentParameters
from ..core.config import CoreSettings
from .enums import CaseStatus, DisputeOutcome, VoteChoice


class ReputationConstants:
    """Arbitrator reputation adjustments."""

    INITIAL = 100
    ALIGNED_REWARD = 10
    MISALIGNED_PENALTY = 5
    FLOOR = 0


class ArbitrationParameters(ComponentParameters):
    min_arbitrators: int = Field(ge=1)
    voting_period: int = Field(gt=0)
    quorum_percentage: int = Field(ge=1, le=100)
    appeal_bond: int = Field(ge=0)
    appeal_window: int = Field(ge=0)
    max_appeals: int = Field(ge=0)

    def quorum_met(self, total_votes: int) -> bool:
        """``total_votes >= min_arbitrators × quorum_percentage / 100``, without truncation."""
        return total_votes * 100 >= self.min_arbitrators * self.quorum_percentage

    @classmethod
    def from_settings(cls, settings: CoreSettings) -> ArbitrationParameters:
        return cls(
            min_arbitrators=settings.min_arbitrators,
            voting_period=settings.voting_period,
            quorum_percentage=settings.quorum_percentage,
            appeal_bond=settings.appeal_bond,
            appeal_window=settings.appeal_window,
            max_appeals=settings.max_appeals,
        )


@dataclass
class Vote:
    dispute_id: str
    arbitrator: str
    choice: VoteChoice
    timestamp: int
    justification: str = ""
    round: int = 1

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["choice"] = self.choice.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vote:
        return cls(
            dispute_id=data["dispute_id"],
            arbitrator=data["arbitrator"],
            choice=VoteChoice(data["choice"]),
            timestamp=int(data["timestamp"]),
            justification=data.get("justification", ""),
            round=int(data.get("round", 1)),
        )


@dataclass
class Appeal:
    appellant: str
    bond: int
    timestamp: int
    prior_outcome: DisputeOutcome
    settled: bool = False

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["prior_outcome"] = self.prior_outcome.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Appeal:
        return cls(
            appellant=data["appellant"],
            bond=int(data["bond"]),
            timestamp=int(data["timestamp"]),
            prior_outcome=DisputeOutcome(data["prior_outcome"]),
            settled=bool(data.get("settled", False)),
        )


@dataclass
class ArbitrationCase:
    """Committee vote on one filed dispute.

    Tallies and voters cover the current round only; an appeal starts a
    new round.
    """

    id: str
    proposal_id: str
    event_id: str
    disputer: str
    proposer: str
    created_at: int
    voting_deadline: int
    status: CaseStatus = CaseStatus.VOTING
    round: int = 1
    upvotes: int = 0
    downvotes: int = 0
    voters: list[str] = field(default_factory=list)
    outcome: DisputeOutcome = DisputeOutcome.PENDING
    resolved_at: int | None = None
    appeals: list[Appeal] = field(default_factory=list)

    @property
    def total_votes(self) -> int:
        return self.upvotes + self.downvotes

    @property
    def appeal_count(self) -> int:
        return len(self.appeals)

    @property
    def open_appeal(self) -> Appeal | None:
        if self.appeals and not self.appeals[-1].settled:
            return self.appeals[-1]
        return None

    def is_party(self, principal: str) -> bool:
        return principal in (self.disputer, self.proposer)

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["status"] = self.status.value
        result["outcome"] = self.outcome.value
        result["appeals"] = [a.to_dict() for a in self.appeals]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArbitrationCase:
        return cls(
            id=data["id"],
            proposal_id=data["proposal_id"],
            event_id=data["event_id"],
            disputer=data["disputer"],
            proposer=data["proposer"],
            created_at=int(data["created_at"]),
            voting_deadline=int(data["voting_deadline"]),
            status=CaseStatus(data.get("status", "voting")),
            round=int(data.get("round", 1)),
            upvotes=int(data.get("upvotes", 0)),
            downvotes=int(data.get("downvotes", 0)),
            voters=list(data.get("voters", [])),
            outcome=DisputeOutcome(data.get("outcome", "pending")),
            resolved_at=data.get("resolved_at"),
            appeals=[Appeal.from_dict(a) for a in data.get("appeals", [])],
        )


@dataclass
class ArbitratorReputation:
    arbitrator: str
    score: int = ReputationConstants.INITIAL
    votes_cast: int = 0
    aligned_votes: int = 0

    def apply(self, aligned: bool) -> int:
        """Adjust the score for one resolved vote and return the new score."""
        self.votes_cast += 1
        if aligned:
            self.aligned_votes += 1
            self.score += ReputationConstants.ALIGNED_REWARD
        else:
            self.score = max(
                ReputationConstants.FLOOR, self.score - ReputationConstants.MISALIGNED_PENALTY
            )
        return self.score

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArbitratorReputation:
        return cls(
            arbitrator=data["arbitrator"],
            score=int(data.get("score", ReputationConstants.INITIAL)),
            votes_cast=int(data.get("votes_cast", 0)),
            aligned_votes=int(data.get("aligned_votes", 0)),
        )
