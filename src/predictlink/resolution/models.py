# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Data models for the resolution lifecycle."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

from pydantic import Field, model_validator

from ..core.basis_points import BPS_DENOMINATOR
from ..core.component import ComponentParameters
from ..core.config import CoreSettings
from .enums import DisputeOutcome, EventStatus, ProposalStatus


class ResolutionParameters(ComponentParameters):
    """Bond minimums, liveness window and the bond reward split."""

    min_proposer_bond: int = Field(gt=0)
    min_disputer_bond: int = Field(gt=0)
    liveness_period: int = Field(gt=0)
    min_confidence_score: int = Field(ge=0, le=BPS_DENOMINATOR)
    proposer_reward_rate: int = Field(ge=0, le=BPS_DENOMINATOR)
    disputer_reward_rate: int = Field(ge=0, le=BPS_DENOMINATOR)
    platform_fee_rate: int = Field(ge=0, le=BPS_DENOMINATOR)
    reopen_on_upheld: bool = False
    report_misbehavior: bool = True
    arbitration_mode: Literal["direct", "committee"] = "direct"

    @model_validator(mode="after")
    def check_reward_split(self) -> ResolutionParameters:
        total = self.proposer_reward_rate + self.disputer_reward_rate + self.platform_fee_rate
        if total != BPS_DENOMINATOR:
            raise ValueError(f"reward rates must sum to {BPS_DENOMINATOR}, got {total}")
        return self

    @property
    def committee_mode(self) -> bool:
        return self.arbitration_mode == "committee"

    @classmethod
    def from_settings(cls, settings: CoreSettings) -> ResolutionParameters:
        return cls(
            min_proposer_bond=settings.min_proposer_bond,
            min_disputer_bond=settings.min_disputer_bond,
            liveness_period=settings.liveness_period,
            min_confidence_score=settings.min_confidence_score,
            proposer_reward_rate=settings.proposer_reward_rate,
            disputer_reward_rate=settings.disputer_reward_rate,
            platform_fee_rate=settings.platform_fee_rate,
            reopen_on_upheld=settings.reopen_on_upheld,
            report_misbehavior=settings.report_misbehavior,
            arbitration_mode=settings.arbitration_mode,
        )


@dataclass
class Event:
    """A real-world event awaiting a trusted outcome.

    The outcome fields mirror the active (or last accepted) proposal.
    """

    id: str
    description: str
    creator: str
    created_at: int
    resolution_time: int
    category: str = "general"
    status: EventStatus = EventStatus.CREATED
    outcome_hash: str | None = None
    outcome: str | None = None
    confidence_score: int | None = None
    proposer: str | None = None
    proposer_bond: int = 0
    dispute_count: int = 0
    evidence_uri: str = ""
    reward_pool: int = 0
    reward_pool_released: bool = False
    settled: bool = False
    active_proposal_id: str | None = None
    proposal_ids: list[str] = field(default_factory=list)
    resolved_at: int | None = None

    def clear_outcome(self) -> None:
        self.active_proposal_id = None
        self.outcome_hash = None
        self.outcome = None
        self.confidence_score = None
        self.proposer = None
        self.proposer_bond = 0
        self.evidence_uri = ""

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["status"] = self.status.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        data = dict(data)
        data["status"] = EventStatus(data.get("status", "created"))
        data["proposal_ids"] = list(data.get("proposal_ids", []))
        for key in ("created_at", "resolution_time", "proposer_bond", "dispute_count", "reward_pool"):
            if key in data:
                data[key] = int(data[key])
        return cls(**data)


@dataclass
class Proposal:
    id: str
    event_id: str
    proposer: str
    outcome_hash: str
    outcome: str
    confidence_score: int
    evidence_uri: str
    bond_amount: int
    submitted_at: int
    liveness_expiry: int
    status: ProposalStatus = ProposalStatus.ACTIVE
    challenge_count: int = 0
    executed: bool = False
    bond_released: bool = False
    dispute_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["status"] = self.status.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Proposal:
        data = dict(data)
        data["status"] = ProposalStatus(data.get("status", "active"))
        data["dispute_ids"] = list(data.get("dispute_ids", []))
        for key in ("confidence_score", "bond_amount", "submitted_at", "liveness_expiry"):
            data[key] = int(data[key])
        return cls(**data)


@dataclass
class Dispute:
    id: str
    proposal_id: str
    event_id: str
    disputer: str
    reason: str
    counter_evidence_uri: str
    bond_amount: int
    timestamp: int
    resolved: bool = False
    outcome: DisputeOutcome = DisputeOutcome.PENDING
    resolved_at: int | None = None
    arbitrated: bool = False

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["outcome"] = self.outcome.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Dispute:
        data = dict(data)
        data["outcome"] = DisputeOutcome(data.get("outcome", "pending"))
        data["bond_amount"] = int(data["bond_amount"])
        data["timestamp"] = int(data["timestamp"])
        return cls(**data)
