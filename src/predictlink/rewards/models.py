# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Data models for the reward distributor."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from pydantic import Field

from ..core.component import ComponentParameters
from ..core.config import CoreSettings


class RewardParameters(ComponentParameters):
    default_pool_duration: int = Field(gt=0)

    @classmethod
    def from_settings(cls, settings: CoreSettings) -> RewardParameters:
        return cls(default_pool_duration=settings.default_pool_duration)


@dataclass
class RewardPool:
    """A funded, share-weighted payout bucket."""

    id: str
    total_rewards: int
    created_at: int
    expiry_time: int
    funder: str
    distributed_rewards: int = 0
    participant_count: int = 0
    total_shares: int = 0
    claim_count: int = 0
    active: bool = True

    @property
    def remaining(self) -> int:
        return self.total_rewards - self.distributed_rewards

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RewardPool:
        return cls(
            id=data["id"],
            total_rewards=int(data["total_rewards"]),
            created_at=int(data["created_at"]),
            expiry_time=int(data["expiry_time"]),
            funder=data["funder"],
            distributed_rewards=int(data.get("distributed_rewards", 0)),
            participant_count=int(data.get("participant_count", 0)),
            total_shares=int(data.get("total_shares", 0)),
            claim_count=int(data.get("claim_count", 0)),
            active=bool(data.get("active", True)),
        )


@dataclass
class Participant:
    pool_id: str
    owner: str
    shares: int = 0
    claimed: bool = False
    claimed_amount: int = 0
    claimed_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Participant:
        return cls(
            pool_id=data["pool_id"],
            owner=data["owner"],
            shares=int(data.get("shares", 0)),
            claimed=bool(data.get("claimed", False)),
            claimed_amount=int(data.get("claimed_amount", 0)),
            claimed_at=data.get("claimed_at"),
        )
