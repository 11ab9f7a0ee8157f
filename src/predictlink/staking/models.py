# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Data models for the bond ledger."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from pydantic import Field, model_validator

from ..core.component import ComponentParameters
from ..core.config import CoreSettings


class StakingParameters(ComponentParameters):
    """Stake limits, lock period and reward rate."""

    min_stake_amount: int = Field(gt=0)
    max_stake_per_user: int = Field(gt=0)
    stake_lock_period: int = Field(ge=0)
    reward_rate: int = Field(ge=0, le=10_000, description="Annual reward rate, bps")

    @model_validator(mode="after")
    def check_limits(self) -> StakingParameters:
        if self.min_stake_amount > self.max_stake_per_user:
            raise ValueError("min_stake_amount cannot exceed max_stake_per_user")
        return self

    @classmethod
    def from_settings(cls, settings: CoreSettings) -> StakingParameters:
        return cls(
            min_stake_amount=settings.min_stake_amount,
            max_stake_per_user=settings.max_stake_per_user,
            stake_lock_period=settings.stake_lock_period,
            reward_rate=settings.staking_reward_rate,
        )


@dataclass
class Stake:
    """Long-term stake held for one owner.

    ``pending_rewards`` holds accrual settled but not yet paid out. It is
    brought up to date lazily on every stake, unstake, claim and slash.
    """

    owner: str
    amount: int = 0
    staked_at: int = 0
    last_reward_claim: int = 0
    lock_period: int = 0
    active: bool = False
    pending_rewards: int = 0
    total_claimed: int = 0
    total_slashed: int = 0

    @property
    def unlocks_at(self) -> int:
        return self.staked_at + self.lock_period

    def is_locked(self, now: int) -> bool:
        return now < self.unlocks_at

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Stake:
        return cls(
            owner=data["owner"],
            amount=int(data.get("amount", 0)),
            staked_at=int(data.get("staked_at", 0)),
            last_reward_claim=int(data.get("last_reward_claim", 0)),
            lock_period=int(data.get("lock_period", 0)),
            active=bool(data.get("active", False)),
            pending_rewards=int(data.get("pending_rewards", 0)),
            total_claimed=int(data.get("total_claimed", 0)),
            total_slashed=int(data.get("total_slashed", 0)),
        )


@dataclass
class SlashResult:
    """Outcome of a percentage slash on one stake."""

    target: str
    percentage_bps: int
    slashed_amount: int
    remaining: int
    deactivated: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
