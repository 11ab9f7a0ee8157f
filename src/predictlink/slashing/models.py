# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Data models for the slashing governor."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from pydantic import Field, field_validator

from ..core.basis_points import apply_bps
from ..core.component import ComponentParameters
from ..core.config import CoreSettings
from .enums import DEFAULT_REASON_RATES, SlashingReason, SlashingStatus


class SlashingParameters(ComponentParameters):
    """Approval quorum, cooling-off delay, caps and reason rates."""

    min_approvals: int = Field(ge=1)
    slashing_delay: int = Field(ge=0)
    max_slashing_percentage: int = Field(ge=0, le=10_000)
    permanent_ban_threshold: int = Field(gt=0)
    reason_rates: dict[SlashingReason, int] = Field(
        default_factory=lambda: dict(DEFAULT_REASON_RATES)
    )

    @field_validator("reason_rates")
    @classmethod
    def check_reason_rates(cls, value: dict[SlashingReason, int]) -> dict[SlashingReason, int]:
        for reason, rate in value.items():
            if not 0 <= rate <= 10_000:
                raise ValueError(f"rate for {reason} must be within 0..10000")
        missing = set(SlashingReason) - set(value)
        if missing:
            raise ValueError(f"missing rates for {sorted(missing)}")
        return value

    def final_amount(self, base_amount: int, reason: SlashingReason) -> int:
        """``min(base × reason rate, base × max percentage)``, in bps, rounded down."""
        return min(
            apply_bps(base_amount, self.reason_rates[reason]),
            apply_bps(base_amount, self.max_slashing_percentage),
        )

    @classmethod
    def from_settings(cls, settings: CoreSettings) -> SlashingParameters:
        return cls(
            min_approvals=settings.min_approvals,
            slashing_delay=settings.slashing_delay,
            max_slashing_percentage=settings.max_slashing_percentage,
            permanent_ban_threshold=settings.permanent_ban_threshold,
        )


@dataclass
class SlashingRequest:
    """A proposal to slash a target, awaiting approvals and the delay."""

    id: str
    target: str
    base_amount: int
    amount: int
    reason: SlashingReason
    evidence: str
    reporter: str
    timestamp: int
    execution_time: int
    status: SlashingStatus = SlashingStatus.PENDING
    approval_count: int = 0
    approvers: list[str] = field(default_factory=list)
    executed_at: int | None = None
    slashed_amount: int = 0

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["reason"] = self.reason.value
        result["status"] = self.status.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SlashingRequest:
        return cls(
            id=data["id"],
            target=data["target"],
            base_amount=int(data["base_amount"]),
            amount=int(data["amount"]),
            reason=SlashingReason(data["reason"]),
            evidence=data.get("evidence", ""),
            reporter=data["reporter"],
            timestamp=int(data["timestamp"]),
            execution_time=int(data["execution_time"]),
            status=SlashingStatus(data.get("status", "pending")),
            approval_count=int(data.get("approval_count", 0)),
            approvers=list(data.get("approvers", [])),
            executed_at=data.get("executed_at"),
            slashed_amount=int(data.get("slashed_amount", 0)),
        )


@dataclass
class UserSlashingHistory:
    """Cumulative slashing totals per target. The ban only clears by admin override."""

    target: str
    total_slashed: int = 0
    slashing_count: int = 0
    last_slashed_at: int | None = None
    is_permanently_banned: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserSlashingHistory:
        return cls(
            target=data["target"],
            total_slashed=int(data.get("total_slashed", 0)),
            slashing_count=int(data.get("slashing_count", 0)),
            last_slashed_at=data.get("last_slashed_at"),
            is_permanently_banned=bool(data.get("is_permanently_banned", False)),
        )


@dataclass
class SlashingRecord:
    """Executed slash, as applied to the bond ledger."""

    request_id: str
    target: str
    requested_amount: int
    slashed_amount: int
    percentage_bps: int
    reason: SlashingReason
    executed_at: int

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["reason"] = self.reason.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SlashingRecord:
        return cls(
            request_id=data["request_id"],
            target=data["target"],
            requested_amount=int(data["requested_amount"]),
            slashed_amount=int(data["slashed_amount"]),
            percentage_bps=int(data["percentage_bps"]),
            reason=SlashingReason(data["reason"]),
            executed_at=int(data["executed_at"]),
        )
