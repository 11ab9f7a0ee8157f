# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Bond ledger: custody of long-term stake.

Handles stake deposits and withdrawals behind a lock period, linear reward
accrual paid from a funded reserve, and the mechanical act of slashing a
percentage of a stake on behalf of the slashing governor.

Custody balance always equals ``total_staked + reward_reserve``.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.access import Authorizer, Capability, require_principal
from ..core.basis_points import (
    BPS_DENOMINATOR,
    apply_bps,
    linear_accrual,
    require_positive_amount,
)
from ..core.component import ProtocolComponent
from ..core.events import EventType
from ..core.exceptions import (
    BlacklistedError,
    ErrorCode,
    InsufficientBondError,
    InsufficientFundsError,
    InvalidStateError,
    TimeGateError,
    ValidationException,
)
from ..core.ledger import Ledger, ledger_operation
from .models import SlashResult, Stake, StakingParameters

logger = logging.getLogger(__name__)


class BondLedger(ProtocolComponent[StakingParameters]):
    """Stake custody, reward accrual and slashing."""

    source = "bond-ledger"
    _snapshot_attrs = ("_stakes", "_blacklist", "_reward_reserve", "_total_staked")

    def __init__(
        self,
        ledger: Ledger,
        authorizer: Authorizer,
        params: StakingParameters,
        treasury: str = "treasury",
        principal: str | None = None,
    ):
        super().__init__(ledger, authorizer, params, treasury, principal)
        self._stakes: dict[str, Stake] = {}
        self._blacklist: dict[str, str] = {}
        self._reward_reserve = 0
        self._total_staked = 0

    # ========================================================================
    # Internal helpers
    # ========================================================================

    def _accrue(self, stake: Stake, now: int) -> None:
        """Move accrual since the last checkpoint into ``pending_rewards``."""
        if stake.active:
            stake.pending_rewards += linear_accrual(
                stake.amount, self.params.reward_rate, now - stake.last_reward_claim
            )
        stake.last_reward_claim = now

    def _active_stake(self, owner: str) -> Stake:
        stake = self._stakes.get(owner)
        if stake is None or not stake.active:
            raise InvalidStateError(
                f"No active stake for {owner}", code=ErrorCode.NO_ACTIVE_STAKE, owner=owner
            )
        return stake

    # ========================================================================
    # Staking
    # ========================================================================

    @ledger_operation
    def stake(self, owner: str, amount: int) -> Stake:
        """Deposit ``amount`` into the owner's stake.

        Pending rewards are settled first; the lock period restarts.

        Raises:
            BlacklistedError: Owner is permanently banned
            InsufficientBondError: Amount below ``min_stake_amount``
            ValidationException: Total would exceed ``max_stake_per_user``
        """
        require_principal(owner, "owner")
        require_positive_amount(amount)
        if owner in self._blacklist:
            raise BlacklistedError(f"{owner} is blacklisted", owner=owner)
        if amount < self.params.min_stake_amount:
            raise InsufficientBondError(
                f"Stake {amount} below minimum {self.params.min_stake_amount}",
                code=ErrorCode.INSUFFICIENT_STAKE,
                amount=amount,
                minimum=self.params.min_stake_amount,
            )

        now = self.now()
        stake = self._stakes.get(owner)
        if stake is None:
            stake = Stake(owner=owner, last_reward_claim=now)
            self._stakes[owner] = stake
        elif not stake.active:
            # Re-staking after a full exit starts a fresh accrual window
            stake.last_reward_claim = now

        current = stake.amount if stake.active else 0
        if current + amount > self.params.max_stake_per_user:
            raise ValidationException(
                f"Total stake {current + amount} exceeds limit {self.params.max_stake_per_user}",
                field="amount",
                value=amount,
                code=ErrorCode.STAKE_LIMIT_EXCEEDED,
            )

        self._accrue(stake, now)
        stake.amount = current + amount
        stake.staked_at = now
        stake.lock_period = self.params.stake_lock_period
        stake.active = True
        self._total_staked += amount

        logger.info(f"{owner} staked {amount} (total {stake.amount})")
        self._emit(EventType.STAKED, owner, "active", amount=amount, total=stake.amount)
        self.ledger.transfer(owner, self.principal, amount)
        return self._copy(stake)

    @ledger_operation
    def unstake(self, owner: str, amount: int) -> Stake:
        """Withdraw ``amount`` once the lock period has elapsed.

        Raises:
            InvalidStateError: No active stake
            ValidationException: Amount exceeds principal
            TimeGateError: Stake still locked
        """
        require_principal(owner, "owner")
        require_positive_amount(amount)
        stake = self._active_stake(owner)
        if amount > stake.amount:
            raise ValidationException(
                f"Unstake {amount} exceeds staked {stake.amount}",
                field="amount",
                value=amount,
                code=ErrorCode.INSUFFICIENT_STAKE,
            )
        now = self.now()
        if stake.is_locked(now):
            raise TimeGateError(
                f"Stake locked until {stake.unlocks_at}",
                code=ErrorCode.STAKE_LOCKED,
                owner=owner,
                unlocks_at=stake.unlocks_at,
            )

        self._accrue(stake, now)
        stake.amount -= amount
        self._total_staked -= amount
        if stake.amount == 0:
            stake.active = False

        logger.info(f"{owner} unstaked {amount} (remaining {stake.amount})")
        self._emit(
            EventType.UNSTAKED,
            owner,
            "active" if stake.active else "inactive",
            amount=amount,
            remaining=stake.amount,
        )
        self.ledger.transfer(self.principal, owner, amount)
        return self._copy(stake)

    def calculate_pending_rewards(self, owner: str) -> int:
        """Rewards claimable right now (settled plus accrued since last checkpoint)."""
        stake = self._stakes.get(owner)
        if stake is None:
            return 0
        pending = stake.pending_rewards
        if stake.active:
            pending += linear_accrual(
                stake.amount, self.params.reward_rate, self.now() - stake.last_reward_claim
            )
        return pending

    @ledger_operation
    def claim_rewards(self, owner: str) -> int:
        """Pay out all pending rewards from the reward reserve.

        Raises:
            ValidationException: Nothing to claim
            InsufficientFundsError: Reserve cannot cover the payout
        """
        require_principal(owner, "owner")
        stake = self._stakes.get(owner)
        if stake is None:
            raise InvalidStateError(
                f"No stake for {owner}", code=ErrorCode.NO_ACTIVE_STAKE, owner=owner
            )
        self._accrue(stake, self.now())
        reward = stake.pending_rewards
        if reward == 0:
            raise ValidationException(
                "No rewards to claim", field="owner", value=owner, code=ErrorCode.ZERO_AMOUNT
            )
        if reward > self._reward_reserve:
            raise InsufficientFundsError(
                f"Reward reserve {self._reward_reserve} cannot cover {reward}",
                reward=reward,
                reserve=self._reward_reserve,
            )

        stake.pending_rewards = 0
        stake.total_claimed += reward
        self._reward_reserve -= reward

        logger.info(f"{owner} claimed {reward} staking rewards")
        self._emit(EventType.REWARD_CLAIMED, owner, "claimed", amount=reward)
        self.ledger.transfer(self.principal, owner, reward)
        return reward

    @ledger_operation
    def fund_rewards(self, caller: str, amount: int) -> int:
        """Top up the staking reward reserve from the caller's balance."""
        require_principal(caller, "caller")
        require_positive_amount(amount)
        self._reward_reserve += amount
        self._emit(
            EventType.REWARDS_FUNDED, self.principal, "funded", amount=amount, funder=caller
        )
        self.ledger.transfer(caller, self.principal, amount)
        return self._reward_reserve

    # ========================================================================
    # Slashing and bans (governor side)
    # ========================================================================

    @ledger_operation
    def slash(self, caller: str, target: str, percentage_bps: int, reason: str = "") -> SlashResult:
        """Forfeit ``percentage_bps`` of the target's stake to the treasury.

        The percentage is clamped to 10000. Rewards accrued up to now are
        settled on the pre-slash principal and stay claimable.
        """
        self._require(caller, Capability.SLASHER)
        require_positive_amount(percentage_bps, "percentage_bps")
        percentage_bps = min(percentage_bps, BPS_DENOMINATOR)
        stake = self._active_stake(target)

        self._accrue(stake, self.now())
        slashed = apply_bps(stake.amount, percentage_bps)
        stake.amount -= slashed
        stake.total_slashed += slashed
        self._total_staked -= slashed
        deactivated = stake.amount == 0
        if deactivated:
            stake.active = False

        logger.info(f"Slashed {slashed} ({percentage_bps} bps) from {target}: {reason}")
        self._emit(
            EventType.SLASHED,
            target,
            "inactive" if deactivated else "active",
            slashed_amount=slashed,
            percentage_bps=percentage_bps,
            reason=reason,
        )
        self.ledger.transfer(self.principal, self.treasury, slashed)
        return SlashResult(
            target=target,
            percentage_bps=percentage_bps,
            slashed_amount=slashed,
            remaining=stake.amount,
            deactivated=deactivated,
        )

    @ledger_operation
    def blacklist(self, caller: str, user: str, reason: str = "") -> None:
        self._require(caller, Capability.SLASHER, Capability.ADMIN)
        require_principal(user, "user")
        if user in self._blacklist:
            return
        self._blacklist[user] = reason
        logger.warning(f"{user} blacklisted: {reason}")
        self._emit(EventType.USER_BLACKLISTED, user, "blacklisted", reason=reason)

    @ledger_operation
    def unblacklist(self, caller: str, user: str) -> None:
        self._require(caller, Capability.SLASHER, Capability.ADMIN)
        if self._blacklist.pop(user, None) is None:
            return
        logger.warning(f"{user} removed from blacklist by {caller}")
        self._emit(EventType.USER_UNBLACKLISTED, user, "active", caller=caller)

    # ========================================================================
    # Queries
    # ========================================================================

    def get_stake(self, owner: str) -> Stake:
        return self._copy(self._get(self._stakes, "Stake", owner))

    def has_active_stake(self, owner: str) -> bool:
        stake = self._stakes.get(owner)
        return stake is not None and stake.active and stake.amount > 0

    def is_blacklisted(self, user: str) -> bool:
        return user in self._blacklist

    @property
    def total_staked(self) -> int:
        return self._total_staked

    @property
    def reward_reserve(self) -> int:
        return self._reward_reserve

    def stakes(self) -> list[Stake]:
        return [self._copy(s) for s in self._stakes.values()]

    def expected_custody(self) -> int:
        return self._total_staked + self._reward_reserve

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": self.params.model_dump(),
            "stakes": [s.to_dict() for s in self._stakes.values()],
            "blacklist": dict(self._blacklist),
            "reward_reserve": self._reward_reserve,
            "total_staked": self._total_staked,
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.params = StakingParameters.model_validate(data["params"])
        self._stakes = {s["owner"]: Stake.from_dict(s) for s in data.get("stakes", [])}
        self._blacklist = dict(data.get("blacklist", {}))
        self._reward_reserve = int(data.get("reward_reserve", 0))
        self._total_staked = int(data.get("total_staked", 0))
