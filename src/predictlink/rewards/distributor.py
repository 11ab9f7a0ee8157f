# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Reward distributor: pool-based proportional-share payouts.

A participant receives ``total_rewards × shares / total_shares`` rounded
down, at most once per pool. Rounding dust and unclaimed rewards stay in
the pool until it is expired, when they are swept to the treasury.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from ..core.access import Authorizer, Capability, require_principal
from ..core.basis_points import pro_rata, require_positive_amount
from ..core.component import ProtocolComponent
from ..core.events import EventType
from ..core.exceptions import (
    AlreadyProcessedError,
    DuplicateIdError,
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    PredictLinkException,
    TimeGateError,
    UnauthorizedError,
    ValidationException,
)
from ..core.ledger import Ledger, ledger_operation
from .models import Participant, RewardParameters, RewardPool

logger = logging.getLogger(__name__)


class RewardDistributor(ProtocolComponent[RewardParameters]):
    """Creates, allocates, pays out and expires reward pools."""

    source = "reward-distributor"
    _snapshot_attrs = ("_pools", "_participants")

    def __init__(
        self,
        ledger: Ledger,
        authorizer: Authorizer,
        params: RewardParameters,
        treasury: str = "treasury",
        principal: str | None = None,
    ):
        super().__init__(ledger, authorizer, params, treasury, principal)
        self._pools: dict[str, RewardPool] = {}
        # pool id -> owner -> participant
        self._participants: dict[str, dict[str, Participant]] = {}
        # pool id prefix -> the only principal allowed to create pools under it
        self._reserved_prefixes: dict[str, str] = {}

    def reserve_prefix(self, prefix: str, owner: str) -> None:
        """Restrict pool ids starting with ``prefix`` to pools created by ``owner``."""
        require_principal(prefix, "prefix")
        holder = self._reserved_prefixes.get(prefix)
        if holder is not None and holder != owner:
            raise ValidationException(
                f"Pool id prefix {prefix!r} is reserved for {holder}", field="prefix", value=prefix
            )
        self._reserved_prefixes[prefix] = owner

    def _check_reserved(self, caller: str, pool_id: str) -> None:
        for prefix, owner in self._reserved_prefixes.items():
            if pool_id.startswith(prefix) and caller != owner:
                raise UnauthorizedError(
                    f"Pool ids starting with {prefix!r} are reserved for {owner}",
                    caller=caller,
                    pool_id=pool_id,
                )

    def _active_pool(self, pool_id: str) -> RewardPool:
        pool = self._get(self._pools, "RewardPool", pool_id)
        if not pool.active:
            raise InvalidStateError(f"Reward pool {pool_id} is not active", pool_id=pool_id)
        return pool

    # ========================================================================
    # Pool setup
    # ========================================================================

    @ledger_operation
    def create_reward_pool(
        self,
        caller: str,
        pool_id: str,
        total_rewards: int,
        expiry_time: int | None = None,
        funder: str | None = None,
    ) -> RewardPool:
        """Fund a new pool from ``funder`` (defaults to the caller).

        Without ``expiry_time`` the pool lives ``default_pool_duration``.
        """
        self._require(caller, Capability.DISTRIBUTOR)
        require_principal(pool_id, "pool_id")
        require_positive_amount(total_rewards, "total_rewards")
        self._check_reserved(caller, pool_id)
        if pool_id in self._pools:
            raise DuplicateIdError("RewardPool", pool_id)
        now = self.now()
        if expiry_time is None:
            expiry_time = now + self.params.default_pool_duration
        elif expiry_time <= now:
            raise ValidationException(
                "Pool expiry must be in the future", field="expiry_time", value=expiry_time
            )
        funder = funder or caller

        pool = RewardPool(
            id=pool_id,
            total_rewards=total_rewards,
            created_at=now,
            expiry_time=expiry_time,
            funder=funder,
        )
        self._pools[pool_id] = pool
        self._participants[pool_id] = {}

        logger.info(f"Reward pool {pool_id} created with {total_rewards}, expires {expiry_time}")
        self._emit(
            EventType.REWARD_POOL_CREATED,
            pool_id,
            "active",
            total_rewards=total_rewards,
            expiry_time=expiry_time,
            funder=funder,
        )
        self.ledger.transfer(funder, self.principal, total_rewards)
        return self._copy(pool)

    @ledger_operation
    def allocate_shares(
        self,
        caller: str,
        pool_id: str,
        recipients: Sequence[str],
        shares: Sequence[int],
    ) -> RewardPool:
        """Add shares for each recipient. Repeated allocations accumulate.

        Raises:
            ValidationException: Arrays empty or of different length
            InvalidStateError: Pool inactive, or a claim has already been paid
            TimeGateError: Pool expired
        """
        self._require(caller, Capability.DISTRIBUTOR)
        if not recipients or len(recipients) != len(shares):
            raise ValidationException(
                "recipients and shares must be non-empty and of equal length",
                field="recipients",
                value=len(recipients),
            )
        pool = self._active_pool(pool_id)
        if self.now() > pool.expiry_time:
            raise TimeGateError(
                f"Reward pool {pool_id} expired", code=ErrorCode.PERIOD_EXPIRED, pool_id=pool_id
            )
        if pool.claim_count:
            raise InvalidStateError(
                f"Reward pool {pool_id} already paid out claims",
                code=ErrorCode.ALLOCATION_CLOSED,
                pool_id=pool_id,
            )

        participants = self._participants[pool_id]
        for recipient, share in zip(recipients, shares, strict=True):
            require_principal(recipient, "recipient")
            require_positive_amount(share, "shares")
            participant = participants.get(recipient)
            if participant is None:
                participant = Participant(pool_id=pool_id, owner=recipient)
                participants[recipient] = participant
                pool.participant_count += 1
            participant.shares += share
            pool.total_shares += share

        self._emit(
            EventType.SHARES_ALLOCATED,
            pool_id,
            "active",
            recipients=list(recipients),
            shares=list(shares),
            total_shares=pool.total_shares,
        )
        return self._copy(pool)

    # ========================================================================
    # Claims
    # ========================================================================

    def _claim(self, owner: str, pool_id: str) -> int:
        pool = self._active_pool(pool_id)
        participant = self._participants[pool_id].get(owner)
        if participant is None:
            raise NotFoundError("Participant", f"{pool_id}/{owner}")
        if participant.claimed:
            raise AlreadyProcessedError(
                f"{owner} already claimed from {pool_id}",
                code=ErrorCode.ALREADY_CLAIMED,
                pool_id=pool_id,
            )
        now = self.now()
        if now > pool.expiry_time:
            raise TimeGateError(
                f"Reward pool {pool_id} expired", code=ErrorCode.PERIOD_EXPIRED, pool_id=pool_id
            )

        amount = pro_rata(pool.total_rewards, participant.shares, pool.total_shares)
        participant.claimed = True
        participant.claimed_amount = amount
        participant.claimed_at = now
        pool.distributed_rewards += amount
        pool.claim_count += 1

        logger.info(f"{owner} claimed {amount} from reward pool {pool_id}")
        self._emit(EventType.POOL_REWARD_CLAIMED, pool_id, "active", owner=owner, amount=amount)
        self.ledger.transfer(self.principal, owner, amount)
        return amount

    @ledger_operation
    def claim_reward(self, owner: str, pool_id: str) -> int:
        """Claim the owner's share of one pool. All-or-nothing."""
        require_principal(owner, "owner")
        return self._claim(owner, pool_id)

    @ledger_operation
    def batch_claim_rewards(self, owner: str, pool_ids: Iterable[str]) -> int:
        """Claim from several pools, skipping the ones that are not claimable.

        Returns the total amount paid.
        """
        require_principal(owner, "owner")
        total = 0
        for pool_id in pool_ids:
            try:
                with self.ledger.atomic():
                    total += self._claim(owner, pool_id)
            except PredictLinkException as e:
                logger.warning(f"Skipping claim on {pool_id} for {owner}: {e.code}")
        return total

    # ========================================================================
    # Expiry
    # ========================================================================

    @ledger_operation
    def expire_pool(self, caller: str, pool_id: str) -> int:
        """Deactivate an expired pool and sweep what is left to the treasury."""
        require_principal(caller, "caller")
        pool = self._active_pool(pool_id)
        if self.now() <= pool.expiry_time:
            raise TimeGateError(
                f"Reward pool {pool_id} expires at {pool.expiry_time}",
                pool_id=pool_id,
                expiry_time=pool.expiry_time,
            )
        swept = pool.remaining
        pool.active = False

        logger.info(f"Reward pool {pool_id} expired, {swept} swept to {self.treasury}")
        self._emit(EventType.POOL_EXPIRED, pool_id, "expired", swept=swept)
        self.ledger.transfer(self.principal, self.treasury, swept)
        return swept

    # ========================================================================
    # Queries
    # ========================================================================

    def get_reward_pool(self, pool_id: str) -> RewardPool:
        return self._copy(self._get(self._pools, "RewardPool", pool_id))

    def get_participant(self, pool_id: str, owner: str) -> Participant:
        participants = self._get(self._participants, "RewardPool", pool_id)
        return self._copy(self._get(participants, "Participant", owner))

    def pending_reward(self, pool_id: str, owner: str) -> int:
        pool = self._pools.get(pool_id)
        participant = self._participants.get(pool_id, {}).get(owner)
        if pool is None or participant is None or participant.claimed or not pool.active:
            return 0
        return pro_rata(pool.total_rewards, participant.shares, pool.total_shares)

    def pools(self, active: bool | None = None) -> list[RewardPool]:
        return [
            self._copy(p) for p in self._pools.values() if active is None or p.active == active
        ]

    def expected_custody(self) -> int:
        return sum(p.remaining for p in self._pools.values() if p.active)

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": self.params.model_dump(),
            "pools": [p.to_dict() for p in self._pools.values()],
            "participants": [
                p.to_dict() for members in self._participants.values() for p in members.values()
            ],
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.params = RewardParameters.model_validate(data["params"])
        self._pools = {p["id"]: RewardPool.from_dict(p) for p in data.get("pools", [])}
        self._participants = {pool_id: {} for pool_id in self._pools}
        for entry in data.get("participants", []):
            participant = Participant.from_dict(entry)
            self._participants.setdefault(participant.pool_id, {})[participant.owner] = participant
