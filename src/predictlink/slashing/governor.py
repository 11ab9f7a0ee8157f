# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Slashing governor: decides whether and how much to slash.

Workflow per request:
1. A reporter files a request; the final amount is derived from the reason
   rate and capped at ``max_slashing_percentage``
2. Slashers approve; at ``min_approvals`` the request becomes APPROVED
3. After ``execution_time`` (request time + delay) a slasher executes it,
   which slashes the target's stake on the bond ledger
4. Once a target's cumulative slashed total reaches the ban threshold the
   target is permanently blacklisted

Execution converts the absolute request amount into basis points of the
target's stake at execution time. If the stake changed since the request,
the amount actually slashed differs from the request; this is logged but
not corrected.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable
from typing import Any

from ..core.access import Authorizer, Capability, require_principal
from ..core.basis_points import require_positive_amount, to_bps
from ..core.component import ProtocolComponent
from ..core.events import EventType
from ..core.exceptions import (
    AlreadyProcessedError,
    BlacklistedError,
    DuplicateIdError,
    ErrorCode,
    InvalidStateError,
    PredictLinkException,
    QuorumNotMetError,
    TimeGateError,
    ValidationException,
)
from ..core.ledger import Ledger, ledger_operation
from ..staking.service import BondLedger
from .enums import REQUEST_TRANSITIONS, SlashingAction, SlashingReason, SlashingStatus
from .models import SlashingParameters, SlashingRecord, SlashingRequest, UserSlashingHistory

logger = logging.getLogger(__name__)


def derive_request_id(
    target: str, amount: int, reason: SlashingReason, timestamp: int, reporter: str, nonce: int
) -> str:
    """Content-derived identifier for a slashing request."""
    material = f"{target}|{amount}|{reason.value}|{timestamp}|{reporter}|{nonce}"
    return hashlib.sha256(material.encode()).hexdigest()


class SlashingGovernor(ProtocolComponent[SlashingParameters]):
    """Multi-approver request/approve/execute slashing workflow."""

    source = "slashing-governor"
    _snapshot_attrs = ("_requests", "_histories", "_records", "_nonce")

    def __init__(
        self,
        ledger: Ledger,
        authorizer: Authorizer,
        params: SlashingParameters,
        bond_ledger: BondLedger,
        treasury: str = "treasury",
        principal: str | None = None,
    ):
        super().__init__(ledger, authorizer, params, treasury, principal)
        self.bond_ledger = bond_ledger
        self._requests: dict[str, SlashingRequest] = {}
        self._histories: dict[str, UserSlashingHistory] = {}
        self._records: dict[str, list[SlashingRecord]] = {}
        self._nonce = 0

    def _history(self, target: str) -> UserSlashingHistory:
        if target not in self._histories:
            self._histories[target] = UserSlashingHistory(target=target)
        return self._histories[target]

    def is_permanently_banned(self, target: str) -> bool:
        history = self._histories.get(target)
        banned = history is not None and history.is_permanently_banned
        return banned or self.bond_ledger.is_blacklisted(target)

    # ========================================================================
    # Request
    # ========================================================================

    @ledger_operation
    def request_slashing(
        self,
        caller: str,
        target: str,
        base_amount: int,
        reason: SlashingReason | str,
        evidence: str = "",
        request_id: str | None = None,
    ) -> SlashingRequest:
        """File a slashing request against ``target``.

        Args:
            caller: Reporter principal (REPORTER capability)
            target: Principal to slash
            base_amount: Amount the reason rate and cap are applied to
            reason: Slashing reason, selects the base rate
            evidence: Free-form evidence reference
            request_id: Optional caller-supplied id; content-derived if omitted

        Raises:
            BlacklistedError: Target already permanently banned
            DuplicateIdError: Request id already in use
            ValidationException: Amount rounds down to zero
        """
        self._require(caller, Capability.REPORTER)
        require_principal(target, "target")
        require_positive_amount(base_amount, "base_amount")
        reason = SlashingReason(reason)
        if self.is_permanently_banned(target):
            raise BlacklistedError(f"{target} is already banned", target=target)

        amount = self.params.final_amount(base_amount, reason)
        if amount == 0:
            raise ValidationException(
                f"Slashing amount for {base_amount} ({reason}) rounds to zero",
                field="base_amount",
                value=base_amount,
                code=ErrorCode.ZERO_AMOUNT,
            )

        now = self.now()
        self._nonce += 1
        request_id = request_id or derive_request_id(
            target, base_amount, reason, now, caller, self._nonce
        )
        if request_id in self._requests:
            raise DuplicateIdError("SlashingRequest", request_id)

        request = SlashingRequest(
            id=request_id,
            target=target,
            base_amount=base_amount,
            amount=amount,
            reason=reason,
            evidence=evidence,
            reporter=caller,
            timestamp=now,
            execution_time=now + self.params.slashing_delay,
        )
        self._requests[request_id] = request

        logger.warning(
            f"Slashing requested against {target}: {amount} of {base_amount} ({reason}) "
            f"by {caller}, executable at {request.execution_time}"
        )
        self._emit(
            EventType.SLASHING_REQUESTED,
            request_id,
            request.status,
            target=target,
            amount=amount,
            reason=reason.value,
            reporter=caller,
            execution_time=request.execution_time,
        )
        return self._copy(request)

    # ========================================================================
    # Approve / reject
    # ========================================================================

    @ledger_operation
    def approve_slashing(self, caller: str, request_id: str) -> SlashingRequest:
        """Record one approval; approvals are never retracted."""
        self._require(caller, Capability.SLASHER)
        request = self._get(self._requests, "SlashingRequest", request_id)
        if request.status == SlashingStatus.EXECUTED:
            raise AlreadyProcessedError(
                f"Slashing request {request_id} already executed", request_id=request_id
            )
        if caller in request.approvers:
            raise AlreadyProcessedError(
                f"{caller} already approved {request_id}",
                code=ErrorCode.ALREADY_APPROVED,
                request_id=request_id,
            )

        request.status = REQUEST_TRANSITIONS.next_state(
            request.status, SlashingAction.APPROVE, request_id
        )
        request.approvers.append(caller)
        request.approval_count += 1
        if request.approval_count >= self.params.min_approvals:
            request.status = REQUEST_TRANSITIONS.next_state(
                request.status, SlashingAction.REACH_QUORUM, request_id
            )

        logger.info(
            f"Slashing request {request_id[:12]} approved by {caller} "
            f"({request.approval_count}/{self.params.min_approvals})"
        )
        self._emit(
            EventType.SLASHING_APPROVED,
            request_id,
            request.status,
            approver=caller,
            approval_count=request.approval_count,
        )
        return self._copy(request)

    @ledger_operation
    def reject_slashing(self, caller: str, request_id: str, reason: str = "") -> SlashingRequest:
        """Admin override: terminally reject a request before execution."""
        self._require(caller, Capability.ADMIN)
        request = self._get(self._requests, "SlashingRequest", request_id)
        if request.status == SlashingStatus.EXECUTED:
            raise AlreadyProcessedError(
                f"Slashing request {request_id} already executed", request_id=request_id
            )
        request.status = REQUEST_TRANSITIONS.next_state(
            request.status, SlashingAction.REJECT, request_id
        )
        logger.info(f"Slashing request {request_id[:12]} rejected by {caller}: {reason}")
        self._emit(EventType.SLASHING_REJECTED, request_id, request.status, reason=reason)
        return self._copy(request)

    # ========================================================================
    # Execute
    # ========================================================================

    def _execute(self, request_id: str) -> SlashingRequest:
        request = self._get(self._requests, "SlashingRequest", request_id)
        if request.status == SlashingStatus.EXECUTED:
            raise AlreadyProcessedError(
                f"Slashing request {request_id} already executed", request_id=request_id
            )
        if request.status == SlashingStatus.REJECTED:
            raise InvalidStateError(
                f"Slashing request {request_id} was rejected", request_id=request_id
            )
        if request.status == SlashingStatus.PENDING:
            raise QuorumNotMetError(
                f"Slashing request {request_id} has {request.approval_count} approvals",
                approvals=request.approval_count,
                required=self.params.min_approvals,
            )
        if request.approval_count < self.params.min_approvals:
            raise QuorumNotMetError(
                f"Slashing request {request_id} no longer meets the approval quorum",
                approvals=request.approval_count,
                required=self.params.min_approvals,
            )
        now = self.now()
        if now < request.execution_time:
            raise TimeGateError(
                f"Slashing request {request_id} executable at {request.execution_time}",
                request_id=request_id,
                execution_time=request.execution_time,
            )
        if not self.bond_ledger.has_active_stake(request.target):
            raise InvalidStateError(
                f"{request.target} has no active stake to slash",
                code=ErrorCode.NO_ACTIVE_STAKE,
                target=request.target,
            )
        request.status = REQUEST_TRANSITIONS.next_state(
            request.status, SlashingAction.EXECUTE, request_id
        )

        current_stake = self.bond_ledger.get_stake(request.target).amount
        percentage = to_bps(request.amount, current_stake)
        if percentage == 0:
            # Smallest slash the bond ledger can express
            percentage = 1
        result = self.bond_ledger.slash(
            self.principal, request.target, percentage, str(request.reason)
        )
        if result.slashed_amount != request.amount:
            logger.warning(
                f"Slashing request {request_id[:12]} asked for {request.amount} but "
                f"{percentage} bps of current stake {current_stake} slashed "
                f"{result.slashed_amount}"
            )

        request.executed_at = now
        request.slashed_amount = result.slashed_amount
        self._records.setdefault(request.target, []).append(
            SlashingRecord(
                request_id=request_id,
                target=request.target,
                requested_amount=request.amount,
                slashed_amount=result.slashed_amount,
                percentage_bps=percentage,
                reason=request.reason,
                executed_at=now,
            )
        )

        history = self._history(request.target)
        history.total_slashed += result.slashed_amount
        history.slashing_count += 1
        history.last_slashed_at = now

        self._emit(
            EventType.SLASHING_EXECUTED,
            request_id,
            request.status,
            target=request.target,
            slashed_amount=result.slashed_amount,
            total_slashed=history.total_slashed,
        )

        if (
            not history.is_permanently_banned
            and history.total_slashed >= self.params.permanent_ban_threshold
        ):
            history.is_permanently_banned = True
            logger.warning(
                f"{request.target} permanently banned after {history.total_slashed} slashed"
            )
            self.bond_ledger.blacklist(
                self.principal, request.target, "permanent ban threshold reached"
            )

        return request

    @ledger_operation
    def execute_slashing(self, caller: str, request_id: str) -> SlashingRequest:
        """Execute an approved request after its delay. All-or-nothing.

        Raises:
            QuorumNotMetError: Not enough approvals
            TimeGateError: ``now < execution_time``
            AlreadyProcessedError: Already executed
            InvalidStateError: Rejected, or target has no active stake
        """
        self._require(caller, Capability.SLASHER)
        return self._copy(self._execute(request_id))

    @ledger_operation
    def batch_execute_slashing(self, caller: str, request_ids: Iterable[str]) -> int:
        """Execute each request independently; failures are skipped.

        Returns the number of requests executed. Callers re-query the
        requests to learn which ones went through.
        """
        self._require(caller, Capability.SLASHER)
        executed = 0
        for request_id in request_ids:
            try:
                with self.ledger.atomic():
                    self._execute(request_id)
            except PredictLinkException as e:
                logger.warning(f"Skipping slashing request {request_id}: {e.code}: {e.message}")
                continue
            executed += 1
        return executed

    # ========================================================================
    # Admin override
    # ========================================================================

    @ledger_operation
    def unblacklist_user(self, caller: str, user: str) -> None:
        """Lift a permanent ban in both the governor and the bond ledger."""
        self._require(caller, Capability.ADMIN)
        require_principal(user, "user")
        history = self._histories.get(user)
        if history is not None:
            history.is_permanently_banned = False
        logger.warning(f"Permanent ban on {user} lifted by {caller}")
        self.bond_ledger.unblacklist(self.principal, user)

    # ========================================================================
    # Queries
    # ========================================================================

    def get_slashing_request(self, request_id: str) -> SlashingRequest:
        return self._copy(self._get(self._requests, "SlashingRequest", request_id))

    def get_user_history(self, target: str) -> UserSlashingHistory:
        history = self._histories.get(target)
        return self._copy(history) if history else UserSlashingHistory(target=target)

    def get_slashing_records(self, target: str) -> list[SlashingRecord]:
        return [self._copy(r) for r in self._records.get(target, [])]

    def list_requests(
        self,
        status: SlashingStatus | None = None,
        target: str | None = None,
    ) -> list[SlashingRequest]:
        results = [
            r
            for r in self._requests.values()
            if (status is None or r.status == status) and (target is None or r.target == target)
        ]
        return [self._copy(r) for r in sorted(results, key=lambda r: r.timestamp)]

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": self.params.model_dump(mode="json"),
            "requests": [r.to_dict() for r in self._requests.values()],
            "histories": [h.to_dict() for h in self._histories.values()],
            "records": [r.to_dict() for records in self._records.values() for r in records],
            "nonce": self._nonce,
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.params = SlashingParameters.model_validate(data["params"])
        self._requests = {r["id"]: SlashingRequest.from_dict(r) for r in data.get("requests", [])}
        self._histories = {
            h["target"]: UserSlashingHistory.from_dict(h) for h in data.get("histories", [])
        }
        self._records = {}
        for entry in data.get("records", []):
            record = SlashingRecord.from_dict(entry)
            self._records.setdefault(record.target, []).append(record)
        self._nonce = int(data.get("nonce", 0))
