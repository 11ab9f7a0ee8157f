# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Resolution lifecycle: event -> proposal -> challenge -> resolution -> settlement.

The lifecycle holds every proposer and disputer bond in its custody
account until the bond is disposed of by exactly one of: dispute
resolution, settlement, or proposal expiry. Bond accounting per path:

- Dispute UPHELD: disputer receives ``bond_p × disputer_rate`` plus its own
  bond back; the rest of the proposer bond goes to the treasury
- Dispute REJECTED: treasury receives ``bond_d × platform_rate``; the
  proposer receives the rest of the disputer bond
- Settlement: treasury receives ``bond_p × platform_rate``; the proposer
  receives the rest
- Expiry: every outstanding bond is refunded in full

State changes are applied before any payout; payouts are the last step of
each operation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..arbitration.enums import CASE_TRANSITIONS, CaseAction
from ..core.access import Authorizer, Capability, require_principal
from ..core.basis_points import apply_bps, require_positive_amount
from ..core.component import ProtocolComponent
from ..core.events import EventType
from ..core.exceptions import (
    AlreadyProcessedError,
    DuplicateIdError,
    ErrorCode,
    InvalidStateError,
    PredictLinkException,
    TimeGateError,
    UnauthorizedError,
    ValidationException,
)
from ..core.ledger import Ledger, ledger_operation
from ..slashing.enums import SlashingReason
from .enums import (
    DisputeOutcome,
    EventAction,
    EventStatus,
    ProposalAction,
    ProposalStatus,
)
from .models import Dispute, Event, Proposal, ResolutionParameters
from .transitions import EVENT_TRANSITIONS, OPEN_PROPOSAL_STATUSES, PROPOSAL_TRANSITIONS
from .validators import require_text, resolve_outcome_hash, validate_bond, validate_confidence

if TYPE_CHECKING:
    from ..arbitration.committee import ArbitrationCommittee
    from ..rewards.distributor import RewardDistributor
    from ..slashing.governor import SlashingGovernor
    from ..staking.service import BondLedger

logger = logging.getLogger(__name__)

# Reward pools opened at settlement are named EVENT_POOL_PREFIX + event id
EVENT_POOL_PREFIX = "event:"

Payouts = list[tuple[str, int]]


class ResolutionLifecycle(ProtocolComponent[ResolutionParameters]):
    """Event, proposal and dispute state machine with bond custody."""

    source = "resolution-lifecycle"
    _snapshot_attrs = ("_events", "_proposals", "_disputes")

    def __init__(
        self,
        ledger: Ledger,
        authorizer: Authorizer,
        params: ResolutionParameters,
        treasury: str = "treasury",
        principal: str | None = None,
        *,
        bond_ledger: BondLedger | None = None,
        governor: SlashingGovernor | None = None,
        arbitration: ArbitrationCommittee | None = None,
        distributor: RewardDistributor | None = None,
    ):
        super().__init__(ledger, authorizer, params, treasury, principal)
        self.bond_ledger = bond_ledger
        self.governor = governor
        self.arbitration = arbitration
        self.distributor = distributor
        if distributor is not None:
            distributor.reserve_prefix(EVENT_POOL_PREFIX, self.principal)
        self._events: dict[str, Event] = {}
        self._proposals: dict[str, Proposal] = {}
        self._disputes: dict[str, Dispute] = {}

    # ========================================================================
    # Internal helpers
    # ========================================================================

    def _event(self, event_id: str) -> Event:
        return self._get(self._events, "Event", event_id)

    def _proposal(self, proposal_id: str) -> Proposal:
        return self._get(self._proposals, "Proposal", proposal_id)

    def _dispute(self, dispute_id: str) -> Dispute:
        return self._get(self._disputes, "Dispute", dispute_id)

    def _unresolved(self, proposal: Proposal) -> list[Dispute]:
        return [
            self._disputes[d] for d in proposal.dispute_ids if not self._disputes[d].resolved
        ]

    def _pay(self, payouts: Payouts) -> None:
        for recipient, amount in payouts:
            self.ledger.transfer(self.principal, recipient, amount)

    def _report(self, target: str, base_amount: int, reason: SlashingReason, evidence: str) -> None:
        """File a slashing request against a staked, unbanned target.

        Reporting runs in its own savepoint: a rejected request never
        blocks the dispute resolution that triggered it.
        """
        if not self.params.report_misbehavior or self.governor is None:
            return
        if self.bond_ledger is None or not self.bond_ledger.has_active_stake(target):
            logger.debug(f"Not reporting {target} for {reason}: no active stake")
            return
        if self.governor.is_permanently_banned(target):
            logger.debug(f"Not reporting {target} for {reason}: already banned")
            return
        try:
            with self.ledger.atomic():
                self.governor.request_slashing(
                    self.principal, target, base_amount, reason, evidence=evidence
                )
        except PredictLinkException as e:
            logger.warning(f"Could not report {target} for {reason}: {e.code}: {e.message}")

    # ========================================================================
    # Events
    # ========================================================================

    @ledger_operation
    def create_event(
        self,
        caller: str,
        event_id: str,
        description: str,
        resolution_time: int,
        category: str = "general",
        reward_pool: int = 0,
    ) -> Event:
        """Register an event whose outcome will be resolved after ``resolution_time``.

        A non-zero ``reward_pool`` is collected from the caller and paid to
        the proposer of the settled outcome.
        """
        self._require(caller, Capability.ADMIN)
        require_principal(event_id, "event_id")
        require_text(description, "description")
        if event_id in self._events:
            raise DuplicateIdError("Event", event_id)
        now = self.now()
        if resolution_time <= now:
            raise ValidationException(
                "resolution_time must be in the future",
                field="resolution_time",
                value=resolution_time,
            )
        if reward_pool < 0:
            raise ValidationException(
                "reward_pool cannot be negative", field="reward_pool", value=reward_pool
            )

        event = Event(
            id=event_id,
            description=description,
            creator=caller,
            created_at=now,
            resolution_time=resolution_time,
            category=category or "general",
            reward_pool=reward_pool,
        )
        self._events[event_id] = event

        logger.info(f"Event {event_id} created ({category}), resolvable at {resolution_time}")
        self._emit(
            EventType.EVENT_CREATED,
            event_id,
            event.status,
            category=event.category,
            resolution_time=resolution_time,
            reward_pool=reward_pool,
        )
        self.ledger.transfer(caller, self.principal, reward_pool)
        return self._copy(event)

    # ========================================================================
    # Proposals
    # ========================================================================

    @ledger_operation
    def propose_outcome(
        self,
        caller: str,
        event_id: str,
        outcome: str,
        bond: int,
        confidence_score: int,
        evidence_uri: str = "",
        outcome_hash: str | None = None,
        proposal_id: str | None = None,
    ) -> Proposal:
        """Submit an outcome with a bond and open the liveness window.

        Raises:
            InvalidStateError: Event not proposable, or an active proposal exists
            TimeGateError: Event resolution time not reached
            ValidationException: Confidence out of range or below the floor
            InsufficientBondError: Bond below ``min_proposer_bond``
        """
        self._require(caller, Capability.PROPOSER)
        require_text(outcome, "outcome")
        require_positive_amount(bond, "bond")
        event = self._event(event_id)
        if event.active_proposal_id is not None:
            raise InvalidStateError(
                f"Event {event_id} already has active proposal {event.active_proposal_id}",
                code=ErrorCode.ACTIVE_PROPOSAL_EXISTS,
                event_id=event_id,
                proposal_id=event.active_proposal_id,
            )
        next_status = EVENT_TRANSITIONS.next_state(event.status, EventAction.PROPOSE, event_id)
        now = self.now()
        if now < event.resolution_time:
            raise TimeGateError(
                f"Event {event_id} resolvable at {event.resolution_time}",
                event_id=event_id,
                resolution_time=event.resolution_time,
            )
        validate_confidence(confidence_score, self.params.min_confidence_score)
        validate_bond(bond, self.params.min_proposer_bond, "Proposer")
        computed_hash = resolve_outcome_hash(outcome, outcome_hash)

        proposal_id = proposal_id or f"{event_id}:p{len(event.proposal_ids) + 1}"
        if proposal_id in self._proposals:
            raise DuplicateIdError("Proposal", proposal_id)

        proposal = Proposal(
            id=proposal_id,
            event_id=event_id,
            proposer=caller,
            outcome_hash=computed_hash,
            outcome=outcome,
            confidence_score=confidence_score,
            evidence_uri=evidence_uri,
            bond_amount=bond,
            submitted_at=now,
            liveness_expiry=now + self.params.liveness_period,
        )
        self._proposals[proposal_id] = proposal

        event.status = next_status
        event.active_proposal_id = proposal_id
        event.proposal_ids.append(proposal_id)
        event.outcome_hash = computed_hash
        event.outcome = outcome
        event.confidence_score = confidence_score
        event.proposer = caller
        event.proposer_bond = bond
        event.evidence_uri = evidence_uri

        logger.info(
            f"Proposal {proposal_id} on {event_id} by {caller} "
            f"(bond {bond}, confidence {confidence_score}), live until {proposal.liveness_expiry}"
        )
        self._emit(
            EventType.PROPOSAL_SUBMITTED,
            proposal_id,
            proposal.status,
            event_id=event_id,
            proposer=caller,
            outcome_hash=computed_hash,
            bond=bond,
            confidence_score=confidence_score,
            evidence_uri=evidence_uri,
            liveness_expiry=proposal.liveness_expiry,
        )
        self.ledger.transfer(caller, self.principal, bond)
        return self._copy(proposal)

    # ========================================================================
    # Disputes
    # ========================================================================

    @ledger_operation
    def file_dispute(
        self,
        caller: str,
        proposal_id: str,
        reason: str,
        bond: int,
        counter_evidence_uri: str = "",
        dispute_id: str | None = None,
    ) -> Dispute:
        """Challenge a proposal during its liveness window.

        Raises:
            InvalidStateError: Proposal not open to challenge
            TimeGateError: Liveness window closed
            UnauthorizedError: Caller is the proposer
            InsufficientBondError: Bond below ``min_disputer_bond``
        """
        self._require(caller, Capability.DISPUTER)
        require_text(reason, "reason")
        require_positive_amount(bond, "bond")
        proposal = self._proposal(proposal_id)
        event = self._event(proposal.event_id)
        next_proposal_status = PROPOSAL_TRANSITIONS.next_state(
            proposal.status, ProposalAction.CHALLENGE, proposal_id
        )
        next_event_status = EVENT_TRANSITIONS.next_state(
            event.status, EventAction.DISPUTE, event.id
        )
        now = self.now()
        if now > proposal.liveness_expiry:
            raise TimeGateError(
                f"Liveness window for {proposal_id} closed at {proposal.liveness_expiry}",
                code=ErrorCode.PERIOD_EXPIRED,
                liveness_expiry=proposal.liveness_expiry,
            )
        if caller == proposal.proposer:
            raise UnauthorizedError(
                f"{caller} cannot dispute its own proposal", proposal_id=proposal_id
            )
        validate_bond(bond, self.params.min_disputer_bond, "Disputer")

        dispute_id = dispute_id or f"{proposal_id}:d{len(proposal.dispute_ids) + 1}"
        if dispute_id in self._disputes:
            raise DuplicateIdError("Dispute", dispute_id)

        dispute = Dispute(
            id=dispute_id,
            proposal_id=proposal_id,
            event_id=event.id,
            disputer=caller,
            reason=reason,
            counter_evidence_uri=counter_evidence_uri,
            bond_amount=bond,
            timestamp=now,
            arbitrated=self.params.committee_mode,
        )
        self._disputes[dispute_id] = dispute
        proposal.dispute_ids.append(dispute_id)
        proposal.challenge_count += 1
        proposal.status = next_proposal_status
        event.dispute_count += 1
        event.status = next_event_status

        logger.info(f"Dispute {dispute_id} filed by {caller} against {proposal_id} (bond {bond})")
        self._emit(
            EventType.DISPUTE_FILED,
            dispute_id,
            dispute.outcome,
            proposal_id=proposal_id,
            event_id=event.id,
            disputer=caller,
            bond=bond,
            reason=reason,
            counter_evidence_uri=counter_evidence_uri,
        )

        if dispute.arbitrated:
            if self.arbitration is None:
                raise InvalidStateError(
                    "Committee arbitration is enabled but no committee is configured",
                    code=ErrorCode.CONFIG_ERROR,
                )
            self.arbitration.create_dispute(
                self.principal, dispute_id, proposal_id, event.id, caller, proposal.proposer
            )

        self.ledger.transfer(caller, self.principal, bond)
        return self._copy(dispute)

    def _apply_outcome(self, dispute: Dispute, outcome: DisputeOutcome) -> Payouts:
        """Resolve a dispute and return the payouts it triggers."""
        proposal = self._proposal(dispute.proposal_id)
        event = self._event(dispute.event_id)
        now = self.now()
        dispute.resolved = True
        dispute.outcome = outcome
        dispute.resolved_at = now
        payouts: Payouts = []

        self._emit(
            EventType.DISPUTE_RESOLVED,
            dispute.id,
            outcome,
            proposal_id=proposal.id,
            event_id=event.id,
        )

        if outcome == DisputeOutcome.UPHELD:
            if proposal.bond_released:
                # Proposal already overturned by an earlier dispute
                payouts.append((dispute.disputer, dispute.bond_amount))
                return payouts

            proposal.status = PROPOSAL_TRANSITIONS.next_state(
                proposal.status, ProposalAction.REJECT, proposal.id
            )
            proposal.bond_released = True
            disputer_reward = apply_bps(proposal.bond_amount, self.params.disputer_reward_rate)
            payouts.append((dispute.disputer, disputer_reward + dispute.bond_amount))
            payouts.append((self.treasury, proposal.bond_amount - disputer_reward))

            if event.active_proposal_id == proposal.id:
                action = EventAction.REOPEN if self.params.reopen_on_upheld else EventAction.CANCEL
                event.status = EVENT_TRANSITIONS.next_state(event.status, action, event.id)
                event.clear_outcome()
                if event.status == EventStatus.CANCELLED:
                    if event.reward_pool and not event.reward_pool_released:
                        event.reward_pool_released = True
                        payouts.append((event.creator, event.reward_pool))
                    self._emit(
                        EventType.EVENT_CANCELLED,
                        event.id,
                        event.status,
                        proposal_id=proposal.id,
                        dispute_id=dispute.id,
                    )
                logger.info(f"Event {event.id} -> {event.status} after dispute {dispute.id} upheld")

            self._report(
                proposal.proposer,
                proposal.bond_amount,
                SlashingReason.FALSE_PROPOSAL,
                f"dispute:{dispute.id}",
            )
            return payouts

        fee = apply_bps(dispute.bond_amount, self.params.platform_fee_rate)
        payouts.append((self.treasury, fee))
        payouts.append((proposal.proposer, dispute.bond_amount - fee))

        if proposal.status == ProposalStatus.CHALLENGED and not self._unresolved(proposal):
            proposal.status = PROPOSAL_TRANSITIONS.next_state(
                proposal.status, ProposalAction.CLEAR, proposal.id
            )
            proposal.liveness_expiry = now + self.params.liveness_period
            if event.active_proposal_id == proposal.id:
                event.status = EVENT_TRANSITIONS.next_state(
                    event.status, EventAction.RESTORE, event.id
                )
            logger.info(
                f"All disputes on {proposal.id} rejected, liveness restarted until "
                f"{proposal.liveness_expiry}"
            )

        self._report(
            dispute.disputer,
            dispute.bond_amount,
            SlashingReason.FRIVOLOUS_DISPUTE,
            f"dispute:{dispute.id}",
        )
        return payouts

    def _check_unresolved(self, dispute: Dispute) -> None:
        if dispute.resolved:
            raise AlreadyProcessedError(
                f"Dispute {dispute.id} already resolved",
                code=ErrorCode.ALREADY_RESOLVED,
                dispute_id=dispute.id,
                outcome=str(dispute.outcome),
            )

    @ledger_operation
    def resolve_dispute(
        self, caller: str, dispute_id: str, outcome: DisputeOutcome | str
    ) -> Dispute:
        """Validator decision on a dispute filed in direct mode."""
        self._require(caller, Capability.VALIDATOR)
        outcome = DisputeOutcome(outcome)
        if outcome not in (DisputeOutcome.UPHELD, DisputeOutcome.REJECTED):
            raise ValidationException(
                "Outcome must be upheld or rejected", field="outcome", value=outcome
            )
        dispute = self._dispute(dispute_id)
        self._check_unresolved(dispute)
        if dispute.arbitrated:
            raise InvalidStateError(
                f"Dispute {dispute_id} is decided by the arbitration committee",
                dispute_id=dispute_id,
            )
        payouts = self._apply_outcome(dispute, outcome)
        logger.info(f"Dispute {dispute_id} resolved {outcome} by {caller}")
        self._pay(payouts)
        return self._copy(dispute)

    @ledger_operation
    def apply_arbitration_outcome(self, caller: str, dispute_id: str) -> Dispute:
        """Finalize the committee case for a dispute and apply its outcome."""
        require_principal(caller, "caller")
        dispute = self._dispute(dispute_id)
        self._check_unresolved(dispute)
        if not dispute.arbitrated or self.arbitration is None:
            raise InvalidStateError(
                f"Dispute {dispute_id} is not under committee arbitration",
                dispute_id=dispute_id,
            )
        outcome = self.arbitration.finalize_dispute(self.principal, dispute_id)
        payouts = self._apply_outcome(dispute, outcome)
        logger.info(f"Dispute {dispute_id} resolved {outcome} by arbitration")
        self._pay(payouts)
        return self._copy(dispute)

    # ========================================================================
    # Finalization and settlement
    # ========================================================================

    @ledger_operation
    def finalize_event(self, caller: str, event_id: str) -> Event:
        """Make the active proposal's outcome final after an unchallenged liveness window."""
        require_principal(caller, "caller")
        event = self._event(event_id)
        if event.status in (EventStatus.RESOLVED, EventStatus.SETTLED):
            raise AlreadyProcessedError(
                f"Event {event_id} already resolved",
                code=ErrorCode.ALREADY_RESOLVED,
                event_id=event_id,
            )
        if event.active_proposal_id is None:
            raise InvalidStateError(f"Event {event_id} has no active proposal", event_id=event_id)
        proposal = self._proposal(event.active_proposal_id)
        if self._unresolved(proposal):
            raise InvalidStateError(
                f"Event {event_id} has unresolved disputes",
                code=ErrorCode.UNRESOLVED_DISPUTES,
                event_id=event_id,
            )
        now = self.now()
        if now <= proposal.liveness_expiry:
            raise TimeGateError(
                f"Liveness window for {proposal.id} open until {proposal.liveness_expiry}",
                liveness_expiry=proposal.liveness_expiry,
            )
        event.status = EVENT_TRANSITIONS.next_state(event.status, EventAction.FINALIZE, event_id)
        proposal.status = PROPOSAL_TRANSITIONS.next_state(
            proposal.status, ProposalAction.FINALIZE, proposal.id
        )
        event.resolved_at = now

        logger.info(f"Event {event_id} resolved with outcome hash {event.outcome_hash}")
        self._emit(
            EventType.EVENT_RESOLVED,
            event_id,
            event.status,
            proposal_id=proposal.id,
            outcome_hash=event.outcome_hash,
        )
        return self._copy(event)

    @ledger_operation
    def settle_event(self, caller: str, event_id: str) -> Event:
        """Distribute the proposer bond and the event reward pool."""
        require_principal(caller, "caller")
        event = self._event(event_id)
        if event.settled:
            raise AlreadyProcessedError(
                f"Event {event_id} already settled",
                code=ErrorCode.ALREADY_SETTLED,
                event_id=event_id,
            )
        event.status = EVENT_TRANSITIONS.next_state(event.status, EventAction.SETTLE, event_id)
        proposal = self._proposal(event.active_proposal_id or "")
        proposal.executed = True
        proposal.bond_released = True
        event.settled = True

        fee = apply_bps(proposal.bond_amount, self.params.platform_fee_rate)
        payouts: Payouts = [
            (self.treasury, fee),
            (proposal.proposer, proposal.bond_amount - fee),
        ]

        self._emit(
            EventType.EVENT_SETTLED,
            event_id,
            event.status,
            proposal_id=proposal.id,
            proposer=proposal.proposer,
            amount=proposal.bond_amount - fee,
            fee=fee,
            reward_pool=event.reward_pool,
        )

        if event.reward_pool and not event.reward_pool_released:
            event.reward_pool_released = True
            if self.distributor is not None:
                pool_id = f"{EVENT_POOL_PREFIX}{event_id}"
                self.distributor.create_reward_pool(
                    self.principal, pool_id, event.reward_pool, funder=self.principal
                )
                self.distributor.allocate_shares(
                    self.principal, pool_id, [proposal.proposer], [proposal.bond_amount]
                )
            else:
                payouts.append((proposal.proposer, event.reward_pool))

        logger.info(f"Event {event_id} settled: {proposal.proposer} paid, fee {fee}")
        self._pay(payouts)
        return self._copy(event)

    # ========================================================================
    # Admin path
    # ========================================================================

    @ledger_operation
    def expire_proposal(self, caller: str, proposal_id: str) -> Proposal:
        """Force-close a stalled proposal, refunding every outstanding bond."""
        self._require(caller, Capability.ADMIN)
        proposal = self._proposal(proposal_id)
        event = self._event(proposal.event_id)
        next_status = PROPOSAL_TRANSITIONS.next_state(
            proposal.status, ProposalAction.EXPIRE, proposal_id
        )
        now = self.now()
        if now <= proposal.liveness_expiry:
            raise TimeGateError(
                f"Proposal {proposal_id} live until {proposal.liveness_expiry}",
                liveness_expiry=proposal.liveness_expiry,
            )

        proposal.status = next_status
        proposal.bond_released = True
        payouts: Payouts = [(proposal.proposer, proposal.bond_amount)]

        for dispute in self._unresolved(proposal):
            dispute.resolved = True
            dispute.outcome = DisputeOutcome.VOIDED
            dispute.resolved_at = now
            payouts.append((dispute.disputer, dispute.bond_amount))
            if dispute.arbitrated and self.arbitration is not None:
                case = self.arbitration.get_case(dispute.id)
                if CASE_TRANSITIONS.can(case.status, CaseAction.CLOSE):
                    self.arbitration.close_case(self.principal, dispute.id, "proposal expired")
            self._emit(
                EventType.DISPUTE_RESOLVED,
                dispute.id,
                dispute.outcome,
                proposal_id=proposal_id,
                event_id=event.id,
            )

        if event.active_proposal_id == proposal_id:
            event.status = EVENT_TRANSITIONS.next_state(event.status, EventAction.EXPIRE, event.id)
            event.clear_outcome()

        logger.warning(f"Proposal {proposal_id} expired by {caller}, bonds refunded")
        self._emit(
            EventType.PROPOSAL_EXPIRED,
            proposal_id,
            proposal.status,
            event_id=event.id,
            refunded=sum(amount for _, amount in payouts),
        )
        self._pay(payouts)
        return self._copy(proposal)

    # ========================================================================
    # Queries
    # ========================================================================

    def get_event(self, event_id: str) -> Event:
        return self._copy(self._event(event_id))

    def get_proposal(self, proposal_id: str) -> Proposal:
        return self._copy(self._proposal(proposal_id))

    def get_dispute(self, dispute_id: str) -> Dispute:
        return self._copy(self._dispute(dispute_id))

    def list_events(self, status: EventStatus | None = None) -> list[Event]:
        return [
            self._copy(e) for e in self._events.values() if status is None or e.status == status
        ]

    def proposals_for_event(self, event_id: str) -> list[Proposal]:
        event = self._event(event_id)
        return [self._copy(self._proposals[p]) for p in event.proposal_ids]

    def disputes_for_proposal(self, proposal_id: str) -> list[Dispute]:
        proposal = self._proposal(proposal_id)
        return [self._copy(self._disputes[d]) for d in proposal.dispute_ids]

    def active_proposals(self, event_id: str) -> list[Proposal]:
        event = self._event(event_id)
        return [
            self._copy(self._proposals[p])
            for p in event.proposal_ids
            if self._proposals[p].status in OPEN_PROPOSAL_STATUSES
        ]

    def expected_custody(self) -> int:
        """Bonds and reward pools currently held by the lifecycle."""
        bonds = sum(p.bond_amount for p in self._proposals.values() if not p.bond_released)
        disputes = sum(d.bond_amount for d in self._disputes.values() if not d.resolved)
        pools = sum(e.reward_pool for e in self._events.values() if not e.reward_pool_released)
        return bonds + disputes + pools

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": self.params.model_dump(),
            "events": [e.to_dict() for e in self._events.values()],
            "proposals": [p.to_dict() for p in self._proposals.values()],
            "disputes": [d.to_dict() for d in self._disputes.values()],
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.params = ResolutionParameters.model_validate(data["params"])
        self._events = {e["id"]: Event.from_dict(e) for e in data.get("events", [])}
        self._proposals = {p["id"]: Proposal.from_dict(p) for p in data.get("proposals", [])}
        self._disputes = {d["id"]: Dispute.from_dict(d) for d in data.get("disputes", [])}
