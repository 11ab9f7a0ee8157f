"""Tests for predictlink.resolution: events, proposals, disputes and settlement."""

from __future__ import annotations

import pytest

from predictlink.core.access import Capability
from predictlink.core.config import HOUR
from predictlink.core.events import EventType
from predictlink.core.exceptions import (
    AlreadyProcessedError,
    DuplicateIdError,
    ErrorCode,
    InsufficientBondError,
    InvalidStateError,
    NotFoundError,
    TimeGateError,
    TransferError,
    UnauthorizedError,
    ValidationException,
)
from predictlink.resolution.enums import DisputeOutcome, EventStatus, ProposalStatus
from predictlink.resolution.validators import compute_outcome_hash
from predictlink.slashing.enums import SlashingReason
from tests.conftest import (
    ADMIN,
    ALICE,
    BOB,
    CAROL,
    DISTRIBUTOR,
    STARTING_BALANCE,
    TREASURY,
    VALIDATOR,
    balance,
)

LIVENESS = 7200


def propose(protocol, event_id="event-1", bond=2_000, outcome="YES", **kwargs):
    return protocol.lifecycle.propose_outcome(ALICE, event_id, outcome, bond, 9_000, **kwargs)


def dispute(protocol, proposal_id="event-1:p1", disputer=BOB, bond=1_000):
    return protocol.lifecycle.file_dispute(disputer, proposal_id, "wrong source", bond)


class TestCreateEvent:
    def test_create(self, protocol, clock):
        event = protocol.lifecycle.create_event(
            ADMIN, "event-1", "Will it rain?", clock.now() + HOUR, category="weather"
        )
        assert event.status == EventStatus.CREATED
        assert event.category == "weather"
        assert event.creator == ADMIN
        assert protocol.ledger.events.query(name=EventType.EVENT_CREATED)

    def test_reward_pool_is_collected(self, protocol, clock):
        protocol.lifecycle.create_event(
            ADMIN, "event-1", "Will it rain?", clock.now() + HOUR, reward_pool=5_000
        )
        assert balance(protocol, ADMIN) == STARTING_BALANCE - 5_000
        assert protocol.lifecycle.custody_balance == 5_000

    def test_requires_admin(self, protocol, clock):
        with pytest.raises(UnauthorizedError):
            protocol.lifecycle.create_event(ALICE, "event-1", "Will it rain?", clock.now() + HOUR)

    def test_resolution_time_in_past(self, protocol, clock):
        with pytest.raises(ValidationException):
            protocol.lifecycle.create_event(ADMIN, "event-1", "Will it rain?", clock.now())

    def test_duplicate(self, protocol, clock):
        protocol.lifecycle.create_event(ADMIN, "event-1", "Will it rain?", clock.now() + HOUR)
        with pytest.raises(DuplicateIdError):
            protocol.lifecycle.create_event(ADMIN, "event-1", "Again?", clock.now() + HOUR)

    def test_empty_description(self, protocol, clock):
        with pytest.raises(ValidationException):
            protocol.lifecycle.create_event(ADMIN, "event-1", "  ", clock.now() + HOUR)


class TestProposeOutcome:
    def test_propose(self, protocol, clock, open_event):
        open_event(protocol)
        proposal = propose(protocol, evidence_uri="ipfs://evidence")

        assert proposal.id == "event-1:p1"
        assert proposal.status == ProposalStatus.ACTIVE
        assert proposal.liveness_expiry == clock.now() + LIVENESS
        assert proposal.outcome_hash == compute_outcome_hash("YES")
        event = protocol.get_event("event-1")
        assert event.status == EventStatus.LIVENESS
        assert event.active_proposal_id == proposal.id
        assert event.proposer == ALICE
        assert event.proposer_bond == 2_000
        assert balance(protocol, ALICE) == STARTING_BALANCE - 2_000
        assert protocol.lifecycle.custody_balance == 2_000

    def test_before_resolution_time(self, protocol, clock):
        protocol.lifecycle.create_event(ADMIN, "event-1", "Will it rain?", clock.now() + HOUR)
        with pytest.raises(TimeGateError):
            propose(protocol)

    def test_unknown_event(self, protocol):
        with pytest.raises(NotFoundError):
            propose(protocol, event_id="nope")

    def test_requires_proposer(self, protocol, open_event):
        open_event(protocol)
        with pytest.raises(UnauthorizedError):
            protocol.lifecycle.propose_outcome(BOB, "event-1", "YES", 2_000, 9_000)

    def test_bond_below_minimum(self, protocol, open_event):
        open_event(protocol)
        with pytest.raises(InsufficientBondError):
            propose(protocol, bond=999)

    @pytest.mark.parametrize(
        "score,code",
        [(7_999, ErrorCode.CONFIDENCE_TOO_LOW), (10_001, ErrorCode.CONFIDENCE_OUT_OF_RANGE)],
    )
    def test_confidence(self, protocol, open_event, score, code):
        open_event(protocol)
        with pytest.raises(ValidationException) as exc_info:
            protocol.lifecycle.propose_outcome(ALICE, "event-1", "YES", 2_000, score)
        assert exc_info.value.code == code

    def test_one_active_proposal(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        with pytest.raises(InvalidStateError) as exc_info:
            propose(protocol, outcome="NO")
        assert exc_info.value.code == ErrorCode.ACTIVE_PROPOSAL_EXISTS

    def test_outcome_hash_must_match(self, protocol, open_event):
        open_event(protocol)
        with pytest.raises(ValidationException):
            propose(protocol, outcome_hash=compute_outcome_hash("NO"))
        assert propose(protocol, outcome_hash=compute_outcome_hash("YES").upper()).id

    def test_unfunded_proposer_changes_nothing(self, protocol, open_event):
        open_event(protocol)
        protocol.roles.grant("dave", Capability.PROPOSER)
        with pytest.raises(TransferError):
            protocol.lifecycle.propose_outcome("dave", "event-1", "YES", 2_000, 9_000)
        event = protocol.get_event("event-1")
        assert event.status == EventStatus.CREATED
        assert event.active_proposal_id is None
        assert not protocol.ledger.events.query(name=EventType.PROPOSAL_SUBMITTED)


class TestFileDispute:
    def test_dispute(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        filed = dispute(protocol)
        assert filed.id == "event-1:p1:d1"
        assert filed.outcome == DisputeOutcome.PENDING
        assert not filed.arbitrated
        assert protocol.get_proposal("event-1:p1").status == ProposalStatus.CHALLENGED
        event = protocol.get_event("event-1")
        assert event.status == EventStatus.DISPUTED
        assert event.dispute_count == 1
        assert protocol.lifecycle.custody_balance == 3_000

    def test_multiple_disputes(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        second = dispute(protocol, disputer=CAROL)
        assert second.id == "event-1:p1:d2"
        assert protocol.get_proposal("event-1:p1").challenge_count == 2

    def test_after_liveness(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        with pytest.raises(TimeGateError) as exc_info:
            dispute(protocol)
        assert exc_info.value.code == ErrorCode.PERIOD_EXPIRED

    def test_at_liveness_boundary(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS)
        assert dispute(protocol).id

    def test_own_proposal(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        protocol.roles.grant(ALICE, Capability.DISPUTER)
        with pytest.raises(UnauthorizedError):
            dispute(protocol, disputer=ALICE)

    def test_bond_below_minimum(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        with pytest.raises(InsufficientBondError):
            dispute(protocol, bond=499)

    def test_requires_disputer(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        with pytest.raises(UnauthorizedError):
            dispute(protocol, disputer=ADMIN)


class TestResolveDispute:
    @pytest.fixture
    def disputed(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        return protocol

    def test_upheld_pays_disputer(self, disputed):
        resolved = disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        assert resolved.outcome == DisputeOutcome.UPHELD
        assert resolved.resolved

        assert balance(disputed, BOB) == STARTING_BALANCE + 600
        assert balance(disputed, TREASURY) == 1_400
        assert balance(disputed, ALICE) == STARTING_BALANCE - 2_000
        proposal = disputed.get_proposal("event-1:p1")
        assert proposal.status == ProposalStatus.REJECTED
        assert proposal.bond_released
        event = disputed.get_event("event-1")
        assert event.status == EventStatus.CANCELLED
        assert event.active_proposal_id is None
        assert disputed.ledger.events.query(name=EventType.EVENT_CANCELLED)
        assert disputed.is_conserved()

    def test_rejected_pays_proposer(self, disputed, clock):
        disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", DisputeOutcome.REJECTED)

        assert balance(disputed, TREASURY) == 100
        assert balance(disputed, ALICE) == STARTING_BALANCE - 2_000 + 900
        assert balance(disputed, BOB) == STARTING_BALANCE - 1_000
        proposal = disputed.get_proposal("event-1:p1")
        assert proposal.status == ProposalStatus.ACTIVE
        assert proposal.liveness_expiry == clock.now() + LIVENESS
        assert disputed.get_event("event-1").status == EventStatus.LIVENESS
        assert disputed.is_conserved()

    def test_rejected_restarts_liveness(self, disputed, clock):
        clock.advance(HOUR)
        disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "rejected")
        clock.advance(LIVENESS)
        with pytest.raises(TimeGateError):
            disputed.lifecycle.finalize_event("keeper", "event-1")
        clock.advance(1)
        assert disputed.lifecycle.finalize_event("keeper", "event-1").status == EventStatus.RESOLVED

    def test_open_dispute_blocks_finalization(self, disputed, clock):
        dispute(disputed, disputer=CAROL)
        disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "rejected")
        assert disputed.get_proposal("event-1:p1").status == ProposalStatus.CHALLENGED
        assert disputed.get_event("event-1").status == EventStatus.DISPUTED
        clock.advance(LIVENESS + 1)
        with pytest.raises(InvalidStateError) as exc_info:
            disputed.lifecycle.finalize_event("keeper", "event-1")
        assert exc_info.value.code == ErrorCode.UNRESOLVED_DISPUTES

    def test_second_upheld_dispute_only_refunds(self, disputed):
        dispute(disputed, disputer=CAROL)
        disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d2", "upheld")
        assert balance(disputed, CAROL) == STARTING_BALANCE
        assert balance(disputed, TREASURY) == 1_400
        assert disputed.is_conserved()

    def test_already_resolved(self, disputed):
        disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "rejected")
        with pytest.raises(AlreadyProcessedError) as exc_info:
            disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        assert exc_info.value.code == ErrorCode.ALREADY_RESOLVED

    def test_requires_validator(self, disputed):
        with pytest.raises(UnauthorizedError):
            disputed.lifecycle.resolve_dispute(ALICE, "event-1:p1:d1", "rejected")

    def test_pending_is_not_a_decision(self, disputed):
        with pytest.raises(ValidationException):
            disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "pending")

    def test_upheld_refunds_reward_pool(self, protocol, open_event):
        open_event(protocol, reward_pool=5_000)
        propose(protocol)
        dispute(protocol)
        protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        assert balance(protocol, ADMIN) == STARTING_BALANCE
        assert protocol.get_event("event-1").reward_pool_released
        assert protocol.is_conserved()

    def test_reopen_on_upheld(self, make_protocol, open_event):
        protocol = make_protocol(reopen_on_upheld=True)
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        assert protocol.get_event("event-1").status == EventStatus.CREATED
        second = propose(protocol, outcome="NO")
        assert second.id == "event-1:p2"
        assert protocol.get_event("event-1").outcome == "NO"


class TestMisbehaviorReports:
    def test_false_proposal_reported(self, protocol, open_event):
        protocol.bond_ledger.stake(ALICE, 10_000)
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")

        [request] = protocol.governor.list_requests(target=ALICE)
        assert request.reason == SlashingReason.FALSE_PROPOSAL
        assert request.base_amount == 2_000
        assert request.amount == 1_000
        assert request.reporter == protocol.lifecycle.principal
        assert request.evidence == "dispute:event-1:p1:d1"

    def test_frivolous_dispute_reported(self, protocol, open_event):
        protocol.bond_ledger.stake(BOB, 10_000)
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "rejected")

        [request] = protocol.governor.list_requests(target=BOB)
        assert request.reason == SlashingReason.FRIVOLOUS_DISPUTE
        assert request.amount == 500

    def test_unstaked_parties_not_reported(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        assert protocol.governor.list_requests() == []

    def test_reporting_disabled(self, make_protocol, open_event):
        protocol = make_protocol(report_misbehavior=False)
        protocol.bond_ledger.stake(ALICE, 10_000)
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")
        assert protocol.governor.list_requests() == []


class TestFinalizeAndSettle:
    def test_finalize_after_liveness(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS)
        with pytest.raises(TimeGateError):
            protocol.lifecycle.finalize_event("keeper", "event-1")
        clock.advance(1)
        event = protocol.lifecycle.finalize_event("keeper", "event-1")
        assert event.status == EventStatus.RESOLVED
        assert event.resolved_at == clock.now()
        assert protocol.get_proposal("event-1:p1").status == ProposalStatus.FINALIZED

    def test_finalize_twice(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        protocol.lifecycle.finalize_event("keeper", "event-1")
        with pytest.raises(AlreadyProcessedError) as exc_info:
            protocol.lifecycle.finalize_event("keeper", "event-1")
        assert exc_info.value.code == ErrorCode.ALREADY_RESOLVED

    def test_finalize_without_proposal(self, protocol, open_event):
        open_event(protocol)
        with pytest.raises(InvalidStateError):
            protocol.lifecycle.finalize_event("keeper", "event-1")

    def test_settle_pays_proposer(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        protocol.lifecycle.finalize_event("keeper", "event-1")
        event = protocol.lifecycle.settle_event("keeper", "event-1")

        assert event.status == EventStatus.SETTLED
        assert event.settled
        assert balance(protocol, TREASURY) == 200
        assert balance(protocol, ALICE) == STARTING_BALANCE - 200
        proposal = protocol.get_proposal("event-1:p1")
        assert proposal.executed
        assert proposal.bond_released
        assert protocol.lifecycle.custody_balance == 0

    def test_settle_twice(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        protocol.lifecycle.finalize_event("keeper", "event-1")
        protocol.lifecycle.settle_event("keeper", "event-1")
        with pytest.raises(AlreadyProcessedError) as exc_info:
            protocol.lifecycle.settle_event("keeper", "event-1")
        assert exc_info.value.code == ErrorCode.ALREADY_SETTLED

    def test_settle_before_resolution(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        with pytest.raises(InvalidStateError):
            protocol.lifecycle.settle_event("keeper", "event-1")

    def test_settle_opens_reward_pool(self, protocol, clock, open_event):
        open_event(protocol, reward_pool=5_000)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        protocol.lifecycle.finalize_event("keeper", "event-1")
        protocol.lifecycle.settle_event("keeper", "event-1")

        pool = protocol.get_reward_pool("event:event-1")
        assert pool.total_rewards == 5_000
        assert protocol.distributor.pending_reward("event:event-1", ALICE) == 5_000
        assert protocol.distributor.claim_reward(ALICE, "event:event-1") == 5_000
        assert balance(protocol, ALICE) == STARTING_BALANCE - 200 + 5_000
        assert protocol.is_conserved()

    def test_event_pool_ids_reserved_for_settlement(self, protocol, clock, open_event):
        with pytest.raises(UnauthorizedError):
            protocol.distributor.create_reward_pool(DISTRIBUTOR, "event:event-1", 1)
        open_event(protocol, reward_pool=5_000)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        protocol.lifecycle.finalize_event("keeper", "event-1")

        event = protocol.lifecycle.settle_event("keeper", "event-1")
        assert event.settled
        assert protocol.get_reward_pool("event:event-1").total_rewards == 5_000
        assert protocol.is_conserved()


class TestExpireProposal:
    def test_expire_refunds_bonds(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        clock.advance(LIVENESS + 1)
        expired = protocol.lifecycle.expire_proposal(ADMIN, "event-1:p1")

        assert expired.status == ProposalStatus.EXPIRED
        assert balance(protocol, ALICE) == STARTING_BALANCE
        assert balance(protocol, BOB) == STARTING_BALANCE
        assert protocol.get_dispute("event-1:p1:d1").outcome == DisputeOutcome.VOIDED
        event = protocol.get_event("event-1")
        assert event.status == EventStatus.CREATED
        assert event.active_proposal_id is None
        [entry] = protocol.ledger.events.query(name=EventType.PROPOSAL_EXPIRED)
        assert entry.payload["refunded"] == 3_000
        assert protocol.is_conserved()

    def test_expire_while_live(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        with pytest.raises(TimeGateError):
            protocol.lifecycle.expire_proposal(ADMIN, "event-1:p1")

    def test_requires_admin(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        with pytest.raises(UnauthorizedError):
            protocol.lifecycle.expire_proposal(ALICE, "event-1:p1")

    def test_event_can_be_proposed_again(self, protocol, clock, open_event):
        open_event(protocol)
        propose(protocol)
        clock.advance(LIVENESS + 1)
        protocol.lifecycle.expire_proposal(ADMIN, "event-1:p1")
        assert propose(protocol).id == "event-1:p2"
        assert [p.id for p in protocol.lifecycle.active_proposals("event-1")] == ["event-1:p2"]


class TestSerialization:
    def test_models_round_trip(self, protocol, open_event):
        open_event(protocol)
        propose(protocol)
        dispute(protocol)
        data = protocol.lifecycle.to_dict()
        protocol.lifecycle.load_dict(data)
        assert protocol.lifecycle.to_dict() == data
