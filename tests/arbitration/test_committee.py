"""Tests for predictlink.arbitration: committee voting, appeals and reputation."""

from __future__ import annotations

import pytest

from predictlink.arbitration.enums import CaseStatus, DisputeOutcome, VoteChoice
from predictlink.arbitration.models import ArbitrationParameters, ArbitratorReputation
from predictlink.core.access import Capability
from predictlink.core.config import DAY
from predictlink.core.exceptions import (
    AlreadyProcessedError,
    DuplicateIdError,
    ErrorCode,
    InvalidStateError,
    QuorumNotMetError,
    TimeGateError,
    UnauthorizedError,
)
from predictlink.resolution.enums import EventStatus, ProposalStatus
from tests.conftest import (
    ALICE,
    ARBITRATORS,
    BOB,
    CAROL,
    STARTING_BALANCE,
    TREASURY,
    VALIDATOR,
    balance,
)

VOTING_PERIOD = 7 * DAY


@pytest.fixture
def committee(protocol):
    protocol.arbitration.create_dispute(VALIDATOR, "d1", "p1", "e1", BOB, ALICE)
    return protocol.arbitration


def vote(committee, choices, dispute_id="d1"):
    for arbitrator, choice in zip(ARBITRATORS, choices, strict=False):
        committee.cast_vote(arbitrator, dispute_id, choice)


class TestCreate:
    def test_case_opens_voting(self, clock, committee):
        case = committee.get_case("d1")
        assert case.status == CaseStatus.VOTING
        assert case.voting_deadline == clock.now() + VOTING_PERIOD
        assert case.round == 1
        assert case.is_party(BOB) and case.is_party(ALICE)

    def test_requires_validator(self, protocol):
        with pytest.raises(UnauthorizedError):
            protocol.arbitration.create_dispute(ALICE, "d1", "p1", "e1", BOB, ALICE)

    def test_duplicate(self, committee):
        with pytest.raises(DuplicateIdError):
            committee.create_dispute(VALIDATOR, "d1", "p1", "e1", BOB, ALICE)


class TestVoting:
    def test_vote_tallies(self, committee):
        vote(committee, ["upheld", "upheld", "rejected"])
        case = committee.get_case("d1")
        assert (case.upvotes, case.downvotes) == (2, 1)
        assert case.voters == list(ARBITRATORS[:3])
        assert len(committee.get_votes("d1", round=1)) == 3

    def test_requires_arbitrator(self, committee):
        with pytest.raises(UnauthorizedError):
            committee.cast_vote(CAROL, "d1", VoteChoice.UPHELD)

    def test_party_cannot_vote(self, protocol, committee):
        protocol.roles.grant(BOB, Capability.ARBITRATOR)
        with pytest.raises(UnauthorizedError):
            committee.cast_vote(BOB, "d1", VoteChoice.UPHELD)

    def test_one_vote_per_round(self, committee):
        committee.cast_vote(ARBITRATORS[0], "d1", "upheld")
        with pytest.raises(AlreadyProcessedError) as exc_info:
            committee.cast_vote(ARBITRATORS[0], "d1", "rejected")
        assert exc_info.value.code == ErrorCode.ALREADY_VOTED

    def test_after_deadline(self, clock, committee):
        clock.advance(VOTING_PERIOD + 1)
        with pytest.raises(TimeGateError) as exc_info:
            committee.cast_vote(ARBITRATORS[0], "d1", "upheld")
        assert exc_info.value.code == ErrorCode.PERIOD_EXPIRED

    def test_invalid_choice(self, committee):
        with pytest.raises(ValueError):
            committee.cast_vote(ARBITRATORS[0], "d1", "abstain")


class TestResolve:
    def test_majority_upheld(self, clock, committee):
        vote(committee, ["upheld", "upheld", "rejected"])
        clock.advance(VOTING_PERIOD + 1)
        case = committee.resolve_dispute("keeper", "d1")
        assert case.status == CaseStatus.RESOLVED
        assert case.outcome == DisputeOutcome.UPHELD
        assert case.resolved_at == clock.now()

    def test_tie_rejects(self, clock, committee):
        vote(committee, ["upheld", "rejected", "upheld", "rejected"])
        clock.advance(VOTING_PERIOD + 1)
        assert committee.resolve_dispute("keeper", "d1").outcome == DisputeOutcome.REJECTED

    def test_before_deadline(self, clock, committee):
        vote(committee, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD)
        with pytest.raises(TimeGateError):
            committee.resolve_dispute("keeper", "d1")

    def test_quorum(self, clock, committee):
        vote(committee, ["upheld"])
        clock.advance(VOTING_PERIOD + 1)
        with pytest.raises(QuorumNotMetError):
            committee.resolve_dispute("keeper", "d1")

    def test_already_resolved(self, clock, committee):
        vote(committee, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        with pytest.raises(AlreadyProcessedError) as exc_info:
            committee.resolve_dispute("keeper", "d1")
        assert exc_info.value.code == ErrorCode.ALREADY_RESOLVED

    def test_reputation(self, clock, committee):
        vote(committee, ["upheld", "upheld", "rejected"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        assert committee.arbitrator_reputation(ARBITRATORS[0]) == 110
        assert committee.arbitrator_reputation(ARBITRATORS[2]) == 95
        assert committee.arbitrator_reputation(ARBITRATORS[3]) == 100
        reputation = committee.get_reputation(ARBITRATORS[2])
        assert (reputation.votes_cast, reputation.aligned_votes) == (1, 0)


class TestAppeal:
    @pytest.fixture
    def resolved(self, clock, committee):
        vote(committee, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        return committee

    def test_appeal_reopens_voting(self, protocol, clock, resolved):
        case = resolved.appeal_dispute(ALICE, "d1")
        assert case.status == CaseStatus.VOTING
        assert case.round == 2
        assert case.voters == []
        assert case.outcome == DisputeOutcome.PENDING
        assert case.voting_deadline == clock.now() + VOTING_PERIOD
        assert balance(protocol, ALICE) == STARTING_BALANCE - 100
        assert resolved.custody_balance == 100

    def test_overturned_appeal_refunds_bond(self, protocol, clock, resolved):
        resolved.appeal_dispute(ALICE, "d1")
        vote(resolved, ["rejected", "rejected"])
        clock.advance(VOTING_PERIOD + 1)
        case = resolved.resolve_dispute("keeper", "d1")
        assert case.outcome == DisputeOutcome.REJECTED
        assert balance(protocol, ALICE) == STARTING_BALANCE
        assert resolved.custody_balance == 0

    def test_confirmed_appeal_forfeits_bond(self, protocol, clock, resolved):
        resolved.appeal_dispute(ALICE, "d1")
        vote(resolved, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        resolved.resolve_dispute("keeper", "d1")
        assert balance(protocol, TREASURY) == 100
        assert balance(protocol, ALICE) == STARTING_BALANCE - 100

    def test_second_round_reputation(self, clock, resolved):
        resolved.appeal_dispute(ALICE, "d1")
        vote(resolved, ["rejected", "rejected"])
        clock.advance(VOTING_PERIOD + 1)
        resolved.resolve_dispute("keeper", "d1")
        assert resolved.arbitrator_reputation(ARBITRATORS[0]) == 120
        assert len(resolved.get_votes("d1")) == 4

    def test_only_parties_appeal(self, resolved):
        with pytest.raises(UnauthorizedError):
            resolved.appeal_dispute(CAROL, "d1")

    def test_appeal_window(self, clock, resolved):
        clock.advance(DAY + 1)
        with pytest.raises(TimeGateError) as exc_info:
            resolved.appeal_dispute(ALICE, "d1")
        assert exc_info.value.code == ErrorCode.PERIOD_EXPIRED

    def test_appeal_limit(self, clock, resolved):
        resolved.appeal_dispute(ALICE, "d1")
        vote(resolved, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        resolved.resolve_dispute("keeper", "d1")
        with pytest.raises(InvalidStateError) as exc_info:
            resolved.appeal_dispute(BOB, "d1")
        assert exc_info.value.code == ErrorCode.APPEAL_NOT_ALLOWED

    def test_cannot_appeal_while_voting(self, committee):
        with pytest.raises(InvalidStateError) as exc_info:
            committee.appeal_dispute(ALICE, "d1")
        assert exc_info.value.code == ErrorCode.APPEAL_NOT_ALLOWED


class TestFinalize:
    def test_waits_for_appeal_window(self, clock, committee):
        vote(committee, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        with pytest.raises(TimeGateError):
            committee.finalize_dispute(VALIDATOR, "d1")
        clock.advance(DAY + 1)
        assert committee.finalize_dispute(VALIDATOR, "d1") == DisputeOutcome.UPHELD
        assert committee.is_final("d1")
        with pytest.raises(AlreadyProcessedError):
            committee.finalize_dispute(VALIDATOR, "d1")

    def test_no_wait_when_appeals_exhausted(self, clock, committee):
        vote(committee, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        committee.appeal_dispute(BOB, "d1")
        vote(committee, ["rejected", "rejected"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        assert committee.finalize_dispute(VALIDATOR, "d1") == DisputeOutcome.REJECTED

    def test_unresolved(self, committee):
        with pytest.raises(InvalidStateError):
            committee.finalize_dispute(VALIDATOR, "d1")

    def test_close_refunds_open_appeal(self, protocol, clock, committee):
        vote(committee, ["upheld", "upheld"])
        clock.advance(VOTING_PERIOD + 1)
        committee.resolve_dispute("keeper", "d1")
        committee.appeal_dispute(BOB, "d1")
        closed = committee.close_case(VALIDATOR, "d1", "proposal expired")
        assert closed.status == CaseStatus.CLOSED
        assert balance(protocol, BOB) == STARTING_BALANCE
        with pytest.raises(InvalidStateError):
            committee.resolve_dispute("keeper", "d1")


class TestCommitteeMode:
    @pytest.fixture
    def disputed(self, committee_protocol, open_event):
        open_event(committee_protocol)
        committee_protocol.lifecycle.propose_outcome(ALICE, "event-1", "YES", 2_000, 9_000)
        committee_protocol.lifecycle.file_dispute(BOB, "event-1:p1", "wrong source", 1_000)
        return committee_protocol

    def test_dispute_opens_case(self, disputed):
        assert disputed.get_dispute("event-1:p1:d1").arbitrated
        case = disputed.arbitration.get_case("event-1:p1:d1")
        assert (case.disputer, case.proposer) == (BOB, ALICE)

    def test_validator_cannot_decide(self, disputed):
        with pytest.raises(InvalidStateError):
            disputed.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "upheld")

    def test_upheld_verdict_applied(self, disputed, clock):
        vote(disputed.arbitration, ["upheld", "upheld", "upheld"], "event-1:p1:d1")
        clock.advance(VOTING_PERIOD + 1)
        disputed.arbitration.resolve_dispute("keeper", "event-1:p1:d1")
        with pytest.raises(TimeGateError):
            disputed.lifecycle.apply_arbitration_outcome("keeper", "event-1:p1:d1")
        assert not disputed.get_dispute("event-1:p1:d1").resolved

        clock.advance(DAY + 1)
        resolved = disputed.lifecycle.apply_arbitration_outcome("keeper", "event-1:p1:d1")
        assert resolved.outcome == DisputeOutcome.UPHELD
        assert balance(disputed, BOB) == STARTING_BALANCE + 600
        assert balance(disputed, TREASURY) == 1_400
        assert disputed.get_event("event-1").status == EventStatus.CANCELLED
        assert disputed.is_conserved()

    def test_appealed_verdict_applied(self, disputed, clock):
        dispute_id = "event-1:p1:d1"
        vote(disputed.arbitration, ["upheld", "upheld"], dispute_id)
        clock.advance(VOTING_PERIOD + 1)
        disputed.arbitration.resolve_dispute("keeper", dispute_id)
        disputed.arbitration.appeal_dispute(ALICE, dispute_id)
        vote(disputed.arbitration, ["rejected", "rejected"], dispute_id)
        clock.advance(VOTING_PERIOD + 1)
        disputed.arbitration.resolve_dispute("keeper", dispute_id)

        disputed.lifecycle.apply_arbitration_outcome("keeper", dispute_id)
        assert balance(disputed, ALICE) == STARTING_BALANCE - 2_000 + 900
        assert balance(disputed, TREASURY) == 100
        assert disputed.get_proposal("event-1:p1").status == ProposalStatus.ACTIVE
        assert disputed.get_event("event-1").status == EventStatus.LIVENESS
        assert disputed.is_conserved()

    def test_expiry_closes_case(self, disputed, clock):
        clock.advance(7_200 + 1)
        disputed.lifecycle.expire_proposal("admin", "event-1:p1")
        assert disputed.arbitration.get_case("event-1:p1:d1").status == CaseStatus.CLOSED
        assert balance(disputed, BOB) == STARTING_BALANCE


class TestModels:
    def test_quorum_is_not_truncated(self):
        params = ArbitrationParameters(
            min_arbitrators=3,
            voting_period=1,
            quorum_percentage=66,
            appeal_bond=0,
            appeal_window=0,
            max_appeals=0,
        )
        assert not params.quorum_met(1)
        assert params.quorum_met(2)

    def test_reputation_floor(self):
        reputation = ArbitratorReputation("arb", score=3)
        assert reputation.apply(aligned=False) == 0
