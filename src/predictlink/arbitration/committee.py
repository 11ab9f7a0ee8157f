# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Dispute arbitration by committee vote.

A case opens a fixed voting window. After the deadline the case resolves
if enough arbitrators voted: the outcome is the strict majority, and a tie
goes to REJECTED (the original proposal stands). Each voter's reputation
moves +10 when aligned with the outcome and -5 (floored at 0) otherwise.

Either party may appeal within the appeal window by posting the appeal
bond, which reopens voting with fresh tallies. The bond is returned if the
new vote overturns the appealed outcome, otherwise it goes to the treasury.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.access import Authorizer, Capability, require_principal
from ..core.component import ProtocolComponent
from ..core.events import EventType
from ..core.exceptions import (
    AlreadyProcessedError,
    DuplicateIdError,
    ErrorCode,
    InvalidStateError,
    QuorumNotMetError,
    TimeGateError,
    UnauthorizedError,
)
from ..core.ledger import Ledger, ledger_operation
from .enums import CASE_TRANSITIONS, CaseAction, CaseStatus, DisputeOutcome, VoteChoice
from .models import Appeal, ArbitrationCase, ArbitrationParameters, ArbitratorReputation, Vote

logger = logging.getLogger(__name__)


class ArbitrationCommittee(ProtocolComponent[ArbitrationParameters]):
    """Committee voting with quorum, appeals and reputation tracking."""

    source = "arbitration-committee"
    _snapshot_attrs = ("_cases", "_votes", "_reputations")

    def __init__(
        self,
        ledger: Ledger,
        authorizer: Authorizer,
        params: ArbitrationParameters,
        treasury: str = "treasury",
        principal: str | None = None,
    ):
        super().__init__(ledger, authorizer, params, treasury, principal)
        self._cases: dict[str, ArbitrationCase] = {}
        self._votes: dict[str, list[Vote]] = {}
        self._reputations: dict[str, ArbitratorReputation] = {}

    def _reputation(self, arbitrator: str) -> ArbitratorReputation:
        if arbitrator not in self._reputations:
            self._reputations[arbitrator] = ArbitratorReputation(arbitrator=arbitrator)
        return self._reputations[arbitrator]

    # ========================================================================
    # Voting
    # ========================================================================

    @ledger_operation
    def create_dispute(
        self,
        caller: str,
        dispute_id: str,
        proposal_id: str,
        event_id: str,
        disputer: str,
        proposer: str,
    ) -> ArbitrationCase:
        """Open a voting window of ``voting_period`` for a filed dispute."""
        self._require(caller, Capability.VALIDATOR)
        require_principal(dispute_id, "dispute_id")
        if dispute_id in self._cases:
            raise DuplicateIdError("ArbitrationCase", dispute_id)
        now = self.now()
        case = ArbitrationCase(
            id=dispute_id,
            proposal_id=proposal_id,
            event_id=event_id,
            disputer=disputer,
            proposer=proposer,
            created_at=now,
            voting_deadline=now + self.params.voting_period,
        )
        self._cases[dispute_id] = case
        self._votes[dispute_id] = []

        logger.info(f"Arbitration opened for dispute {dispute_id}, voting until {case.voting_deadline}")
        self._emit(
            EventType.ARBITRATION_OPENED,
            dispute_id,
            case.status,
            proposal_id=proposal_id,
            voting_deadline=case.voting_deadline,
        )
        return self._copy(case)

    @ledger_operation
    def cast_vote(
        self,
        arbitrator: str,
        dispute_id: str,
        choice: VoteChoice | str,
        justification: str = "",
    ) -> Vote:
        """Cast one vote per arbitrator per round, before the deadline.

        Raises:
            UnauthorizedError: Not an arbitrator, or a party to the dispute
            TimeGateError: Voting deadline passed
            AlreadyProcessedError: Already voted this round
        """
        self._require(arbitrator, Capability.ARBITRATOR)
        choice = VoteChoice(choice)
        case = self._get(self._cases, "ArbitrationCase", dispute_id)
        if case.status != CaseStatus.VOTING:
            raise InvalidStateError(
                f"Arbitration {dispute_id} is not open for voting",
                dispute_id=dispute_id,
                status=str(case.status),
            )
        if case.is_party(arbitrator):
            raise UnauthorizedError(
                f"{arbitrator} is a party to dispute {dispute_id}", dispute_id=dispute_id
            )
        now = self.now()
        if now > case.voting_deadline:
            raise TimeGateError(
                f"Voting on {dispute_id} closed at {case.voting_deadline}",
                code=ErrorCode.PERIOD_EXPIRED,
                voting_deadline=case.voting_deadline,
            )
        if arbitrator in case.voters:
            raise AlreadyProcessedError(
                f"{arbitrator} already voted on {dispute_id}",
                code=ErrorCode.ALREADY_VOTED,
                dispute_id=dispute_id,
            )

        vote = Vote(
            dispute_id=dispute_id,
            arbitrator=arbitrator,
            choice=choice,
            timestamp=now,
            justification=justification,
            round=case.round,
        )
        self._votes[dispute_id].append(vote)
        case.voters.append(arbitrator)
        if choice == VoteChoice.UPHELD:
            case.upvotes += 1
        else:
            case.downvotes += 1

        self._emit(
            EventType.VOTE_CAST,
            dispute_id,
            case.status,
            arbitrator=arbitrator,
            choice=choice.value,
            round=case.round,
            justification=justification,
        )
        return self._copy(vote)

    @ledger_operation
    def resolve_dispute(self, caller: str, dispute_id: str) -> ArbitrationCase:
        """Close voting and apply the majority outcome (tie -> REJECTED).

        Raises:
            TimeGateError: Voting deadline not reached
            QuorumNotMetError: Too few votes
            AlreadyProcessedError: Round already resolved
        """
        require_principal(caller, "caller")
        case = self._get(self._cases, "ArbitrationCase", dispute_id)
        if case.status in (CaseStatus.RESOLVED, CaseStatus.FINALIZED):
            raise AlreadyProcessedError(
                f"Arbitration {dispute_id} already resolved",
                code=ErrorCode.ALREADY_RESOLVED,
                dispute_id=dispute_id,
            )
        if case.status != CaseStatus.VOTING:
            raise InvalidStateError(
                f"Arbitration {dispute_id} is {case.status}", status=str(case.status)
            )
        now = self.now()
        if now <= case.voting_deadline:
            raise TimeGateError(
                f"Voting on {dispute_id} open until {case.voting_deadline}",
                voting_deadline=case.voting_deadline,
            )
        if not self.params.quorum_met(case.total_votes):
            raise QuorumNotMetError(
                f"Arbitration {dispute_id} has {case.total_votes} votes",
                votes=case.total_votes,
                min_arbitrators=self.params.min_arbitrators,
                quorum_percentage=self.params.quorum_percentage,
            )

        case.status = CASE_TRANSITIONS.next_state(case.status, CaseAction.RESOLVE, dispute_id)
        case.outcome = (
            DisputeOutcome.UPHELD if case.upvotes > case.downvotes else DisputeOutcome.REJECTED
        )
        case.resolved_at = now

        for vote in self._votes[dispute_id]:
            if vote.round == case.round:
                self._reputation(vote.arbitrator).apply(vote.choice.outcome == case.outcome)

        logger.info(
            f"Arbitration {dispute_id} resolved {case.outcome} "
            f"({case.upvotes} upheld / {case.downvotes} rejected, round {case.round})"
        )
        self._emit(
            EventType.ARBITRATION_RESOLVED,
            dispute_id,
            case.status,
            outcome=case.outcome.value,
            upvotes=case.upvotes,
            downvotes=case.downvotes,
            round=case.round,
        )

        appeal = case.open_appeal
        if appeal is not None:
            appeal.settled = True
            recipient = appeal.appellant if case.outcome != appeal.prior_outcome else self.treasury
            logger.info(f"Appeal bond {appeal.bond} on {dispute_id} paid to {recipient}")
            self.ledger.transfer(self.principal, recipient, appeal.bond)
        return self._copy(case)

    # ========================================================================
    # Appeals and finality
    # ========================================================================

    @ledger_operation
    def appeal_dispute(self, caller: str, dispute_id: str) -> ArbitrationCase:
        """Reopen voting against the appeal bond (disputer or proposer only)."""
        case = self._get(self._cases, "ArbitrationCase", dispute_id)
        require_principal(caller, "caller")
        if not case.is_party(caller):
            raise UnauthorizedError(
                f"Only the disputer or proposer may appeal {dispute_id}", dispute_id=dispute_id
            )
        if case.status != CaseStatus.RESOLVED:
            raise InvalidStateError(
                f"Arbitration {dispute_id} has no appealable resolution",
                code=ErrorCode.APPEAL_NOT_ALLOWED,
                status=str(case.status),
            )
        if case.appeal_count >= self.params.max_appeals:
            raise InvalidStateError(
                f"Arbitration {dispute_id} reached {self.params.max_appeals} appeals",
                code=ErrorCode.APPEAL_NOT_ALLOWED,
                appeals=case.appeal_count,
            )
        now = self.now()
        appeal_deadline = (case.resolved_at or 0) + self.params.appeal_window
        if now > appeal_deadline:
            raise TimeGateError(
                f"Appeal window for {dispute_id} closed",
                code=ErrorCode.PERIOD_EXPIRED,
                appeal_deadline=appeal_deadline,
            )

        case.status = CASE_TRANSITIONS.next_state(case.status, CaseAction.APPEAL, dispute_id)
        case.appeals.append(
            Appeal(
                appellant=caller,
                bond=self.params.appeal_bond,
                timestamp=now,
                prior_outcome=case.outcome,
            )
        )
        case.round += 1
        case.upvotes = 0
        case.downvotes = 0
        case.voters = []
        case.outcome = DisputeOutcome.PENDING
        case.resolved_at = None
        case.voting_deadline = now + self.params.voting_period

        logger.info(f"{caller} appealed arbitration {dispute_id} (round {case.round})")
        self._emit(
            EventType.DISPUTE_APPEALED,
            dispute_id,
            case.status,
            appellant=caller,
            bond=self.params.appeal_bond,
            round=case.round,
        )
        self.ledger.transfer(caller, self.principal, self.params.appeal_bond)
        return self._copy(case)

    def is_final(self, dispute_id: str) -> bool:
        case = self._get(self._cases, "ArbitrationCase", dispute_id)
        return case.status == CaseStatus.FINALIZED

    @ledger_operation
    def finalize_dispute(self, caller: str, dispute_id: str) -> DisputeOutcome:
        """Make a resolved outcome irreversible once no appeal can be filed."""
        self._require(caller, Capability.VALIDATOR)
        case = self._get(self._cases, "ArbitrationCase", dispute_id)
        if case.status == CaseStatus.FINALIZED:
            raise AlreadyProcessedError(
                f"Arbitration {dispute_id} already finalized",
                code=ErrorCode.ALREADY_RESOLVED,
                dispute_id=dispute_id,
            )
        if case.status != CaseStatus.RESOLVED:
            raise InvalidStateError(
                f"Arbitration {dispute_id} is not resolved", status=str(case.status)
            )
        appeal_deadline = (case.resolved_at or 0) + self.params.appeal_window
        appeals_left = case.appeal_count < self.params.max_appeals
        if appeals_left and self.now() <= appeal_deadline:
            raise TimeGateError(
                f"Appeal window for {dispute_id} open until {appeal_deadline}",
                appeal_deadline=appeal_deadline,
            )

        case.status = CASE_TRANSITIONS.next_state(case.status, CaseAction.FINALIZE, dispute_id)
        logger.info(f"Arbitration {dispute_id} finalized as {case.outcome}")
        self._emit(
            EventType.ARBITRATION_FINALIZED, dispute_id, case.status, outcome=case.outcome.value
        )
        return case.outcome

    @ledger_operation
    def close_case(self, caller: str, dispute_id: str, reason: str = "") -> ArbitrationCase:
        """Void an undecided case; an unsettled appeal bond is refunded."""
        self._require(caller, Capability.VALIDATOR)
        case = self._get(self._cases, "ArbitrationCase", dispute_id)
        case.status = CASE_TRANSITIONS.next_state(case.status, CaseAction.CLOSE, dispute_id)

        logger.info(f"Arbitration {dispute_id} closed: {reason}")
        self._emit(EventType.ARBITRATION_FINALIZED, dispute_id, case.status, reason=reason)

        appeal = case.open_appeal
        if appeal is not None:
            appeal.settled = True
            self.ledger.transfer(self.principal, appeal.appellant, appeal.bond)
        return self._copy(case)

    # ========================================================================
    # Queries
    # ========================================================================

    def get_case(self, dispute_id: str) -> ArbitrationCase:
        return self._copy(self._get(self._cases, "ArbitrationCase", dispute_id))

    def has_case(self, dispute_id: str) -> bool:
        return dispute_id in self._cases

    def get_votes(self, dispute_id: str, round: int | None = None) -> list[Vote]:
        votes = self._get(self._votes, "ArbitrationCase", dispute_id)
        return [self._copy(v) for v in votes if round is None or v.round == round]

    def arbitrator_reputation(self, arbitrator: str) -> int:
        reputation = self._reputations.get(arbitrator)
        return reputation.score if reputation else ArbitratorReputation(arbitrator).score

    def get_reputation(self, arbitrator: str) -> ArbitratorReputation:
        reputation = self._reputations.get(arbitrator)
        return self._copy(reputation) if reputation else ArbitratorReputation(arbitrator)

    def expected_custody(self) -> int:
        return sum(
            case.open_appeal.bond for case in self._cases.values() if case.open_appeal is not None
        )

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": self.params.model_dump(),
            "cases": [c.to_dict() for c in self._cases.values()],
            "votes": [v.to_dict() for votes in self._votes.values() for v in votes],
            "reputations": [r.to_dict() for r in self._reputations.values()],
        }

    def load_dict(self, data: dict[str, Any]) -> None:
        self.params = ArbitrationParameters.model_validate(data["params"])
        self._cases = {c["id"]: ArbitrationCase.from_dict(c) for c in data.get("cases", [])}
        self._votes = {case_id: [] for case_id in self._cases}
        for entry in data.get("votes", []):
            vote = Vote.from_dict(entry)
            self._votes.setdefault(vote.dispute_id, []).append(vote)
        self._reputations = {
            r["arbitrator"]: ArbitratorReputation.from_dict(r) for r in data.get("reputations", [])
        }
