# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Composition root: wires the five components onto one ledger.

Usage:
    from predictlink.protocol import OracleProtocol

    protocol = OracleProtocol()
    protocol.roles.grant("alice", Capability.PROPOSER)
    protocol.lifecycle.propose_outcome("alice", "event-1", "YES", 1000, 9000)
"""

from __future__ import annotations

import logging
from typing import Any

from .arbitration.committee import ArbitrationCommittee
from .arbitration.models import ArbitrationParameters
from .core.access import Authorizer, Capability, RoleRegistry
from .core.config import CoreSettings, get_config
from .core.ledger import Ledger
from .core.logging import DomainEventLogger
from .core.metrics import ProtocolMetrics
from .resolution.lifecycle import ResolutionLifecycle
from .resolution.models import Dispute, Event, Proposal, ResolutionParameters
from .rewards.distributor import RewardDistributor
from .rewards.models import RewardParameters, RewardPool
from .slashing.governor import SlashingGovernor
from .slashing.models import SlashingParameters, SlashingRequest
from .staking.models import Stake, StakingParameters
from .staking.service import BondLedger

logger = logging.getLogger(__name__)


class OracleProtocol:
    """The oracle core: bond ledger, governor, lifecycle, arbitration, rewards.

    When no authorizer is supplied a ``RoleRegistry`` is created. Whenever
    the authorizer is a ``RoleRegistry`` the internal component principals
    are granted the capabilities they use on each other; an external
    authorizer must grant them itself.
    """

    def __init__(
        self,
        settings: CoreSettings | None = None,
        *,
        ledger: Ledger | None = None,
        authorizer: Authorizer | None = None,
    ):
        self.settings = settings or get_config()
        self.ledger = ledger or Ledger()
        if authorizer is None:
            authorizer = RoleRegistry()
        self.authorizer = authorizer
        self.roles = authorizer if isinstance(authorizer, RoleRegistry) else None
        treasury = self.settings.treasury_principal

        self.bond_ledger = BondLedger(
            self.ledger, authorizer, StakingParameters.from_settings(self.settings), treasury
        )
        self.governor = SlashingGovernor(
            self.ledger,
            authorizer,
            SlashingParameters.from_settings(self.settings),
            self.bond_ledger,
            treasury,
        )
        self.arbitration = ArbitrationCommittee(
            self.ledger, authorizer, ArbitrationParameters.from_settings(self.settings), treasury
        )
        self.distributor = RewardDistributor(
            self.ledger, authorizer, RewardParameters.from_settings(self.settings), treasury
        )
        self.lifecycle = ResolutionLifecycle(
            self.ledger,
            authorizer,
            ResolutionParameters.from_settings(self.settings),
            treasury,
            bond_ledger=self.bond_ledger,
            governor=self.governor,
            arbitration=self.arbitration,
            distributor=self.distributor,
        )

        if self.roles is not None:
            self.grant_internal_roles(self.roles)

        self.metrics = ProtocolMetrics()
        self.event_logger = DomainEventLogger()
        self.ledger.events.subscribe(self.metrics)
        self.ledger.events.subscribe(self.event_logger)

    @property
    def components(self) -> list[Any]:
        return [self.bond_ledger, self.governor, self.lifecycle, self.arbitration, self.distributor]

    @property
    def treasury(self) -> str:
        return self.settings.treasury_principal

    def grant_internal_roles(self, roles: RoleRegistry) -> None:
        """Give component principals the capabilities they exercise on each other."""
        roles.grant(self.governor.principal, Capability.SLASHER)
        roles.grant(
            self.lifecycle.principal,
            Capability.REPORTER,
            Capability.VALIDATOR,
            Capability.DISTRIBUTOR,
        )

    # ========================================================================
    # Query surface
    # ========================================================================

    def get_event(self, event_id: str) -> Event:
        return self.lifecycle.get_event(event_id)

    def get_proposal(self, proposal_id: str) -> Proposal:
        return self.lifecycle.get_proposal(proposal_id)

    def get_dispute(self, dispute_id: str) -> Dispute:
        return self.lifecycle.get_dispute(dispute_id)

    def get_stake(self, owner: str) -> Stake:
        return self.bond_ledger.get_stake(owner)

    def get_slashing_request(self, request_id: str) -> SlashingRequest:
        return self.governor.get_slashing_request(request_id)

    def get_reward_pool(self, pool_id: str) -> RewardPool:
        return self.distributor.get_reward_pool(pool_id)

    def total_staked(self) -> int:
        return self.bond_ledger.total_staked

    def pending_rewards(self, owner: str) -> int:
        return self.bond_ledger.calculate_pending_rewards(owner)

    def arbitrator_reputation(self, arbitrator: str) -> int:
        return self.arbitration.arbitrator_reputation(arbitrator)

    def metrics_snapshot(self) -> dict[str, Any]:
        snapshot = self.metrics.snapshot()
        snapshot["total_staked"] = self.bond_ledger.total_staked
        snapshot["reward_reserve"] = self.bond_ledger.reward_reserve
        snapshot["custody"] = {c.principal: c.custody_balance for c in self.components}
        return snapshot

    def metrics_text(self) -> str:
        return self.metrics.format_prometheus(
            custody={c.principal: c.custody_balance for c in self.components}
        )

    def conservation_report(self) -> dict[str, dict[str, int | bool]]:
        """Compare each component's custody balance with its own bookkeeping."""
        report: dict[str, dict[str, int | bool]] = {}
        for component in self.components:
            expected = component.expected_custody()
            actual = component.custody_balance
            report[component.principal] = {
                "expected": expected,
                "actual": actual,
                "balanced": expected == actual,
            }
        return report

    def is_conserved(self) -> bool:
        return all(entry["balanced"] for entry in self.conservation_report().values())
