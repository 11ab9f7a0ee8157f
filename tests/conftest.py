"""Shared fixtures for the PredictLink test suite."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

import pytest

from predictlink.core.access import Capability, RoleRegistry
from predictlink.core.config import HOUR, CoreSettings, clear_config_cache
from predictlink.core.ledger import InMemoryValueLedger, Ledger, ManualClock
from predictlink.protocol import OracleProtocol

T0 = 1_700_000_000
STARTING_BALANCE = 1_000_000

ADMIN = "admin"
ALICE = "alice"  # proposer
BOB = "bob"  # disputer
CAROL = "carol"  # second disputer
VALIDATOR = "validator"
REPORTER = "reporter"
SLASHERS = ("slasher-1", "slasher-2", "slasher-3")
ARBITRATORS = ("arb-1", "arb-2", "arb-3", "arb-4")
DISTRIBUTOR = "distributor"
FUNDER = "funder"
TREASURY = "treasury"

FUNDED = (ADMIN, ALICE, BOB, CAROL, DISTRIBUTOR, FUNDER, *ARBITRATORS)


# ============================================================================
# Environment isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove PREDICTLINK_ variables and reset the config singleton."""
    for key in list(os.environ.keys()):
        if key.startswith("PREDICTLINK_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; put them back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# Ledger building blocks
# ============================================================================


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(T0)


@pytest.fixture
def values() -> InMemoryValueLedger:
    return InMemoryValueLedger({p: STARTING_BALANCE for p in FUNDED})


@pytest.fixture
def ledger(clock, values) -> Ledger:
    return Ledger(clock=clock, values=values)


@pytest.fixture
def roles() -> RoleRegistry:
    return RoleRegistry()


def grant_standard_roles(roles: RoleRegistry) -> None:
    roles.grant(ADMIN, Capability.ADMIN)
    roles.grant(ALICE, Capability.PROPOSER)
    roles.grant(BOB, Capability.DISPUTER)
    roles.grant(CAROL, Capability.DISPUTER)
    roles.grant(VALIDATOR, Capability.VALIDATOR)
    roles.grant(REPORTER, Capability.REPORTER)
    roles.grant(DISTRIBUTOR, Capability.DISTRIBUTOR)
    for slasher in SLASHERS:
        roles.grant(slasher, Capability.SLASHER)
    for arbitrator in ARBITRATORS:
        roles.grant(arbitrator, Capability.ARBITRATOR)


# ============================================================================
# Protocol
# ============================================================================


@pytest.fixture
def make_protocol(clock) -> Callable[..., OracleProtocol]:
    """Factory: a fully wired protocol on a fresh funded ledger.

    Keyword arguments override CoreSettings fields.
    """

    def _make(**overrides) -> OracleProtocol:
        settings = CoreSettings(**overrides)
        values = InMemoryValueLedger({p: STARTING_BALANCE for p in FUNDED})
        roles = RoleRegistry()
        grant_standard_roles(roles)
        return OracleProtocol(
            settings, ledger=Ledger(clock=clock, values=values), authorizer=roles
        )

    return _make


@pytest.fixture
def protocol(make_protocol) -> OracleProtocol:
    return make_protocol()


@pytest.fixture
def committee_protocol(make_protocol) -> OracleProtocol:
    return make_protocol(arbitration_mode="committee")


@pytest.fixture
def open_event(clock) -> Callable[..., str]:
    """Create an event on a protocol and move the clock to its resolution time."""

    def _open(protocol: OracleProtocol, event_id: str = "event-1", reward_pool: int = 0) -> str:
        protocol.lifecycle.create_event(
            ADMIN, event_id, "Will it rain tomorrow?", clock.now() + HOUR, reward_pool=reward_pool
        )
        clock.advance(HOUR)
        return event_id

    return _open


def balance(protocol: OracleProtocol, principal: str) -> int:
    return protocol.ledger.balance_of(principal)
