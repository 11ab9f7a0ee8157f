# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""``predictlink demo``: walk one event through the whole lifecycle.

Runs propose -> dispute -> reject -> finalize -> settle -> claim on an
in-memory ledger and prints the committed event log.
"""

from __future__ import annotations

import argparse
from typing import Any

from ...core.access import Capability
from ...core.config import HOUR, get_config
from ...core.exceptions import PredictLinkException
from ...core.ledger import InMemoryValueLedger, Ledger, ManualClock
from ...protocol import OracleProtocol
from ...resolution.enums import DisputeOutcome
from ..output import output_error, output_result

DEMO_START = 1_700_000_000


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``demo`` command."""
    demo_parser = subparsers.add_parser(
        "demo", help="Run a propose/dispute/settle scenario on an in-memory ledger"
    )
    demo_parser.add_argument("--save", help="Also write the final state snapshot here")
    demo_parser.set_defaults(func=cmd_demo)


def run_demo() -> OracleProtocol:
    """Build a protocol and run the scenario. Returns the final protocol."""
    settings = get_config().model_copy(update={"arbitration_mode": "direct"})
    clock = ManualClock(DEMO_START)
    values = InMemoryValueLedger({"admin": 10_000, "alice": 5_000, "bob": 2_000})
    protocol = OracleProtocol(settings, ledger=Ledger(clock=clock, values=values))
    roles = protocol.roles
    roles.grant("admin", Capability.ADMIN)
    roles.grant("alice", Capability.PROPOSER)
    roles.grant("bob", Capability.DISPUTER)
    roles.grant("validator", Capability.VALIDATOR)

    lifecycle = protocol.lifecycle
    lifecycle.create_event(
        "admin", "demo-event", "Will it rain tomorrow?", DEMO_START + HOUR, reward_pool=5_000
    )
    clock.advance(HOUR)
    proposal = lifecycle.propose_outcome(
        "alice", "demo-event", "YES", 2_000, 9_000, evidence_uri="https://weather.example/obs"
    )
    clock.advance(600)
    dispute = lifecycle.file_dispute("bob", proposal.id, "Forecast source disagrees", 1_000)
    lifecycle.resolve_dispute("validator", dispute.id, DisputeOutcome.REJECTED)

    clock.advance(protocol.lifecycle.params.liveness_period + 1)
    lifecycle.finalize_event("keeper", "demo-event")
    lifecycle.settle_event("keeper", "demo-event")
    protocol.distributor.claim_reward("alice", "event:demo-event")
    return protocol


def demo_report(protocol: OracleProtocol) -> dict[str, Any]:
    values = protocol.ledger.values
    return {
        "event_log": [
            f"#{e.sequence} {e.name} {e.entity_id} -> {e.status}"
            for e in protocol.ledger.events.query()
        ],
        "balances": values.balances() if isinstance(values, InMemoryValueLedger) else {},
        "conserved": protocol.is_conserved(),
    }


def cmd_demo(args: argparse.Namespace) -> int:
    try:
        protocol = run_demo()
    except PredictLinkException as e:
        output_error(f"{e.code}: {e.message}")
        return 1

    if args.save:
        from ...storage.snapshot import save_state

        save_state(protocol, args.save)
    output_result(demo_report(protocol), as_json=args.json)
    return 0
