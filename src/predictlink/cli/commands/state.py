# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""State snapshot commands.

Provides:
  predictlink state init PATH [--clock SECONDS] [--force]
  predictlink state inspect PATH
  predictlink state migrate PATH [--output OUT] [--dry-run]
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from ...core.exceptions import PredictLinkException
from ...core.ledger import Ledger, ManualClock
from ...protocol import OracleProtocol
from ...slashing.enums import SlashingStatus
from ...storage.migrations import migrate, pending_migrations, schema_version_of
from ...storage.snapshot import import_state, load_snapshot, save_state
from ..output import output_error, output_result

logger = logging.getLogger(__name__)


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``state`` command tree."""
    state_parser = subparsers.add_parser("state", help="Create, inspect and migrate state snapshots")
    state_sub = state_parser.add_subparsers(dest="state_command", required=True)

    init_p = state_sub.add_parser("init", help="Write an empty protocol snapshot")
    init_p.add_argument("path", help="Snapshot file to create")
    init_p.add_argument("--clock", type=int, default=0, help="Initial ledger clock (seconds)")
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init_p.set_defaults(func=cmd_state_init)

    inspect_p = state_sub.add_parser("inspect", help="Summarize a snapshot")
    inspect_p.add_argument("path", help="Snapshot file")
    inspect_p.set_defaults(func=cmd_state_inspect)

    migrate_p = state_sub.add_parser("migrate", help="Upgrade a snapshot to the current schema")
    migrate_p.add_argument("path", help="Snapshot file")
    migrate_p.add_argument("--output", "-o", help="Write here instead of overwriting PATH")
    migrate_p.add_argument("--dry-run", action="store_true", help="Show what would be applied")
    migrate_p.set_defaults(func=cmd_state_migrate)


def cmd_state_init(args: argparse.Namespace) -> int:
    path = Path(args.path)
    if path.exists() and not args.force:
        output_error(f"{path} already exists (use --force to overwrite)")
        return 1
    protocol = OracleProtocol(ledger=Ledger(clock=ManualClock(args.clock)))
    save_state(protocol, path)
    output_result({"created": str(path), "clock": args.clock}, as_json=args.json)
    return 0


def summarize(protocol: OracleProtocol) -> dict[str, Any]:
    """Counts and totals describing a loaded protocol."""
    events_by_status: dict[str, int] = {}
    for event in protocol.lifecycle.list_events():
        events_by_status[str(event.status)] = events_by_status.get(str(event.status), 0) + 1
    pending_slashing = protocol.governor.list_requests(status=SlashingStatus.PENDING)
    approved_slashing = protocol.governor.list_requests(status=SlashingStatus.APPROVED)
    return {
        "clock": protocol.ledger.now(),
        "events": events_by_status,
        "stakers": sum(1 for s in protocol.bond_ledger.stakes() if s.active),
        "total_staked": protocol.bond_ledger.total_staked,
        "reward_reserve": protocol.bond_ledger.reward_reserve,
        "slashing_requests": {
            "pending": len(pending_slashing),
            "approved": len(approved_slashing),
        },
        "reward_pools": len(protocol.distributor.pools(active=True)),
        "log_entries": len(protocol.ledger.events),
        "conservation": protocol.conservation_report(),
        "conserved": protocol.is_conserved(),
    }


def cmd_state_inspect(args: argparse.Namespace) -> int:
    try:
        data = load_snapshot(args.path)
        version = schema_version_of(data)
        protocol = import_state(data)
    except (OSError, json.JSONDecodeError) as e:
        output_error(f"Cannot read {args.path}: {e}")
        return 1
    except PredictLinkException as e:
        output_error(f"{e.code}: {e.message}")
        return 1

    summary = {"schema_version": version, **summarize(protocol)}
    output_result(summary, as_json=args.json)
    return 0 if summary["conserved"] else 2


def cmd_state_migrate(args: argparse.Namespace) -> int:
    try:
        data = load_snapshot(args.path)
        version = schema_version_of(data)
        steps = pending_migrations(version)
        if args.dry_run:
            plan = [f"{s.from_version} -> {s.to_version}: {s.description}" for s in steps]
            output_result({"schema_version": version, "pending": plan}, as_json=args.json)
            return 0
        upgraded = migrate(data)
    except (OSError, json.JSONDecodeError) as e:
        output_error(f"Cannot read {args.path}: {e}")
        return 1
    except PredictLinkException as e:
        output_error(f"{e.code}: {e.message}")
        return 1

    target = Path(args.output or args.path)
    target.write_text(json.dumps(upgraded, indent=2, sort_keys=True))
    logger.info(f"Migrated {args.path} from v{version} to v{upgraded['schema_version']}")
    output_result(
        {
            "from_version": version,
            "to_version": upgraded["schema_version"],
            "applied": len(steps),
            "output": str(target),
        },
        as_json=args.json,
    )
    return 0
