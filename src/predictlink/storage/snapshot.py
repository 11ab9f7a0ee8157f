# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Export and import complete protocol state.

A snapshot is a JSON-safe dict:

    {
        "schema_version": 2,
        "clock": 1700000000,
        "balances": {"alice": 5000, ...},
        "roles": {"alice": ["proposer"], ...},
        "events": [...],
        "components": {"bond-ledger": {...}, ...}
    }

Snapshots from older schema versions are migrated on import.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ..core.access import RoleRegistry
from ..core.config import CoreSettings
from ..core.exceptions import SchemaVersionError
from ..core.ledger import InMemoryValueLedger, Ledger, ManualClock
from ..protocol import OracleProtocol
from .migrations import CURRENT_SCHEMA_VERSION, migrate

logger = logging.getLogger(__name__)


def export_state(protocol: OracleProtocol) -> dict[str, Any]:
    values = protocol.ledger.values
    return {
        "schema_version": CURRENT_SCHEMA_VERSION,
        "clock": protocol.ledger.now(),
        "balances": values.balances() if isinstance(values, InMemoryValueLedger) else None,
        "roles": protocol.roles.to_dict() if protocol.roles is not None else None,
        "events": protocol.ledger.events.to_list(),
        "components": {c.principal: c.to_dict() for c in protocol.components},
    }


def import_state(data: dict[str, Any], settings: CoreSettings | None = None) -> OracleProtocol:
    """Rebuild a protocol on an in-memory ledger from a snapshot.

    Raises:
        SchemaVersionError: Unknown version or malformed component data
    """
    data = migrate(data)
    clock = ManualClock(int(data.get("clock", 0)))
    values = InMemoryValueLedger(data.get("balances") or {})
    ledger = Ledger(clock=clock, values=values)
    roles = RoleRegistry.from_dict(data.get("roles") or {})
    protocol = OracleProtocol(settings, ledger=ledger, authorizer=roles)

    components = data.get("components", {})
    for component in protocol.components:
        state = components.get(component.principal)
        if state is None:
            raise SchemaVersionError(
                f"Snapshot has no state for {component.principal}",
                field="components",
                value=component.principal,
            )
        try:
            component.load_dict(state)
        except (KeyError, TypeError, ValueError) as e:
            raise SchemaVersionError(
                f"Malformed state for {component.principal}: {e}",
                field="components",
                value=component.principal,
            ) from e
    ledger.events.load(data.get("events", []))

    logger.info(
        f"Imported snapshot at clock {clock.now()} with {len(ledger.events)} events"
    )
    return protocol


def save_state(protocol: OracleProtocol, path: str | Path) -> Path:
    path = Path(path)
    path.write_text(json.dumps(export_state(protocol), indent=2, sort_keys=True))
    return path


def load_snapshot(path: str | Path) -> dict[str, Any]:
    return json.loads(Path(path).read_text())


def load_state(path: str | Path, settings: CoreSettings | None = None) -> OracleProtocol:
    return import_state(load_snapshot(path), settings)
