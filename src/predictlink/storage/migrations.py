# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Versioned state snapshot migrations.

Snapshots carry a ``schema_version``. Upgrading an older snapshot applies
registered migrations one version at a time:

    @migration(from_version=1, description="...")
    def upgrade(data: dict) -> None:
        ...  # mutate data in place

Version history:
    1 - amounts stored as decimal strings
    2 - amounts stored as integers (current)
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from ..core.exceptions import SchemaVersionError

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 2

MigrationFunc = Callable[[dict[str, Any]], None]


@dataclass
class Migration:
    """A single upgrade step from ``from_version`` to ``from_version + 1``."""

    from_version: int
    description: str
    func: MigrationFunc

    @property
    def to_version(self) -> int:
        return self.from_version + 1


_MIGRATIONS: dict[int, Migration] = {}


def migration(from_version: int, description: str = "") -> Callable[[MigrationFunc], MigrationFunc]:
    """Register an upgrade step for snapshots at ``from_version``."""

    def decorator(func: MigrationFunc) -> MigrationFunc:
        if from_version in _MIGRATIONS:
            raise ValueError(f"Migration from version {from_version} already registered")
        _MIGRATIONS[from_version] = Migration(
            from_version=from_version,
            description=description or (func.__doc__ or func.__name__).strip().splitlines()[0],
            func=func,
        )
        return func

    return decorator


def schema_version_of(data: dict[str, Any]) -> int:
    version = data.get("schema_version")
    if isinstance(version, bool) or not isinstance(version, int):
        raise SchemaVersionError(
            "Snapshot has no valid schema_version", field="schema_version", value=version
        )
    if version < 1 or version > CURRENT_SCHEMA_VERSION:
        raise SchemaVersionError(
            f"Unsupported schema version {version} (current {CURRENT_SCHEMA_VERSION})",
            field="schema_version",
            value=version,
        )
    return version


def pending_migrations(version: int, target: int = CURRENT_SCHEMA_VERSION) -> list[Migration]:
    """Migrations needed to bring ``version`` up to ``target``."""
    steps = []
    for v in range(version, target):
        step = _MIGRATIONS.get(v)
        if step is None:
            raise SchemaVersionError(
                f"No migration registered from schema version {v}", field="schema_version", value=v
            )
        steps.append(step)
    return steps


def migrate(data: dict[str, Any], dry_run: bool = False) -> dict[str, Any]:
    """Return a copy of ``data`` upgraded to the current schema version.

    Args:
        data: Snapshot dict (left unmodified)
        dry_run: Only validate the version and list the steps

    Raises:
        SchemaVersionError: Version missing, unknown or newer than supported
    """
    version = schema_version_of(data)
    steps = pending_migrations(version)
    if dry_run:
        for step in steps:
            logger.info(f"Would apply migration {step.from_version} -> {step.to_version}: {step.description}")
        return data

    upgraded = copy.deepcopy(data)
    for step in steps:
        logger.info(f"Applying migration {step.from_version} -> {step.to_version}: {step.description}")
        step.func(upgraded)
        upgraded["schema_version"] = step.to_version
    return upgraded


# ============================================================================
# Registered migrations
# ============================================================================

# Keys whose values are amounts in ledger base units
AMOUNT_KEYS = frozenset(
    {
        "amount",
        "pending_rewards",
        "total_claimed",
        "total_slashed",
        "reward_reserve",
        "total_staked",
        "base_amount",
        "slashed_amount",
        "requested_amount",
        "bond",
        "bond_amount",
        "proposer_bond",
        "reward_pool",
        "total_rewards",
        "distributed_rewards",
        "shares",
        "total_shares",
        "claimed_amount",
        "min_stake_amount",
        "max_stake_per_user",
        "min_proposer_bond",
        "min_disputer_bond",
        "appeal_bond",
        "permanent_ban_threshold",
    }
)


def _to_int(value: Any, path: str) -> int:
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise SchemaVersionError(f"Amount at {path} is not a number", field=path, value=value) from None
    if number != number.to_integral_value():
        raise SchemaVersionError(
            f"Amount at {path} has a fractional part", field=path, value=value
        )
    return int(number)


def _convert_amounts(node: Any, path: str = "") -> Any:
    if isinstance(node, dict):
        for key, value in node.items():
            child = f"{path}.{key}" if path else str(key)
            if key in AMOUNT_KEYS and isinstance(value, str):
                node[key] = _to_int(value, child)
            else:
                node[key] = _convert_amounts(value, child)
    elif isinstance(node, list):
        return [_convert_amounts(item, f"{path}[{i}]") for i, item in enumerate(node)]
    return node


@migration(from_version=1, description="Store amounts as integers")
def _amounts_to_integers(data: dict[str, Any]) -> None:
    balances = data.get("balances") or {}
    data["balances"] = {k: _to_int(v, f"balances.{k}") for k, v in balances.items()}
    data["components"] = _convert_amounts(data.get("components", {}), "components")
