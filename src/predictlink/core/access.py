# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Capability checks for protocol operations.

Components never decide who holds which role. They ask an injected
``Authorizer`` whether a principal holds a capability; granting and
revoking is the job of an administrative authority outside the core.
``RoleRegistry`` is the in-memory authority used for tests, the CLI
demo and snapshots.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from .exceptions import ErrorCode, UnauthorizedError, ValidationException

logger = logging.getLogger(__name__)


class Capability(StrEnum):
    """Capabilities checked by the core."""

    PROPOSER = "proposer"
    DISPUTER = "disputer"
    VALIDATOR = "validator"
    ARBITRATOR = "arbitrator"
    SLASHER = "slasher"
    REPORTER = "reporter"
    DISTRIBUTOR = "distributor"
    ADMIN = "admin"


@runtime_checkable
class Authorizer(Protocol):
    """Answers "does principal P hold capability C"."""

    def has_capability(self, principal: str, capability: Capability) -> bool: ...


class RoleRegistry:
    """In-memory capability assignments."""

    def __init__(self, grants: dict[str, set[Capability]] | None = None):
        self._grants: dict[str, set[Capability]] = defaultdict(set)
        for principal, capabilities in (grants or {}).items():
            self._grants[principal].update(Capability(c) for c in capabilities)

    def grant(self, principal: str, *capabilities: Capability) -> None:
        require_principal(principal)
        for capability in capabilities:
            self._grants[principal].add(Capability(capability))
        logger.debug(f"Granted {', '.join(capabilities)} to {principal}")

    def revoke(self, principal: str, *capabilities: Capability) -> None:
        held = self._grants.get(principal)
        if not held:
            return
        for capability in capabilities:
            held.discard(Capability(capability))
        logger.debug(f"Revoked {', '.join(capabilities)} from {principal}")

    def has_capability(self, principal: str, capability: Capability) -> bool:
        return capability in self._grants.get(principal, ())

    def capabilities_of(self, principal: str) -> set[Capability]:
        return set(self._grants.get(principal, ()))

    def holders(self, capability: Capability) -> list[str]:
        return sorted(p for p, caps in self._grants.items() if capability in caps)

    def to_dict(self) -> dict[str, list[str]]:
        return {p: sorted(c.value for c in caps) for p, caps in self._grants.items() if caps}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoleRegistry:
        return cls({p: set(caps) for p, caps in data.items()})


def require_principal(principal: str | None, field: str = "principal") -> str:
    """Reject empty principal identifiers (the "zero address")."""
    if not principal or not str(principal).strip():
        raise ValidationException(
            f"{field} must be a non-empty principal",
            field=field,
            value=principal,
            code=ErrorCode.ZERO_ADDRESS,
        )
    return principal


def require_capability(
    authorizer: Authorizer,
    principal: str,
    *capabilities: Capability,
) -> None:
    """Raise UnauthorizedError unless the principal holds one of the capabilities."""
    require_principal(principal, "caller")
    if any(authorizer.has_capability(principal, c) for c in capabilities):
        return
    names = " or ".join(c.value for c in capabilities)
    raise UnauthorizedError(
        f"{principal} lacks capability {names}",
        principal=principal,
        required=[c.value for c in capabilities],
    )
