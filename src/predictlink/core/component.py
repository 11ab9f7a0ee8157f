# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Shared plumbing for protocol components.

Every component owns its entity stores, a custody account on the value
ledger, and a validated parameter set. State lives in plain dicts keyed by
id; accessors hand out copies.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from .access import Authorizer, Capability, require_capability
from .events import DomainEvent, EventType
from .exceptions import ErrorCode, NotFoundError, ValidationException
from .ledger import Ledger, LedgerParticipant, ledger_operation

logger = logging.getLogger(__name__)

P = TypeVar("P", bound="ComponentParameters")
T = TypeVar("T")


class ComponentParameters(BaseModel):
    """Base for per-component parameter sets.

    Instances are immutable; ``updated()`` returns a re-validated copy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    def updated(self: P, **changes: Any) -> P:
        """Return a copy with ``changes`` applied, validating the whole set."""
        data = self.model_dump()
        data.update(changes)
        try:
            return type(self).model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field = ".".join(str(p) for p in first.get("loc", ())) or None
            raise ValidationException(
                f"Invalid parameters: {first.get('msg', str(e))}",
                field=field,
                value=first.get("input") if field else None,
                code=ErrorCode.INVALID_PARAMETER,
            ) from e


class ProtocolComponent(LedgerParticipant, Generic[P]):
    """Base class wiring a component to the ledger and the authorizer."""

    source: ClassVar[str] = "component"

    def __init__(
        self,
        ledger: Ledger,
        authorizer: Authorizer,
        params: P,
        treasury: str,
        principal: str | None = None,
    ):
        self.ledger = ledger
        self.authorizer = authorizer
        self.params = params
        self.treasury = treasury
        self.principal = principal or self.source
        ledger.register(self)

    def snapshot(self) -> dict[str, Any]:
        state = super().snapshot()
        state["params"] = self.params
        return state

    def _require(self, caller: str, *capabilities: Capability) -> None:
        require_capability(self.authorizer, caller, *capabilities)

    def _emit(self, name: EventType, entity_id: str, status: str, **payload: Any) -> DomainEvent:
        return self.ledger.emit(name, entity_id, str(status), self.source, **payload)

    def _get(self, store: dict[str, T], resource_type: str, resource_id: str) -> T:
        try:
            return store[resource_id]
        except KeyError:
            raise NotFoundError(resource_type, resource_id) from None

    @staticmethod
    def _copy(entity: T) -> T:
        return copy.deepcopy(entity)

    def now(self) -> int:
        return self.ledger.now()

    @property
    def custody_balance(self) -> int:
        return self.ledger.balance_of(self.principal)

    def expected_custody(self) -> int:
        """Value this component's own records say it holds in custody.

        Components that never hold value keep the default of zero.
        """
        return 0

    @ledger_operation
    def update_parameters(self, caller: str, **changes: Any) -> P:
        """Replace parameters (ADMIN only); the full set is re-validated."""
        self._require(caller, Capability.ADMIN)
        if not changes:
            raise ValidationException(
                "No parameter changes given", code=ErrorCode.INVALID_PARAMETER
            )
        self.params = self.params.updated(**changes)
        logger.info(f"{self.source} parameters updated by {caller}: {sorted(changes)}")
        self._emit(
            EventType.PARAMETERS_UPDATED,
            self.principal,
            "updated",
            changes={k: getattr(self.params, k) for k in changes},
            caller=caller,
        )
        return self.params
