# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Ledger interface consumed by the oracle core.

The core assumes an external ledger that executes one operation at a time
and either applies it fully or reverts it fully. This module provides:

- ``Clock``: the ledger's monotonic clock (``ManualClock`` for tests and
  simulation, ``SystemClock`` for wall-clock use)
- ``ValueLedger``: conditional value transfers between principals
- ``Ledger``: bundles clock, value transfers and the event log, and runs
  every mutating operation inside ``atomic()``

``atomic()`` snapshots every registered participant before the operation
and restores them if any exception escapes. Nested blocks behave as
savepoints: the inner block rolls back on its own while the outer
operation continues.
"""

from __future__ import annotations

import copy
import functools
import logging
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Any, Protocol, TypeVar, runtime_checkable

from .events import DomainEvent, EventLog, EventType
from .exceptions import TransferError, ValidationException
from .logging import operation_context

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# ============================================================================
# Clocks
# ============================================================================


@runtime_checkable
class Clock(Protocol):
    """Monotonic clock in integer seconds."""

    def now(self) -> int: ...


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: int = 0):
        self._now = int(start)

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValidationException("Clock cannot move backwards", field="seconds", value=seconds)
        self._now += int(seconds)
        return self._now

    def set(self, timestamp: int) -> int:
        if timestamp < self._now:
            raise ValidationException(
                "Clock cannot move backwards", field="timestamp", value=timestamp
            )
        self._now = int(timestamp)
        return self._now


class SystemClock:
    """Wall-clock seconds, clamped so readings never decrease."""

    def __init__(self) -> None:
        self._last = 0

    def now(self) -> int:
        self._last = max(self._last, int(time.time()))
        return self._last


# ============================================================================
# Value transfers
# ============================================================================


@runtime_checkable
class ValueLedger(Protocol):
    """All-or-nothing value transfer between principals."""

    def transfer(self, sender: str, recipient: str, amount: int) -> None: ...

    def balance_of(self, principal: str) -> int: ...


class InMemoryValueLedger:
    """Balance table for simulation and tests."""

    def __init__(self, balances: dict[str, int] | None = None):
        self._balances: dict[str, int] = dict(balances or {})

    def mint(self, principal: str, amount: int) -> int:
        if amount <= 0:
            raise ValidationException("Mint amount must be positive", field="amount", value=amount)
        self._balances[principal] = self._balances.get(principal, 0) + amount
        return self._balances[principal]

    def balance_of(self, principal: str) -> int:
        return self._balances.get(principal, 0)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise TransferError("Negative transfer amount", sender=sender, amount=amount)
        available = self._balances.get(sender, 0)
        if available < amount:
            raise TransferError(
                f"Insufficient balance for {sender}: {available} < {amount}",
                sender=sender,
                recipient=recipient,
                amount=amount,
                available=available,
            )
        self._balances[sender] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount

    def balances(self) -> dict[str, int]:
        return {k: v for k, v in self._balances.items() if v}

    @property
    def total_supply(self) -> int:
        return sum(self._balances.values())

    def snapshot(self) -> dict[str, int]:
        return dict(self._balances)

    def restore(self, state: dict[str, int]) -> None:
        self._balances = dict(state)


# ============================================================================
# Participants
# ============================================================================


@runtime_checkable
class Participant(Protocol):
    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...


class LedgerParticipant:
    """Mixin for components whose stores roll back with the ledger.

    Subclasses list the attributes holding their state in
    ``_snapshot_attrs``; they are deep-copied on entry to ``atomic()``.
    """

    _snapshot_attrs: tuple[str, ...] = ()

    def snapshot(self) -> dict[str, Any]:
        return {name: copy.deepcopy(getattr(self, name)) for name in self._snapshot_attrs}

    def restore(self, state: dict[str, Any]) -> None:
        for name, value in state.items():
            setattr(self, name, value)


# ============================================================================
# Ledger
# ============================================================================


class Ledger:
    """Serial, atomic execution environment shared by all components."""

    def __init__(
        self,
        clock: Clock | None = None,
        values: ValueLedger | None = None,
        events: EventLog | None = None,
    ):
        self.clock: Clock = clock or ManualClock()
        self.values: ValueLedger = values if values is not None else InMemoryValueLedger()
        self.events = events or EventLog()
        self._participants: list[Participant] = []
        self._depth = 0

        if isinstance(self.values, Participant):
            self.register(self.values)
        self.register(self.events)

    def register(self, participant: Participant) -> None:
        if participant not in self._participants:
            self._participants.append(participant)

    def now(self) -> int:
        return self.clock.now()

    @property
    def in_operation(self) -> bool:
        return self._depth > 0

    @contextmanager
    def atomic(self) -> Generator[Ledger, None, None]:
        """Run a block as one all-or-nothing ledger operation."""
        snapshots = [(p, p.snapshot()) for p in self._participants]
        outermost = self._depth == 0
        self._depth += 1
        try:
            with operation_context():
                yield self
        except BaseException:
            for participant, state in snapshots:
                participant.restore(state)
            if outermost:
                logger.debug("Ledger operation rolled back")
            raise
        finally:
            self._depth -= 1

        if outermost:
            self.events.flush()

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move value between principals. Zero amounts are a no-op."""
        if amount == 0 or sender == recipient:
            return
        self.values.transfer(sender, recipient, amount)

    def balance_of(self, principal: str) -> int:
        return self.values.balance_of(principal)

    def emit(
        self,
        name: EventType,
        entity_id: str,
        status: str,
        source: str,
        **payload: Any,
    ) -> DomainEvent:
        return self.events.append(
            name=name,
            entity_id=entity_id,
            status=status,
            timestamp=self.now(),
            source=source,
            payload=payload,
        )


def ledger_operation(method: F) -> F:
    """Run a component method inside ``self.ledger.atomic()``."""

    @functools.wraps(method)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        with self.ledger.atomic():
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]
