# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Explicit transition tables for entity status fields.

A table maps ``(state, action)`` to the next state. Any pair missing from
the table is a rejected transition, so every state/action combination has
a defined outcome.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Generic, TypeVar

from .exceptions import ErrorCode, InvalidStateError

S = TypeVar("S", bound=StrEnum)
A = TypeVar("A", bound=StrEnum)


class TransitionTable(Generic[S, A]):
    """Total transition function over a status enum and an action enum."""

    def __init__(self, name: str, transitions: Mapping[tuple[S, A], S]):
        self.name = name
        self._transitions = dict(transitions)

    def can(self, state: S, action: A) -> bool:
        return (state, action) in self._transitions

    def next_state(
        self,
        state: S,
        action: A,
        entity_id: str = "",
        code: ErrorCode | None = None,
    ) -> S:
        """Return the state reached by ``action``, or raise InvalidStateError."""
        try:
            return self._transitions[(state, action)]
        except KeyError:
            raise InvalidStateError(
                f"{self.name} {entity_id} cannot {action} while {state}",
                code=code,
                entity=self.name,
                entity_id=entity_id,
                state=str(state),
                action=str(action),
            ) from None

    def actions_from(self, state: S) -> list[A]:
        return [a for (s, a) in self._transitions if s == state]

    def terminal_states(self, states: Iterable[S]) -> list[S]:
        return [s for s in states if not self.actions_from(s)]
