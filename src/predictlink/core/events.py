# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Append-only domain event log.

Components append events while an operation runs; subscribers (metrics,
the domain event logger, off-chain relays) only see them once the
outermost ledger operation commits. A rolled-back operation leaves no
trace in the log.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class EventType(StrEnum):
    """Names of the domain events emitted by the core."""

    # Resolution lifecycle
    EVENT_CREATED = "EventCreated"
    PROPOSAL_SUBMITTED = "ProposalSubmitted"
    DISPUTE_FILED = "DisputeFiled"
    DISPUTE_RESOLVED = "DisputeResolved"
    EVENT_RESOLVED = "EventResolved"
    EVENT_SETTLED = "EventSettled"
    EVENT_CANCELLED = "EventCancelled"
    PROPOSAL_EXPIRED = "ProposalExpired"

    # Bond ledger
    STAKED = "Staked"
    UNSTAKED = "Unstaked"
    REWARD_CLAIMED = "RewardClaimed"
    REWARDS_FUNDED = "RewardsFunded"
    SLASHED = "Slashed"
    USER_BLACKLISTED = "UserBlacklisted"
    USER_UNBLACKLISTED = "UserUnblacklisted"

    # Slashing governor
    SLASHING_REQUESTED = "SlashingRequested"
    SLASHING_APPROVED = "SlashingApproved"
    SLASHING_EXECUTED = "SlashingExecuted"
    SLASHING_REJECTED = "SlashingRejected"

    # Arbitration
    ARBITRATION_OPENED = "ArbitrationOpened"
    VOTE_CAST = "VoteCast"
    ARBITRATION_RESOLVED = "ArbitrationResolved"
    DISPUTE_APPEALED = "DisputeAppealed"
    ARBITRATION_FINALIZED = "ArbitrationFinalized"

    # Reward distributor
    REWARD_POOL_CREATED = "RewardPoolCreated"
    SHARES_ALLOCATED = "SharesAllocated"
    POOL_REWARD_CLAIMED = "PoolRewardClaimed"
    POOL_EXPIRED = "PoolExpired"

    PARAMETERS_UPDATED = "ParametersUpdated"


@dataclass(frozen=True)
class DomainEvent:
    """A single committed (or pending) entry of the event log."""

    sequence: int
    name: EventType
    entity_id: str
    status: str
    timestamp: int
    source: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence": self.sequence,
            "name": self.name.value,
            "entity_id": self.entity_id,
            "status": self.status,
            "timestamp": self.timestamp,
            "source": self.source,
            "payload": dict(self.payload),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainEvent:
        return cls(
            sequence=int(data["sequence"]),
            name=EventType(data["name"]),
            entity_id=data["entity_id"],
            status=data["status"],
            timestamp=int(data["timestamp"]),
            source=data["source"],
            payload=dict(data.get("payload", {})),
        )


Subscriber = Callable[[DomainEvent], None]


class EventLog:
    """Append-only, queryable log of domain events.

    Sequence numbers are gap-free: an aborted operation truncates the
    entries it appended, so the next event reuses the freed number.
    """

    def __init__(self) -> None:
        self._entries: list[DomainEvent] = []
        self._delivered = 0
        self._subscribers: list[Subscriber] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(
        self,
        name: EventType,
        entity_id: str,
        status: str,
        timestamp: int,
        source: str,
        payload: dict[str, Any] | None = None,
    ) -> DomainEvent:
        event = DomainEvent(
            sequence=len(self._entries) + 1,
            name=name,
            entity_id=entity_id,
            status=str(status),
            timestamp=timestamp,
            source=source,
            payload=payload or {},
        )
        self._entries.append(event)
        return event

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback invoked once per committed event."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscribers.remove(callback)

    def flush(self) -> list[DomainEvent]:
        """Deliver events appended since the last flush to subscribers.

        Called by the ledger when the outermost operation commits. State is
        already committed at this point, so a failing subscriber is logged
        and does not stop delivery to the others.
        """
        pending = self._entries[self._delivered :]
        self._delivered = len(self._entries)
        for event in pending:
            for callback in list(self._subscribers):
                try:
                    callback(event)
                except Exception:
                    logger.exception(f"Event subscriber {callback!r} failed on {event.name}")
        return pending

    @property
    def pending(self) -> list[DomainEvent]:
        return self._entries[self._delivered :]

    def query(
        self,
        name: EventType | str | None = None,
        entity_id: str | None = None,
        since: int | None = None,
        limit: int | None = None,
    ) -> list[DomainEvent]:
        """Return committed and pending events matching all given filters.

        Args:
            name: Event name to match
            entity_id: Entity identifier to match
            since: Only events with sequence greater than this
            limit: Maximum number of events (most recent kept)
        """
        results = self._entries
        if name is not None:
            results = [e for e in results if e.name == name]
        if entity_id is not None:
            results = [e for e in results if e.entity_id == entity_id]
        if since is not None:
            results = [e for e in results if e.sequence > since]
        else:
            results = list(results)
        if limit is not None:
            results = results[-limit:] if limit > 0 else []
        return results

    # Ledger participant hooks

    def snapshot(self) -> int:
        return len(self._entries)

    def restore(self, state: int) -> None:
        del self._entries[state:]
        self._delivered = min(self._delivered, state)

    # Serialization

    def to_list(self) -> list[dict[str, Any]]:
        return [event.to_dict() for event in self._entries]

    def load(self, entries: list[dict[str, Any]]) -> None:
        """Replace the log contents from a snapshot; loaded events count as delivered."""
        self._entries = [DomainEvent.from_dict(entry) for entry in entries]
        self._delivered = len(self._entries)
