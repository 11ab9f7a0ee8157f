# SPDX-License-Identifier: MIT
# Copyright (c) 2026 PredictLink Contributors

"""Protocol metrics fed by committed domain events.

Exports Prometheus text format without a prometheus_client dependency.

Metrics exported:
- predictlink_events_total: committed domain events by name
- predictlink_value_moved_total: amounts carried by events, by event name
- predictlink_custody_balance: current custody balance per component
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any

from .events import DomainEvent

# Payload keys whose values are amounts moved by the event
AMOUNT_KEYS = ("amount", "bond", "reward", "slashed_amount", "total_rewards", "swept")


class ProtocolMetrics:
    """Thread-safe counters, subscribed to the EventLog."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._event_counts: dict[str, int] = defaultdict(int)
        self._value_moved: dict[str, int] = defaultdict(int)
        self._last_sequence = 0

    def __call__(self, event: DomainEvent) -> None:
        self.record(event)

    def record(self, event: DomainEvent) -> None:
        name = str(event.name)
        moved = sum(
            value
            for key, value in event.payload.items()
            if key in AMOUNT_KEYS and isinstance(value, int) and not isinstance(value, bool)
        )
        with self._lock:
            self._event_counts[name] += 1
            if moved:
                self._value_moved[name] += moved
            self._last_sequence = max(self._last_sequence, event.sequence)

    def count(self, name: str) -> int:
        with self._lock:
            return self._event_counts.get(str(name), 0)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "events": dict(sorted(self._event_counts.items())),
                "value_moved": dict(sorted(self._value_moved.items())),
                "last_sequence": self._last_sequence,
            }

    def format_prometheus(self, custody: dict[str, int] | None = None) -> str:
        """Format all metrics in Prometheus text format.

        Args:
            custody: Optional custody balances by component principal.
        """
        lines: list[str] = []

        with self._lock:
            lines.append("# HELP predictlink_events_total Committed domain events")
            lines.append("# TYPE predictlink_events_total counter")
            for name, count in sorted(self._event_counts.items()):
                lines.append(f'predictlink_events_total{{event="{name}"}} {count}')

            lines.append("")
            lines.append("# HELP predictlink_value_moved_total Value carried by domain events")
            lines.append("# TYPE predictlink_value_moved_total counter")
            for name, amount in sorted(self._value_moved.items()):
                lines.append(f'predictlink_value_moved_total{{event="{name}"}} {amount}')

        if custody is not None:
            lines.append("")
            lines.append("# HELP predictlink_custody_balance Value held in custody per component")
            lines.append("# TYPE predictlink_custody_balance gauge")
            for component, balance in sorted(custody.items()):
                lines.append(f'predictlink_custody_balance{{component="{component}"}} {balance}')

        lines.append("")
        return "\n".join(lines)
