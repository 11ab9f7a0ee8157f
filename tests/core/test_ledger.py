"""Tests for predictlink.core.ledger: clocks, value transfers and atomic operations."""

from __future__ import annotations

import pytest

from predictlink.core.events import EventType
from predictlink.core.exceptions import ErrorCode, TransferError, ValidationException
from predictlink.core.ledger import (
    InMemoryValueLedger,
    Ledger,
    LedgerParticipant,
    ManualClock,
    SystemClock,
    ledger_operation,
)


class Counter(LedgerParticipant):
    _snapshot_attrs = ("items",)

    def __init__(self, ledger: Ledger):
        self.ledger = ledger
        self.items: list[int] = []
        ledger.register(self)

    @ledger_operation
    def add_then_fail(self, value: int) -> None:
        self.items.append(value)
        self.ledger.emit(EventType.STAKED, "x", "active", "test", amount=value)
        raise ValidationException("boom")

    @ledger_operation
    def add(self, value: int) -> None:
        self.items.append(value)
        self.ledger.emit(EventType.STAKED, "x", "active", "test", amount=value)


class TestManualClock:
    def test_advance_and_set(self):
        clock = ManualClock(100)
        assert clock.advance(50) == 150
        assert clock.set(200) == 200
        assert clock.now() == 200

    def test_cannot_move_backwards(self):
        clock = ManualClock(100)
        with pytest.raises(ValidationException):
            clock.advance(-1)
        with pytest.raises(ValidationException):
            clock.set(99)


class TestSystemClock:
    def test_monotonic(self):
        clock = SystemClock()
        first = clock.now()
        assert clock.now() >= first > 0


class TestInMemoryValueLedger:
    def test_transfer(self):
        values = InMemoryValueLedger({"a": 100})
        values.transfer("a", "b", 40)
        assert values.balance_of("a") == 60
        assert values.balance_of("b") == 40
        assert values.total_supply == 100

    def test_insufficient_balance(self):
        values = InMemoryValueLedger({"a": 10})
        with pytest.raises(TransferError) as exc_info:
            values.transfer("a", "b", 11)
        assert exc_info.value.code == ErrorCode.TRANSFER_FAILED
        assert values.balance_of("a") == 10

    def test_negative_amount(self):
        with pytest.raises(TransferError):
            InMemoryValueLedger({"a": 10}).transfer("a", "b", -1)

    def test_mint_and_balances(self):
        values = InMemoryValueLedger()
        values.mint("a", 5)
        values.transfer("a", "b", 5)
        assert values.balances() == {"b": 5}

    def test_mint_rejects_non_positive(self):
        with pytest.raises(ValidationException):
            InMemoryValueLedger().mint("a", 0)


class TestLedgerAtomic:
    def test_rollback_restores_participants_and_log(self):
        ledger = Ledger(values=InMemoryValueLedger({"a": 100}))
        counter = Counter(ledger)
        with pytest.raises(ValidationException):
            counter.add_then_fail(1)
        assert counter.items == []
        assert len(ledger.events) == 0

    def test_rollback_restores_balances(self):
        ledger = Ledger(values=InMemoryValueLedger({"a": 100}))
        with pytest.raises(RuntimeError):
            with ledger.atomic():
                ledger.transfer("a", "b", 30)
                raise RuntimeError("abort")
        assert ledger.balance_of("a") == 100
        assert ledger.balance_of("b") == 0

    def test_commit_flushes_to_subscribers(self):
        ledger = Ledger()
        counter = Counter(ledger)
        seen = []
        ledger.events.subscribe(seen.append)
        counter.add(5)
        assert [e.payload["amount"] for e in seen] == [5]
        assert ledger.events.pending == []

    def test_nested_block_is_a_savepoint(self):
        ledger = Ledger()
        counter = Counter(ledger)
        seen = []
        ledger.events.subscribe(seen.append)
        with ledger.atomic():
            counter.add(1)
            with pytest.raises(ValidationException):
                counter.add_then_fail(2)
            counter.add(3)
            assert seen == []
        assert counter.items == [1, 3]
        assert [e.sequence for e in seen] == [1, 2]
        assert [e.payload["amount"] for e in seen] == [1, 3]

    def test_in_operation_flag(self):
        ledger = Ledger()
        assert not ledger.in_operation
        with ledger.atomic():
            assert ledger.in_operation
        assert not ledger.in_operation

    def test_zero_and_self_transfers_are_noops(self):
        ledger = Ledger(values=InMemoryValueLedger())
        ledger.transfer("a", "b", 0)
        ledger.transfer("a", "a", 10)
        assert ledger.balance_of("a") == 0

    def test_emit_uses_clock(self):
        ledger = Ledger(clock=ManualClock(77))
        event = ledger.emit(EventType.STAKED, "alice", "active", "bond-ledger", amount=1)
        assert event.timestamp == 77
        assert event.source == "bond-ledger"
