"""Tests for predictlink.storage.snapshot."""

from __future__ import annotations

import json

import pytest

from predictlink.core.exceptions import SchemaVersionError
from predictlink.resolution.enums import EventStatus
from predictlink.storage import (
    CURRENT_SCHEMA_VERSION,
    export_state,
    import_state,
    load_snapshot,
    load_state,
    save_state,
)
from tests.conftest import ALICE, BOB, DISTRIBUTOR, FUNDER, VALIDATOR


def normalized(data):
    return json.loads(json.dumps(data, sort_keys=True))


@pytest.fixture
def busy_protocol(protocol, open_event):
    protocol.bond_ledger.fund_rewards(FUNDER, 10_000)
    protocol.bond_ledger.stake(BOB, 20_000)
    open_event(protocol, reward_pool=1_000)
    protocol.lifecycle.propose_outcome(ALICE, "event-1", "YES", 2_000, 9_000)
    protocol.lifecycle.file_dispute(BOB, "event-1:p1", "wrong", 1_000)
    protocol.lifecycle.resolve_dispute(VALIDATOR, "event-1:p1:d1", "rejected")
    protocol.distributor.create_reward_pool(DISTRIBUTOR, "pool-1", 900)
    protocol.distributor.allocate_shares(DISTRIBUTOR, "pool-1", [ALICE, BOB], [1, 2])
    return protocol


class TestExport:
    def test_shape(self, busy_protocol, clock):
        data = export_state(busy_protocol)
        assert data["schema_version"] == CURRENT_SCHEMA_VERSION
        assert data["clock"] == clock.now()
        assert data["roles"][ALICE] == ["proposer"]
        assert set(data["components"]) == {c.principal for c in busy_protocol.components}
        assert len(data["events"]) == len(busy_protocol.ledger.events)

    def test_json_safe(self, busy_protocol):
        data = export_state(busy_protocol)
        assert normalized(data) == json.loads(json.dumps(data))


class TestImport:
    def test_round_trip(self, busy_protocol):
        data = normalized(export_state(busy_protocol))
        restored = import_state(data, busy_protocol.settings)
        assert normalized(export_state(restored)) == data
        assert restored.is_conserved()

    def test_restored_protocol_keeps_running(self, busy_protocol):
        restored = import_state(normalized(export_state(busy_protocol)), busy_protocol.settings)
        restored.ledger.clock.advance(7_200 + 1)
        restored.lifecycle.finalize_event("keeper", "event-1")
        event = restored.lifecycle.settle_event("keeper", "event-1")
        assert event.status == EventStatus.SETTLED
        assert restored.distributor.claim_reward(ALICE, "event:event-1") == 1_000
        assert restored.is_conserved()
        # New events continue the sequence
        sequences = [e["sequence"] for e in restored.ledger.events.to_list()]
        assert sequences == sorted(set(sequences))

    def test_missing_component(self, busy_protocol):
        data = normalized(export_state(busy_protocol))
        del data["components"]["reward-distributor"]
        with pytest.raises(SchemaVersionError):
            import_state(data)

    def test_malformed_component(self, busy_protocol):
        data = normalized(export_state(busy_protocol))
        del data["components"]["bond-ledger"]["params"]
        with pytest.raises(SchemaVersionError) as exc_info:
            import_state(data)
        assert exc_info.value.details["value"] == "bond-ledger"

    def test_future_version(self, busy_protocol):
        data = normalized(export_state(busy_protocol))
        data["schema_version"] = CURRENT_SCHEMA_VERSION + 1
        with pytest.raises(SchemaVersionError):
            import_state(data)


class TestFiles:
    def test_save_and_load(self, busy_protocol, tmp_path):
        path = save_state(busy_protocol, tmp_path / "state.json")
        assert path.exists()
        assert load_snapshot(path)["schema_version"] == CURRENT_SCHEMA_VERSION
        restored = load_state(path, busy_protocol.settings)
        assert restored.get_stake(BOB).amount == 20_000
        assert restored.ledger.now() == busy_protocol.ledger.now()
