"""Tests for mirroring status documents into the store."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from custom_components.haassohn.auth import NonceManager, derive_session_secret
from custom_components.haassohn.coordinator import StoveState
from custom_components.haassohn.store import PointObject, StatePointStore
from custom_components.haassohn.sync import (
    Leaf,
    NodeKind,
    StateSynchronizer,
    classify,
    coerce,
    values_differ,
    walk_document,
)


@pytest.fixture
def state() -> StoveState:
    """Return a fresh stove state."""
    return StoveState()


@pytest.fixture
def nonce() -> NonceManager:
    """Return a nonce manager."""
    return NonceManager("1234")


@pytest.fixture
def synchronizer(
    store: StatePointStore, nonce: NonceManager, state: StoveState
) -> StateSynchronizer:
    """Return a synchronizer on the shared test store."""
    return StateSynchronizer(store, nonce, state)


class TestWalkDocument:
    """Tests for flattening."""

    def test_flatten(self) -> None:
        """Objects are descended, scalars and arrays become points."""
        leaves = list(walk_document({"a": {"b": 1, "c": [1, 2]}}))
        assert [leaf.point_id for leaf in leaves] == ["device.a.b", "device.a.c"]
        assert leaves[0].value == 1
        assert leaves[1].kind is NodeKind.ARRAY
        assert coerce(leaves[1]) == "[1,2]"

    def test_document_order(self) -> None:
        """Siblings after a nested object are still visited in order."""
        leaves = list(walk_document({"x": 1, "n": {"y": 2}, "z": 3}))
        assert [leaf.point_id for leaf in leaves] == [
            "device.x",
            "device.n.y",
            "device.z",
        ]

    def test_prefix(self) -> None:
        """A prefix is inserted after the root."""
        leaves = list(walk_document({"nonce": "n"}, "meta"))
        assert leaves[0].point_id == "device.meta.nonce"

    def test_empty_object(self) -> None:
        """Empty objects produce no points."""
        assert list(walk_document({"a": {}, "b": {"c": {}}})) == []

    def test_deep_nesting(self) -> None:
        """Nesting deeper than the recursion limit is handled."""
        document: dict = {"leaf": 1}
        for _ in range(5000):
            document = {"n": document}
        leaves = list(walk_document(document))
        assert len(leaves) == 1
        assert leaves[0].point_id.endswith(".leaf")

    def test_classify(self) -> None:
        """Node kinds are explicit."""
        assert classify({}) is NodeKind.OBJECT
        assert classify([1]) is NodeKind.ARRAY
        assert classify(None) is NodeKind.SCALAR
        assert classify(True) is NodeKind.SCALAR
        assert classify("x") is NodeKind.SCALAR

    def test_coerce_scalars_unchanged(self) -> None:
        """Scalars pass through."""
        assert coerce(Leaf("device.a", NodeKind.SCALAR, 21.5)) == 21.5
        assert coerce(Leaf("device.a", NodeKind.SCALAR, None)) is None

    def test_coerce_nested_array(self) -> None:
        """Arrays of objects become compact JSON."""
        leaf = Leaf("device.a", NodeKind.ARRAY, [{"d": 1}, "x"])
        assert coerce(leaf) == '[{"d":1},"x"]'

    def test_values_differ(self) -> None:
        """Comparison is strict about types."""
        assert values_differ(1, True) is True
        assert values_differ(1, 1) is False
        assert values_differ("1", 1) is True


class TestSync:
    """Tests for StateSynchronizer."""

    async def test_publishes_points(
        self, synchronizer: StateSynchronizer, store: StatePointStore
    ) -> None:
        """Known points are published with ack."""
        await synchronizer.async_sync({"sp_temp": 21.5, "weekprogram": [1, 2]})
        state = await store.async_get_state("device.sp_temp")
        assert state.val == 21.5
        assert state.ack is True
        assert store.get_value("device.weekprogram") == "[1,2]"

    async def test_idempotent(
        self, synchronizer: StateSynchronizer, store: StatePointStore
    ) -> None:
        """An identical document publishes nothing the second time."""
        store.async_set_state = AsyncMock(wraps=store.async_set_state)
        document = {"prg": True, "sp_temp": 21.5, "meta": {"typ": "HSP"}}

        await synchronizer.async_sync(document)
        assert store.async_set_state.await_count == 3

        await synchronizer.async_sync(document)
        assert store.async_set_state.await_count == 3

    async def test_changed_value_published(
        self, synchronizer: StateSynchronizer, store: StatePointStore
    ) -> None:
        """A changed value replaces the stored one."""
        await synchronizer.async_sync({"is_temp": 20.0})
        await synchronizer.async_sync({"is_temp": 20.5})
        assert store.get_value("device.is_temp") == 20.5

    async def test_unacknowledged_value_overwritten(
        self, synchronizer: StateSynchronizer, store: StatePointStore
    ) -> None:
        """The stove's value wins over a pending command of another value."""
        await store.async_set_state("device.sp_temp", 25.0, ack=False)
        await synchronizer.async_sync({"sp_temp": 21.0})
        state = await store.async_get_state("device.sp_temp")
        assert state.val == 21.0
        assert state.ack is True

    async def test_missing_point(
        self,
        synchronizer: StateSynchronizer,
        store: StatePointStore,
        state: StoveState,
    ) -> None:
        """Unknown points set the sticky flag and are not created."""
        await synchronizer.async_sync({"x": {"y": 1}, "prg": True})
        assert state.missing_state is True
        assert "device.x.y" not in store.point_ids
        # Siblings are still processed
        assert store.get_value("device.prg") is True

        await synchronizer.async_sync({"prg": False})
        assert state.missing_state is True

    async def test_nonce_side_effect(
        self, synchronizer: StateSynchronizer, nonce: NonceManager
    ) -> None:
        """meta.nonce feeds the nonce manager."""
        await synchronizer.async_sync({"meta": {"nonce": "n1"}})
        assert nonce.nonce == "n1"
        assert nonce.hspin == derive_session_secret("n1", nonce.hpin)

    async def test_version_side_effect(
        self, synchronizer: StateSynchronizer, state: StoveState
    ) -> None:
        """Hardware and software versions are cached."""
        await synchronizer.async_sync({"meta": {"hw_version": "5.0", "sw_version": "1.4.1"}})
        assert state.hw_version == "5.0"
        assert state.sw_version == "1.4.1"

    async def test_eco_editable_controls_writability(
        self, synchronizer: StateSynchronizer, store: StatePointStore
    ) -> None:
        """eco_editable toggles whether eco_mode accepts commands."""
        assert store.get_object("device.eco_mode").write is False

        await synchronizer.async_sync({"meta": {"eco_editable": True}})
        assert store.get_object("device.eco_mode").write is True

        await synchronizer.async_sync({"meta": {"eco_editable": False}})
        assert store.get_object("device.eco_mode").write is False

    async def test_store_failure_terminates(
        self, nonce: NonceManager, state: StoveState
    ) -> None:
        """A broken store stops the sync and terminates."""
        store = StatePointStore({"device.prg": PointObject("Program", "boolean")})
        await store.async_close()
        synchronizer = StateSynchronizer(store, nonce, state)

        await synchronizer.async_sync({"prg": True, "mode": "off"})

        assert state.terminated is True
        assert state.missing_state is False
