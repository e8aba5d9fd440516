"""Tests for the fixed-capacity watchpoint pool."""

from __future__ import annotations

import pytest

from emu_dbg.errors import MalformedExpressionError, PoolExhaustedError, WatchEvaluationFault
from emu_dbg.watchpoints import WatchChange, WatchpointPool


def test_allocate_up_to_capacity_yields_distinct_ids():
    pool = WatchpointPool(capacity=32)
    ids = [pool.allocate(f"{idx}", idx).id for idx in range(32)]
    assert sorted(ids) == list(range(32))
    assert pool.free_count == 0
    pool.check_invariants()
    with pytest.raises(PoolExhaustedError):
        pool.allocate("33", 33)
    assert pool.active_count == 32
    pool.check_invariants()


def test_enumerate_is_most_recent_first():
    pool = WatchpointPool(capacity=4)
    first = pool.allocate("1", 1)
    second = pool.allocate("2", 2)
    third = pool.allocate("3", 3)
    assert [w.id for w in pool.enumerate()] == [third.id, second.id, first.id]
    assert [w.expr for w in pool.enumerate()] == ["3", "2", "1"]


def test_release_unlinks_and_returns_slot():
    pool = WatchpointPool(capacity=2)
    watch = pool.allocate("$eax", 5)
    assert pool.release(watch.id) is True
    assert pool.lookup(watch.id) is None
    assert pool.enumerate() == []
    assert pool.free_count == 2
    pool.check_invariants()


def test_release_unknown_id_is_a_noop():
    pool = WatchpointPool(capacity=2)
    pool.allocate("1", 1)
    assert pool.release(7) is False
    assert pool.release(1) is False
    assert pool.active_count == 1
    pool.check_invariants()


def test_ids_are_reused_with_new_generation():
    pool = WatchpointPool(capacity=1)
    watch = pool.allocate("1", 1)
    handle = (watch.id, watch.generation)
    pool.release(watch.id)
    again = pool.allocate("2", 2)
    assert again.id == handle[0]
    assert again.generation == handle[1] + 1
    assert pool.is_current(*handle) is False
    assert pool.is_current(again.id, again.generation) is True


def test_check_all_updates_changed_values_in_order():
    values = {"a": 1, "b": 2}
    pool = WatchpointPool(capacity=4)
    pool.allocate("a", 1)
    pool.allocate("b", 2)
    values.update(a=10, b=20)
    changes = pool.check_all(values.__getitem__)
    assert changes == [WatchChange(1, "b", 2, 20), WatchChange(0, "a", 1, 10)]
    assert pool.check_all(values.__getitem__) == []
    assert pool.lookup(0).value == 10


def test_check_all_faults_on_invalid_expression():
    pool = WatchpointPool(capacity=2)
    pool.allocate("broken", 0)

    def evaluate(_text):
        raise MalformedExpressionError("no longer valid")

    with pytest.raises(WatchEvaluationFault) as info:
        pool.check_all(evaluate)
    assert info.value.watch_id == 0


@pytest.mark.parametrize("capacity", [0, -3])
def test_non_positive_capacity_is_rejected(capacity):
    with pytest.raises(ValueError):
        WatchpointPool(capacity=capacity)
