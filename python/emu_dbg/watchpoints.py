"""Fixed-capacity watchpoint pool.

Slots live in a backing list of ``capacity`` records.  Two index lists
partition them: ``_free`` (next allocation taken from the front) and
``_active`` (most recently created first).  The pool never grows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .config import DEFAULT_WATCH_CAPACITY
from .errors import ExpressionError, PoolExhaustedError, WatchEvaluationFault

LOGGER = logging.getLogger("emu_dbg.watchpoints")

Evaluate = Callable[[str], int]


@dataclass
class Watchpoint:
    id: int
    expr: Optional[str] = None
    value: int = 0
    generation: int = 0

    def export(self) -> Dict[str, object]:
        return {"id": self.id, "expr": self.expr, "value": self.value, "generation": self.generation}


@dataclass(frozen=True)
class WatchChange:
    id: int
    expr: str
    old: int
    new: int

    def export(self) -> Dict[str, object]:
        return {"id": self.id, "expr": self.expr, "old": self.old, "new": self.new}


class WatchpointPool:
    """Allocates watchpoint slots from a fixed backing store."""

    def __init__(self, capacity: int = DEFAULT_WATCH_CAPACITY) -> None:
        if int(capacity) <= 0:
            raise ValueError("watch_capacity must be positive")
        self._capacity = int(capacity)
        self._slots: List[Watchpoint] = [Watchpoint(id=index) for index in range(self._capacity)]
        self._free: List[int] = list(range(self._capacity))
        self._active: List[int] = []

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def free_count(self) -> int:
        return len(self._free)

    def allocate(self, expr: str, value: int) -> Watchpoint:
        """Take a free slot and make it the head of the active list.

        Raises ``PoolExhaustedError`` when every slot is in use.
        """
        if not self._free:
            raise PoolExhaustedError(self._capacity)
        index = self._free.pop(0)
        slot = self._slots[index]
        slot.expr = expr
        slot.value = value
        slot.generation += 1
        self._active.insert(0, index)
        LOGGER.debug("allocated watchpoint %d (generation %d): %s", slot.id, slot.generation, expr)
        return slot

    def release(self, watch_id: int) -> bool:
        """Return *watch_id* to the free list; False when it is not active."""
        for position, index in enumerate(self._active):
            if self._slots[index].id != watch_id:
                continue
            del self._active[position]
            slot = self._slots[index]
            slot.expr = None
            slot.value = 0
            self._free.insert(0, index)
            LOGGER.debug("released watchpoint %d", watch_id)
            return True
        return False

    def lookup(self, watch_id: int) -> Optional[Watchpoint]:
        for index in self._active:
            if self._slots[index].id == watch_id:
                return self._slots[index]
        return None

    def is_current(self, watch_id: int, generation: int) -> bool:
        """True while the handle (*watch_id*, *generation*) still names a live watchpoint."""
        slot = self.lookup(watch_id)
        return slot is not None and slot.generation == generation

    def enumerate(self) -> List[Watchpoint]:
        return [self._slots[index] for index in self._active]

    def check_all(self, evaluate: Evaluate) -> List[WatchChange]:
        """Re-evaluate every active watchpoint in active-list order.

        Values that differ are updated in place and reported.  An expression
        that no longer evaluates raises ``WatchEvaluationFault``.
        """
        changes: List[WatchChange] = []
        for index in self._active:
            slot = self._slots[index]
            try:
                value = evaluate(slot.expr)
            except ExpressionError as exc:
                raise WatchEvaluationFault(slot.id, slot.expr, exc) from exc
            if value == slot.value:
                continue
            changes.append(WatchChange(slot.id, slot.expr, slot.value, value))
            slot.value = value
        return changes

    def check_invariants(self) -> None:
        """Assert that the free and active lists partition the pool."""
        combined = self._free + self._active
        assert len(combined) == self._capacity, "slot lost or duplicated"
        assert set(combined) == set(range(self._capacity)), "free/active lists do not partition the pool"
        for index in self._free:
            assert self._slots[index].expr is None, f"free slot {index} still owns an expression"


__all__ = ["Watchpoint", "WatchChange", "WatchpointPool"]
