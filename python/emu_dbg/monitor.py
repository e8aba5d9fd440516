"""Monitor facade used by the command layer.

The monitor owns the evaluator, the watchpoint pool and the execution
controller for one machine.  Every public method runs under a single lock
so no two operations interleave.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .config import MonitorConfig
from .errors import ExpressionError
from .evaluator import Evaluator
from .machine import MASK32, WORD_BYTES, Machine
from .watchpoints import WatchChange, Watchpoint, WatchpointPool

LOGGER = logging.getLogger("emu_dbg.monitor")

ChangeHook = Callable[[WatchChange], None]

STOP_WATCHPOINT = "watchpoint"
STOP_HALTED = "halted"
STOP_BUDGET = "budget"


@dataclass(frozen=True)
class EvalResult:
    value: Optional[int]
    error: Optional[ExpressionError] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class RunResult:
    executed: int
    reason: str
    changes: List[WatchChange] = field(default_factory=list)

    def export(self) -> Dict[str, object]:
        return {
            "executed": self.executed,
            "reason": self.reason,
            "changes": [change.export() for change in self.changes],
        }


class NoCpuError(RuntimeError):
    """Raised when execution is requested on a machine without a CPU."""


class Monitor:
    def __init__(
        self,
        machine: Optional[Machine] = None,
        *,
        config: Optional[MonitorConfig] = None,
        on_watch_change: Optional[ChangeHook] = None,
    ) -> None:
        self.config = config or MonitorConfig()
        self.machine = machine or Machine()
        self.evaluator = Evaluator(
            self.machine.registers,
            self.machine.memory,
            stack_depth=self.config.stack_depth,
            max_lexeme=self.config.max_lexeme,
        )
        self.watchpoints = WatchpointPool(self.config.watch_capacity)
        self.on_watch_change = on_watch_change
        self.halted = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Expressions

    def evaluate(self, text: str) -> EvalResult:
        with self._lock:
            try:
                return EvalResult(self.evaluator.evaluate(text))
            except ExpressionError as exc:
                LOGGER.debug("evaluation of %r failed: %s", text, exc)
                return EvalResult(None, exc)

    def examine(self, count: int, text: str) -> List[Tuple[int, int]]:
        """Evaluate *text* as a base address and read *count* words from it.

        A count of zero or less reads nothing.
        """
        with self._lock:
            base = self.evaluator.evaluate(text)
            words: List[Tuple[int, int]] = []
            for index in range(max(0, int(count))):
                address = (base + index * WORD_BYTES) & MASK32
                data = self.machine.memory.read(address, WORD_BYTES)
                words.append((address, int.from_bytes(data, "little")))
            return words

    # ------------------------------------------------------------------
    # Watchpoints

    def create_watch(self, text: str) -> int:
        """Evaluate *text* and persist it as a watchpoint.

        An invalid expression raises ``ExpressionError`` and allocates
        nothing; an exhausted pool raises ``PoolExhaustedError``.
        """
        expr = text.strip()
        with self._lock:
            value = self.evaluator.evaluate(expr)
            watch = self.watchpoints.allocate(expr, value)
            LOGGER.info("watchpoint %d: %s = %d", watch.id, expr, value)
            return watch.id

    def delete_watch(self, watch_id: int) -> bool:
        with self._lock:
            removed = self.watchpoints.release(watch_id)
            if not removed:
                LOGGER.debug("delete of unknown watchpoint %d ignored", watch_id)
            return removed

    def lookup_watch(self, watch_id: int) -> Optional[Watchpoint]:
        with self._lock:
            return self.watchpoints.lookup(watch_id)

    def list_watches(self) -> List[Watchpoint]:
        with self._lock:
            return self.watchpoints.enumerate()

    def check_watches(self) -> bool:
        """Re-evaluate all watchpoints; True when any value changed."""
        return bool(self._check_watches())

    def _check_watches(self) -> List[WatchChange]:
        with self._lock:
            changes = self.watchpoints.check_all(self.evaluator.evaluate)
            for change in changes:
                LOGGER.info(
                    "watchpoint %d: %s old=%d new=%d", change.id, change.expr, change.old, change.new
                )
                if self.on_watch_change is not None:
                    self.on_watch_change(change)
            return changes

    # ------------------------------------------------------------------
    # Execution control

    def step(self, count: int = 1) -> RunResult:
        return self.run(max(1, int(count)))

    def continue_(self) -> RunResult:
        return self.run(self.config.continue_budget)

    def run(self, budget: int) -> RunResult:
        """Step up to *budget* instructions, checking watchpoints after each.

        Stops early when a watchpoint changes or the CPU halts.
        """
        with self._lock:
            cpu = self.machine.cpu
            if cpu is None:
                raise NoCpuError("no CPU attached to this machine")
            if self.halted:
                return RunResult(0, STOP_HALTED)
            executed = 0
            while executed < budget:
                running = cpu.step()
                executed += 1
                changes = self._check_watches()
                if not running:
                    self.halted = True
                    LOGGER.info("cpu halted after %d instruction(s)", executed)
                    return RunResult(executed, STOP_HALTED, changes)
                if changes:
                    return RunResult(executed, STOP_WATCHPOINT, changes)
            return RunResult(executed, STOP_BUDGET)


__all__ = [
    "EvalResult",
    "Monitor",
    "NoCpuError",
    "RunResult",
    "STOP_BUDGET",
    "STOP_HALTED",
    "STOP_WATCHPOINT",
]
