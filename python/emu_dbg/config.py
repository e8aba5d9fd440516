"""Monitor configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_WATCH_CAPACITY = 32
DEFAULT_STACK_DEPTH = 32
DEFAULT_MAX_LEXEME = 31
DEFAULT_MEMORY_SIZE = 8 * 1024 * 1024
DEFAULT_LOAD_ADDRESS = 0x100000
DEFAULT_CONTINUE_BUDGET = 0xFFFFFFFF

LOG_LEVEL_ENV = "EMU_DBG_LOG"


@dataclass(frozen=True)
class MonitorConfig:
    """Sizes and limits fixed for the lifetime of a monitor."""

    watch_capacity: int = DEFAULT_WATCH_CAPACITY
    stack_depth: int = DEFAULT_STACK_DEPTH
    max_lexeme: int = DEFAULT_MAX_LEXEME
    memory_size: int = DEFAULT_MEMORY_SIZE
    load_address: int = DEFAULT_LOAD_ADDRESS
    continue_budget: int = DEFAULT_CONTINUE_BUDGET

    def __post_init__(self) -> None:
        for name in ("watch_capacity", "stack_depth", "max_lexeme", "memory_size"):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be positive")
        if not 0 <= self.load_address < self.memory_size:
            raise ValueError("load_address must fall inside memory")


def default_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, "WARNING")
