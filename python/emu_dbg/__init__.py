"""
emu-dbg: expression evaluator and watchpoint monitor for an emulated machine.

``Monitor`` is the programmatic surface; ``python -m emu_dbg`` launches the
interactive debugger.
"""

from __future__ import annotations

from .cli import main
from .monitor import EvalResult, Monitor

__all__ = ["EvalResult", "Monitor", "main"]
__version__ = "0.1.0"
