"""Output helpers for emu-dbg."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

from .context import DebuggerContext
from .machine import MASK32
from .watchpoints import WatchChange, Watchpoint


def _json_dump(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, indent=2, sort_keys=True)


def emit_result(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit a successful command result."""
    if ctx.json_output:
        payload: Dict[str, Any] = {"status": "ok"}
        if data is not None:
            payload["result"] = data
        else:
            payload["message"] = message
        print(_json_dump(payload))
    else:
        print(message)


def emit_error(ctx: DebuggerContext, *, message: str, data: Optional[Mapping[str, Any]] = None) -> None:
    """Emit an error message respecting JSON mode."""
    payload: Dict[str, Any] = {"status": "error", "error": message}
    if data:
        payload["details"] = dict(data)
    if ctx.json_output:
        print(_json_dump(payload))
    else:
        print(f"error: {message}")


def format_value(value: int) -> str:
    """Render a 32-bit value as unsigned decimal with its hex form."""
    value &= MASK32
    return f"{value} (0x{value:08x})"


def render_watch_change(ctx: DebuggerContext, change: WatchChange) -> None:
    if ctx.json_output:
        print(_json_dump({"event": "watch_update", "watch": change.export()}))
        return
    print(f"Watchpoint {change.id}: {change.expr}")
    print(f"Old value = {format_value(change.old)}")
    print(f"New value = {format_value(change.new)}")


def render_watch_table(watches: Sequence[Watchpoint]) -> None:
    if not watches:
        print("No watchpoints.")
        return
    print("Num   Value        Expression")
    for watch in watches:
        print(f"{watch.id:<5} 0x{watch.value & MASK32:08x}   {watch.expr}")


def render_registers(registers: Mapping[str, int]) -> None:
    for name, value in registers.items():
        print(f"{name:<6}0x{value & MASK32:08x}  {value & MASK32}")


def render_words(words: Iterable[Tuple[int, int]]) -> None:
    for address, value in words:
        print(f"0x{address & MASK32:08x}: 0x{value & MASK32:08x}")


__all__ = [
    "emit_result",
    "emit_error",
    "format_value",
    "render_watch_change",
    "render_watch_table",
    "render_registers",
    "render_words",
]
