"""Debugger context shared by the CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import MonitorConfig
from .machine import Machine
from .monitor import Monitor

LOGGER = logging.getLogger("emu_dbg.context")


@dataclass
class DebuggerContext:
    """Holds shared CLI debugger state."""

    json_output: bool = False
    config: MonitorConfig = field(default_factory=MonitorConfig)
    machine: Optional[Machine] = None
    aliases: Dict[str, str] = field(default_factory=dict)
    _monitor: Optional[Monitor] = field(default=None, init=False, repr=False)

    @property
    def monitor(self) -> Monitor:
        if self._monitor is None:
            from .output import render_watch_change

            self._monitor = Monitor(
                self.machine,
                config=self.config,
                on_watch_change=lambda change: render_watch_change(self, change),
            )
            self.machine = self._monitor.machine
            LOGGER.debug("monitor created (watch capacity %d)", self.config.watch_capacity)
        return self._monitor

    def resolve_alias(self, name: str) -> str:
        return self.aliases.get(name, name)

    def set_alias(self, alias: str, command: str) -> None:
        if alias == command:
            self.aliases.pop(alias, None)
            return
        self.aliases[alias] = command

    def list_aliases(self) -> Dict[str, str]:
        return dict(self.aliases)


__all__ = ["DebuggerContext"]
