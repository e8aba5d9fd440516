"""Lightweight command parsing helpers for emu-dbg."""

from __future__ import annotations

import shlex
from typing import List, Sequence

PARSE_ERROR_MARKER = "#parse-error"


def split_command(line: str) -> List[str]:
    """Split a command line into argv tokens using shlex rules."""
    if not line:
        return []
    try:
        return shlex.split(line, comments=False, posix=True)
    except ValueError as exc:
        # Return the raw line as a single token so callers can raise a friendlier error.
        return [f"{PARSE_ERROR_MARKER}:{exc}", line.strip()]


def join_expression(argv: Sequence[str]) -> str:
    """Rebuild an expression that the shell split on whitespace."""
    return " ".join(part for part in argv if part).strip()
