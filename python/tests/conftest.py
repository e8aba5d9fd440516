"""
Pytest configuration and fixtures for emu-dbg tests.
"""
import sys
from pathlib import Path

import pytest

PYTHON_SRC = Path(__file__).resolve().parents[1]
if str(PYTHON_SRC) not in sys.path:
    sys.path.append(str(PYTHON_SRC))

from emu_dbg.context import DebuggerContext
from emu_dbg.machine import Machine, Memory, X86RegisterFile
from emu_dbg.monitor import Monitor


@pytest.fixture
def machine():
    """A small machine with a few registers and words preset."""
    registers = X86RegisterFile({"eax": 5, "ebx": 0x100, "esp": 0x200, "eip": 0x1000})
    memory = Memory(0x10000)
    memory.write_word(0x100, 0xDEADBEEF)
    memory.write_word(0x104, 0x104)
    memory.write_word(0x200, 42)
    return Machine(registers, memory)


@pytest.fixture
def monitor(machine):
    return Monitor(machine)


@pytest.fixture
def ctx(machine):
    return DebuggerContext(machine=machine)
