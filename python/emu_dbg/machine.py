"""Register file, memory and CPU bindings consumed by the monitor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Tuple, Union

from .config import DEFAULT_MEMORY_SIZE
from .errors import MemoryAccessError

LOGGER = logging.getLogger("emu_dbg.machine")

MASK32 = 0xFFFFFFFF
WORD_BYTES = 4

GPR_NAMES: Tuple[str, ...] = ("eax", "ecx", "edx", "ebx", "esp", "ebp", "esi", "edi")
GPR16_NAMES: Tuple[str, ...] = ("ax", "cx", "dx", "bx", "sp", "bp", "si", "di")
GPR8_LOW_NAMES: Tuple[str, ...] = ("al", "cl", "dl", "bl")
GPR8_HIGH_NAMES: Tuple[str, ...] = ("ah", "ch", "dh", "bh")
PC_NAME = "eip"


class RegisterLookup(Protocol):
    def lookup(self, name: str) -> Optional[int]:
        ...

    def names(self) -> Iterable[str]:
        ...


class MemoryReader(Protocol):
    def read(self, address: int, length: int) -> bytes:
        ...


class Cpu(Protocol):
    def step(self) -> bool:
        """Execute one instruction; return False once the CPU has halted."""
        ...


# name -> (32-bit register, shift, mask)
_REGISTER_VIEWS: Dict[str, Tuple[str, int, int]] = {}
for _index, _name in enumerate(GPR_NAMES):
    _REGISTER_VIEWS[_name] = (_name, 0, MASK32)
    _REGISTER_VIEWS[GPR16_NAMES[_index]] = (_name, 0, 0xFFFF)
for _index, _name in enumerate(GPR_NAMES[:4]):
    _REGISTER_VIEWS[GPR8_LOW_NAMES[_index]] = (_name, 0, 0xFF)
    _REGISTER_VIEWS[GPR8_HIGH_NAMES[_index]] = (_name, 8, 0xFF)
_REGISTER_VIEWS[PC_NAME] = (PC_NAME, 0, MASK32)


class X86RegisterFile:
    """32-bit x86 general purpose registers plus ``eip``.

    16- and 8-bit names are views onto the 32-bit registers and read or write
    only their own bits.
    """

    def __init__(self, values: Optional[Dict[str, int]] = None) -> None:
        self._regs: Dict[str, int] = {name: 0 for name in GPR_NAMES + (PC_NAME,)}
        for name, value in (values or {}).items():
            self.set(name, value)

    def names(self) -> List[str]:
        return list(_REGISTER_VIEWS)

    def lookup(self, name: str) -> Optional[int]:
        view = _REGISTER_VIEWS.get(name)
        if view is None:
            return None
        base, shift, mask = view
        return (self._regs[base] >> shift) & mask

    def set(self, name: str, value: int) -> None:
        view = _REGISTER_VIEWS.get(name)
        if view is None:
            raise KeyError(f"unknown register '{name}'")
        base, shift, mask = view
        current = self._regs[base]
        current &= ~(mask << shift) & MASK32
        current |= (int(value) & mask) << shift
        self._regs[base] = current & MASK32

    def __getitem__(self, name: str) -> int:
        value = self.lookup(name)
        if value is None:
            raise KeyError(name)
        return value

    def __setitem__(self, name: str, value: int) -> None:
        self.set(name, value)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._regs)


class Memory:
    """Flat little-endian byte-addressed memory."""

    def __init__(self, size: int = DEFAULT_MEMORY_SIZE) -> None:
        self.size = int(size)
        self._data = bytearray(self.size)

    def _check(self, address: int, length: int) -> None:
        if address < 0 or length < 0 or address + length > self.size:
            raise MemoryAccessError(address, length, size=self.size)

    def read(self, address: int, length: int) -> bytes:
        self._check(address, length)
        return bytes(self._data[address : address + length])

    def write(self, address: int, data: bytes) -> None:
        self._check(address, len(data))
        self._data[address : address + len(data)] = data

    def read_word(self, address: int) -> int:
        return int.from_bytes(self.read(address, WORD_BYTES), "little")

    def write_word(self, address: int, value: int) -> None:
        self.write(address, (int(value) & MASK32).to_bytes(WORD_BYTES, "little"))

    def load(self, image: Union[bytes, bytearray], base: int) -> int:
        self.write(base, bytes(image))
        LOGGER.info("loaded %d bytes at 0x%08X", len(image), base)
        return len(image)

    def load_file(self, path: Union[str, Path], base: int) -> int:
        return self.load(Path(path).read_bytes(), base)


@dataclass
class Machine:
    """The emulated machine state the monitor inspects."""

    registers: X86RegisterFile = field(default_factory=X86RegisterFile)
    memory: Memory = field(default_factory=Memory)
    cpu: Optional[Cpu] = None


__all__ = [
    "Cpu",
    "GPR_NAMES",
    "Machine",
    "MASK32",
    "Memory",
    "MemoryReader",
    "PC_NAME",
    "RegisterLookup",
    "WORD_BYTES",
    "X86RegisterFile",
]
