"""Sv39 addresses, page table entries and a page-table walker over simulated memory."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Generic, TypeVar

PA_WIDTH_SV39 = 56
VA_WIDTH_SV39 = 39
PAGE_SIZE_BITS = 12
PAGE_SIZE = 1 << PAGE_SIZE_BITS
PPN_WIDTH_SV39 = PA_WIDTH_SV39 - PAGE_SIZE_BITS
VPN_WIDTH_SV39 = VA_WIDTH_SV39 - PAGE_SIZE_BITS

_USIZE_MAX = (1 << 64) - 1


class _Masked:
    _MASK = _USIZE_MAX
    _TAG = ""
    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value & self._MASK)

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"{self._TAG}:{self.value:#x}"


@dataclass(frozen=True, order=True, repr=False)
class PhysAddr(_Masked):
    """A physical address, masked to 56 bits."""

    value: int
    _MASK = (1 << PA_WIDTH_SV39) - 1
    _TAG = "PA"

    def floor(self) -> PhysPageNum:
        return PhysPageNum(self.value // PAGE_SIZE)

    def ceil(self) -> PhysPageNum:
        return PhysPageNum((self.value - 1 + PAGE_SIZE) // PAGE_SIZE)

    def page_offset(self) -> int:
        return self.value & (PAGE_SIZE - 1)

    def aligned(self) -> bool:
        return self.page_offset() == 0

    def page_number(self) -> PhysPageNum:
        """Return the page number of a page-aligned address."""
        if not self.aligned():
            raise ValueError(f"{self!r} is not page aligned")
        return self.floor()


@dataclass(frozen=True, order=True, repr=False)
class VirtAddr(_Masked):
    """A virtual address, masked to 39 bits."""

    value: int
    _MASK = (1 << VA_WIDTH_SV39) - 1
    _TAG = "VA"

    def floor(self) -> VirtPageNum:
        return VirtPageNum(self.value // PAGE_SIZE)

    def ceil(self) -> VirtPageNum:
        return VirtPageNum((self.value - 1 + PAGE_SIZE) // PAGE_SIZE)

    def page_offset(self) -> int:
        return self.value & (PAGE_SIZE - 1)

    def aligned(self) -> bool:
        return self.page_offset() == 0

    def page_number(self) -> VirtPageNum:
        """Return the page number of a page-aligned address."""
        if not self.aligned():
            raise ValueError(f"{self!r} is not page aligned")
        return self.floor()

    def __int__(self) -> int:
        """Return the 64-bit address, sign-extended from bit 38."""
        if self.value >= 1 << (VA_WIDTH_SV39 - 1):
            return self.value | (_USIZE_MAX ^ self._MASK)
        return self.value


@dataclass(frozen=True, order=True, repr=False)
class PhysPageNum(_Masked):
    """A physical page number, masked to 44 bits."""

    value: int
    _MASK = (1 << PPN_WIDTH_SV39) - 1
    _TAG = "PPN"

    def addr(self) -> PhysAddr:
        return PhysAddr(self.value << PAGE_SIZE_BITS)

    def step(self) -> PhysPageNum:
        """Return the following page number."""
        return PhysPageNum(self.value + 1)


@dataclass(frozen=True, order=True, repr=False)
class VirtPageNum(_Masked):
    """A virtual page number, masked to 27 bits."""

    value: int
    _MASK = (1 << VPN_WIDTH_SV39) - 1
    _TAG = "VPN"

    def addr(self) -> VirtAddr:
        return VirtAddr(self.value << PAGE_SIZE_BITS)

    def step(self) -> VirtPageNum:
        """Return the following page number."""
        return VirtPageNum(self.value + 1)

    def indexes(self) -> tuple[int, int, int]:
        """Return the three 9-bit page-table indexes, top level first."""
        vpn = self.value
        return ((vpn >> 18) & 511, (vpn >> 9) & 511, vpn & 511)


P = TypeVar("P", VirtPageNum, PhysPageNum)


class SimpleRange(Generic[P]):
    """The page numbers from ``start`` up to, but not including, ``end``."""

    def __init__(self, start: P, end: P) -> None:
        if start > end:
            raise ValueError(f"start {start!r} > end {end!r}!")
        self.start = start
        self.end = end

    def __iter__(self) -> Iterator[P]:
        current = self.start
        while current != self.end:
            yield current
            current = current.step()

    def __repr__(self) -> str:
        return f"SimpleRange({self.start!r}, {self.end!r})"


VPNRange = SimpleRange


class PTEFlags(enum.IntFlag):
    """Page table entry flag bits."""

    V = 1 << 0
    R = 1 << 1
    W = 1 << 2
    X = 1 << 3
    U = 1 << 4
    G = 1 << 5
    A = 1 << 6
    D = 1 << 7


@dataclass(frozen=True)
class PageTableEntry:
    """A raw Sv39 page table entry."""

    bits: int

    @classmethod
    def new(cls, ppn: PhysPageNum, flags: PTEFlags) -> PageTableEntry:
        return cls(ppn.value << 10 | int(flags))

    @classmethod
    def empty(cls) -> PageTableEntry:
        return cls(0)

    def ppn(self) -> PhysPageNum:
        return PhysPageNum((self.bits >> 10) & ((1 << 44) - 1))

    def flags(self) -> PTEFlags:
        return PTEFlags(self.bits & 0xFF)

    def is_valid(self) -> bool:
        return bool(self.flags() & PTEFlags.V)

    def readable(self) -> bool:
        return bool(self.flags() & PTEFlags.R)

    def writable(self) -> bool:
        return bool(self.flags() & PTEFlags.W)

    def executable(self) -> bool:
        return bool(self.flags() & PTEFlags.X)


class PhysicalMemory:
    """Sparse, zero-filled physical memory addressed by byte."""

    def __init__(self) -> None:
        self._pages: dict[int, bytearray] = {}

    def _frame(self, ppn: PhysPageNum) -> bytearray:
        return self._pages.setdefault(ppn.value, bytearray(PAGE_SIZE))

    @staticmethod
    def _spans(addr: int, length: int) -> Iterator[tuple[int, int, int]]:
        if addr < 0 or length < 0:
            raise ValueError("address and length must not be negative")
        while length > 0:
            page, offset = divmod(addr, PAGE_SIZE)
            count = min(length, PAGE_SIZE - offset)
            yield page, offset, count
            addr += count
            length -= count

    def read_bytes(self, addr: int, length: int) -> bytes:
        out = bytearray()
        for page, offset, count in self._spans(addr, length):
            frame = self._pages.get(page)
            out += frame[offset : offset + count] if frame else bytes(count)
        return bytes(out)

    def write_bytes(self, addr: int, data: bytes) -> None:
        pos = 0
        for page, offset, count in self._spans(addr, len(data)):
            frame = self._pages.setdefault(page, bytearray(PAGE_SIZE))
            frame[offset : offset + count] = data[pos : pos + count]
            pos += count

    def read_u64(self, addr: int) -> int:
        """Read a little-endian 64-bit word."""
        return int.from_bytes(self.read_bytes(addr, 8), "little")

    def write_u64(self, addr: int, value: int) -> None:
        """Write a little-endian 64-bit word."""
        self.write_bytes(addr, (value & _USIZE_MAX).to_bytes(8, "little"))


class PageTable:
    """A three-level Sv39 page table rooted in simulated memory."""

    def __init__(self, memory: PhysicalMemory, root_ppn: PhysPageNum) -> None:
        self.memory = memory
        self.root_ppn = root_ppn

    @classmethod
    def from_token(cls, memory: PhysicalMemory, token: int) -> PageTable:
        return cls(memory, PhysPageNum(token | ((_USIZE_MAX << 12) & _USIZE_MAX)))

    def _find_pte(self, vpn: VirtPageNum) -> int:
        ppn = self.root_ppn
        level1, level2, leaf = vpn.indexes()
        for idx in (level1, level2):
            ppn = PageTableEntry(self.memory.read_u64(ppn.addr().value + idx * 8)).ppn()
        return ppn.addr().value + leaf * 8

    def translate(self, vpn: VirtPageNum) -> PageTableEntry:
        """Return the leaf entry for ``vpn``."""
        return PageTableEntry(self.memory.read_u64(self._find_pte(vpn)))

    def translate_va(self, va: VirtAddr) -> PhysAddr:
        """Return the physical address that ``va`` maps to."""
        aligned_pa = self.translate(va.floor()).ppn().addr()
        return PhysAddr(int(aligned_pa) + va.page_offset())

    def token(self) -> int:
        return 8 << 60 | self.root_ppn.value


def translated_byte_buffer(
    memory: PhysicalMemory, token: int, ptr: int, length: int
) -> list[memoryview]:
    """Return writable views of the physical pieces behind ``[ptr, ptr + length)``."""
    page_table = PageTable.from_token(memory, token)
    start = ptr
    end = start + length
    pieces: list[memoryview] = []
    while start < end:
        start_va = VirtAddr(start)
        vpn = start_va.floor()
        frame = memoryview(memory._frame(page_table.translate(vpn).ppn()))
        end_va = min(vpn.step().addr(), VirtAddr(end))
        if end_va.page_offset() == 0:
            pieces.append(frame[start_va.page_offset() :])
        else:
            pieces.append(frame[start_va.page_offset() : end_va.page_offset()])
        start = int(end_va)
    return pieces


def translated_str(memory: PhysicalMemory, token: int, ptr: int) -> str:
    """Read a NUL-terminated string starting at virtual address ``ptr``."""
    page_table = PageTable.from_token(memory, token)
    chars: list[str] = []
    va = ptr
    while True:
        pa = page_table.translate_va(VirtAddr(va))
        ch = memory.read_bytes(pa.value, 1)[0]
        if ch == 0:
            break
        chars.append(chr(ch))
        va += 1
    return "".join(chars)