"""A buddy-system frame allocator and power-of-two alignment helpers."""

from __future__ import annotations

import sys
from collections.abc import Sequence

PAGE_SIZE = 4096


def is_power_of_two(value: int) -> bool:
    """Return whether ``value`` is a power of two."""
    return value != 0 and (value & (value - 1)) == 0


def _check_align(align: int) -> None:
    if not (is_power_of_two(align) and align >= 2):
        raise ValueError(f"alignment must be a power of two >= 2, got {align}")


def align_up(value: int, align: int) -> int:
    """Return the smallest multiple of ``align`` that is >= ``value``."""
    _check_align(align)
    return (value + align - 1) & ~(align - 1)


def align_down(value: int, align: int) -> int:
    """Return the greatest multiple of ``align`` that is <= ``value``."""
    _check_align(align)
    return value & ~(align - 1)


def prev_power_of_two(num: int) -> int:
    """Return the greatest power of two that is <= ``num``."""
    if num <= 0:
        raise ValueError("prev_power_of_two needs a positive number")
    return 1 << (num.bit_length() - 1)


def next_power_of_two(num: int) -> int:
    """Return the smallest power of two that is >= ``num`` (1 for 0)."""
    if num <= 1:
        return 1
    return 1 << (num - 1).bit_length()


def _trailing_zeros(power: int) -> int:
    return power.bit_length() - 1


class FrameAllocator:
    """Hands out ranges of frame numbers in power-of-two blocks."""

    def __init__(self, order: int = 32) -> None:
        if order < 1:
            raise ValueError("order must be at least 1")
        self._free_list: list[set[int]] = [set() for _ in range(order)]
        self._allocated = 0
        self._total = 0

    def add_frame(self, start: int, end: int) -> None:
        """Add the frame numbers ``[start, end)`` to the allocator."""
        if start > end:
            raise ValueError(f"start {start} is greater than end {end}")
        max_block = 1 << (len(self._free_list) - 1)
        total = 0
        current = start
        while current < end:
            lowbit = current & -current if current > 0 else 32
            size = min(lowbit, prev_power_of_two(end - current), max_block)
            total += size
            self._free_list[_trailing_zeros(size)].add(current)
            current += size
        self._total += total

    def insert(self, frames: range) -> None:
        """Add the frames of ``frames`` to the allocator."""
        self.add_frame(frames.start, frames.stop)

    def alloc(self, count: int) -> int | None:
        """Allocate ``count`` frames; return the first frame or None."""
        return self._alloc_power_of_two(next_power_of_two(count))

    def alloc_aligned(self, size: int, align: int) -> int | None:
        """Allocate ``size`` frames aligned to ``align``; return the first frame or None."""
        return self._alloc_power_of_two(self._aligned_size(size, align))

    def dealloc(self, start_frame: int, count: int) -> None:
        """Return ``count`` frames starting at ``start_frame``, as allocated."""
        self._dealloc_power_of_two(start_frame, next_power_of_two(count))

    def dealloc_aligned(self, start_frame: int, size: int, align: int) -> None:
        """Return frames allocated by ``alloc_aligned`` with the same size and alignment."""
        self._dealloc_power_of_two(start_frame, self._aligned_size(size, align))

    def allocated(self) -> int:
        return self._allocated

    def total(self) -> int:
        return self._total

    @staticmethod
    def _aligned_size(size: int, align: int) -> int:
        if not is_power_of_two(align):
            raise ValueError(f"alignment must be a power of two, got {align}")
        return max(next_power_of_two(size), align)

    def _alloc_power_of_two(self, size: int) -> int | None:
        klass = _trailing_zeros(size)
        for i in range(klass, len(self._free_list)):
            if not self._free_list[i]:
                continue
            for j in range(i, klass, -1):
                if not self._free_list[j]:
                    return None
                block = min(self._free_list[j])
                self._free_list[j - 1].add(block + (1 << (j - 1)))
                self._free_list[j - 1].add(block)
                self._free_list[j].remove(block)
            if not self._free_list[klass]:
                return None
            result = min(self._free_list[klass])
            self._free_list[klass].remove(result)
            self._allocated += size
            return result
        return None

    def _dealloc_power_of_two(self, start_frame: int, size: int) -> None:
        if size > self._allocated:
            raise ValueError("deallocating more frames than are allocated")
        current_ptr = start_frame
        current_class = _trailing_zeros(size)
        while current_class < len(self._free_list):
            buddy = current_ptr ^ (1 << current_class)
            if buddy in self._free_list[current_class]:
                self._free_list[current_class].remove(buddy)
                current_ptr = min(current_ptr, buddy)
                current_class += 1
            else:
                self._free_list[current_class].add(current_ptr)
                break
        self._allocated -= size

    def __repr__(self) -> str:
        free = [sorted(blocks) for blocks in self._free_list]
        return (
            f"FrameAllocator(free_list={free}, "
            f"allocated={self._allocated}, total={self._total})"
        )


_REGIONS = ((0x0, 0x9FC00), (0x100000, 0x8000000))


def main(argv: Sequence[str] | None = None) -> int:
    """Fill an allocator from the built-in memory map and print it."""
    if argv is None:
        argv = sys.argv[1:]
    allocator = FrameAllocator(32)
    for region_start, region_end in _REGIONS:
        start = align_up(region_start, PAGE_SIZE) // PAGE_SIZE
        end = align_down(region_end, PAGE_SIZE) // PAGE_SIZE
        if end <= start:
            continue
        allocator.add_frame(start, end)
    print(repr(allocator))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())