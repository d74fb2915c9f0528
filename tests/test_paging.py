import itertools

import pytest

from tinkerbox.paging import (
    PAGE_SIZE,
    PageTable,
    PageTableEntry,
    PhysAddr,
    PhysicalMemory,
    PhysPageNum,
    PTEFlags,
    SimpleRange,
    VirtAddr,
    VirtPageNum,
    translated_byte_buffer,
    translated_str,
)


def _map(memory, root, mapping):
    """Build page-table levels under ``root`` for each (vpn, leaf ppn) pair."""
    fresh = itertools.count(0x100)
    for vpn, leaf in mapping:
        table = root
        for level, idx in enumerate(vpn.indexes()):
            slot = table.addr().value + idx * 8
            if level == 2:
                entry = PageTableEntry.new(leaf, PTEFlags.V | PTEFlags.R | PTEFlags.W)
                memory.write_u64(slot, entry.bits)
                continue
            entry = PageTableEntry(memory.read_u64(slot))
            if not entry.is_valid():
                entry = PageTableEntry.new(PhysPageNum(next(fresh)), PTEFlags.V)
                memory.write_u64(slot, entry.bits)
            table = entry.ppn()


def test_addresses_are_masked():
    assert VirtAddr(5 + (1 << 39)) == VirtAddr(5)
    assert PhysAddr(7 + (1 << 56)) == PhysAddr(7)
    assert PhysPageNum(9 + (1 << 44)) == PhysPageNum(9)
    assert VirtPageNum(3 + (1 << 27)) == VirtPageNum(3)


def test_repr_format():
    assert repr(VirtAddr(0x1000)) == "VA:0x1000"
    assert repr(PhysPageNum(0x80000)).startswith("PPN:0x")


def test_floor_ceil_and_offset():
    va = VirtAddr(3 * PAGE_SIZE + 1)
    assert va.floor() == VirtPageNum(3)
    assert va.ceil() == VirtPageNum(4)
    assert va.page_offset() == 1
    assert not va.aligned()
    pa = PhysAddr(5 * PAGE_SIZE)
    assert pa.floor() == pa.ceil() == PhysPageNum(5)
    assert pa.aligned()


def test_page_number_round_trip():
    vpn = VirtPageNum(1234)
    assert vpn.addr().page_number() == vpn
    ppn = PhysPageNum(0x80000)
    assert ppn.addr().page_number() == ppn


def test_page_number_rejects_unaligned():
    with pytest.raises(ValueError):
        VirtAddr(PAGE_SIZE + 4).page_number()
    with pytest.raises(ValueError):
        PhysAddr(PAGE_SIZE + 4).page_number()


def test_virt_addr_int_sign_extends():
    high = VirtAddr(1 << 38)
    assert int(high) >= 1 << 63
    assert int(high) & ((1 << 39) - 1) == high.value
    assert int(VirtAddr(0x1234)) == 0x1234


def test_indexes():
    vpn = VirtPageNum((2 << 18) | (7 << 9) | 300)
    assert vpn.indexes() == (2, 7, 300)


def test_simple_range_iterates():
    rng = SimpleRange(VirtPageNum(2), VirtPageNum(5))
    assert list(rng) == [VirtPageNum(2), VirtPageNum(3), VirtPageNum(4)]
    assert list(SimpleRange(PhysPageNum(4), PhysPageNum(4))) == []


def test_simple_range_rejects_reversed():
    with pytest.raises(ValueError):
        SimpleRange(VirtPageNum(5), VirtPageNum(2))


def test_page_table_entry_round_trip():
    flags = PTEFlags.V | PTEFlags.R | PTEFlags.X
    entry = PageTableEntry.new(PhysPageNum(0x80123), flags)
    assert entry.ppn() == PhysPageNum(0x80123)
    assert entry.flags() == flags
    assert entry.is_valid() and entry.readable() and entry.executable()
    assert not entry.writable()


def test_empty_entry_is_invalid():
    entry = PageTableEntry.empty()
    assert not entry.is_valid()
    assert entry.flags() == PTEFlags(0)


def test_memory_reads_zero_and_round_trips():
    memory = PhysicalMemory()
    assert memory.read_bytes(0x5000, 16) == bytes(16)
    data = bytes(range(200))
    memory.write_bytes(PAGE_SIZE - 50, data)
    assert memory.read_bytes(PAGE_SIZE - 50, 200) == data
    memory.write_u64(0x40, 0x0102030405060708)
    assert memory.read_u64(0x40) == 0x0102030405060708
    assert memory.read_bytes(0x40, 1) == b"\x08"


def test_translate_va_follows_mapping():
    memory = PhysicalMemory()
    root = PhysPageNum(0x10)
    vpn = VirtPageNum((1 << 18) | (2 << 9) | 3)
    _map(memory, root, [(vpn, PhysPageNum(0x80000))])
    table = PageTable(memory, root)
    assert table.translate(vpn).ppn() == PhysPageNum(0x80000)
    assert table.translate(vpn).is_valid()
    va = VirtAddr(vpn.addr().value + 0x123)
    assert table.translate_va(va) == PhysAddr(PhysPageNum(0x80000).addr().value + 0x123)


def test_token_carries_mode_and_root():
    table = PageTable(PhysicalMemory(), PhysPageNum(7))
    assert table.token() >> 60 == 8
    assert table.token() & ((1 << 60) - 1) == 7


def test_from_token_keeps_low_bits_and_ignores_middle_bits():
    memory = PhysicalMemory()
    token = 0x80ABC
    first = PageTable.from_token(memory, token)
    second = PageTable.from_token(memory, token | 0xFFFFF000)
    assert first.root_ppn == second.root_ppn
    assert first.root_ppn.value & 0xFFF == token & 0xFFF


def test_translated_byte_buffer_spans_pages():
    memory = PhysicalMemory()
    token = 0x21
    root = PageTable.from_token(memory, token).root_ppn
    vpn = VirtPageNum(0x40)
    _map(memory, root, [(vpn, PhysPageNum(0x900)), (vpn.step(), PhysPageNum(0x500))])
    start = vpn.addr().value + PAGE_SIZE - 10
    message = b"hello buddy system and pages"
    memory.write_bytes(PhysPageNum(0x900).addr().value + PAGE_SIZE - 10, message[:10])
    memory.write_bytes(PhysPageNum(0x500).addr().value, message[10:])
    pieces = translated_byte_buffer(memory, token, start, len(message))
    assert len(pieces) == 2
    assert b"".join(bytes(p) for p in pieces) == message
    pieces[1][0:1] = b"X"
    assert memory.read_bytes(PhysPageNum(0x500).addr().value, 1) == b"X"


def test_translated_str_reads_until_nul():
    memory = PhysicalMemory()
    token = 0x3
    root = PageTable.from_token(memory, token).root_ppn
    vpn = VirtPageNum(0x77)
    _map(memory, root, [(vpn, PhysPageNum(0x600))])
    memory.write_bytes(PhysPageNum(0x600).addr().value + 8, b"kernel\x00tail")
    assert translated_str(memory, token, vpn.addr().value + 8) == "kernel"