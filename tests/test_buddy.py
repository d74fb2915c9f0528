import pytest

from tinkerbox.buddy import (
    FrameAllocator,
    align_down,
    align_up,
    is_power_of_two,
    main,
    next_power_of_two,
    prev_power_of_two,
)


@pytest.mark.parametrize(
    "align, expected", [(2, 12), (4, 12), (8, 16), (16, 16)]
)
def test_align_up_examples(align, expected):
    assert align_up(12, align) == expected


@pytest.mark.parametrize(
    "align, expected", [(2, 12), (4, 12), (8, 8), (16, 0)]
)
def test_align_down_examples(align, expected):
    assert align_down(12, align) == expected


@pytest.mark.parametrize("align", [0, 1, 3, 6])
def test_align_rejects_bad_alignment(align):
    with pytest.raises(ValueError):
        align_up(12, align)
    with pytest.raises(ValueError):
        align_down(12, align)


def test_is_power_of_two():
    assert is_power_of_two(1)
    assert is_power_of_two(4096)
    assert not is_power_of_two(0)
    assert not is_power_of_two(6)


@pytest.mark.parametrize("num", [1, 2, 3, 5, 100, 4095, 4096, 4097])
def test_power_of_two_bounds(num):
    prev = prev_power_of_two(num)
    nxt = next_power_of_two(num)
    assert is_power_of_two(prev) and is_power_of_two(nxt)
    assert prev <= num <= nxt
    assert prev * 2 > num
    assert nxt < num * 2 or nxt == 1


def test_next_power_of_two_of_zero():
    assert next_power_of_two(0) == 1


def test_prev_power_of_two_rejects_zero():
    with pytest.raises(ValueError):
        prev_power_of_two(0)


def test_add_frame_counts_total():
    allocator = FrameAllocator()
    allocator.add_frame(0, 1024)
    assert allocator.total() == 1024
    assert allocator.allocated() == 0


def test_insert_range():
    allocator = FrameAllocator()
    allocator.insert(range(10, 20))
    assert allocator.total() == 10


def test_add_frame_rejects_reversed_range():
    allocator = FrameAllocator()
    with pytest.raises(ValueError):
        allocator.add_frame(20, 10)


def test_alloc_from_empty_returns_none():
    assert FrameAllocator().alloc(1) is None


def test_alloc_every_frame_then_exhausted():
    allocator = FrameAllocator()
    allocator.add_frame(0, 128)
    frames = [allocator.alloc(1) for _ in range(128)]
    assert sorted(frames) == list(range(128))
    assert allocator.allocated() == 128
    assert allocator.alloc(1) is None


def test_dealloc_merges_buddies():
    allocator = FrameAllocator()
    allocator.add_frame(0, 32)
    frame = allocator.alloc(1)
    assert allocator.alloc(32) is None
    allocator.dealloc(frame, 1)
    assert allocator.allocated() == 0
    assert allocator.alloc(32) == 0


def test_alloc_is_aligned_to_size():
    allocator = FrameAllocator()
    allocator.add_frame(3, 300)
    for count in (1, 2, 4, 8, 16):
        frame = allocator.alloc(count)
        assert frame % count == 0
        assert 3 <= frame and frame + count <= 300


def test_alloc_aligned_and_dealloc_aligned():
    allocator = FrameAllocator()
    allocator.add_frame(1, 256)
    frame = allocator.alloc_aligned(3, 8)
    assert frame % 8 == 0
    assert allocator.allocated() >= 8
    allocator.dealloc_aligned(frame, 3, 8)
    assert allocator.allocated() == 0


def test_alloc_aligned_rejects_bad_alignment():
    allocator = FrameAllocator()
    allocator.add_frame(0, 64)
    with pytest.raises(ValueError):
        allocator.alloc_aligned(4, 3)


def test_dealloc_more_than_allocated_raises():
    allocator = FrameAllocator()
    allocator.add_frame(0, 64)
    with pytest.raises(ValueError):
        allocator.dealloc(0, 4)


def test_small_order_caps_block_size():
    allocator = FrameAllocator(order=4)
    allocator.add_frame(0, 64)
    assert allocator.total() == 64
    assert allocator.alloc(16) is None
    assert allocator.alloc(8) is not None
    assert allocator.allocated() == 8


def test_main_prints_allocator(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert out.startswith("FrameAllocator(")
    assert "allocated=0" in out