import pytest

from tinkerbox.keys import Key


def test_default_key_is_empty():
    key = Key()
    assert key.is_empty()
    assert len(key) == 0
    assert key.raw_ref() == b""


def test_raw_ref_round_trip():
    key = Key(b"hello")
    assert key.raw_ref() == b"hello"
    assert len(key) == 5
    assert not key.is_empty()


def test_append_and_clear():
    key = Key(b"ab")
    key.append(b"cd")
    assert key.raw_ref() == b"ab" + b"cd"
    key.clear()
    assert key.is_empty()
    assert key.raw_ref() == b""


def test_set_from_replaces_content():
    key = Key(b"old-content")
    other = Key(b"new")
    key.set_from(other)
    assert key == other
    assert key.raw_ref() == b"new"


def test_copy_is_independent():
    key = Key(b"abc")
    dup = key.copy()
    key.append(b"x")
    assert dup.raw_ref() == b"abc"
    assert key != dup


def test_ordering_is_bytewise():
    a = Key(b"a")
    ab = Key(b"ab")
    b = Key(b"b")
    assert a < ab < b
    assert b > a
    assert a <= Key(b"a")
    assert sorted([b, ab, a]) == [a, ab, b]


def test_equality_ignores_construction_type():
    assert Key(bytearray(b"xy")) == Key(b"xy")
    assert Key(memoryview(b"xy")) == Key(b"xy")


def test_str_rejected():
    with pytest.raises(TypeError):
        Key("text")
    with pytest.raises(TypeError):
        Key(b"a").append("text")


def test_repr_shows_bytes():
    assert repr(Key(b"ab")) == "Key(b'ab')"


def test_key_is_unhashable():
    with pytest.raises(TypeError):
        hash(Key(b"a"))