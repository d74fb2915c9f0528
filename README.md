# tinkerbox

A collection of small, self-contained building blocks for people who like
to look at how systems pieces work: several list containers, a
buddy-system frame allocator, an Sv39 page-table model over simulated
memory, a Redis serialization protocol (RESP) codec with an asyncio
connection, an in-memory key/value database with expiring keys and
publish/subscribe channels, and a pair of programs that measure network
message lag.

The package has no runtime dependencies beyond the standard library and
supports Python 3.10 and later.

## Installation

```
pip install tinkerbox
```

To run the test suite:

```
pip install "tinkerbox[test]"
pytest
```

## What is inside

| Module | Provides |
| --- | --- |
| `tinkerbox.stack` | `Stack`, a last-in, first-out stack |
| `tinkerbox.persistent` | `PersistentList`, an immutable list whose `prepend` and `tail` return new lists sharing nodes |
| `tinkerbox.deque` | `Deque`, a double-ended queue, and `DequeDrain` |
| `tinkerbox.queue_list` | `Queue`, a first-in, first-out queue |
| `tinkerbox.linkedlist` | `LinkedList`, a doubly linked list with ordering, hashing and the double-ended iterators `ListIter` and `ListDrain` |
| `tinkerbox.keys` | `Key`, a mutable byte-string key ordered byte by byte |
| `tinkerbox.buddy` | `FrameAllocator` and the helpers `is_power_of_two`, `align_up`, `align_down`, `prev_power_of_two`, `next_power_of_two` |
| `tinkerbox.paging` | `PhysAddr`, `VirtAddr`, `PhysPageNum`, `VirtPageNum`, `SimpleRange`, `PTEFlags`, `PageTableEntry`, `PhysicalMemory`, `PageTable`, `translated_byte_buffer`, `translated_str` |
| `tinkerbox.frame` | RESP frames (`Simple`, `ErrorReply`, `Integer`, `Bulk`, `Null`, `Array`), `check`, `parse`, `encode`, and the errors `ProtocolError` and `Incomplete` |
| `tinkerbox.connection` | `Connection`, reading and writing frames over asyncio streams |
| `tinkerbox.db` | `Db`, a key/value store with expiring keys and pub/sub channels, with `Subscription` and `Lagged` |
| `tinkerbox.lag` | `Micro`, `Finish`, `encode_message`, `decode_message`, `now_millis` and `Calculator` |
| `tinkerbox.lag_server` | `LagServer` |
| `tinkerbox.lag_client` | `send_msg`, `gen_msg` |

## Examples

### Lists

```python
from tinkerbox.stack import Stack
from tinkerbox.linkedlist import LinkedList

stack = Stack()
stack.push(1)
stack.push(2)
assert stack.pop() == 2

items = LinkedList([0, 1, 2, 3])
items.push_front(-1)
assert list(items) == [-1, 0, 1, 2, 3]
assert list(reversed(items)) == [3, 2, 1, 0, -1]
assert repr(items) == "[-1, 0, 1, 2, 3]"
```

`LinkedList` compares lexicographically; when two elements cannot be
ordered (such as NaN), every ordering comparison is false.

### Frame allocation

```python
from tinkerbox.buddy import FrameAllocator

allocator = FrameAllocator(32)
allocator.add_frame(0, 1024)
start = allocator.alloc(4)
allocator.dealloc(start, 4)
assert allocator.allocated() == 0
```

### RESP frames

```python
from tinkerbox.frame import Bulk, Incomplete, Simple, check, encode, parse

assert encode(Simple("OK")) == b"+OK\r\n"
assert parse(b"$5\r\nhello\r\n") == Bulk(b"hello")
assert check(b"$5\r\nhello\r\nextra") == 11

try:
    check(b"$5\r\nhel")
except Incomplete:
    pass  # more bytes are needed
```

`Connection` wraps an `asyncio.StreamReader` and `StreamWriter`:
`read_frame()` returns the next frame, or `None` when the peer closed the
stream cleanly, and `write_frame(frame)` encodes and flushes a frame.

### In-memory database

```python
import asyncio
from tinkerbox.db import Db

async def demo():
    async with Db() as db:
        db.set("greeting", b"hello", expire=0.5)
        assert db.get("greeting") == b"hello"

        sub = db.subscribe("news")
        assert db.publish("news", b"update") == 1
        assert await sub.recv() == b"update"

asyncio.run(demo())
```

Entering the `async with` block starts the background task that removes
expired keys; leaving it stops that task. Each channel holds up to 1024
messages; a subscriber that falls further behind gets a `Lagged` error
from `recv()` and then continues from the oldest message still held.

### Paging

```python
from tinkerbox.paging import PhysAddr, VirtAddr, VirtPageNum

assert VirtAddr(0x80201BC6).floor() == VirtPageNum(0x80201)
assert VirtAddr(0x80201BC6).page_offset() == 0xBC6
assert repr(PhysAddr(0x1000)) == "PA:0x1000"
```

`PageTable` walks a three-level table stored in a `PhysicalMemory`,
a sparse, zero-filled byte-addressed memory.

## Command-line tools

### `tinkerbox-buddy`

Feeds a sample physical memory map into a buddy allocator and prints the
resulting free lists.

```
tinkerbox-buddy
```

### `lag-server` and `lag-client`

Measure one-way message lag. The client sends a series of messages, each
on its own connection and carrying a millisecond timestamp, then a finish
message. The server records the lag of each and, on the finish message,
prints the message count and the average lag, then exits.

```
lag-server
lag-client
```

Both take an optional `host:port` argument (default `127.0.0.1:33443`).
`lag-client --count N` sets how many timestamps are sent (default 100).

## What this package does not do

- There is no Redis-style server: the package provides the frame codec,
  `Connection` and `Db`, but nothing that accepts client connections and
  runs commands against a database.
- There is no echo server and no persistent, on-disk key-value store or
  command-line tool for one; `Db` keeps everything in memory.