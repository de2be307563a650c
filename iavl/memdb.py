"""An in-memory, ordered key-value store with batches and range iterators."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from typing import Iterator, Optional

from sortedcontainers import SortedDict


class DBError(Exception):
    """Base class for key-value store errors."""


class KeyEmptyError(DBError):
    """Raised when an empty or missing key is used."""

    def __init__(self) -> None:
        super().__init__("key cannot be empty")


class ValueNilError(DBError):
    """Raised when a missing value is set."""

    def __init__(self) -> None:
        super().__init__("value cannot be nil")


class BatchClosedError(DBError):
    """Raised when a batch that was written or closed is used again."""

    def __init__(self) -> None:
        super().__init__("batch has been written or closed")


def _check_key(key: Optional[bytes]) -> bytes:
    if not key:
        raise KeyEmptyError()
    return bytes(key)


def _check_bound(bound: Optional[bytes]) -> Optional[bytes]:
    if bound is None:
        return None
    if len(bound) == 0:
        raise KeyEmptyError()
    return bytes(bound)


class MemDB:
    """Thread-safe in-memory database keeping keys in byte order."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._data: SortedDict = SortedDict()

    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value stored under ``key``, or None."""
        key = _check_key(key)
        with self._lock:
            return self._data.get(key)

    def has(self, key: bytes) -> bool:
        """Whether ``key`` is present."""
        key = _check_key(key)
        with self._lock:
            return key in self._data

    def set(self, key: bytes, value: bytes) -> None:
        """Store ``value`` under ``key``."""
        key = _check_key(key)
        if value is None:
            raise ValueNilError()
        with self._lock:
            self._data[key] = bytes(value)

    def set_sync(self, key: bytes, value: bytes) -> None:
        """Same as ``set``; there is nothing to flush in memory."""
        self.set(key, value)

    def delete(self, key: bytes) -> None:
        """Remove ``key`` if present."""
        key = _check_key(key)
        with self._lock:
            self._data.pop(key, None)

    def delete_sync(self, key: bytes) -> None:
        """Same as ``delete``."""
        self.delete(key)

    def close(self) -> None:
        """No-op: closing an in-memory database keeps its contents."""

    def print(self) -> None:
        """Print every entry as upper-case hex."""
        with self._lock:
            for key, value in self._data.items():
                print(f"[{key.hex().upper()}]:\t[{value.hex().upper()}]")

    def stats(self) -> dict[str, str]:
        """Return the database type and its number of entries."""
        with self._lock:
            return {"database.type": "memDB", "database.size": str(len(self._data))}

    def new_batch(self) -> "MemDBBatch":
        """Create a batch of writes applied atomically on ``write``."""
        return MemDBBatch(self)

    def new_batch_with_size(self, size: int) -> "MemDBBatch":
        """Same as ``new_batch``; in-memory batches are not pre-allocated."""
        return MemDBBatch(self)

    def iterator(
        self, start: Optional[bytes], end: Optional[bytes]
    ) -> "MemDBIterator":
        """Ascending iterator over keys in [start, end); None leaves a side open."""
        return self._make_iterator(start, end, reverse=False)

    def reverse_iterator(
        self, start: Optional[bytes], end: Optional[bytes]
    ) -> "MemDBIterator":
        """Descending iterator over keys in [start, end); None leaves a side open."""
        return self._make_iterator(start, end, reverse=True)

    def _make_iterator(
        self, start: Optional[bytes], end: Optional[bytes], reverse: bool
    ) -> "MemDBIterator":
        start = _check_bound(start)
        end = _check_bound(end)
        with self._lock:
            keys = self._data.irange(
                minimum=start,
                maximum=end,
                inclusive=(True, False),
                reverse=reverse,
            )
            items = [(k, self._data[k]) for k in keys]
        return MemDBIterator(items, start, end)

    def _apply(self, ops: list["_Operation"]) -> None:
        with self._lock:
            for op in ops:
                if op.kind is _OpType.SET:
                    self._data[op.key] = op.value
                elif op.kind is _OpType.DELETE:
                    self._data.pop(op.key, None)
                else:
                    raise DBError(f"unknown operation type {op.kind!r} ({op!r})")


class MemDBIterator:
    """Cursor over a range of a MemDB, positioned on its first entry."""

    def __init__(
        self,
        items: list[tuple[bytes, bytes]],
        start: Optional[bytes],
        end: Optional[bytes],
    ) -> None:
        self._items = items
        self._pos = 0
        self._start = start
        self._end = end

    def domain(self) -> tuple[Optional[bytes], Optional[bytes]]:
        """The (start, end) bounds the iterator was created with."""
        return self._start, self._end

    def valid(self) -> bool:
        """Whether the iterator points at an entry."""
        return self._pos < len(self._items)

    def _assert_valid(self) -> None:
        if not self.valid():
            raise DBError("iterator is invalid")

    def next(self) -> None:
        """Advance to the next entry."""
        self._assert_valid()
        self._pos += 1

    def key(self) -> bytes:
        """Key of the current entry."""
        self._assert_valid()
        return self._items[self._pos][0]

    def value(self) -> bytes:
        """Value of the current entry."""
        self._assert_valid()
        return self._items[self._pos][1]

    def error(self) -> Optional[Exception]:
        """Always None: in-memory iteration cannot fail."""
        return None

    def close(self) -> None:
        """Release the iterator; it is invalid afterwards."""
        self._items = []
        self._pos = 0

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        while self.valid():
            item = self._items[self._pos]
            self._pos += 1
            yield item

    def __enter__(self) -> "MemDBIterator":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class _OpType(enum.Enum):
    SET = 1
    DELETE = 2


@dataclass(frozen=True)
class _Operation:
    kind: _OpType
    key: bytes
    value: Optional[bytes] = None


class MemDBBatch:
    """Buffered writes to a MemDB, applied together by ``write``."""

    def __init__(self, db: MemDB) -> None:
        self._db = db
        self._ops: Optional[list[_Operation]] = []
        self._size = 0

    def set(self, key: bytes, value: bytes) -> None:
        """Queue storing ``value`` under ``key``."""
        key = _check_key(key)
        if value is None:
            raise ValueNilError()
        if self._ops is None:
            raise BatchClosedError()
        value = bytes(value)
        self._size += len(key) + len(value)
        self._ops.append(_Operation(_OpType.SET, key, value))

    def delete(self, key: bytes) -> None:
        """Queue removing ``key``."""
        key = _check_key(key)
        if self._ops is None:
            raise BatchClosedError()
        self._size += len(key)
        self._ops.append(_Operation(_OpType.DELETE, key))

    def write(self) -> None:
        """Apply the queued operations and close the batch."""
        if self._ops is None:
            raise BatchClosedError()
        self._db._apply(self._ops)
        self.close()

    def write_sync(self) -> None:
        """Same as ``write``."""
        self.write()

    def close(self) -> None:
        """Discard the batch; further use raises BatchClosedError."""
        self._ops = None
        self._size = 0

    def get_byte_size(self) -> int:
        """Total length of the keys and values queued so far."""
        if self._ops is None:
            raise BatchClosedError()
        return self._size

    def __enter__(self) -> "MemDBBatch":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()