"""A logical key-value store living under a key prefix of another store."""

from __future__ import annotations

import threading
from typing import Any, Iterator, Optional

from iavl.hexbytes import cp_incr
from iavl.memdb import DBError, KeyEmptyError, ValueNilError


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


class PrefixDB:
    """Namespace of another store: every key is stored with ``prefix`` in front."""

    def __init__(self, db: Any, prefix: bytes) -> None:
        self._lock = threading.Lock()
        self.prefix = bytes(prefix)
        self._db = db

    def _prefixed(self, key: bytes) -> bytes:
        return self.prefix + key

    def get(self, key: bytes) -> Optional[bytes]:
        """Return the value stored under ``key``, or None."""
        return self._db.get(self._prefixed(_check_key(key)))

    def has(self, key: bytes) -> bool:
        """Whether ``key`` is present."""
        return self._db.has(self._prefixed(_check_key(key)))

    def set(self, key: bytes, value: bytes) -> None:
        """Store ``value`` under ``key``."""
        self._db.set(self._prefixed(_check_key(key)), value)

    def delete(self, key: bytes) -> None:
        """Remove ``key`` if present."""
        self._db.delete(self._prefixed(_check_key(key)))

    def _bounds(
        self, start: Optional[bytes], end: Optional[bytes]
    ) -> tuple[bytes, Optional[bytes]]:
        pstart = self.prefix + (start or b"")
        pend = cp_incr(self.prefix) if end is None else self.prefix + end
        return pstart, pend

    def iterator(
        self, start: Optional[bytes], end: Optional[bytes]
    ) -> "PrefixDBIterator":
        """Ascending iterator over keys in [start, end) of this namespace."""
        start = _check_bound(start)
        end = _check_bound(end)
        pstart, pend = self._bounds(start, end)
        source = self._db.iterator(pstart, pend)
        return PrefixDBIterator(self.prefix, start, end, source)

    def reverse_iterator(
        self, start: Optional[bytes], end: Optional[bytes]
    ) -> "PrefixDBIterator":
        """Descending iterator over keys in [start, end) of this namespace."""
        start = _check_bound(start)
        end = _check_bound(end)
        pstart, pend = self._bounds(start, end)
        source = self._db.reverse_iterator(pstart, pend)
        return PrefixDBIterator(self.prefix, start, end, source)

    def new_batch(self) -> "PrefixDBBatch":
        """Create a batch whose keys are written under the prefix."""
        return PrefixDBBatch(self.prefix, self._db.new_batch())

    def new_batch_with_size(self, size: int) -> "PrefixDBBatch":
        """Create a batch pre-sized to ``size`` where the backend supports it."""
        return PrefixDBBatch(self.prefix, self._db.new_batch_with_size(size))

    def close(self) -> None:
        """Close the underlying store."""
        with self._lock:
            self._db.close()

    def print(self) -> None:
        """Print the prefix and every entry of the namespace as upper-case hex."""
        print(f"prefix: {self.prefix.hex().upper()}")
        itr = self.iterator(None, None)
        try:
            for key, value in itr:
                print(f"[{key.hex().upper()}]:\t[{value.hex().upper()}]")
        finally:
            itr.close()


def iterate_prefix(db: Any, prefix: bytes) -> Any:
    """Iterator over the keys of ``db`` that start with ``prefix``."""
    if len(prefix) == 0:
        return db.iterator(None, None)
    return db.iterator(bytes(prefix), cp_incr(prefix))


class PrefixDBIterator:
    """Iterator over a source iterator that strips the namespace prefix."""

    def __init__(
        self,
        prefix: bytes,
        start: Optional[bytes],
        end: Optional[bytes],
        source: Any,
    ) -> None:
        self._prefix = prefix
        self._start = start
        self._end = end
        self._source = source
        self._err: Optional[Exception] = None
        # Empty keys are not allowed, so an entry equal to the prefix is skipped.
        if source.valid() and source.key() == prefix:
            source.next()
        self._valid = source.valid() and source.key().startswith(prefix)

    def domain(self) -> tuple[Optional[bytes], Optional[bytes]]:
        """The (start, end) bounds the iterator was created with."""
        return self._start, self._end

    def valid(self) -> bool:
        """Whether the iterator points at an entry of the namespace."""
        if not self._valid or self._err is not None or not self._source.valid():
            return False
        key = self._source.key()
        if not key.startswith(self._prefix):
            self._err = DBError(
                f"received invalid key from backend: {key.hex()} "
                f"(expected prefix {self._prefix.hex()})"
            )
            return False
        return True

    def _assert_valid(self) -> None:
        if not self.valid():
            raise DBError("iterator is invalid")

    def next(self) -> None:
        """Advance to the next entry."""
        self._assert_valid()
        while True:
            self._source.next()
            if not self._source.valid() or not self._source.key().startswith(
                self._prefix
            ):
                self._valid = False
                return
            if self._source.key() != self._prefix:
                return

    def key(self) -> bytes:
        """Key of the current entry, without the prefix."""
        self._assert_valid()
        return self._source.key()[len(self._prefix):]

    def value(self) -> bytes:
        """Value of the current entry."""
        self._assert_valid()
        return self._source.value()

    def error(self) -> Optional[Exception]:
        """The source's error, or one found while checking keys, or None."""
        err = self._source.error()
        if err is not None:
            return err
        return self._err

    def close(self) -> None:
        """Close the source iterator."""
        self._source.close()

    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        while self.valid():
            item = (self.key(), self.value())
            self.next()
            yield item

    def __enter__(self) -> "PrefixDBIterator":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class PrefixDBBatch:
    """Batch that writes its keys under a prefix into a source batch."""

    def __init__(self, prefix: bytes, source: Any) -> None:
        self._prefix = bytes(prefix)
        self._source = source

    def set(self, key: bytes, value: bytes) -> None:
        """Queue storing ``value`` under ``key``."""
        key = _check_key(key)
        if value is None:
            raise ValueNilError()
        self._source.set(self._prefix + key, value)

    def delete(self, key: bytes) -> None:
        """Queue removing ``key``."""
        self._source.delete(self._prefix + _check_key(key))

    def write(self) -> None:
        """Write the source batch."""
        self._source.write()

    def write_sync(self) -> None:
        """Write the source batch synchronously."""
        self._source.write_sync()

    def close(self) -> None:
        """Close the source batch."""
        self._source.close()

    def get_byte_size(self) -> int:
        """Byte size of the source batch."""
        if self._source is None:
            raise DBError("source batch is nil")
        return self._source.get_byte_size()

    def __enter__(self) -> "PrefixDBBatch":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()