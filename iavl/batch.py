"""A batch that flushes itself to the database once it grows past a threshold."""

from __future__ import annotations

import threading
from typing import Any

# Some backends grow by more than key + value per entry; over-account for it.
_ENTRY_OVERHEAD = 100


class BatchWithFlusher:
    """Batch wrapper that writes and renews its batch when it would exceed a size."""

    def __init__(self, db: Any, flush_threshold: int) -> None:
        self._lock = threading.Lock()
        self._db = db
        self.flush_threshold = flush_threshold
        self._batch = db.new_batch_with_size(flush_threshold)

    def _estimate_size_after_setting(self, key: bytes, value: bytes) -> int:
        return self._batch.get_byte_size() + len(key) + len(value) + _ENTRY_OVERHEAD

    def _flush(self, sync: bool) -> None:
        if sync:
            self._batch.write_sync()
        else:
            self._batch.write()
        self._batch.close()
        self._batch = self._db.new_batch_with_size(self.flush_threshold)

    def set(self, key: bytes, value: bytes) -> None:
        """Queue ``key`` = ``value``, flushing first if the batch would grow too large."""
        with self._lock:
            if self._estimate_size_after_setting(key, value) > self.flush_threshold:
                self._flush(sync=False)
            self._batch.set(key, value)

    def delete(self, key: bytes) -> None:
        """Queue deleting ``key``, flushing first if the batch would grow too large."""
        with self._lock:
            if self._estimate_size_after_setting(key, b"") > self.flush_threshold:
                self._flush(sync=False)
            self._batch.delete(key)

    def write(self) -> None:
        """Write the pending batch and start a new one."""
        with self._lock:
            self._flush(sync=False)

    def write_sync(self) -> None:
        """Write the pending batch synchronously and start a new one."""
        with self._lock:
            self._flush(sync=True)

    def close(self) -> None:
        """Close the pending batch."""
        with self._lock:
            self._batch.close()

    def get_byte_size(self) -> int:
        """Byte size of the pending batch."""
        return self._batch.get_byte_size()

    def __enter__(self) -> "BatchWithFlusher":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()