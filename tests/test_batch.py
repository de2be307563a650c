import pytest

from iavl.batch import BatchWithFlusher
from iavl.memdb import BatchClosedError, KeyEmptyError, MemDB

VALUE_10KB = bytes(10000)
THRESHOLD = 100000


def make_key(n: int) -> bytes:
    return n.to_bytes(2, "big")


def test_batch_with_flusher_commits_all():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    for nonce in range(1000):
        batch.set(make_key(nonce), VALUE_10KB)
    batch.write()

    itr = db.iterator(None, None)
    count = 0
    for nonce, (key, value) in enumerate(itr):
        assert key == make_key(nonce)
        assert value == VALUE_10KB
        count += 1
    assert count == 1000


def test_flushes_before_explicit_write():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    for nonce in range(50):
        batch.set(make_key(nonce), VALUE_10KB)
    stored = len(list(db.iterator(None, None)))
    assert 0 < stored < 50
    assert batch.get_byte_size() <= THRESHOLD
    batch.write()
    assert len(list(db.iterator(None, None))) == 50


def test_no_flush_below_threshold():
    db = MemDB()
    batch = BatchWithFlusher(db, THRESHOLD)
    batch.set(b"a", b"1")
    batch.set(b"b", b"2")
    assert db.get(b"a") is None
    assert batch.get_byte_size() == 4
    batch.write_sync()
    assert db.get(b"a") == b"1"
    assert db.get(b"b") == b"2"
    assert batch.get_byte_size() == 0


def test_delete_is_batched():
    db = MemDB()
    db.set(b"a", b"1")
    batch = BatchWithFlusher(db, THRESHOLD)
    batch.delete(b"a")
    assert db.get(b"a") == b"1"
    batch.write()
    assert db.get(b"a") is None


def test_closed_batch_rejects_use():
    batch = BatchWithFlusher(MemDB(), THRESHOLD)
    batch.close()
    with pytest.raises(BatchClosedError):
        batch.get_byte_size()
    with pytest.raises(BatchClosedError):
        batch.set(b"a", b"1")


def test_empty_key_rejected():
    batch = BatchWithFlusher(MemDB(), THRESHOLD)
    with pytest.raises(KeyEmptyError):
        batch.set(b"", b"1")