# iavl

Building blocks for a versioned AVL+ key-value store, in plain Python: the
storage encodings, a node cache, an export-stream compressor and a few
key-value stores to put data in.

## Modules

- `iavl.encoding`: unsigned and zig-zag signed varints and length-prefixed byte
  strings. `encode_uvarint`, `encode_varint`, `encode_bytes` and
  `encode_32bytes_hash` write to any binary file-like object;
  `encode_bytes_slice` returns the prefixed bytes; `decode_uvarint`,
  `decode_varint` and `decode_bytes` return `(value, bytes_read)`;
  `encode_uvarint_size`, `encode_varint_size` and `encode_bytes_size` give
  encoded lengths. Malformed input raises `DecodeError` (a `ValueError`), whose
  `consumed` attribute holds how many bytes were read.
- `iavl.hexbytes`: `HexBytes`, a `bytes` subclass whose `str()` is upper-case
  hex and which converts to and from a JSON string with `to_json` /
  `HexBytes.from_json`; and `cp_incr`, which adds one to a byte string as a
  big-endian number (returning `None` on overflow), handy as the exclusive end
  of a prefix range.
- `iavl.cache`: `LRUCache(max_element_count)`, a cache of any objects with a
  `key` attribute. `add` returns the node it replaced or evicted (or `None`),
  `get` marks a node as recently used, `has` does not, `remove` returns the
  removed node; `len()` gives the number of cached nodes.
- `iavl.fastnode`: `FastNode(key, value, version_last_updated_at)` with
  `encoded_size`, `write_bytes` and `to_bytes`, and `deserialize_node(key, buf)`.
- `iavl.compress`: `ExportNode(key, value, version, height)`, one node of a tree
  in depth-first post-order; `CompressExporter`, an iterator wrapping any
  iterable of export nodes that drops branch keys, delta-encodes leaf keys and
  stores branch versions relative to their children; `CompressImporter`, which
  undoes this and passes each node to a wrapped object's `add` method; and the
  helpers `delta_encode`, `delta_decode` and `diff_offset`.
- `iavl.memdb`: `MemDB`, a thread-safe sorted in-memory store with `get`,
  `has`, `set`, `delete`, `stats`, `print`, `iterator` / `reverse_iterator`
  over `[start, end)` (`None` leaves a side open) and `new_batch` for atomic
  writes. Errors are `DBError` and its subclasses `KeyEmptyError`,
  `ValueNilError` and `BatchClosedError`.
- `iavl.prefixdb`: `PrefixDB(db, prefix)`, a namespace inside another store
  with the same interface, prefixed batches, and `iterate_prefix(db, prefix)`.
- `iavl.batch`: `BatchWithFlusher(db, flush_threshold)`, a batch that writes
  itself out and starts a fresh one whenever the next entry would take it past
  the threshold.
- `iavl.color`: `green`, `blue`, `cyan` and `colored_bytes`, which colours
  printable and non-printable bytes differently when the environment variable
  `TENDERMINT_IAVL_COLORS_ON` is non-empty and returns plain text otherwise.
- `iavl.rand`: `Rand`, a lock-guarded, seedable pseudo-random source (not for
  cryptography), and the shared-generator helpers `seed`, `rand_str`,
  `rand_int`, `rand_int31`, `rand_bytes` and `rand_perm`.

Iterators from `MemDB` and `PrefixDB` can be driven by hand
(`valid` / `key` / `value` / `next` / `close`) or used as Python iterators of
`(key, value)` pairs; iterators and batches are also context managers that
close on exit.

## Install

```
pip install .
```

## Example

```python
from iavl.memdb import MemDB
from iavl.prefixdb import PrefixDB
from iavl.batch import BatchWithFlusher

db = MemDB()
store = PrefixDB(db, b"s/k:bank/")
store.set(b"alice", b"100")
print(store.get(b"alice"))          # b'100'

batch = BatchWithFlusher(db, 100_000)
for n in range(1000):
    batch.set(n.to_bytes(2, "big"), b"\x00" * 100)
batch.write()

with db.iterator(None, None) as itr:
    for key, value in itr:
        ...
```

Encoding round trip:

```python
import io
from iavl.encoding import encode_varint, decode_varint

buf = io.BytesIO()
encode_varint(buf, -100)
value, read = decode_varint(buf.getvalue())   # (-100, 2)
```

## What this package does not do

It has no versioned tree itself: there is no mutable or immutable AVL+ tree,
no saving or loading of versions, no proofs, and no exporter or importer that
walks a tree (the compressor works on any stream of `ExportNode`s you give
it). The only store is in memory; there is no on-disk backend. There is no
command-line tool.

## Tests

```
pip install .[test]
pytest
```