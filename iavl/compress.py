"""Exported tree nodes and a compact encoding for streams of them.

Compression drops branch keys (they are rebuilt from the leaves on import),
delta-encodes each leaf key against the previous leaf key, and stores each
branch version as the difference to the largest version of its children.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, replace
from typing import Iterable, Iterator, Optional, Protocol

from iavl.encoding import DecodeError, decode_uvarint, encode_uvarint


@dataclass
class ExportNode:
    """One node of an exported tree, in depth-first post-order."""

    key: Optional[bytes]
    value: Optional[bytes]
    version: int
    height: int


class _NodeImporter(Protocol):
    def add(self, node: ExportNode) -> None: ...


class CompressExporter:
    """Iterator that compresses the nodes yielded by another exporter."""

    def __init__(self, exporter: Iterable[ExportNode]) -> None:
        self._inner: Iterator[ExportNode] = iter(exporter)
        self._last_key: bytes = b""
        self._version_stack: list[int] = []

    def __iter__(self) -> "CompressExporter":
        return self

    def __next__(self) -> ExportNode:
        node = next(self._inner)
        if node.height == 0:
            key = node.key or b""
            encoded = delta_encode(key, self._last_key)
            self._last_key = key
            self._version_stack.append(node.version)
            return replace(node, key=encoded)

        if len(self._version_stack) < 2:
            raise ValueError("branch node exported before both of its children")
        right = self._version_stack.pop()
        max_version = max(right, self._version_stack[-1])
        self._version_stack[-1] = node.version
        return replace(node, key=None, version=node.version - max_version)


class CompressImporter:
    """Importer that decompresses nodes before passing them to another importer."""

    def __init__(self, importer: _NodeImporter) -> None:
        self._inner = importer
        self._last_key: bytes = b""
        self._min_key_stack: list[bytes] = []
        self._version_stack: list[int] = []

    def add(self, node: ExportNode) -> None:
        """Decompress ``node`` and add it to the wrapped importer."""
        if node.height == 0:
            key = delta_decode(node.key or b"", self._last_key)
            self._last_key = key
            self._min_key_stack.append(key)
            self._version_stack.append(node.version)
            decoded = replace(node, key=key)
        else:
            if len(self._version_stack) < 2:
                raise ValueError("branch node imported before both of its children")
            # The smallest key of the right subtree becomes the branch key;
            # the left subtree's smallest key stays as the merged subtree's.
            key = self._min_key_stack.pop()
            right = self._version_stack.pop()
            version = node.version + max(right, self._version_stack[-1])
            self._version_stack[-1] = version
            decoded = replace(node, key=key, version=version)
        self._inner.add(decoded)


def delta_encode(key: bytes, last_key: Optional[bytes]) -> bytes:
    """Encode ``key`` as a varint shared-prefix length followed by the rest of it."""
    key = key or b""
    shared = diff_offset(last_key, key)
    buf = io.BytesIO()
    encode_uvarint(buf, shared)
    buf.write(key[shared:])
    return buf.getvalue()


def delta_decode(key: bytes, last_key: Optional[bytes]) -> bytes:
    """Reverse ``delta_encode`` given the previously decoded key."""
    try:
        shared, n = decode_uvarint(key)
    except DecodeError as exc:
        raise DecodeError(f"uvarint parse failed {-exc.consumed}", exc.consumed) from exc
    rest = bytes(key[n:])
    if shared == 0:
        return rest
    last_key = last_key or b""
    if shared > len(last_key):
        raise DecodeError(
            f"shared prefix length {shared} exceeds previous key length {len(last_key)}", n
        )
    return bytes(last_key[:shared]) + rest


def diff_offset(a: Optional[bytes], b: Optional[bytes]) -> int:
    """Index of the first byte at which ``a`` and ``b`` differ."""
    a = a or b""
    b = b or b""
    return next(
        (i for i, (x, y) in enumerate(zip(a, b)) if x != y),
        min(len(a), len(b)),
    )