"""A least-recently-used cache of nodes keyed by their byte keys."""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional, Protocol


class CacheNode(Protocol):
    """Anything with a byte ``key`` can be cached."""

    @property
    def key(self) -> bytes: ...


class LRUCache:
    """Node cache bounded by element count, evicting the least recently used."""

    def __init__(self, max_element_count: int) -> None:
        self.max_element_count = max_element_count
        self._items: OrderedDict[bytes, CacheNode] = OrderedDict()

    def add(self, node: CacheNode) -> Optional[CacheNode]:
        """Add ``node``.

        Returns the node it replaced under the same key, or the evicted oldest
        node if the cache overflowed, otherwise None.
        """
        key = bytes(node.key)
        if key in self._items:
            old = self._items[key]
            self._items[key] = node
            self._items.move_to_end(key)
            return old
        self._items[key] = node
        if len(self._items) > self.max_element_count:
            _, oldest = self._items.popitem(last=False)
            return oldest
        return None

    def get(self, key: bytes) -> Optional[CacheNode]:
        """Return the node for ``key`` and mark it recently used, or None."""
        key = bytes(key)
        node = self._items.get(key)
        if node is not None:
            self._items.move_to_end(key)
        return node

    def has(self, key: bytes) -> bool:
        """Whether a node with ``key`` is cached, without touching recency."""
        return bytes(key) in self._items

    def __contains__(self, key: object) -> bool:
        return isinstance(key, (bytes, bytearray)) and self.has(key)

    def remove(self, key: bytes) -> Optional[CacheNode]:
        """Remove and return the node for ``key``, or None if absent."""
        return self._items.pop(bytes(key), None)

    def __len__(self) -> int:
        return len(self._items)