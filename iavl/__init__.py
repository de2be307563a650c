"""Building blocks for a versioned AVL+ key-value store: encodings, cache, fast nodes, export compression and key-value stores."""

__version__ = "0.1.0"