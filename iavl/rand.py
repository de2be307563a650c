"""A lock-guarded pseudo-random generator for tests and tooling.

None of this is suitable for cryptographic use.
"""

from __future__ import annotations

import os
import random
import threading
from typing import Optional

_STR_CHARS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"


class Rand:
    """Pseudo-random generator seeded from OS randomness unless a seed is given.

    Every method is safe to call from several threads.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._lock = threading.Lock()
        if seed is None:
            seed = int.from_bytes(os.urandom(8), "big")
        self._rng = random.Random(seed)

    def seed(self, seed: int) -> None:
        """Reset the generator to a known state."""
        with self._lock:
            self._rng = random.Random(seed)

    def string(self, length: int) -> str:
        """Random alphanumeric string of ``length`` characters."""
        chars: list[str] = []
        while len(chars) < length:
            val = self.int63()
            for _ in range(10):
                v = val & 0x3F
                val >>= 6
                if v >= len(_STR_CHARS):
                    continue
                chars.append(_STR_CHARS[v])
                if len(chars) == length:
                    break
        return "".join(chars)

    def uint16(self) -> int:
        return self.uint32() & 0xFFFF

    def uint32(self) -> int:
        with self._lock:
            return self._rng.getrandbits(32)

    def uint64(self) -> int:
        return (self.uint32() << 32) + self.uint32()

    def int(self) -> int:
        """Non-negative 63-bit integer."""
        with self._lock:
            return self._rng.getrandbits(63)

    def int31(self) -> int:
        """Non-negative 31-bit integer."""
        with self._lock:
            return self._rng.getrandbits(31)

    def int31n(self, n: int) -> int:
        """Integer in [0, n); n must be positive."""
        return self._below(n)

    def int63(self) -> int:
        """Non-negative 63-bit integer."""
        with self._lock:
            return self._rng.getrandbits(63)

    def int63n(self, n: int) -> int:
        """Integer in [0, n); n must be positive."""
        return self._below(n)

    def intn(self, n: int) -> int:
        """Integer in [0, n); n must be positive."""
        return self._below(n)

    def _below(self, n: int) -> int:
        if n <= 0:
            raise ValueError("invalid argument: n must be positive")
        with self._lock:
            return self._rng.randrange(n)

    def float64(self) -> float:
        """Float in [0.0, 1.0)."""
        with self._lock:
            return self._rng.random()

    def bool(self) -> bool:
        return self.int63() % 2 == 0

    def bytes(self, n: int) -> bytes:
        """``n`` random bytes from the internal generator."""
        return bytes(self.int() & 0xFF for _ in range(n))

    def perm(self, n: int) -> list[int]:
        """Random permutation of ``range(n)``."""
        with self._lock:
            return self._rng.sample(range(n), n)

    def time(self) -> int:
        """Random Unix timestamp in seconds, anywhere in the signed 64-bit range."""
        u = self.uint64()
        return u - (1 << 64) if u >= (1 << 63) else u


_grand = Rand()


def seed(seed: int) -> None:
    """Reset the shared generator to a known state."""
    _grand.seed(seed)


def rand_str(length: int) -> str:
    return _grand.string(length)


def rand_int() -> int:
    return _grand.int()


def rand_int31() -> int:
    return _grand.int31()


def rand_bytes(n: int) -> bytes:
    return _grand.bytes(n)


def rand_perm(n: int) -> list[int]:
    return _grand.perm(n)