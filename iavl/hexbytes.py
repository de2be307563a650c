"""Byte strings rendered as upper-case hexadecimal, plus byte helpers."""

from __future__ import annotations


class HexBytes(bytes):
    """Bytes that print and serialise to JSON as upper-case hexadecimal."""

    def to_json(self) -> str:
        """Return the JSON string literal holding the upper-case hex form."""
        return '"' + self.hex().upper() + '"'

    @classmethod
    def from_json(cls, data: str | bytes) -> "HexBytes":
        """Parse a JSON string literal of hex digits."""
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("ascii", errors="replace")
        if len(data) < 2 or data[0] != '"' or data[-1] != '"':
            raise ValueError(f"invalid hex string: {data}")
        return cls(bytes.fromhex(data[1:-1]))

    def __str__(self) -> str:
        return self.hex().upper()


def cp_incr(bz: bytes) -> bytes | None:
    """Return ``bz`` incremented by one as a big-endian number of the same length.

    Returns None on overflow, i.e. when every byte is 0xFF.
    """
    if len(bz) == 0:
        raise ValueError("cp_incr expects non-zero bz length")
    ret = bytearray(bz)
    for i in reversed(range(len(ret))):
        if ret[i] < 0xFF:
            ret[i] += 1
            return bytes(ret)
        ret[i] = 0x00
    return None