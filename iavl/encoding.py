"""Varint and length-prefixed byte encodings used by the tree's storage format."""

from __future__ import annotations

import io
from typing import BinaryIO

MAX_VARINT_LEN64 = 10

_UINT64_MASK = (1 << 64) - 1
_MAX_INT = (1 << 63) - 1
_HASH_LEN_PREFIX = b"\x20"


class DecodeError(ValueError):
    """Raised when a byte string cannot be decoded.

    ``consumed`` holds the number of input bytes read before the failure.
    """

    def __init__(self, message: str, consumed: int = 0) -> None:
        super().__init__(message)
        self.consumed = consumed


def _read_uvarint(bz: bytes) -> tuple[int, int]:
    """Decode an unsigned varint; returns (value, n) where n <= 0 signals failure."""
    x = 0
    shift = 0
    for i, b in enumerate(bz):
        if i == MAX_VARINT_LEN64:
            return 0, -(i + 1)
        if b < 0x80:
            if i == MAX_VARINT_LEN64 - 1 and b > 1:
                return 0, -(i + 1)
            return x | (b << shift), i + 1
        x |= (b & 0x7F) << shift
        shift += 7
    return 0, 0


def _put_uvarint(u: int) -> bytes:
    u &= _UINT64_MASK
    out = bytearray()
    while u >= 0x80:
        out.append((u & 0x7F) | 0x80)
        u >>= 7
    out.append(u)
    return bytes(out)


def _zigzag(i: int) -> int:
    ux = (i << 1) & _UINT64_MASK
    if i < 0:
        ux ^= _UINT64_MASK
    return ux


def decode_uvarint(bz: bytes) -> tuple[int, int]:
    """Decode an unsigned varint, returning the value and the number of bytes read."""
    u, n = _read_uvarint(bz)
    if n == 0:
        raise DecodeError("buffer too small", 0)
    if n < 0:
        raise DecodeError("EOF decoding uvarint", -n)
    return u, n


def decode_varint(bz: bytes) -> tuple[int, int]:
    """Decode a zig-zag signed varint, returning the value and the number of bytes read."""
    ux, n = _read_uvarint(bz)
    if n == 0:
        raise DecodeError("buffer too small", 0)
    if n < 0:
        raise DecodeError("EOF decoding varint", -n)
    x = ux >> 1
    if ux & 1:
        x = ~x
    return x, n


def decode_bytes(bz: bytes) -> tuple[bytes, int]:
    """Decode a varint length-prefixed byte string, returning it and the bytes consumed."""
    size, n = decode_uvarint(bz)
    if size >= _MAX_INT:
        raise DecodeError(f"invalid out of range length {size} decoding []byte", n)
    end = n + size
    if len(bz) < end:
        raise DecodeError(f"insufficient bytes decoding []byte of length {size}", n)
    return bytes(bz[n:end]), end


def encode_uvarint(w: BinaryIO, u: int) -> None:
    """Write an unsigned varint to ``w``."""
    w.write(_put_uvarint(u))


def encode_varint(w: BinaryIO, i: int) -> None:
    """Write a zig-zag signed varint to ``w``."""
    w.write(_put_uvarint(_zigzag(i)))


def encode_bytes(w: BinaryIO, bz: bytes) -> None:
    """Write a varint length-prefixed byte string to ``w``."""
    encode_uvarint(w, len(bz))
    w.write(bytes(bz))


def encode_32bytes_hash(w: BinaryIO, bz: bytes) -> None:
    """Write a 32-byte hash with its one-byte length prefix."""
    w.write(_HASH_LEN_PREFIX)
    w.write(bytes(bz))


def encode_bytes_slice(bz: bytes) -> bytes:
    """Return ``bz`` with its varint length prefix."""
    buf = io.BytesIO()
    encode_bytes(buf, bz)
    return buf.getvalue()


def encode_uvarint_size(u: int) -> int:
    """Number of bytes the unsigned varint encoding of ``u`` takes."""
    u &= _UINT64_MASK
    if u == 0:
        return 1
    return (u.bit_length() + 6) // 7


def encode_varint_size(i: int) -> int:
    """Number of bytes the signed varint encoding of ``i`` takes."""
    return encode_uvarint_size(_zigzag(i))


def encode_bytes_size(bz: bytes) -> int:
    """Number of bytes ``bz`` takes including its length prefix."""
    return encode_uvarint_size(len(bz)) + len(bz)