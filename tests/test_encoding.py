import io

import pytest

from iavl.encoding import (
    DecodeError,
    decode_bytes,
    decode_uvarint,
    decode_varint,
    encode_32bytes_hash,
    encode_bytes,
    encode_bytes_size,
    encode_bytes_slice,
    encode_uvarint,
    encode_uvarint_size,
    encode_varint,
    encode_varint_size,
)

MAX_INT32 = 2**31 - 1
MAX_UINT32 = 2**32 - 1
MAX_INT64 = 2**63 - 1
MIN_INT64 = -(2**63)
MAX_UINT64 = 2**64 - 1

BZ = bytes([0, 1, 2, 3, 4, 5, 6, 7])


def _uvarint(u):
    buf = io.BytesIO()
    encode_uvarint(buf, u)
    return buf.getvalue()


VALID_CASES = [
    ("full", BZ, 8),
    ("empty", BZ, 0),
    ("partial", BZ, 3),
    ("empty input", b"", 0),
]

INVALID_CASES = [
    ("out of bounds", BZ, 9),
    ("empty input out of bounds", b"", 1),
    ("max int32", BZ, MAX_INT32),
    ("max int32 -1", BZ, MAX_INT32 - 1),
    ("max int32 -10", BZ, MAX_INT32 - 10),
    ("max int32 +1", BZ, MAX_INT32 + 1),
    ("max int32 +10", BZ, MAX_INT32 + 10),
    ("max int32*2", BZ, MAX_INT32 * 2),
    ("max int32*2 -1", BZ, MAX_INT32 * 2 - 1),
    ("max int32*2 -10", BZ, MAX_INT32 * 2 - 10),
    ("max int32*2 +1", BZ, MAX_INT32 * 2 + 1),
    ("max int32*2 +10", BZ, MAX_INT32 * 2 + 10),
    ("max uint32", BZ, MAX_UINT32),
    ("max uint32 -1", BZ, MAX_UINT32 - 1),
    ("max uint32 -10", BZ, MAX_UINT32 - 10),
    ("max uint32 +1", BZ, MAX_UINT32 + 1),
    ("max uint32 +10", BZ, MAX_UINT32 + 10),
    ("max uint32*2", BZ, MAX_UINT32 * 2),
    ("max uint32*2 -1", BZ, MAX_UINT32 * 2 - 1),
    ("max uint32*2 -10", BZ, MAX_UINT32 * 2 - 10),
    ("max uint32*2 +1", BZ, MAX_UINT32 * 2 + 1),
    ("max uint32*2 +10", BZ, MAX_UINT32 * 2 + 10),
    ("max int64", BZ, MAX_INT64),
    ("max int64 -1", BZ, MAX_INT64 - 1),
    ("max int64 -10", BZ, MAX_INT64 - 10),
    ("max int64 +1", BZ, MAX_INT64 + 1),
    ("max int64 +10", BZ, MAX_INT64 + 10),
    ("max uint64", BZ, MAX_UINT64),
    ("max uint64 -1", BZ, MAX_UINT64 - 1),
    ("max uint64 -10", BZ, MAX_UINT64 - 10),
]


@pytest.mark.parametrize("name,bz,prefix", VALID_CASES)
def test_decode_bytes_valid(name, bz, prefix):
    header = _uvarint(prefix)
    value, n = decode_bytes(header + bz)
    assert n == len(header) + prefix
    assert value == bz[:prefix]


@pytest.mark.parametrize("name,bz,prefix", INVALID_CASES)
def test_decode_bytes_invalid(name, bz, prefix):
    header = _uvarint(prefix)
    with pytest.raises(DecodeError) as excinfo:
        decode_bytes(header + bz)
    assert excinfo.value.consumed == len(header)


def test_decode_bytes_invalid_varint():
    with pytest.raises(DecodeError):
        decode_bytes(b"\xff")


ENC_VALUES = [
    -1, -100, -(1 << 32),
    0, 1, 100, 1 << 32,
    -(1 << 52), 1 << 52, 17,
    19, 28, 37, 388888888,
    -99999999999, 99999999999,
    MAX_INT64, MIN_INT64,
]


@pytest.mark.parametrize(
    "value,expected_hex",
    [
        (0, "00"),
        (-1, "01"),
        (1, "02"),
        (100, "c801"),
        (-100, "c701"),
        (1 << 32, "8080808020"),
        (MAX_INT64, "feffffffffffffffff01"),
        (MIN_INT64, "ffffffffffffffffff01"),
    ],
)
def test_encode_varint_known_values(value, expected_hex):
    buf = io.BytesIO()
    encode_varint(buf, value)
    assert buf.getvalue().hex() == expected_hex


@pytest.mark.parametrize("value", ENC_VALUES)
def test_varint_round_trip(value):
    buf = io.BytesIO()
    encode_varint(buf, value)
    data = buf.getvalue()
    decoded, n = decode_varint(data)
    assert decoded == value
    assert n == len(data)
    assert encode_varint_size(value) == len(data)


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, MAX_UINT32, MAX_UINT64])
def test_uvarint_round_trip(value):
    data = _uvarint(value)
    assert decode_uvarint(data) == (value, len(data))
    assert encode_uvarint_size(value) == len(data)


def test_uvarint_known_encoding():
    assert _uvarint(300) == b"\xac\x02"
    assert encode_uvarint_size(0) == 1
    assert encode_uvarint_size(MAX_UINT64) == 10


def test_decode_uvarint_empty_buffer():
    with pytest.raises(DecodeError) as excinfo:
        decode_uvarint(b"")
    assert excinfo.value.consumed == 0


def test_decode_uvarint_overflow():
    with pytest.raises(DecodeError) as excinfo:
        decode_uvarint(b"\xff" * 9 + b"\x02")
    assert excinfo.value.consumed == 10


def test_decode_varint_overflow():
    with pytest.raises(DecodeError):
        decode_varint(b"\xff" * 11)


def test_encode_bytes_and_slice():
    buf = io.BytesIO()
    encode_bytes(buf, b"abc")
    assert buf.getvalue() == b"\x03abc"
    assert encode_bytes_slice(b"abc") == b"\x03abc"
    assert encode_bytes_slice(b"") == b"\x00"
    assert encode_bytes_size(b"abc") == 4
    assert encode_bytes_size(b"x" * 200) == 202


def test_encode_32bytes_hash():
    digest = bytes(range(32))
    buf = io.BytesIO()
    encode_32bytes_hash(buf, digest)
    assert buf.getvalue() == b"\x20" + digest


def test_encode_decode_bytes_round_trip():
    payload = bytes(range(256)) * 3
    data = encode_bytes_slice(payload)
    value, n = decode_bytes(data + b"trailing")
    assert value == payload
    assert n == len(data)