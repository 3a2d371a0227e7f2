import pytest

from btcscript_analyzer.convert import (
    check_int,
    decode_bool,
    decode_int,
    decode_int_unchecked,
    encode_bool,
    encode_int,
)
from btcscript_analyzer.errors import ScriptError, ScriptFailure

I32_MIN = -(2**31)
I32_MAX = 2**31 - 1

TEST_CASES = [
    (0, b"", False),
    (1, b"\x01", True),
    (3, b"\x03", True),
    (-5, b"\x85", True),
    (20, b"\x14", True),
    (32, b"\x20", True),
    (127, b"\x7f", True),
    (128, b"\x80\x00", True),
    (-127, b"\xff", True),
    (-128, b"\x80\x80", True),
    (1008, b"\xf0\x03", True),
    (2016, b"\xe0\x07", True),
    (I32_MIN + 1, b"\xff\xff\xff\xff", True),
    (I32_MAX, b"\xff\xff\xff\x7f", True),
]


@pytest.mark.parametrize("value,encoded,_truthy", TEST_CASES)
def test_int_encode(value, encoded, _truthy):
    assert encode_int(value) == encoded
    assert decode_int(encoded, 4) == value


@pytest.mark.parametrize(
    "negative_zero", [b"\x80", b"\x00\x80", b"\x00\x00\x80", b"\x00\x00\x00\x80"]
)
def test_negative_zero_decodes_to_zero(negative_zero):
    assert decode_int(negative_zero, 4) == 0


def test_bool_encode():
    assert encode_bool(False) == b""
    assert encode_bool(True) == b"\x01"


@pytest.mark.parametrize("_value,encoded,truthy", TEST_CASES)
def test_bool_decode(_value, encoded, truthy):
    assert decode_bool(encoded) == truthy


@pytest.mark.parametrize(
    "negative_zero", [b"\x80", b"\x00\x80", b"\x00\x00\x80", b"\x00\x00\x00\x80"]
)
def test_negative_zero_is_falsy(negative_zero):
    assert decode_bool(negative_zero) is False


def test_decode_int_overflow():
    with pytest.raises(ScriptFailure) as info:
        decode_int(b"\x01\x02\x03\x04\x05", 4)
    assert info.value.error is ScriptError.NUM_OVERFLOW


def test_check_int_accepts_max_len():
    check_int(b"\x01\x02\x03\x04\x05", 5)
    with pytest.raises(ScriptFailure) as info:
        check_int(b"\x01\x02\x03\x04\x05\x06", 5)
    assert info.value.error is ScriptError.NUM_OVERFLOW


def test_five_byte_round_trip():
    value = 2 * I32_MAX
    encoded = encode_int(value)
    assert len(encoded) == 5
    assert decode_int_unchecked(encoded) == value
    assert decode_int(encoded, 5) == value


def test_encode_too_large_raises():
    with pytest.raises(ValueError):
        encode_int(2**40)