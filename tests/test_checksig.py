import pytest

from btcscript_analyzer.checksig import (
    SIGHASH_ALL,
    PubKeyCheckResult,
    check_pub_key,
    is_valid_signature_encoding,
)


def _der(r: bytes, s: bytes, hashtype: int = SIGHASH_ALL) -> bytes:
    body = bytes([0x02, len(r)]) + r + bytes([0x02, len(s)]) + s
    return bytes([0x30, len(body)]) + body + bytes([hashtype])


@pytest.mark.parametrize("prefix", [0x02, 0x03])
def test_compressed_pub_key(prefix):
    result = check_pub_key(bytes([prefix]) + bytes(32))
    assert result is PubKeyCheckResult.COMPRESSED
    assert result.is_valid and result.compressed


def test_uncompressed_pub_key():
    result = check_pub_key(bytes([0x04]) + bytes(64))
    assert result is PubKeyCheckResult.UNCOMPRESSED
    assert result.is_valid and not result.compressed


@pytest.mark.parametrize(
    "key",
    [b"", bytes(32), bytes([0x04]) + bytes(32), bytes([0x02]) + bytes(64), bytes([0x05]) + bytes(32)],
)
def test_invalid_pub_key(key):
    result = check_pub_key(key)
    assert result is PubKeyCheckResult.INVALID
    assert not result.is_valid


def test_minimal_valid_signature():
    assert is_valid_signature_encoding(_der(b"\x01", b"\x01")) is True


def test_typical_signature_length():
    sig = _der(b"\x00" + b"\x80" * 32, b"\x7f" * 32)
    assert len(sig) == 73
    assert is_valid_signature_encoding(sig) is True


def test_too_short():
    assert is_valid_signature_encoding(_der(b"\x01", b"\x01")[:-1]) is False


def test_too_long():
    assert is_valid_signature_encoding(_der(b"\x01" * 33, b"\x01" * 33)) is False


def test_wrong_compound_marker():
    sig = bytearray(_der(b"\x01", b"\x01"))
    sig[0] = 0x31
    assert is_valid_signature_encoding(bytes(sig)) is False


def test_wrong_total_length():
    sig = bytearray(_der(b"\x01", b"\x01"))
    sig[1] += 1
    assert is_valid_signature_encoding(bytes(sig)) is False


def test_negative_r_rejected():
    assert is_valid_signature_encoding(_der(b"\x80", b"\x01")) is False


def test_negative_s_rejected():
    assert is_valid_signature_encoding(_der(b"\x01", b"\x80")) is False


def test_padded_r_rejected():
    assert is_valid_signature_encoding(_der(b"\x00\x01", b"\x01")) is False


def test_padded_s_rejected():
    assert is_valid_signature_encoding(_der(b"\x01", b"\x00\x01")) is False


def test_required_padding_accepted():
    assert is_valid_signature_encoding(_der(b"\x00\x80", b"\x00\x80")) is True


def test_zero_length_r_rejected():
    assert is_valid_signature_encoding(_der(b"", b"\x01\x01")) is False


def test_wrong_integer_marker_for_s():
    sig = bytearray(_der(b"\x01", b"\x01"))
    sig[5] = 0x03
    assert is_valid_signature_encoding(bytes(sig)) is False