"""Public key and signature encoding checks."""

from __future__ import annotations

from enum import Enum

SIGHASH_DEFAULT = 0
SIGHASH_ALL = 1
SIGHASH_NONE = 2
SIGHASH_SINGLE = 3
SIGHASH_ANYONECANPAY = 128

# Hash types that can appear at the end of a signature (SIGHASH_DEFAULT cannot).
SIG_HASH_TYPES = frozenset(
    {
        SIGHASH_ALL,
        SIGHASH_NONE,
        SIGHASH_SINGLE,
        SIGHASH_ALL | SIGHASH_ANYONECANPAY,
        SIGHASH_NONE | SIGHASH_ANYONECANPAY,
        SIGHASH_SINGLE | SIGHASH_ANYONECANPAY,
    }
)


class PubKeyCheckResult(Enum):
    """Outcome of checking a public key's encoding."""

    INVALID = "invalid"
    COMPRESSED = "compressed"
    UNCOMPRESSED = "uncompressed"

    @property
    def is_valid(self) -> bool:
        return self is not PubKeyCheckResult.INVALID

    @property
    def compressed(self) -> bool:
        return self is PubKeyCheckResult.COMPRESSED


def check_pub_key(pub_key: bytes) -> PubKeyCheckResult:
    """Classify a public key as compressed, uncompressed or invalid."""
    if len(pub_key) == 33 and pub_key[0] in (0x02, 0x03):
        return PubKeyCheckResult.COMPRESSED
    if len(pub_key) == 65 and pub_key[0] == 0x04:
        return PubKeyCheckResult.UNCOMPRESSED
    return PubKeyCheckResult.INVALID


def is_valid_signature_encoding(sig: bytes) -> bool:
    """Check strict DER encoding of a signature followed by a sighash byte.

    Format: 0x30 [total-length] 0x02 [R-length] [R] 0x02 [S-length] [S] [sighash].
    R and S must be positive and minimally encoded.
    """
    size = len(sig)
    if size < 9 or size > 73:
        return False
    if sig[0] != 0x30:
        return False
    if sig[1] != size - 3:
        return False
    len_r = sig[3]
    if 5 + len_r >= size:
        return False
    len_s = sig[5 + len_r]
    if len_r + len_s + 7 != size:
        return False
    if sig[2] != 0x02:
        return False
    if len_r == 0:
        return False
    if sig[4] & 0x80:
        return False
    if len_r > 1 and sig[4] == 0x00 and not sig[5] & 0x80:
        return False
    if sig[len_r + 4] != 0x02:
        return False
    if len_s == 0:
        return False
    if sig[len_r + 6] & 0x80:
        return False
    if len_s > 1 and sig[len_r + 6] == 0x00 and not sig[len_r + 7] & 0x80:
        return False
    return True