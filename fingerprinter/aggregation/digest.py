"""
Digest function: serialized signal text -> fixed-length lowercase hex.

Primary path is a hashlib digest (sha256 by default). If the algorithm cannot
be constructed (stripped or FIPS-restricted builds), a 32-bit rolling hash is
used instead so a reproducible identifier is still produced. Both paths are
pure functions of their input.
"""

from __future__ import annotations

import hashlib

from fingerprinter.core.exceptions import DigestUnavailable
from fingerprinter.fp_logging import get_logger

logger = get_logger(__name__)


def _utf16_units(text: str):
    for ch in text:
        code = ord(ch)
        if code > 0xFFFF:
            code -= 0x10000
            yield 0xD800 + (code >> 10)
            yield 0xDC00 + (code & 0x3FF)
        else:
            yield code


def simple_hash(text: str) -> int:
    """
    h = h * 31 + unit over UTF-16 code units in 32-bit arithmetic, returned
    as the unsigned fold of the signed result. Empty text hashes to 0.
    """
    h = 0
    for unit in _utf16_units(text):
        h = ((h << 5) - h + unit) & 0xFFFFFFFF
    return h


def sha256_hex(text: str, algorithm: str = "sha256") -> str:
    """hashlib hexdigest of the UTF-8 text; raises DigestUnavailable if algorithm is missing."""
    try:
        hasher = hashlib.new(algorithm)
    except (ValueError, TypeError) as e:
        raise DigestUnavailable(f"hash algorithm {algorithm!r} unavailable: {e}") from e
    hasher.update(text.encode("utf-8"))
    if hasher.digest_size == 0:
        raise DigestUnavailable(f"hash algorithm {algorithm!r} has no fixed digest size")
    return hasher.hexdigest()


def compute_digest(text: str, algorithm: str = "sha256") -> str:
    """Primary digest, falling back to the 8-hex-char rolling hash."""
    try:
        return sha256_hex(text, algorithm)
    except DigestUnavailable as e:
        logger.warning("digest_fallback", algorithm=algorithm, error=str(e))
        return format(simple_hash(text), "08x")
