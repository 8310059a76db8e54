"""
Custom-data normalizer.

Strips caller-supplied auxiliary data of transient fields so it can be mixed
into the digest: known time/random/identifier keys are dropped, then any
value that looks like a millisecond epoch timestamp or a UUID.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from fingerprinter.core.exceptions import MalformedCustomData

UNSTABLE_KEYS: frozenset[str] = frozenset(
    {
        "timestamp",
        "time",
        "now",
        "date",
        "random",
        "rand",
        "nonce",
        "salt",
        "sessionId",
        "requestId",
        "uuid",
        "performance",
        "timing",
    }
)

# Millisecond epoch magnitude: 2001-09-09 .. 2286-11-20
TIMESTAMP_MIN = 10**12
TIMESTAMP_MAX = 10**13

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def looks_like_timestamp(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return TIMESTAMP_MIN < value < TIMESTAMP_MAX


def looks_like_uuid(value: Any) -> bool:
    return isinstance(value, str) and UUID_RE.match(value) is not None


def normalize_custom_data(
    data: Mapping[str, Any],
    allow_unstable: bool = False,
) -> dict[str, Any]:
    """
    Return a new mapping without unstable entries; the input is never mutated.

    allow_unstable=True returns a plain copy. Raises MalformedCustomData when
    data is not a mapping; non-string keys are coerced to str.
    """
    if not isinstance(data, Mapping):
        raise MalformedCustomData(
            f"custom data must be a mapping, got {type(data).__name__}",
            source="custom",
        )
    copied = {str(k): v for k, v in data.items()}
    if allow_unstable:
        return copied
    return {
        key: value
        for key, value in copied.items()
        if key not in UNSTABLE_KEYS
        and not looks_like_timestamp(value)
        and not looks_like_uuid(value)
    }
