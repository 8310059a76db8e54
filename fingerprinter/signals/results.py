"""
Per-signal collection results: Ok(value) | Failed(reason).

Collectors historically reported failure by returning shapes such as
{"error": "..."} or the string "unknown". classify_value() is the only place
those shapes are recognized; everything downstream (confidence, entropy,
suspicion rules) works on the tagged results.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union

ERROR_SENTINELS = frozenset({"unknown", "no-canvas", "no-canvas-context"})


class FailureKind(str, Enum):
    ERROR = "error"
    UNSUPPORTED = "unsupported"
    TIMEOUT = "timeout"
    MARKER = "marker"


@dataclass(frozen=True)
class Ok:
    value: Any

    ok = True

    def to_plain(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Failed:
    reason: str
    kind: FailureKind = FailureKind.ERROR

    ok = False

    def to_plain(self) -> dict[str, str]:
        return {"error": self.reason}


SignalResult = Union[Ok, Failed]


def classify_value(raw: Any) -> SignalResult:
    """
    Wrap a raw collector value, recognizing error markers.

    A mapping carrying an "error" key or one of ERROR_SENTINELS becomes
    Failed(kind=MARKER); an existing SignalResult is returned unchanged.
    """
    if isinstance(raw, (Ok, Failed)):
        return raw
    if isinstance(raw, str) and raw in ERROR_SENTINELS:
        return Failed(raw, FailureKind.MARKER)
    if isinstance(raw, Mapping) and "error" in raw:
        return Failed(str(raw.get("error")), FailureKind.MARKER)
    return Ok(raw)


def is_error(result: SignalResult) -> bool:
    return not result.ok


def to_plain(result: SignalResult) -> Any:
    return result.to_plain()
