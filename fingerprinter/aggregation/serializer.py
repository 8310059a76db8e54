"""
Deterministic JSON serialization of the merged signal mapping.

Top-level order is kept as given (registration order); nested mapping keys
and sets are sorted so equal data always yields equal text. Cycles become
CIRCULAR_MARKER instead of raising. Objects whose text would carry a memory
address (live host objects) serialize through their public fields, or by
type name when they have none.
"""

from __future__ import annotations

import dataclasses
import json
import math
import re
from enum import Enum
from typing import Any, Mapping

from fingerprinter.signals.results import Failed, Ok

CIRCULAR_MARKER = "[Circular]"

_ADDRESS_RE = re.compile(r" at 0x[0-9a-fA-F]+")


def _object_fields(obj: Any) -> dict[str, Any] | None:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    attrs = getattr(obj, "__dict__", None)
    if isinstance(attrs, dict):
        return {str(k): v for k, v in attrs.items() if not str(k).startswith("_")}
    return None


def _enter(obj: Any, ancestors: set[int], build) -> Any:
    marker = id(obj)
    if marker in ancestors:
        return CIRCULAR_MARKER
    ancestors.add(marker)
    try:
        return build()
    finally:
        ancestors.discard(marker)


def _canonical(obj: Any, ancestors: set[int], depth: int) -> Any:
    if isinstance(obj, (Ok, Failed)):
        obj = obj.to_plain()
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        return obj if math.isfinite(obj) else None
    if isinstance(obj, Enum):
        return _canonical(obj.value, ancestors, depth)
    if isinstance(obj, Mapping):
        def build_mapping():
            items = obj.items() if depth == 0 else sorted(obj.items(), key=lambda kv: str(kv[0]))
            return {str(k): _canonical(v, ancestors, depth + 1) for k, v in items}

        return _enter(obj, ancestors, build_mapping)
    if isinstance(obj, (list, tuple, set, frozenset)):
        def build_sequence():
            values = [_canonical(v, ancestors, depth + 1) for v in obj]
            if isinstance(obj, (set, frozenset)):
                values.sort(key=lambda v: json.dumps(v, sort_keys=True, default=str))
            return values

        return _enter(obj, ancestors, build_sequence)
    if isinstance(obj, type) or callable(obj):
        return getattr(obj, "__qualname__", type(obj).__name__)
    text = str(obj)
    if not _ADDRESS_RE.search(text):
        return text
    fields = _object_fields(obj)
    if fields is None:
        return type(obj).__name__
    return _enter(
        obj,
        ancestors,
        lambda: {k: _canonical(v, ancestors, depth + 1) for k, v in sorted(fields.items())},
    )


def safe_stringify(obj: Any) -> str:
    """Compact, deterministic JSON text for obj."""
    return json.dumps(
        _canonical(obj, set(), 0),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
