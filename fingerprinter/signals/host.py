"""
Host environment: the globals signal sources read from.

A HostEnvironment wraps a snapshot of browser-like globals ("window",
"document", "navigator", "screen", ...), as posted by a client-side agent or
produced by a driver such as a headless browser session. Values may be plain
data, zero-argument callables, or awaitables; read() resolves all three so a
live host can hand out lazy, asynchronous values.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Mapping

_MISSING = object()

REQUIRED_GLOBALS = ("window", "document")


@dataclass(frozen=True)
class HostEnvironment:
    globals: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any]) -> HostEnvironment:
        return cls(globals=dict(snapshot))

    def is_supported(self) -> bool:
        """True when the browser-only globals exist (window and document)."""
        return all(self.globals.get(name) is not None for name in REQUIRED_GLOBALS)

    def has(self, path: str) -> bool:
        return _walk(self.globals, path) is not _MISSING

    async def read(self, path: str, default: Any = None) -> Any:
        """
        Resolve a dotted path ("navigator.userAgent").

        Each step looks up a mapping key or attribute; callables are called and
        awaitables awaited before descending. Missing steps return default.
        """
        node: Any = self.globals
        for part in path.split("."):
            node = await _resolve(node)
            node = _step(node, part)
            if node is _MISSING:
                return default
        return await _resolve(node)


async def _resolve(node: Any) -> Any:
    if callable(node) and not isinstance(node, type):
        node = node()
    if inspect.isawaitable(node):
        node = await node
    return node


def _step(node: Any, part: str) -> Any:
    if isinstance(node, Mapping):
        return node.get(part, _MISSING)
    if node is None:
        return _MISSING
    return getattr(node, part, _MISSING)


def _walk(root: Mapping[str, Any], path: str) -> Any:
    node: Any = root
    for part in path.split("."):
        node = _step(node, part)
        if node is _MISSING:
            return _MISSING
    return node
