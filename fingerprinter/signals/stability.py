"""
Stability classifier: static per-source metadata lookup.

Separates "was this value collected without error" from "is this value
expected to reproduce across runs on the same host". Stable-tagged sources
drive the durable identifier; unstable ones (battery, connection, WebRTC
addresses, permission grants, first-run audio jitter) stay informational.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from fingerprinter.signals.base import SignalSource, SourceMetadata


class StabilityClassifier:
    """Lookup of SourceMetadata by signal name, frozen at construction."""

    def __init__(self, sources: Iterable[SignalSource]) -> None:
        self._metadata: Mapping[str, SourceMetadata] = MappingProxyType(
            {s.name: s.metadata for s in sources}
        )

    def __contains__(self, name: object) -> bool:
        return name in self._metadata

    def metadata(self, name: str) -> SourceMetadata:
        """Metadata for name; unregistered names get the defaults (weight 5, 2 bits, stable)."""
        return self._metadata.get(name) or SourceMetadata(name=name)

    def is_stable(self, name: str) -> bool:
        return self.metadata(name).stable

    def weight(self, name: str) -> float:
        return self.metadata(name).weight

    def entropy(self, name: str) -> float:
        return self.metadata(name).entropy

    def stable_names(self) -> list[str]:
        return [name for name, meta in self._metadata.items() if meta.stable]
