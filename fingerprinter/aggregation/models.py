"""
Aggregation result model.

Created fresh per generate() call; owned by the caller afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fingerprinter.signals.results import SignalResult

if TYPE_CHECKING:
    from fingerprinter.analysis_engine.models import SuspicionResult

CUSTOM_KEY = "custom"


@dataclass
class AggregationResult:
    """
    Merged signals plus derived scalars.

    signals keeps registration order with the "custom" block (if any) last.
    """

    fingerprint: str
    signals: dict[str, SignalResult]
    confidence: int
    """Share of registered sources collected without error, 0-100."""
    entropy: float
    """Sum of static entropy bits over non-error signals."""
    duration: float
    """Wall-clock generation time in milliseconds."""
    version: str
    suspicion: SuspicionResult | None = None

    @property
    def components(self) -> dict[str, Any]:
        """Plain JSON-able mapping; failures render as {"error": reason}."""
        return {name: result.to_plain() for name, result in self.signals.items()}

    @property
    def custom(self) -> dict[str, Any] | None:
        result = self.signals.get(CUSTOM_KEY)
        return result.to_plain() if result is not None else None

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.signals.values() if not r.ok)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fingerprint": self.fingerprint,
            "components": self.components,
            "confidence": self.confidence,
            "entropy": self.entropy,
            "duration": self.duration,
            "version": self.version,
            "suspicion": self.suspicion.to_dict() if self.suspicion else None,
        }
