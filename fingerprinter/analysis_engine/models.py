"""
Data models for suspicion analysis output.

SuspicionSignal is derived fresh on every run and never persisted;
SuspicionResult carries only the detected signals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SignalCategory(str, Enum):
    AUTOMATION = "automation"
    INCONSISTENCY = "inconsistency"
    ENVIRONMENT = "environment"
    BOT_PATTERN = "bot-pattern"
    PRIVACY_TOOLING = "privacy-tooling"


@dataclass(frozen=True)
class SuspicionSignal:
    """One rule outcome: fixed id, severity and category, plus the detected flag."""

    id: str
    severity: int
    category: SignalCategory
    description: str
    detected: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "severity": self.severity,
            "category": self.category.value,
            "description": self.description,
            "detected": self.detected,
        }


@dataclass
class SuspicionResult:
    score: int
    """Sum of severity * 10 over detected signals, capped at 100."""
    risk_level: RiskLevel
    signals: list[SuspicionSignal]
    """Detected signals only."""
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def signal_ids(self) -> list[str]:
        return [s.id for s in self.signals]

    def has(self, signal_id: str) -> bool:
        return signal_id in self.signal_ids

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "risk_level": self.risk_level.value,
            "signals": [s.to_dict() for s in self.signals],
            "details": self.details,
        }
