"""
Suspicion engine: evaluate the rule battery against one signal mapping.

Stateless and pure: the same mapping always yields the same result. A rule
that raises is logged and counted as not detected, so one broken check never
aborts the batch. Score = sum(severity * 10) over detected rules, capped at
100; risk level: <30 LOW, <70 MEDIUM, otherwise HIGH.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping

from fingerprinter.analysis_engine.models import (
    RiskLevel,
    SignalCategory,
    SuspicionResult,
    SuspicionSignal,
)
from fingerprinter.analysis_engine.rules import DEFAULT_RULES, SignalView, SuspicionRule
from fingerprinter.analysis_engine.tables import DEFAULT_TABLES, SuspicionTables
from fingerprinter.fp_logging import get_logger

logger = get_logger(__name__)

MAX_SCORE = 100
MEDIUM_THRESHOLD = 30
HIGH_THRESHOLD = 70
HIGH_SEVERITY = 8


def calculate_score(signals: Iterable[SuspicionSignal]) -> int:
    total = sum(s.severity * 10 for s in signals if s.detected)
    return max(0, min(MAX_SCORE, total))


def calculate_risk_level(score: int) -> RiskLevel:
    if score < MEDIUM_THRESHOLD:
        return RiskLevel.LOW
    if score < HIGH_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


class SuspicionEngine:
    """Rule battery bound to a set of lookup tables."""

    def __init__(
        self,
        tables: SuspicionTables = DEFAULT_TABLES,
        rules: Iterable[SuspicionRule] = DEFAULT_RULES,
    ) -> None:
        self.tables = tables
        self.rules: tuple[SuspicionRule, ...] = tuple(rules)
        ids = [r.id for r in self.rules]
        if len(set(ids)) != len(ids):
            raise ValueError("suspicion rule ids must be unique")

    def evaluate(self, signals: Mapping[str, Any] | SignalView) -> list[SuspicionSignal]:
        """Run every rule; returns all signals with their detected flag."""
        view = signals if isinstance(signals, SignalView) else SignalView(signals)
        evaluated: list[SuspicionSignal] = []
        for rule in self.rules:
            try:
                detected = bool(rule.predicate(view, self.tables))
            except Exception as e:
                logger.warning("suspicion_rule_failed", rule=rule.id, error=str(e))
                detected = False
            evaluated.append(
                SuspicionSignal(
                    id=rule.id,
                    severity=rule.severity,
                    category=rule.category,
                    description=rule.description,
                    detected=detected,
                )
            )
        return evaluated

    def analyze(self, signals: Mapping[str, Any] | SignalView) -> SuspicionResult:
        """Score a merged signal mapping; only detected signals are returned."""
        detected = [s for s in self.evaluate(signals) if s.detected]
        score = calculate_score(detected)
        risk_level = calculate_risk_level(score)
        categories = Counter(s.category.value for s in detected)
        result = SuspicionResult(
            score=score,
            risk_level=risk_level,
            signals=detected,
            details={
                "total_signals_detected": len(detected),
                "high_severity_signals": sum(1 for s in detected if s.severity >= HIGH_SEVERITY),
                "automation_detected": categories[SignalCategory.AUTOMATION.value] > 0,
                "inconsistencies_found": categories[SignalCategory.INCONSISTENCY.value] > 0,
                "categories": dict(categories),
            },
        )
        logger.debug(
            "suspicion_result",
            score=score,
            risk_level=risk_level.value,
            signals=result.signal_ids,
        )
        return result


def analyze(
    signals: Mapping[str, Any] | SignalView,
    tables: SuspicionTables = DEFAULT_TABLES,
) -> SuspicionResult:
    """Score signals with the default rule battery and the given tables."""
    return SuspicionEngine(tables=tables).analyze(signals)
