"""
Analysis engine package: heuristic suspicion scoring.

Evaluates a fixed, table-driven battery of rules against a merged signal
mapping and produces a bounded score, categorized findings and a risk level.
"""

from fingerprinter.analysis_engine.models import (
    RiskLevel,
    SignalCategory,
    SuspicionResult,
    SuspicionSignal,
)
from fingerprinter.analysis_engine.rules import DEFAULT_RULES, SignalView, SuspicionRule
from fingerprinter.analysis_engine.suspicion import (
    SuspicionEngine,
    analyze,
    calculate_risk_level,
    calculate_score,
)
from fingerprinter.analysis_engine.tables import DEFAULT_TABLES, SuspicionTables

__all__ = [
    "RiskLevel",
    "SignalCategory",
    "SuspicionResult",
    "SuspicionSignal",
    "DEFAULT_RULES",
    "SignalView",
    "SuspicionRule",
    "SuspicionEngine",
    "analyze",
    "calculate_risk_level",
    "calculate_score",
    "DEFAULT_TABLES",
    "SuspicionTables",
]
