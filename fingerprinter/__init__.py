"""
fingerprinter: host signal aggregation, stable fingerprint digests and
heuristic suspicion scoring.

Signal sources read a browser-like host snapshot; the aggregator merges
their results with normalized custom data, derives confidence and entropy,
hashes a deterministic serialization, and optionally scores the same signals
for automation, inconsistency and privacy-tooling evidence.
"""

__version__ = "0.1.0"

from fingerprinter.aggregation import (  # noqa: E402
    AggregationResult,
    Fingerprint,
    generate,
    generate_sync,
    get_available_sources,
    get_signals,
    get_version,
)
from fingerprinter.analysis_engine import (  # noqa: E402
    RiskLevel,
    SuspicionEngine,
    SuspicionResult,
    SuspicionSignal,
    SuspicionTables,
    analyze,
)
from fingerprinter.config import FingerprintOptions, get_settings  # noqa: E402
from fingerprinter.core.exceptions import FingerprintError, UnsupportedEnvironment  # noqa: E402
from fingerprinter.signals import HostEnvironment, SignalSource  # noqa: E402

__all__ = [
    "__version__",
    "AggregationResult",
    "Fingerprint",
    "generate",
    "generate_sync",
    "get_available_sources",
    "get_signals",
    "get_version",
    "RiskLevel",
    "SuspicionEngine",
    "SuspicionResult",
    "SuspicionSignal",
    "SuspicionTables",
    "analyze",
    "FingerprintOptions",
    "get_settings",
    "FingerprintError",
    "UnsupportedEnvironment",
    "HostEnvironment",
    "SignalSource",
]
