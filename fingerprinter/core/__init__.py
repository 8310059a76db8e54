"""
Core utilities: error taxonomy and cross-cutting concerns.

Shared by the signal sources, aggregation pipeline and suspicion engine.
"""

from fingerprinter.core.exceptions import (
    DigestUnavailable,
    FingerprintError,
    MalformedCustomData,
    SourceTimeout,
    SourceUnavailable,
    UnsupportedEnvironment,
)

__all__ = [
    "DigestUnavailable",
    "FingerprintError",
    "MalformedCustomData",
    "SourceTimeout",
    "SourceUnavailable",
    "UnsupportedEnvironment",
]
