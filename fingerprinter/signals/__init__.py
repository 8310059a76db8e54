"""
Signal sources package: host environment, source contract, default
collectors, per-signal results and the stability classifier.
"""

from fingerprinter.signals.base import HostPathSource, SignalSource, SourceMetadata
from fingerprinter.signals.collectors import (
    available_sources,
    build_default_sources,
    default_sources,
)
from fingerprinter.signals.host import HostEnvironment
from fingerprinter.signals.results import (
    Failed,
    FailureKind,
    Ok,
    SignalResult,
    classify_value,
    is_error,
    to_plain,
)
from fingerprinter.signals.stability import StabilityClassifier

__all__ = [
    "HostPathSource",
    "SignalSource",
    "SourceMetadata",
    "available_sources",
    "build_default_sources",
    "default_sources",
    "HostEnvironment",
    "Failed",
    "FailureKind",
    "Ok",
    "SignalResult",
    "classify_value",
    "is_error",
    "to_plain",
    "StabilityClassifier",
]
