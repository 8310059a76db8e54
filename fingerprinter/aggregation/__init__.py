"""
Aggregation pipeline: collect, normalize, score, serialize and hash.
"""

from fingerprinter.aggregation.aggregator import (
    Fingerprint,
    generate,
    generate_sync,
    get_available_sources,
    get_signals,
    get_version,
)
from fingerprinter.aggregation.digest import compute_digest, sha256_hex, simple_hash
from fingerprinter.aggregation.models import AggregationResult
from fingerprinter.aggregation.normalizer import normalize_custom_data
from fingerprinter.aggregation.serializer import CIRCULAR_MARKER, safe_stringify

__all__ = [
    "Fingerprint",
    "generate",
    "generate_sync",
    "get_available_sources",
    "get_signals",
    "get_version",
    "compute_digest",
    "sha256_hex",
    "simple_hash",
    "AggregationResult",
    "normalize_custom_data",
    "CIRCULAR_MARKER",
    "safe_stringify",
]
