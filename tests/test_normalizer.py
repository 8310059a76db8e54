"""
Tests for custom-data normalization (aggregation.normalizer).
"""

from __future__ import annotations

import pytest

from fingerprinter.aggregation.normalizer import (
    UNSTABLE_KEYS,
    looks_like_timestamp,
    looks_like_uuid,
    normalize_custom_data,
)
from fingerprinter.core.exceptions import MALFORMED_CUSTOM_DATA, MalformedCustomData


def test_denylisted_keys_removed():
    """Every known transient key is dropped regardless of its value."""
    data = {key: "x" for key in UNSTABLE_KEYS}
    data["stable"] = "x"
    assert normalize_custom_data(data) == {"stable": "x"}


def test_timestamp_and_uuid_values_removed():
    """Millisecond timestamps and UUID strings are dropped under any key."""
    data = {
        "stable": "x",
        "ts": 1700000000000,
        "id": "123e4567-e89b-12d3-a456-426614174000",
    }
    assert normalize_custom_data(data) == {"stable": "x"}


def test_timestamp_bounds_are_exclusive():
    """Only values strictly between 10^12 and 10^13 count as timestamps."""
    assert looks_like_timestamp(10**12 + 1)
    assert looks_like_timestamp(1.7e12)
    assert not looks_like_timestamp(10**12)
    assert not looks_like_timestamp(10**13)
    assert not looks_like_timestamp(1700000000)
    assert not looks_like_timestamp(True)
    assert not looks_like_timestamp("1700000000000")


def test_uuid_match_is_case_insensitive():
    assert looks_like_uuid("123E4567-E89B-12D3-A456-426614174000")
    assert not looks_like_uuid("123e4567e89b12d3a456426614174000")
    assert not looks_like_uuid("prefix-123e4567-e89b-12d3-a456-426614174000")
    assert not looks_like_uuid(42)


def test_allow_unstable_returns_copy():
    """With normalization disabled the data is copied unchanged."""
    data = {"timestamp": 1, "stable": "x"}
    out = normalize_custom_data(data, allow_unstable=True)
    assert out == data
    assert out is not data


def test_input_not_mutated():
    data = {"nonce": "abc", "stable": "x"}
    normalize_custom_data(data)
    assert data == {"nonce": "abc", "stable": "x"}


def test_empty_after_normalization():
    """A block made only of transient fields normalizes to an empty mapping."""
    assert normalize_custom_data({"timestamp": 1, "nonce": "n"}) == {}


def test_non_string_keys_coerced():
    assert normalize_custom_data({1: "one"}) == {"1": "one"}


def test_non_mapping_rejected():
    """Lists and scalars raise MalformedCustomData with its code."""
    with pytest.raises(MalformedCustomData) as exc_info:
        normalize_custom_data(["a", "b"])
    assert exc_info.value.code == MALFORMED_CUSTOM_DATA
    assert exc_info.value.source == "custom"


def test_normalization_idempotent():
    data = {"stable": "x", "ts": 1700000000000, "requestId": "r-1", "nested": {"timestamp": 1}}
    once = normalize_custom_data(data)
    assert normalize_custom_data(once) == once
    # nested values are kept as-is
    assert once["nested"] == {"timestamp": 1}
