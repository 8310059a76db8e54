"""
Tests for the aggregation pipeline (Fingerprint / generate).

Sources are small in-test doubles so failures, timeouts and ordering are
controlled; the default registry is exercised against the clean host
snapshot from conftest.
"""

from __future__ import annotations

import asyncio

import pytest
import structlog

from fingerprinter import generate, generate_sync, get_available_sources, get_version
from fingerprinter.aggregation.aggregator import Fingerprint, get_signals
from fingerprinter.aggregation.digest import sha256_hex
from fingerprinter.aggregation.serializer import safe_stringify
from fingerprinter.analysis_engine import RiskLevel, SuspicionEngine
from fingerprinter.config.settings import FingerprintOptions
from fingerprinter.core.exceptions import NOT_BROWSER, UnsupportedEnvironment
from fingerprinter.signals.base import SignalSource, SourceMetadata
from fingerprinter.signals.host import HostEnvironment
from fingerprinter.signals.results import Failed, FailureKind, Ok


class StaticSource(SignalSource):
    """Returns a fixed value synchronously."""

    def __init__(self, name, value, entropy=2.0, stable=True, supported=True):
        self.name = name
        self.value = value
        self.supported = supported
        self.metadata = SourceMetadata(name=name, entropy=entropy, stable=stable)

    def is_supported(self, host):
        return self.supported and host.is_supported()

    def collect(self, host):
        return self.value


class AsyncStaticSource(StaticSource):
    def __init__(self, name, value, delay=0.0, **kwargs):
        super().__init__(name, value, **kwargs)
        self.delay = delay

    async def collect(self, host):
        await asyncio.sleep(self.delay)
        return self.value


class FailingSource(SignalSource):
    def __init__(self, name):
        self.name = name
        self.metadata = SourceMetadata(name=name)

    def collect(self, host):
        raise RuntimeError(f"{self.name} exploded")


class SlowSource(SignalSource):
    """Sleeps far past any test timeout; records whether it was cancelled."""

    def __init__(self, name, fallback=None):
        self.name = name
        self.fallback = fallback
        self.metadata = SourceMetadata(name=name, stable=False)
        self.cancelled = False
        self.finished = False

    async def collect(self, host):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        self.finished = True
        return {"late": True}


def _mixed_sources():
    """Five sources: three ok, one raising, one reporting an error marker."""
    return [
        StaticSource("a", "alpha", entropy=4),
        FailingSource("b"),
        StaticSource("c", {"x": 1}, entropy=3),
        StaticSource("d", "unknown", entropy=7),
        AsyncStaticSource("e", [1, 2], entropy=5),
    ]


def _run(options, host, sources=None, engine=None):
    return asyncio.run(Fingerprint(options, host=host, sources=sources, engine=engine).generate())


# --- Environment ---


def test_unsupported_environment_raises():
    """No host, or a host without window/document, aborts before collection."""
    with pytest.raises(UnsupportedEnvironment) as exc_info:
        generate_sync(host=None)
    assert exc_info.value.code == NOT_BROWSER
    assert "browser environments" in str(exc_info.value)

    bare = HostEnvironment.from_snapshot({"window": {}})
    with pytest.raises(UnsupportedEnvironment):
        asyncio.run(Fingerprint(host=bare).collect())


# --- Failure isolation and scoring ---


def test_failure_isolation(host):
    """A raising source and an error marker degrade confidence; the run completes."""
    result = _run(FingerprintOptions(), host, _mixed_sources())
    assert list(result.signals) == ["a", "b", "c", "d", "e"]
    assert result.signals["a"] == Ok("alpha")
    assert isinstance(result.signals["b"], Failed)
    assert result.signals["b"].kind == FailureKind.ERROR
    assert "exploded" in result.signals["b"].reason
    assert result.signals["d"] == Failed("unknown", FailureKind.MARKER)
    assert result.confidence == 60
    assert result.entropy == 12.0
    assert result.error_count == 2
    assert result.components["b"] == {"error": "b exploded"}


def test_custom_data_adds_half_share(host):
    """round(3.5 / 5.5 * 100) == 64 with a non-empty custom block."""
    options = FingerprintOptions(custom_data={"stable": "x", "timestamp": 1700000000000})
    result = _run(options, host, _mixed_sources())
    assert result.confidence == 64
    assert list(result.signals)[-1] == "custom"
    assert result.custom == {"stable": "x"}
    # custom data carries no entropy
    assert result.entropy == 12.0


def test_custom_data_empty_after_normalization(host):
    options = FingerprintOptions(custom_data={"timestamp": 1, "nonce": "abc"})
    result = _run(options, host, _mixed_sources())
    assert "custom" not in result.signals
    assert result.custom is None
    assert result.confidence == 60


def test_custom_data_malformed_is_ignored(host):
    options = FingerprintOptions(custom_data=["not", "a", "mapping"])
    result = _run(options, host, _mixed_sources())
    assert "custom" not in result.signals
    assert result.confidence == 60


def test_allow_unstable_custom_data(host):
    options = FingerprintOptions(custom_data={"timestamp": 1}, allow_unstable_data=True)
    result = _run(options, host, [StaticSource("a", "alpha")])
    assert result.custom == {"timestamp": 1}
    # round(1.5 / 1.5 * 100)
    assert result.confidence == 100


def test_all_sources_fail(host):
    """Every slot failing still yields a digest with zero confidence and entropy."""
    sources = [FailingSource("a"), StaticSource("b", {"error": "no-audio-context"}), FailingSource("c")]
    result = _run(FingerprintOptions(), host, sources)
    assert result.confidence == 0
    assert result.entropy == 0.0
    assert len(result.fingerprint) == 64


def test_no_sources_zero_confidence(host):
    result = _run(FingerprintOptions(), host, [])
    assert result.confidence == 0
    assert result.signals == {}


def test_unsupported_source_recorded_as_failure(host):
    sources = [StaticSource("a", "alpha"), StaticSource("b", "beta", supported=False)]
    result = _run(FingerprintOptions(), host, sources)
    assert result.signals["b"].kind == FailureKind.UNSUPPORTED
    assert result.confidence == 50


def test_exclude_skips_sources(host):
    options = FingerprintOptions(exclude={"b", "d"})
    result = _run(options, host, _mixed_sources())
    assert list(result.signals) == ["a", "c", "e"]
    assert result.confidence == 100


def test_reserved_and_duplicate_names_rejected(host):
    with pytest.raises(ValueError):
        Fingerprint(host=host, sources=[StaticSource("a", 1), StaticSource("a", 2)])
    with pytest.raises(ValueError):
        Fingerprint(host=host, sources=[StaticSource("custom", 1)])


# --- Timeouts ---


def test_timeout_without_fallback(host):
    slow = SlowSource("slow")
    options = FingerprintOptions(timeout_ms=50)
    result = _run(options, host, [StaticSource("a", "alpha"), slow])
    assert result.signals["slow"].kind == FailureKind.TIMEOUT
    assert result.confidence == 50


def test_timeout_uses_fallback(host):
    """A fallback value takes the slot; error-shaped fallbacks still count as errors."""
    options = FingerprintOptions(timeout_ms=50)
    ok_fallback = SlowSource("battery", fallback={"supported": False})
    error_fallback = SlowSource("audio", fallback={"error": "audio-timeout"})
    result = _run(options, host, [ok_fallback, error_fallback])
    assert result.signals["battery"] == Ok({"supported": False})
    assert result.signals["audio"] == Failed("audio-timeout", FailureKind.MARKER)
    assert result.confidence == 50


def test_timed_out_source_is_cancelled(host):
    """The losing source is cancelled and never completes after the digest."""
    slow = SlowSource("slow")
    _run(FingerprintOptions(timeout_ms=50), host, [slow])
    assert slow.cancelled
    assert not slow.finished


# --- Determinism and ordering ---


def test_same_input_same_fingerprint(host):
    first = _run(FingerprintOptions(), host, _mixed_sources())
    second = _run(FingerprintOptions(), host, _mixed_sources())
    assert first.fingerprint == second.fingerprint


class _PermissionStatus:
    def __init__(self, state):
        self.state = state


def test_live_host_objects_digest_deterministically(host):
    """Fresh objects with equal fields give the same fingerprint across runs."""
    first = _run(FingerprintOptions(), host, [StaticSource("permissions", {"v": _PermissionStatus("granted")})])
    second = _run(FingerprintOptions(), host, [StaticSource("permissions", {"v": _PermissionStatus("granted")})])
    assert first.fingerprint == second.fingerprint
    denied = _run(FingerprintOptions(), host, [StaticSource("permissions", {"v": _PermissionStatus("denied")})])
    assert denied.fingerprint != first.fingerprint


def test_fingerprint_is_digest_of_serialized_signals(host):
    result = _run(FingerprintOptions(), host, _mixed_sources())
    assert result.fingerprint == sha256_hex(safe_stringify(result.signals))


def test_registration_order_independent_of_completion(host):
    """A fast source registered last still lands last."""
    sources = [
        AsyncStaticSource("first", 1, delay=0.05),
        AsyncStaticSource("second", 2, delay=0.0),
    ]
    result = _run(FingerprintOptions(), host, sources)
    assert list(result.signals) == ["first", "second"]


def test_sequential_matches_parallel(host):
    parallel = _run(FingerprintOptions(parallel=True), host, _mixed_sources())
    sequential = _run(FingerprintOptions(parallel=False), host, _mixed_sources())
    assert parallel.fingerprint == sequential.fingerprint
    assert parallel.confidence == sequential.confidence


def test_stable_only_digest_ignores_unstable_signals(host):
    """Changing an unstable signal changes the full digest but not the stable-only one."""

    def sources(battery_level):
        return [
            StaticSource("ua", "Mozilla"),
            StaticSource("battery", {"level": battery_level}, stable=False),
        ]

    stable_opts = FingerprintOptions(stable_only_digest=True)
    assert _run(stable_opts, host, sources(0.5)).fingerprint == _run(stable_opts, host, sources(0.9)).fingerprint
    full_opts = FingerprintOptions()
    assert _run(full_opts, host, sources(0.5)).fingerprint != _run(full_opts, host, sources(0.9)).fingerprint
    # the signals map is still complete
    assert "battery" in _run(stable_opts, host, sources(0.5)).signals


def test_digest_fallback_algorithm(host):
    options = FingerprintOptions(digest_algorithm="no-such-hash")
    result = _run(options, host, _mixed_sources())
    assert len(result.fingerprint) == 8


# --- Default registry against a real host snapshot ---


def test_default_sources_on_clean_host(host):
    result = generate_sync(FingerprintOptions(), host=host)
    assert list(result.signals) == get_available_sources()
    assert result.confidence == 100
    assert result.entropy == 143.0
    assert result.version == get_version()
    assert result.suspicion is None
    assert result.duration >= 0


def test_default_sources_deterministic(host):
    first = generate_sync(host=host)
    second = generate_sync(host=host)
    assert first.fingerprint == second.fingerprint


def test_degraded_host_lowers_confidence(clean_snapshot):
    """Missing canvas and battery API: canvas errors, battery is unsupported."""
    del clean_snapshot["canvas"]
    del clean_snapshot["navigator"]["getBattery"]
    result = generate_sync(host=HostEnvironment.from_snapshot(clean_snapshot))
    assert result.signals["canvas"] == Failed("no-canvas", FailureKind.MARKER)
    assert result.signals["battery"].kind == FailureKind.UNSUPPORTED
    # round(19 / 21 * 100)
    assert result.confidence == 90


def test_suspicion_analysis_included(host):
    options = FingerprintOptions(include_suspicion_analysis=True)
    result = generate_sync(options, host=host)
    assert result.suspicion is not None
    assert result.suspicion.signal_ids == ["too_perfect"]
    assert result.suspicion.risk_level == RiskLevel.MEDIUM
    payload = result.to_dict()
    assert payload["suspicion"]["score"] == 30
    assert payload["components"]["timezone"] == "Europe/Berlin"


def test_injected_engine_used(host):
    options = FingerprintOptions(include_suspicion_analysis=True)
    result = _run(options, host, _mixed_sources(), engine=SuspicionEngine(rules=[]))
    assert result.suspicion.score == 0
    assert result.suspicion.risk_level == RiskLevel.LOW


def test_get_signals_has_no_digest(host):
    signals = asyncio.run(get_signals(FingerprintOptions(custom_data={"plan": "pro"}), host=host))
    assert signals["custom"] == Ok({"plan": "pro"})
    assert signals["userAgent"].ok


def test_module_generate_coroutine(host):
    result = asyncio.run(generate(host=host, sources=[StaticSource("a", "alpha")]))
    assert result.confidence == 100


class RunIdRecorder(SignalSource):
    """Records the structlog context visible while the source runs."""

    def __init__(self, name):
        self.name = name
        self.metadata = SourceMetadata(name=name)
        self.seen = None

    async def collect(self, host):
        self.seen = structlog.contextvars.get_contextvars()
        return "ok"


def test_run_id_bound_for_source_tasks(host):
    """Events logged from concurrently running sources carry the run's run_id."""
    first, second = RunIdRecorder("first"), RunIdRecorder("second")
    _run(FingerprintOptions(), host, [first, second])
    assert first.seen["run_id"]
    assert first.seen["run_id"] == second.seen["run_id"]
    other = RunIdRecorder("first")
    _run(FingerprintOptions(), host, [other])
    assert other.seen["run_id"] != first.seen["run_id"]
    assert "run_id" not in structlog.contextvars.get_contextvars()
