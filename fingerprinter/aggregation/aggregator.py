"""
Aggregator: run signal sources, merge, score and hash.

Sources run as independent asyncio tasks on one event loop (or one after
another when parallel=False). Each async collect() is raced against the
per-source timeout with asyncio.wait_for, so a losing source is cancelled
and can never write into a mapping that has already been hashed. Any single
source failure degrades that slot to a Failed result; only an unsupported
host aborts the call, before any collection starts.
"""

from __future__ import annotations

import asyncio
import inspect
import math
import time
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from fingerprinter import __version__
from fingerprinter.aggregation.digest import compute_digest
from fingerprinter.aggregation.models import CUSTOM_KEY, AggregationResult
from fingerprinter.aggregation.normalizer import normalize_custom_data
from fingerprinter.aggregation.serializer import safe_stringify
from fingerprinter.analysis_engine.suspicion import SuspicionEngine
from fingerprinter.config.settings import FingerprintOptions
from fingerprinter.core.exceptions import (
    MalformedCustomData,
    SourceTimeout,
    SourceUnavailable,
    UnsupportedEnvironment,
)
from fingerprinter.fp_logging import get_logger, run_context
from fingerprinter.signals.base import SignalSource
from fingerprinter.signals.collectors import available_sources, build_default_sources
from fingerprinter.signals.host import HostEnvironment
from fingerprinter.signals.results import Failed, FailureKind, Ok, SignalResult, classify_value
from fingerprinter.signals.stability import StabilityClassifier

logger = get_logger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _error_reason(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class Fingerprint:
    """
    One configured fingerprinting pipeline.

    host: the environment sources read from; None or a host without window/
    document globals makes collect()/generate() raise UnsupportedEnvironment.
    sources: defaults to every registered source; options.exclude is applied
    on top.
    """

    def __init__(
        self,
        options: FingerprintOptions | None = None,
        host: HostEnvironment | None = None,
        sources: Iterable[SignalSource] | None = None,
        engine: SuspicionEngine | None = None,
    ) -> None:
        self.options = options or FingerprintOptions()
        self.host = host
        candidates = list(sources) if sources is not None else build_default_sources()
        self.sources: list[SignalSource] = [
            s for s in candidates if s.name not in self.options.exclude
        ]
        names = [s.name for s in self.sources]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate source names: {sorted(n for n in set(names) if names.count(n) > 1)}")
        if CUSTOM_KEY in names:
            raise ValueError(f"source name {CUSTOM_KEY!r} is reserved for custom data")
        self.classifier = StabilityClassifier(self.sources)
        self.engine = engine

    def _ensure_supported(self) -> HostEnvironment:
        if self.host is None or not self.host.is_supported():
            raise UnsupportedEnvironment(
                "Fingerprinting is only available in browser environments"
            )
        return self.host

    async def _await_with_timeout(self, source: SignalSource, pending: Any) -> Any:
        try:
            return await asyncio.wait_for(pending, timeout=self.options.timeout_sec)
        except asyncio.TimeoutError as e:
            raise SourceTimeout(
                f"{source.name} exceeded {self.options.timeout_ms}ms",
                source=source.name,
            ) from e

    async def _run_source(self, source: SignalSource, host: HostEnvironment) -> SignalResult:
        try:
            if not source.is_supported(host):
                raise SourceUnavailable(f"{source.name} not supported", source=source.name)
            value = source.collect(host)
            if inspect.isawaitable(value):
                value = await self._await_with_timeout(source, value)
            return classify_value(value)
        except SourceTimeout as e:
            logger.warning(
                "signal_source_timeout",
                source=source.name,
                timeout_ms=self.options.timeout_ms,
                has_fallback=source.fallback is not None,
            )
            if source.fallback is not None:
                return classify_value(source.fallback)
            return Failed(_error_reason(e), FailureKind.TIMEOUT)
        except SourceUnavailable as e:
            logger.debug("signal_source_unsupported", source=source.name)
            return Failed(_error_reason(e), FailureKind.UNSUPPORTED)
        except Exception as e:
            logger.warning("signal_source_failed", source=source.name, error=_error_reason(e))
            return Failed(_error_reason(e), FailureKind.ERROR)

    async def collect(self) -> dict[str, SignalResult]:
        """
        Run every source and merge results by name in registration order,
        regardless of completion order.
        """
        host = self._ensure_supported()
        if self.options.parallel:
            results = await asyncio.gather(*(self._run_source(s, host) for s in self.sources))
        else:
            results = [await self._run_source(s, host) for s in self.sources]
        return {source.name: result for source, result in zip(self.sources, results)}

    def _custom_block(self) -> dict[str, Any] | None:
        """Normalized custom data, or None when absent, malformed or empty after normalization."""
        data = self.options.custom_data
        if data is None:
            return None
        try:
            normalized = normalize_custom_data(data, allow_unstable=self.options.allow_unstable_data)
        except MalformedCustomData as e:
            logger.warning("custom_data_ignored", error=str(e))
            return None
        return normalized or None

    async def get_signals(self) -> dict[str, SignalResult]:
        """Collected signals plus the custom block; no digest, no suspicion analysis."""
        signals = await self.collect()
        custom = self._custom_block()
        if custom is not None:
            signals[CUSTOM_KEY] = Ok(custom)
        return signals

    def calculate_confidence(self, signals: Mapping[str, SignalResult]) -> int:
        """
        round((ok sources + 0.5 * custom) / (registered sources + 0.5 * custom) * 100).

        The 0.5 custom share is counted on both sides only when a non-empty
        custom block is present.
        """
        ok_count = sum(1 for s in self.sources if signals.get(s.name, Failed("missing")).ok)
        custom_share = 0.5 if CUSTOM_KEY in signals else 0.0
        denominator = len(self.sources) + custom_share
        if denominator == 0:
            return 0
        return _round_half_up((ok_count + custom_share) / denominator * 100)

    def calculate_entropy(self, signals: Mapping[str, SignalResult]) -> float:
        return float(
            sum(
                self.classifier.entropy(s.name)
                for s in self.sources
                if signals.get(s.name, Failed("missing")).ok
            )
        )

    def _digest_input(self, signals: Mapping[str, SignalResult]) -> dict[str, SignalResult]:
        if not self.options.stable_only_digest:
            return dict(signals)
        return {
            name: result
            for name, result in signals.items()
            if name == CUSTOM_KEY or self.classifier.is_stable(name)
        }

    async def generate(self) -> AggregationResult:
        """Collect, merge, score and hash. Raises UnsupportedEnvironment only."""
        self._ensure_supported()
        with run_context():
            return await self._generate()

    async def _generate(self) -> AggregationResult:
        started = time.perf_counter()

        signals = await self.get_signals()
        confidence = self.calculate_confidence(signals)
        entropy = self.calculate_entropy(signals)
        fingerprint = compute_digest(
            safe_stringify(self._digest_input(signals)),
            self.options.digest_algorithm,
        )

        suspicion = None
        if self.options.include_suspicion_analysis:
            engine = self.engine or SuspicionEngine()
            suspicion = engine.analyze(MappingProxyType(signals))

        duration = (time.perf_counter() - started) * 1000.0
        logger.info(
            "fingerprint_generated",
            sources=len(self.sources),
            errors=sum(1 for r in signals.values() if not r.ok),
            confidence=confidence,
            entropy=entropy,
            duration_ms=round(duration, 2),
            suspicion_score=suspicion.score if suspicion else None,
        )
        return AggregationResult(
            fingerprint=fingerprint,
            signals=signals,
            confidence=confidence,
            entropy=entropy,
            duration=duration,
            version=__version__,
            suspicion=suspicion,
        )


async def generate(
    options: FingerprintOptions | None = None,
    host: HostEnvironment | None = None,
    sources: Iterable[SignalSource] | None = None,
) -> AggregationResult:
    """Generate a fingerprint with a one-off pipeline."""
    return await Fingerprint(options, host=host, sources=sources).generate()


async def get_signals(
    options: FingerprintOptions | None = None,
    host: HostEnvironment | None = None,
    sources: Iterable[SignalSource] | None = None,
) -> dict[str, SignalResult]:
    return await Fingerprint(options, host=host, sources=sources).get_signals()


def generate_sync(
    options: FingerprintOptions | None = None,
    host: HostEnvironment | None = None,
    sources: Iterable[SignalSource] | None = None,
) -> AggregationResult:
    """Blocking wrapper for callers without a running event loop."""
    return asyncio.run(generate(options, host=host, sources=sources))


def get_available_sources() -> list[str]:
    return available_sources()


def get_version() -> str:
    return __version__
