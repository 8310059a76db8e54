"""
Fingerprint options and environment-backed defaults.

FingerprintOptions is the single configuration object accepted by
Fingerprint / generate(). get_settings() builds one from the environment so
services can tune timeouts and digest behaviour without code changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

from fingerprinter.config import env


@dataclass(frozen=True)
class FingerprintOptions:
    """
    Options for one generation call.

    exclude: source names to skip (per-source exclusion flags).
    custom_data: caller-supplied mapping merged under the "custom" key.
    allow_unstable_data: disable custom-data normalization.
    include_suspicion_analysis: run the suspicion engine on the result.
    timeout_ms: max wait per source.
    parallel: run sources concurrently (True) or one after another.
    digest_algorithm: hashlib name for the primary digest path.
    stable_only_digest: hash only stable-tagged signals (plus custom data).
    """

    exclude: frozenset[str] = frozenset()
    custom_data: Mapping[str, Any] | None = None
    allow_unstable_data: bool = False
    include_suspicion_analysis: bool = False
    timeout_ms: int = env.DEFAULT_TIMEOUT_MS
    parallel: bool = True
    digest_algorithm: str = env.DEFAULT_DIGEST_ALGORITHM
    stable_only_digest: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.exclude, frozenset):
            object.__setattr__(self, "exclude", frozenset(self.exclude))
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")

    @property
    def timeout_sec(self) -> float:
        return self.timeout_ms / 1000.0

    def with_overrides(self, **changes: Any) -> FingerprintOptions:
        return replace(self, **changes)


def get_settings(
    *,
    exclude: Iterable[str] = (),
    custom_data: Mapping[str, Any] | None = None,
) -> FingerprintOptions:
    """
    Return FingerprintOptions populated from environment variables.

    Per-call values (exclusions, custom data) are passed explicitly since
    they do not belong in the environment.
    """
    return FingerprintOptions(
        exclude=frozenset(exclude),
        custom_data=custom_data,
        allow_unstable_data=env.get_allow_unstable_data(),
        include_suspicion_analysis=env.get_include_suspicion(),
        timeout_ms=env.get_timeout_ms(),
        parallel=env.get_parallel(),
        digest_algorithm=env.get_digest_algorithm(),
        stable_only_digest=env.get_stable_only_digest(),
    )
