"""
Signal source contract.

A SignalSource has a unique name, static metadata (weight, entropy bits,
stability tag, category), an is_supported() check and a collect() that may be
sync or async and may raise. The aggregator owns timeouts and error
handling; sources only describe what to read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Literal, Mapping

from fingerprinter.signals.host import HostEnvironment

SourceCategory = Literal[
    "browser",
    "hardware",
    "network",
    "graphics",
    "audio",
    "storage",
    "permissions",
]

DEFAULT_WEIGHT = 5.0
DEFAULT_ENTROPY = 2.0


@dataclass(frozen=True)
class SourceMetadata:
    """Static per-source constants, fixed at registration."""

    name: str
    weight: float = DEFAULT_WEIGHT
    entropy: float = DEFAULT_ENTROPY
    stable: bool = True
    category: SourceCategory = "browser"


class SignalSource:
    """
    Base class for signal sources.

    fallback is the value reported when the source loses the timeout race;
    None means the slot becomes a timeout failure instead.

    Only awaitables are bounded by timeout_ms. A synchronous collect(), or a
    blocking sync callable resolved through HostEnvironment.read(), runs to
    completion on the event loop and stalls every other source meanwhile.
    Sources that may block should be async and offload the blocking part
    (asyncio.to_thread).
    """

    name: str = ""
    metadata: SourceMetadata
    fallback: Any = None

    def is_supported(self, host: HostEnvironment) -> bool:
        return host.is_supported()

    def collect(self, host: HostEnvironment) -> Any | Awaitable[Any]:
        raise NotImplementedError(f"{type(self).__name__}.collect() not implemented")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HostPathSource(SignalSource):
    """
    Reads one dotted host path, or a mapping of field name -> path, and
    optionally reshapes the result.

    A single path that resolves to nothing yields "unknown", which the
    aggregator records as an error marker.
    """

    def __init__(
        self,
        name: str,
        path: str | None = None,
        *,
        fields: Mapping[str, str] | None = None,
        requires: tuple[str, ...] = (),
        transform: Callable[[Any], Any] | None = None,
        fallback: Any = None,
        weight: float = DEFAULT_WEIGHT,
        entropy: float = DEFAULT_ENTROPY,
        stable: bool = True,
        category: SourceCategory = "browser",
    ) -> None:
        if (path is None) == (fields is None):
            raise ValueError(f"source {name!r}: pass exactly one of path or fields")
        self.name = name
        self.path = path
        self.fields = dict(fields) if fields is not None else None
        self.requires = requires
        self.transform = transform
        self.fallback = fallback
        self.metadata = SourceMetadata(
            name=name,
            weight=weight,
            entropy=entropy,
            stable=stable,
            category=category,
        )

    def is_supported(self, host: HostEnvironment) -> bool:
        return host.is_supported() and all(host.has(p) for p in self.requires)

    async def collect(self, host: HostEnvironment) -> Any:
        if self.fields is not None:
            value: Any = {key: await host.read(p) for key, p in self.fields.items()}
        else:
            value = await host.read(self.path, "unknown")
        if self.transform is not None:
            value = self.transform(value)
        return value
