"""
Application-level exceptions.

Closed taxonomy shared by the aggregator, digest and normalizer. Only
UnsupportedEnvironment is ever raised to callers; the rest are raised and
recovered inside the package so that a single failing data point degrades
confidence instead of aborting a run.
"""

from __future__ import annotations

NOT_BROWSER = "NOT_BROWSER"
COLLECTOR_TIMEOUT = "COLLECTOR_TIMEOUT"
COLLECTOR_ERROR = "COLLECTOR_ERROR"
UNSUPPORTED = "UNSUPPORTED"
HASH_ERROR = "HASH_ERROR"
MALFORMED_CUSTOM_DATA = "MALFORMED_CUSTOM_DATA"


class FingerprintError(Exception):
    """Base error with a stable code and the source name it relates to, if any."""

    code = COLLECTOR_ERROR

    def __init__(self, message: str, code: str | None = None, source: str | None = None):
        super().__init__(message)
        if code is not None:
            self.code = code
        self.source = source

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, source={self.source!r}, message={str(self)!r})"


class UnsupportedEnvironment(FingerprintError):
    """Host cannot support fingerprinting at all. Fatal, raised before collection."""

    code = NOT_BROWSER


class SourceUnavailable(FingerprintError):
    """A signal source declared itself unsupported for this host."""

    code = UNSUPPORTED


class SourceTimeout(FingerprintError):
    """A signal source lost the timeout race."""

    code = COLLECTOR_TIMEOUT


class DigestUnavailable(FingerprintError):
    """The cryptographic hash primitive could not be constructed."""

    code = HASH_ERROR


class MalformedCustomData(FingerprintError):
    """Caller-supplied custom data is not a mapping."""

    code = MALFORMED_CUSTOM_DATA
