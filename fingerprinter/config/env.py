"""
Environment variable loading and validation for fingerprinter.

- FINGERPRINT_TIMEOUT_MS: per-source timeout in milliseconds (default: 5000)
- FINGERPRINT_PARALLEL: run sources concurrently (default: true)
- FINGERPRINT_ALLOW_UNSTABLE_DATA: skip custom-data normalization (default: false)
- FINGERPRINT_INCLUDE_SUSPICION: run the suspicion engine on generate (default: false)
- FINGERPRINT_DIGEST_ALGORITHM: hashlib algorithm name (default: sha256)
- FINGERPRINT_STABLE_ONLY_DIGEST: digest only stable-tagged signals (default: false)
- Loads .env from the working directory's project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_DIGEST_ALGORITHM = "sha256"

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def load_fingerprint_env() -> None:
    """Load .env from project root. Safe to call multiple times."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH)


def _get_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def get_timeout_ms() -> int:
    """
    Return FINGERPRINT_TIMEOUT_MS from env.
    Invalid or non-positive values fall back to the default (5000).
    """
    load_fingerprint_env()
    raw = (os.getenv("FINGERPRINT_TIMEOUT_MS") or "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_MS
    try:
        value = int(float(raw))
    except ValueError:
        return DEFAULT_TIMEOUT_MS
    return value if value > 0 else DEFAULT_TIMEOUT_MS


def get_parallel() -> bool:
    """Return True unless FINGERPRINT_PARALLEL is set to a falsy value."""
    load_fingerprint_env()
    return _get_bool("FINGERPRINT_PARALLEL", True)


def get_allow_unstable_data() -> bool:
    load_fingerprint_env()
    return _get_bool("FINGERPRINT_ALLOW_UNSTABLE_DATA", False)


def get_include_suspicion() -> bool:
    load_fingerprint_env()
    return _get_bool("FINGERPRINT_INCLUDE_SUSPICION", False)


def get_stable_only_digest() -> bool:
    load_fingerprint_env()
    return _get_bool("FINGERPRINT_STABLE_ONLY_DIGEST", False)


def get_digest_algorithm() -> str:
    """Return FINGERPRINT_DIGEST_ALGORITHM lowercased, default sha256."""
    load_fingerprint_env()
    raw = (os.getenv("FINGERPRINT_DIGEST_ALGORITHM") or "").strip().lower()
    return raw or DEFAULT_DIGEST_ALGORITHM
