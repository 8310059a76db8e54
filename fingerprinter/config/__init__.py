"""
Configuration management for fingerprinter.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for generation options.
"""

from fingerprinter.config.settings import FingerprintOptions, get_settings  # noqa: F401

__all__ = ["FingerprintOptions", "get_settings"]
