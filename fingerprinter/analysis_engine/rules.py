"""
Table-driven suspicion rule battery.

Each SuspicionRule is a fixed id, severity (0-10), category and a predicate
over a read-only SignalView plus the injected SuspicionTables. Adding a
check means appending a rule; scoring never changes. Rules are grouped by
category: automation, inconsistency, environment, bot-pattern,
privacy-tooling.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from fingerprinter.analysis_engine.models import SignalCategory
from fingerprinter.analysis_engine.tables import SuspicionTables
from fingerprinter.signals.results import Failed, SignalResult, classify_value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SignalView:
    """
    Read-only view over a merged signal mapping.

    Accepts SignalResult values or raw collector values (classified on entry),
    so the engine can score results from generate() or a stored components dict.
    """

    def __init__(self, signals: Mapping[str, Any]) -> None:
        self._results: Mapping[str, SignalResult] = MappingProxyType(
            {str(name): classify_value(value) for name, value in signals.items()}
        )

    def __len__(self) -> int:
        return len(self._results)

    def results(self) -> Iterable[SignalResult]:
        return self._results.values()

    def result(self, name: str) -> SignalResult | None:
        return self._results.get(name)

    def value(self, name: str, default: Any = None) -> Any:
        """Collected value for name, or default when missing or failed."""
        result = self._results.get(name)
        if result is None or not result.ok:
            return default
        return result.value

    def mapping(self, name: str) -> Mapping[str, Any]:
        value = self.value(name)
        return value if isinstance(value, Mapping) else {}

    def text(self, name: str) -> str:
        value = self.value(name)
        return value if isinstance(value, str) else ""

    def is_missing_or_error(self, name: str) -> bool:
        result = self._results.get(name)
        return result is None or not result.ok

    def error_count(self) -> int:
        return sum(1 for r in self._results.values() if not r.ok)

    @property
    def user_agent(self) -> str:
        return self.text("userAgent")

    def injected_globals(self) -> set[str]:
        found = self.mapping("automation").get("injectedGlobals") or []
        return {str(g) for g in found}


Predicate = Callable[[SignalView, SuspicionTables], bool]


@dataclass(frozen=True)
class SuspicionRule:
    id: str
    severity: int
    category: SignalCategory
    description: str
    predicate: Predicate


# --- automation ---


def has_webdriver(view: SignalView, tables: SuspicionTables) -> bool:
    return view.mapping("automation").get("webdriver") is True


def is_headless(view: SignalView, tables: SuspicionTables) -> bool:
    ua = view.user_agent
    if any(marker in ua for marker in tables.headless_ua_markers):
        return True
    automation = view.mapping("automation")
    for key in ("outerWidth", "outerHeight"):
        dim = automation.get(key)
        if _is_number(dim) and dim == 0:
            return True
    if "Chrome/" not in ua or automation.get("chrome") is not False:
        return False
    # Chrome proper always exposes window.chrome; WebViews never do
    return not any(re.search(pattern, ua) for pattern in tables.webview_ua_patterns)


def has_phantom_signatures(view: SignalView, tables: SuspicionTables) -> bool:
    ua = view.user_agent
    if any(marker in ua for marker in tables.phantom_ua_markers):
        return True
    return bool(view.injected_globals() & tables.phantom_globals)


def has_selenium_signatures(view: SignalView, tables: SuspicionTables) -> bool:
    found = view.injected_globals()
    if found & tables.selenium_globals:
        return True
    return any(g.startswith(tables.automation_global_prefixes) for g in found)


def has_automation_artifacts(view: SignalView, tables: SuspicionTables) -> bool:
    return bool(view.injected_globals() & tables.automation_globals)


# --- inconsistency ---


def _languages(view: SignalView) -> list[str]:
    value = view.value("language")
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return []


def has_timezone_language_mismatch(view: SignalView, tables: SuspicionTables) -> bool:
    timezone = view.text("timezone")
    languages = _languages(view)
    if not timezone or not languages:
        return False
    return any(
        tz in timezone and any(lang in declared for declared in languages)
        for tz, lang in tables.suspicious_timezone_languages
    )


def has_screen_inconsistency(view: SignalView, tables: SuspicionTables) -> bool:
    screen = view.mapping("screen")
    if not screen:
        return False
    resolution = f"{screen.get('width')}x{screen.get('height')}"
    return (
        resolution in tables.emulator_resolutions
        and screen.get("colorDepth") == tables.emulator_color_depth
    )


def has_generic_canvas(view: SignalView, tables: SuspicionTables) -> bool:
    result = view.result("canvas")
    if isinstance(result, Failed):
        return result.reason in ("no-canvas", "no-canvas-context")
    canvas = view.value("canvas")
    return isinstance(canvas, str) and len(canvas) < tables.generic_canvas_max_length


def _family(text: str, markers: Mapping[str, tuple[str, ...]], lower: bool) -> str | None:
    haystack = text.lower() if lower else text
    for family, needles in markers.items():
        if any(needle in haystack for needle in needles):
            return family
    return None


def has_platform_mismatch(view: SignalView, tables: SuspicionTables) -> bool:
    ua_family = _family(view.user_agent, tables.os_ua_markers, lower=False)
    platform = view.mapping("hardware").get("platform") or view.mapping("clientHints").get("platform")
    if ua_family is None or not isinstance(platform, str) or platform == "unknown":
        return False
    platform_family = _family(platform, tables.os_platform_markers, lower=True)
    if platform_family is None:
        return False
    return platform_family not in tables.compatible_platforms.get(ua_family, frozenset({ua_family}))


def has_hardware_anomaly(view: SignalView, tables: SuspicionTables) -> bool:
    hardware = view.mapping("hardware")
    cores = hardware.get("hardwareConcurrency")
    if _is_number(cores) and (cores <= 0 or cores > tables.max_hardware_concurrency):
        return True
    memory = hardware.get("deviceMemory")
    return _is_number(memory) and memory < tables.min_device_memory_gb


# --- environment ---


def has_missing_apis(view: SignalView, tables: SuspicionTables) -> bool:
    missing = [name for name in tables.expected_signals if view.is_missing_or_error(name)]
    return len(missing) > tables.max_missing_expected


def has_too_many_errors(view: SignalView, tables: SuspicionTables) -> bool:
    return view.error_count() > tables.error_threshold


def has_suspicious_user_agent(view: SignalView, tables: SuspicionTables) -> bool:
    ua = view.user_agent.lower()
    return any(pattern in ua for pattern in tables.suspicious_ua_patterns)


def has_touch_mismatch(view: SignalView, tables: SuspicionTables) -> bool:
    ua = view.user_agent
    if not any(marker in ua for marker in tables.mobile_ua_markers):
        return False
    touch = view.mapping("touch") or view.mapping("hardware")
    points = touch.get("maxTouchPoints")
    return _is_number(points) and points == 0 and not touch.get("touchEvent")


# --- bot-pattern ---


def _is_default(value: Any) -> bool:
    if value is None or value is False or value == "unknown":
        return True
    if _is_number(value):
        return value == 0
    if isinstance(value, (str, list, tuple, set, frozenset, Mapping)):
        return len(value) == 0
    return False


def is_too_perfect(view: SignalView, tables: SuspicionTables) -> bool:
    """Every signal present, non-error and non-default; real hosts almost always degrade one."""
    if len(view) == 0:
        return False
    return all(r.ok and not _is_default(r.value) for r in view.results())


def has_known_bot_signature(view: SignalView, tables: SuspicionTables) -> bool:
    ua = view.user_agent
    return any(signature in ua for signature in tables.bot_signatures)


def has_virtual_renderer(view: SignalView, tables: SuspicionTables) -> bool:
    webgl = view.mapping("webgl")
    text = " ".join(
        str(webgl.get(key) or "")
        for key in ("vendor", "renderer", "unmaskedVendor", "unmaskedRenderer")
    ).lower()
    return any(marker in text for marker in tables.virtual_renderer_markers)


# --- privacy-tooling ---


def has_blocked_canvas(view: SignalView, tables: SuspicionTables) -> bool:
    canvas = view.value("canvas")
    return isinstance(canvas, str) and len(canvas) < tables.blocked_canvas_max_length


def has_tampered_accessors(view: SignalView, tables: SuspicionTables) -> bool:
    for check in view.mapping("integrity").values():
        if isinstance(check, Mapping) and "error" in check:
            return True
        if isinstance(check, str):
            if tables.native_code_marker not in check:
                return True
            if any(pattern in check for pattern in tables.tamper_patterns):
                return True
    return False


def has_audio_anomaly(view: SignalView, tables: SuspicionTables) -> bool:
    audio = view.mapping("audio")
    rate = audio.get("sampleRate")
    if _is_number(rate):
        if not math.isfinite(rate):
            return True
        if rate != int(rate) or int(rate) not in tables.standard_sample_rates:
            return True
    for key in ("maxChannelCount", "channelCount"):
        channels = audio.get(key)
        if not _is_number(channels):
            continue
        if not math.isfinite(channels) or channels < 0 or channels > tables.max_channel_count:
            return True
    return False


DEFAULT_RULES: tuple[SuspicionRule, ...] = (
    SuspicionRule("webdriver", 9, SignalCategory.AUTOMATION, "WebDriver automation detected", has_webdriver),
    SuspicionRule("headless", 8, SignalCategory.AUTOMATION, "Headless browser detected", is_headless),
    SuspicionRule("phantom", 7, SignalCategory.AUTOMATION, "PhantomJS signatures detected", has_phantom_signatures),
    SuspicionRule("selenium", 8, SignalCategory.AUTOMATION, "Selenium signatures detected", has_selenium_signatures),
    SuspicionRule(
        "automation_artifacts",
        7,
        SignalCategory.AUTOMATION,
        "Automation tool script artifacts detected",
        has_automation_artifacts,
    ),
    SuspicionRule(
        "timezone_language_mismatch",
        5,
        SignalCategory.INCONSISTENCY,
        "Timezone/language inconsistency",
        has_timezone_language_mismatch,
    ),
    SuspicionRule(
        "screen_consistency",
        6,
        SignalCategory.INCONSISTENCY,
        "Screen resolution matches emulator default",
        has_screen_inconsistency,
    ),
    SuspicionRule("generic_canvas", 4, SignalCategory.INCONSISTENCY, "Canvas fingerprint too generic", has_generic_canvas),
    SuspicionRule(
        "platform_mismatch",
        6,
        SignalCategory.INCONSISTENCY,
        "Platform contradicts user agent OS",
        has_platform_mismatch,
    ),
    SuspicionRule(
        "hardware_anomaly",
        5,
        SignalCategory.INCONSISTENCY,
        "Implausible core count or device memory",
        has_hardware_anomaly,
    ),
    SuspicionRule("missing_apis", 6, SignalCategory.ENVIRONMENT, "Missing browser APIs", has_missing_apis),
    SuspicionRule("collection_errors", 5, SignalCategory.ENVIRONMENT, "Too many collection errors", has_too_many_errors),
    SuspicionRule("suspicious_ua", 7, SignalCategory.ENVIRONMENT, "Suspicious user agent", has_suspicious_user_agent),
    SuspicionRule(
        "touch_mismatch",
        4,
        SignalCategory.ENVIRONMENT,
        "Mobile user agent without touch support",
        has_touch_mismatch,
    ),
    SuspicionRule("too_perfect", 3, SignalCategory.BOT_PATTERN, "Fingerprint too perfect/stable", is_too_perfect),
    SuspicionRule("bot_signature", 9, SignalCategory.BOT_PATTERN, "Known bot signature detected", has_known_bot_signature),
    SuspicionRule(
        "virtual_renderer",
        7,
        SignalCategory.BOT_PATTERN,
        "Software rasterizer or virtual GPU renderer",
        has_virtual_renderer,
    ),
    SuspicionRule(
        "canvas_blocked",
        6,
        SignalCategory.PRIVACY_TOOLING,
        "Canvas output blocked or spoofed",
        has_blocked_canvas,
    ),
    SuspicionRule(
        "tampered_accessors",
        7,
        SignalCategory.PRIVACY_TOOLING,
        "Sensitive property accessor overridden",
        has_tampered_accessors,
    ),
    SuspicionRule(
        "audio_anomaly",
        5,
        SignalCategory.PRIVACY_TOOLING,
        "Audio parameters outside standard range",
        has_audio_anomaly,
    ),
)
