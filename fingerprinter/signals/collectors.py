"""
Default signal sources.

Thin readers over a HostEnvironment snapshot laid out like browser globals:
"navigator", "screen", "window", "document", "Intl", plus
pre-rendered results under "canvas", "webgl", "audio", "fonts", "webrtc",
"storage", "permissions", "math" and "integrity". Weights, entropy bits and
stability tags are fixed per source and feed confidence/entropy accounting.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from fingerprinter.signals.base import HostPathSource, SignalSource, SourceMetadata
from fingerprinter.signals.host import HostEnvironment

# Globals injected by automation controllers and tool-specific scripts.
AUTOMATION_GLOBALS: tuple[str, ...] = (
    "webdriver",
    "_selenium",
    "selenium",
    "callSelenium",
    "_Selenium_IDE_Recorder",
    "__webdriver_evaluate",
    "__selenium_evaluate",
    "__webdriver_script_fn",
    "__driver_evaluate",
    "__selenium_unwrapped",
    "__webdriver_unwrapped",
    "__fxdriver_unwrapped",
    "_phantom",
    "callPhantom",
    "__phantomas",
    "__nightmare",
    "domAutomation",
    "domAutomationController",
    "__playwright",
    "__pwInitScripts",
    "__puppeteer_evaluation_script__",
)

# ChromeDriver leaves a "$cdc_..." (or "cdc_...") property on document.
CHROMEDRIVER_PREFIXES: tuple[str, ...] = ("$cdc_", "cdc_", "$wdc_")


def _unique_languages(value: Mapping[str, Any]) -> Any:
    seen: list[str] = []
    primary = value.get("language")
    extra = value.get("languages") or []
    for lang in ([primary] if primary else []) + list(extra):
        if isinstance(lang, str) and lang not in seen:
            seen.append(lang)
    return seen or "unknown"


def _screen(value: Mapping[str, Any]) -> dict[str, Any]:
    out = {k: (v if v is not None else 0) for k, v in value.items()}
    if not value.get("devicePixelRatio"):
        out["devicePixelRatio"] = 1
    return out


def _plugins(value: Any) -> Any:
    if not isinstance(value, Iterable) or isinstance(value, (str, bytes, Mapping)):
        return "unknown"
    return [
        {
            "name": str(p.get("name", "")),
            "description": str(p.get("description", "")),
            "filename": str(p.get("filename", "")),
        }
        for p in value
        if isinstance(p, Mapping)
    ]


def _canvas(value: Any) -> Any:
    if not isinstance(value, str) or not value or value == "unknown":
        return "no-canvas"
    return value


def _webgl(value: Any) -> Any:
    if not isinstance(value, Mapping):
        return {"error": "no-webgl-context"}
    return dict(value)


def _audio(value: Any) -> Any:
    if not isinstance(value, Mapping):
        return {"error": "no-audio-context"}
    return dict(value)


def _fonts(value: Any) -> Any:
    if not isinstance(value, Iterable) or isinstance(value, (str, bytes, Mapping)):
        return "unknown"
    return sorted({str(f) for f in value})


def _battery(value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        return {"supported": False}
    return {
        "supported": True,
        "charging": value.get("charging"),
        "level": value.get("level"),
        "chargingTime": value.get("chargingTime"),
        "dischargingTime": value.get("dischargingTime"),
    }


def _connection(value: Any) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        return {"supported": False}
    out = {"supported": True}
    for key in ("effectiveType", "downlink", "rtt", "saveData", "type"):
        if value.get(key) is not None:
            out[key] = value[key]
    return out


def _touch(value: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "maxTouchPoints": int(value.get("maxTouchPoints") or 0),
        "touchEvent": bool(value.get("touchEvent")),
        "pointerEvent": bool(value.get("pointerEvent")),
        "coarsePrimaryPointer": bool(value.get("coarsePrimaryPointer")),
    }


def _storage(value: Mapping[str, Any]) -> dict[str, Any]:
    out = {k: bool(value.get(k)) for k in ("localStorage", "sessionStorage", "indexedDB", "cookiesEnabled")}
    quota = value.get("quotaEstimate")
    out["quotaEstimate"] = quota if isinstance(quota, (int, float)) else None
    return out


def _media_devices(value: Any) -> dict[str, Any]:
    devices = [d for d in (value or []) if isinstance(d, Mapping)]
    return {
        "audioInputs": sum(1 for d in devices if d.get("kind") == "audioinput"),
        "audioOutputs": sum(1 for d in devices if d.get("kind") == "audiooutput"),
        "videoInputs": sum(1 for d in devices if d.get("kind") == "videoinput"),
        "hasMediaDevices": True,
    }


class AutomationSource(SignalSource):
    """
    Reports automation-controller markers: navigator.webdriver, injected
    globals on window/document, outer window size and window.chrome presence.
    """

    def __init__(self) -> None:
        self.name = "automation"
        self.metadata = SourceMetadata(
            name="automation", weight=2, entropy=1, stable=False, category="browser"
        )

    async def collect(self, host: HostEnvironment) -> dict[str, Any]:
        window = await host.read("window", {}) or {}
        document = await host.read("document", {}) or {}
        present: set[str] = set()
        for scope in (window, document):
            keys = _keys(scope)
            present.update(name for name in AUTOMATION_GLOBALS if name in keys)
            present.update(
                key for key in keys if any(key.startswith(p) for p in CHROMEDRIVER_PREFIXES)
            )
        return {
            "webdriver": bool(await host.read("navigator.webdriver", False)),
            "injectedGlobals": sorted(present),
            "outerWidth": await host.read("window.outerWidth"),
            "outerHeight": await host.read("window.outerHeight"),
            "chrome": host.has("window.chrome"),
        }


def _keys(scope: Any) -> set[str]:
    if isinstance(scope, Mapping):
        return {str(k) for k in scope.keys()}
    return set(dir(scope))


def build_default_sources() -> list[SignalSource]:
    """Return fresh instances of every registered source, in registration order."""
    return [
        HostPathSource("userAgent", "navigator.userAgent", weight=8, entropy=10),
        HostPathSource(
            "language",
            fields={"language": "navigator.language", "languages": "navigator.languages"},
            transform=_unique_languages,
            weight=6,
            entropy=5,
        ),
        HostPathSource("timezone", "Intl.timeZone", weight=7, entropy=6),
        HostPathSource(
            "screen",
            fields={
                "width": "screen.width",
                "height": "screen.height",
                "availWidth": "screen.availWidth",
                "availHeight": "screen.availHeight",
                "colorDepth": "screen.colorDepth",
                "pixelDepth": "screen.pixelDepth",
                "devicePixelRatio": "window.devicePixelRatio",
            },
            transform=_screen,
            weight=7,
            entropy=8,
            category="hardware",
        ),
        HostPathSource("plugins", "navigator.plugins", transform=_plugins, weight=5, entropy=6),
        HostPathSource("canvas", "canvas", transform=_canvas, weight=9, entropy=12, category="graphics"),
        HostPathSource("webgl", "webgl", transform=_webgl, weight=9, entropy=15, category="graphics"),
        HostPathSource(
            "audio",
            "audio",
            transform=_audio,
            fallback={"error": "audio-timeout"},
            weight=8,
            entropy=10,
            stable=False,
            category="audio",
        ),
        HostPathSource("fonts", "fonts", transform=_fonts, weight=8, entropy=12),
        HostPathSource(
            "hardware",
            fields={
                "hardwareConcurrency": "navigator.hardwareConcurrency",
                "deviceMemory": "navigator.deviceMemory",
                "platform": "navigator.platform",
                "maxTouchPoints": "navigator.maxTouchPoints",
            },
            weight=8,
            entropy=8,
            category="hardware",
        ),
        HostPathSource(
            "webrtc",
            "webrtc",
            fallback={"hasWebRTC": True, "localIPs": [], "error": "timeout"},
            weight=7,
            entropy=8,
            stable=False,
            category="network",
        ),
        HostPathSource(
            "clientHints",
            fields={
                "brands": "navigator.userAgentData.brands",
                "mobile": "navigator.userAgentData.mobile",
                "platform": "navigator.userAgentData.platform",
            },
            requires=("navigator.userAgentData",),
            fallback={"brands": [], "mobile": False, "platform": "unknown"},
            weight=7,
            entropy=10,
        ),
        HostPathSource(
            "storage",
            fields={
                "localStorage": "storage.localStorage",
                "sessionStorage": "storage.sessionStorage",
                "indexedDB": "storage.indexedDB",
                "cookiesEnabled": "navigator.cookieEnabled",
                "quotaEstimate": "storage.quota",
            },
            transform=_storage,
            weight=5,
            entropy=4,
            category="storage",
        ),
        HostPathSource(
            "battery",
            "navigator.getBattery",
            requires=("navigator.getBattery",),
            transform=_battery,
            fallback={"supported": False},
            weight=3,
            entropy=3,
            stable=False,
            category="hardware",
        ),
        HostPathSource(
            "connection",
            "navigator.connection",
            transform=_connection,
            weight=4,
            entropy=4,
            stable=False,
            category="network",
        ),
        HostPathSource(
            "touch",
            fields={
                "maxTouchPoints": "navigator.maxTouchPoints",
                "touchEvent": "window.TouchEvent",
                "pointerEvent": "window.PointerEvent",
                "coarsePrimaryPointer": "window.coarsePointer",
            },
            transform=_touch,
            weight=5,
            entropy=4,
            category="hardware",
        ),
        HostPathSource(
            "permissions",
            "permissions",
            weight=4,
            entropy=5,
            stable=False,
            category="permissions",
        ),
        HostPathSource("math", "math", weight=6, entropy=6),
        HostPathSource(
            "mediaDevices",
            "navigator.mediaDevices.enumerateDevices",
            requires=("navigator.mediaDevices",),
            transform=_media_devices,
            fallback={"audioInputs": 0, "audioOutputs": 0, "videoInputs": 0, "hasMediaDevices": True},
            weight=5,
            entropy=5,
            category="hardware",
        ),
        AutomationSource(),
        HostPathSource("integrity", "integrity", weight=2, entropy=1, stable=False),
    ]


_REGISTERED_NAMES: tuple[str, ...] = tuple(s.name for s in build_default_sources())


def available_sources() -> list[str]:
    """Names of every registered source, for discovery."""
    return list(_REGISTERED_NAMES)


def default_sources(exclude: Iterable[str] = ()) -> list[SignalSource]:
    """Registered sources minus the excluded names."""
    skip = set(exclude)
    return [s for s in build_default_sources() if s.name not in skip]
