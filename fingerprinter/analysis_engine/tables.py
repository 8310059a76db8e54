"""
Lookup tables for suspicion rules.

Plain immutable data, injected into SuspicionEngine so tests and deployments
can swap in their own signature lists without touching rule logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class SuspicionTables:
    # (timezone substring, language prefix) pairs that rarely co-occur on real hosts
    suspicious_timezone_languages: tuple[tuple[str, str], ...] = (
        ("America/New_York", "zh-CN"),
        ("Europe/Paris", "ja-JP"),
        ("Asia/Tokyo", "es-ES"),
    )
    # Default emulator/VM resolutions, only suspicious together with emulator_color_depth
    emulator_resolutions: frozenset[str] = frozenset({"1024x768", "800x600", "1280x720", "1920x1080"})
    emulator_color_depth: int = 24
    generic_canvas_max_length: int = 100
    blocked_canvas_max_length: int = 32

    headless_ua_markers: tuple[str, ...] = ("HeadlessChrome", "PhantomJS")
    # Android WebView / in-app browsers: Chrome UA without window.chrome
    webview_ua_patterns: tuple[str, ...] = (r"; wv\)", r"Version/\d+(?:\.\d+)* Chrome/")
    phantom_ua_markers: tuple[str, ...] = ("PhantomJS",)
    phantom_globals: frozenset[str] = frozenset({"_phantom", "callPhantom", "__phantomas"})
    selenium_globals: frozenset[str] = frozenset(
        {
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
        }
    )
    # Other controller artifacts; chromedriver "$cdc_" keys are matched by prefix
    automation_globals: frozenset[str] = frozenset(
        {
            "__nightmare",
            "domAutomation",
            "domAutomationController",
            "__playwright",
            "__pwInitScripts",
            "__puppeteer_evaluation_script__",
        }
    )
    automation_global_prefixes: tuple[str, ...] = ("$cdc_", "cdc_", "$wdc_")

    suspicious_ua_patterns: tuple[str, ...] = (
        "headlesschrome",
        "phantomjs",
        "bot",
        "crawler",
        "spider",
        "scraper",
    )
    bot_signatures: tuple[str, ...] = (
        "Googlebot",
        "Bingbot",
        "facebookexternalhit",
        "Twitterbot",
        "LinkedInBot",
        "WhatsApp",
        "python-requests",
        "python-httpx",
        "aiohttp",
        "curl/",
        "wget",
        "Wget/",
        "Go-http-client",
        "okhttp",
    )
    virtual_renderer_markers: tuple[str, ...] = (
        "swiftshader",
        "llvmpipe",
        "softpipe",
        "mesa offscreen",
        "vmware svga",
        "virtualbox",
        "microsoft basic render driver",
        "parallels display",
    )

    expected_signals: tuple[str, ...] = ("userAgent", "language", "screen")
    max_missing_expected: int = 1
    error_threshold: int = 3

    # OS family -> markers found in a user agent / navigator.platform
    os_ua_markers: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(
            {
                "android": ("Android",),
                "ios": ("iPhone", "iPad", "iPod"),
                "windows": ("Windows",),
                "mac": ("Macintosh", "Mac OS X"),
                "linux": ("Linux", "X11", "CrOS"),
            }
        )
    )
    os_platform_markers: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(
            {
                "android": ("android", "linux arm", "linux aarch"),
                "ios": ("iphone", "ipad", "ipod"),
                "windows": ("win",),
                "mac": ("mac",),
                "linux": ("linux", "x11", "cros"),
            }
        )
    )
    # Platform families a UA family may legitimately report (iPadOS says MacIntel)
    compatible_platforms: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: MappingProxyType(
            {
                "android": frozenset({"android", "linux"}),
                "ios": frozenset({"ios", "mac"}),
                "windows": frozenset({"windows"}),
                "mac": frozenset({"mac"}),
                "linux": frozenset({"linux", "android"}),
            }
        )
    )
    mobile_ua_markers: tuple[str, ...] = ("Mobile", "Android", "iPhone", "iPad", "iPod")

    max_hardware_concurrency: int = 128
    min_device_memory_gb: float = 0.25

    standard_sample_rates: frozenset[int] = frozenset(
        {8000, 11025, 16000, 22050, 24000, 32000, 44100, 48000, 88200, 96000, 176400, 192000}
    )
    max_channel_count: int = 32

    tamper_patterns: tuple[str, ...] = (
        "Proxy",
        "Reflect.",
        "defineProperty",
        "__lookupGetter__",
        "=>",
        "return ",
    )
    native_code_marker: str = "[native code]"


DEFAULT_TABLES = SuspicionTables()
