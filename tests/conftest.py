"""
Pytest fixtures for fingerprinter tests.

A "clean" host is a desktop Chrome on Windows with every API answering
normally; the suspicion battery only flags it as too_perfect. Tests mutate
the returned snapshot/components (both are rebuilt per test) to trigger
individual rules.
"""

from __future__ import annotations

import pytest

CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
CANVAS_DATA = "data:image/png;base64," + "iVBORw0KGgoAAAANSUhEUgAAASwAAACW" * 8
NATIVE_GETTER = "function get webdriver() { [native code] }"
NATIVE_TO_STRING = "function toString() { [native code] }"


def build_clean_snapshot() -> dict:
    """Globals of a healthy desktop browser, including async APIs."""

    async def get_battery():
        return {"charging": True, "level": 0.8, "chargingTime": 0, "dischargingTime": None}

    async def enumerate_devices():
        return [
            {"kind": "audioinput", "deviceId": "default"},
            {"kind": "audiooutput", "deviceId": "default"},
            {"kind": "videoinput", "deviceId": "cam0"},
        ]

    return {
        "window": {
            "outerWidth": 1920,
            "outerHeight": 1040,
            "devicePixelRatio": 1.25,
            "chrome": {"runtime": {}},
            "TouchEvent": False,
            "PointerEvent": True,
            "coarsePointer": False,
        },
        "document": {"title": "Checkout"},
        "navigator": {
            "userAgent": CHROME_UA,
            "language": "en-US",
            "languages": ["en-US", "en"],
            "webdriver": False,
            "plugins": [
                {"name": "PDF Viewer", "description": "Portable Document Format", "filename": "internal-pdf-viewer"},
            ],
            "hardwareConcurrency": 8,
            "deviceMemory": 8,
            "platform": "Win32",
            "maxTouchPoints": 0,
            "cookieEnabled": True,
            "userAgentData": {
                "brands": [{"brand": "Chromium", "version": "120"}],
                "mobile": False,
                "platform": "Windows",
            },
            "getBattery": get_battery,
            "connection": {"effectiveType": "4g", "downlink": 10, "rtt": 50, "saveData": False},
            "mediaDevices": {"enumerateDevices": enumerate_devices},
        },
        "screen": {
            "width": 2560,
            "height": 1440,
            "availWidth": 2560,
            "availHeight": 1400,
            "colorDepth": 24,
            "pixelDepth": 24,
        },
        "Intl": {"timeZone": "Europe/Berlin"},
        "canvas": CANVAS_DATA,
        "webgl": {
            "vendor": "Google Inc. (NVIDIA)",
            "renderer": "ANGLE (NVIDIA, NVIDIA GeForce RTX 3060 Direct3D11 vs_5_0 ps_5_0, D3D11)",
        },
        "audio": {"sampleRate": 48000, "maxChannelCount": 2, "channelCount": 2, "sum": 124.04347527516074},
        "fonts": ["Segoe UI", "Arial", "Calibri", "Arial"],
        "webrtc": {"hasWebRTC": True, "localIPs": ["192.168.1.10"]},
        "storage": {"localStorage": True, "sessionStorage": True, "indexedDB": True, "quota": 299977904947},
        "permissions": {"notifications": "default", "geolocation": "prompt"},
        "math": {"tan": -1.4214488238747245, "sinh": 1.1752011936438014},
        "integrity": {"webdriverGetter": NATIVE_GETTER, "toString": NATIVE_TO_STRING},
    }


def build_clean_components() -> dict:
    """Raw signal mapping as a healthy host's components would look."""
    return {
        "userAgent": CHROME_UA,
        "language": ["en-US", "en"],
        "timezone": "Europe/Berlin",
        "screen": {"width": 2560, "height": 1440, "colorDepth": 24, "pixelDepth": 24, "devicePixelRatio": 1.25},
        "plugins": [{"name": "PDF Viewer", "description": "Portable Document Format", "filename": "internal-pdf-viewer"}],
        "canvas": CANVAS_DATA,
        "webgl": {"vendor": "Google Inc. (NVIDIA)", "renderer": "ANGLE (NVIDIA GeForce RTX 3060)"},
        "audio": {"sampleRate": 48000, "maxChannelCount": 2},
        "fonts": ["Arial", "Calibri", "Segoe UI"],
        "hardware": {"hardwareConcurrency": 8, "deviceMemory": 8, "platform": "Win32", "maxTouchPoints": 0},
        "webrtc": {"hasWebRTC": True, "localIPs": ["192.168.1.10"]},
        "touch": {"maxTouchPoints": 0, "touchEvent": False, "pointerEvent": True},
        "automation": {
            "webdriver": False,
            "injectedGlobals": [],
            "outerWidth": 1920,
            "outerHeight": 1040,
            "chrome": True,
        },
        "integrity": {"webdriverGetter": NATIVE_GETTER, "toString": NATIVE_TO_STRING},
    }


@pytest.fixture
def clean_snapshot():
    return build_clean_snapshot()


@pytest.fixture
def host(clean_snapshot):
    """HostEnvironment over the clean snapshot."""
    from fingerprinter.signals.host import HostEnvironment

    return HostEnvironment.from_snapshot(clean_snapshot)


@pytest.fixture
def clean_components():
    return build_clean_components()
