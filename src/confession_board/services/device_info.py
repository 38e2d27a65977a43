"""Coarse device labels derived from a User-Agent header."""

from __future__ import annotations

UNKNOWN_BROWSER = "Unknown Browser"
UNKNOWN_OS = "Unknown OS"

# First match wins, so order matters: Chrome user agents also mention Safari.
_BROWSERS: tuple[tuple[str, str], ...] = (
    ("Firefox", "Firefox"),
    ("Chrome", "Chrome"),
    ("Safari", "Safari"),
    ("Edge", "Edge"),
)

_OPERATING_SYSTEMS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("Windows",), "Windows"),
    (("Mac",), "macOS"),
    (("Linux",), "Linux"),
    (("Android",), "Android"),
    (("iOS", "iPhone", "iPad"), "iOS"),
)


def detect_browser(user_agent: str) -> str:
    for marker, name in _BROWSERS:
        if marker in user_agent:
            return name
    return UNKNOWN_BROWSER


def detect_os(user_agent: str) -> str:
    for markers, name in _OPERATING_SYSTEMS:
        if any(marker in user_agent for marker in markers):
            return name
    return UNKNOWN_OS


def describe_user_agent(user_agent: str | None) -> str:
    """Return a label such as `Firefox on Windows`."""
    ua = user_agent or ""
    return f"{detect_browser(ua)} on {detect_os(ua)}"
