# tests/services/test_device_info.py
"""Tests for User-Agent labelling."""

import pytest

from confession_board.services.device_info import (
    UNKNOWN_BROWSER,
    UNKNOWN_OS,
    describe_user_agent,
    detect_browser,
    detect_os,
)

FIREFOX_WINDOWS = "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:124.0) Gecko/20100101 Firefox/124.0"
CHROME_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)
SAFARI_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
)


@pytest.mark.parametrize(
    ("user_agent", "expected"),
    [
        (FIREFOX_WINDOWS, "Firefox on Windows"),
        (CHROME_MAC, "Chrome on macOS"),
        # iPhone agents also say "Mac OS X", and Mac is checked first.
        (SAFARI_IPHONE, "Safari on macOS"),
        ("curl/8.5.0", f"{UNKNOWN_BROWSER} on {UNKNOWN_OS}"),
        (None, f"{UNKNOWN_BROWSER} on {UNKNOWN_OS}"),
    ],
)
def test_describe_user_agent(user_agent: str | None, expected: str) -> None:
    assert describe_user_agent(user_agent) == expected


def test_chrome_wins_over_safari_marker() -> None:
    assert detect_browser(CHROME_MAC) == "Chrome"


def test_linux_and_android() -> None:
    assert detect_os("Mozilla/5.0 (X11; Linux x86_64)") == "Linux"
    # Android agents contain "Linux" too.
    assert detect_os("Mozilla/5.0 (Linux; Android 14; Pixel 8)") == "Linux"
    assert detect_os("Dalvik/2.1.0 (Android 14)") == "Android"
    assert detect_os("SomeApp/1.0 (iPad)") == "iOS"
