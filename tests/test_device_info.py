"""User-Agent parsing and header-derived device metadata."""

import unittest

from app.services.device_info import extract_device_info, parse_user_agent

ANDROID_UA = "Mozilla/5.0 (Linux; Android 13; SM-G991B) AppleWebKit/537.36 Chrome/120 Mobile"
IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_2 like Mac OS X) AppleWebKit/605.1.15"
WINDOWS_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120"


class TestParseUserAgent(unittest.TestCase):
    def test_android(self) -> None:
        parsed = parse_user_agent(ANDROID_UA)
        self.assertEqual(parsed["platform"], "android")
        self.assertEqual(parsed["os_version"], "13")

    def test_iphone(self) -> None:
        parsed = parse_user_agent(IPHONE_UA)
        self.assertEqual(parsed["platform"], "ios")
        self.assertEqual(parsed["os_version"], "17.2")
        self.assertEqual(parsed["device_model"], "iPhone")

    def test_desktop_is_web(self) -> None:
        self.assertEqual(parse_user_agent(WINDOWS_UA), {"platform": "web", "os_version": "Windows"})

    def test_empty(self) -> None:
        self.assertEqual(parse_user_agent(""), {})


class TestExtractDeviceInfo(unittest.TestCase):
    def test_explicit_headers_win(self) -> None:
        info = extract_device_info(
            {
                "user-agent": ANDROID_UA,
                "x-platform": "mobile",
                "x-app-domain": "shop",
                "x-app-version": "2.1.0",
                "x-device-model": "Pixel 8",
            }
        )
        self.assertEqual(info.platform, "mobile")
        self.assertEqual(info.domain, "shop")
        self.assertEqual(info.app_version, "2.1.0")
        self.assertEqual(info.device_model, "Pixel 8")
        self.assertEqual(info.os_version, "13")

    def test_defaults(self) -> None:
        info = extract_device_info({}, default_domain="main")
        self.assertEqual(info.platform, "unknown")
        self.assertEqual(info.domain, "main")
        self.assertIsNone(info.user_agent)
