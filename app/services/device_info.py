"""Derive device metadata from request headers and the User-Agent string."""

import re
from collections.abc import Mapping
from dataclasses import dataclass

_ANDROID_VERSION = re.compile(r"Android\s+([0-9.]+)", re.IGNORECASE)
_ANDROID_MODEL = re.compile(r"\)\s+([A-Z0-9-]+)")
_IOS_VERSION = re.compile(r"OS\s+([0-9_]+)", re.IGNORECASE)


@dataclass
class DeviceInfo:
    """Metadata recorded on a device row at login and refresh."""

    platform: str = "unknown"
    domain: str = "default"
    app_version: str | None = None
    os_version: str | None = None
    device_model: str | None = None
    user_agent: str | None = None


def parse_user_agent(user_agent: str) -> dict[str, str]:
    """Best-effort platform, os_version and device_model from a User-Agent."""
    if not user_agent:
        return {}
    ua = user_agent.lower()
    result: dict[str, str] = {}

    if "android" in ua:
        result["platform"] = "android"
        if m := _ANDROID_VERSION.search(user_agent):
            result["os_version"] = m.group(1)
        if m := _ANDROID_MODEL.search(user_agent):
            result["device_model"] = m.group(1)
    elif "iphone" in ua or "ipad" in ua:
        result["platform"] = "ios"
        if m := _IOS_VERSION.search(user_agent):
            result["os_version"] = m.group(1).replace("_", ".")
        result["device_model"] = "iPad" if "ipad" in ua else "iPhone"
    elif "windows" in ua:
        result["platform"] = "web"
        result["os_version"] = "Windows"
    elif "mac" in ua:
        result["platform"] = "web"
        result["os_version"] = "macOS"
    elif "linux" in ua:
        result["platform"] = "web"
        result["os_version"] = "Linux"
    else:
        result["platform"] = "web"
    return result


def extract_device_info(headers: Mapping[str, str], default_domain: str = "default") -> DeviceInfo:
    """
    Build DeviceInfo from headers. Explicit X-* headers win over values parsed
    from the User-Agent; anything still missing keeps its default.
    """
    user_agent = headers.get("user-agent", "") or ""
    parsed = parse_user_agent(user_agent)
    return DeviceInfo(
        platform=headers.get("x-platform") or parsed.get("platform") or "unknown",
        domain=headers.get("x-app-domain") or default_domain,
        app_version=headers.get("x-app-version") or None,
        os_version=headers.get("x-os-version") or parsed.get("os_version"),
        device_model=headers.get("x-device-model") or parsed.get("device_model"),
        user_agent=user_agent or None,
    )
