from __future__ import annotations

import math
import re
from typing import Mapping

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def js_round(value: float) -> int:
    """Half-up rounding, matching what the offer service expects for coordinates."""
    return int(math.floor(value + 0.5))


def hex_to_legacy_color(hex_color: str) -> dict[str, float]:
    match = _HEX_RE.match(hex_color or "")
    if not match:
        return {"red": 0, "green": 0, "blue": 0}
    red, green, blue = (int(group, 16) for group in match.groups())
    return {
        "red": _normalize_channel(red),
        "green": _normalize_channel(green),
        "blue": _normalize_channel(blue),
    }


def legacy_color_to_hex(color: Mapping[str, float]) -> str:
    channels = (color.get("red", 0), color.get("green", 0), color.get("blue", 0))
    return "#" + "".join(
        f"{_clamp_byte(js_round(float(channel) * 255)):02x}" for channel in channels
    )


def hex_to_rgb_floats(hex_color: str) -> tuple[float, float, float]:
    match = _HEX_RE.match(hex_color or "")
    if not match:
        return (0.0, 0.0, 0.0)
    red, green, blue = (int(group, 16) / 255 for group in match.groups())
    return (red, green, blue)


def _normalize_channel(channel: int) -> float:
    value = js_round(channel / 255 * 10000) / 10000
    return int(value) if value.is_integer() else value


def _clamp_byte(value: int) -> int:
    return max(0, min(255, value))
