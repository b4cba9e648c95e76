"""Color helpers used when building card themes."""

import re
from typing import Optional, Tuple

_HEX_PATTERN = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)

FALLBACK_RGB = (128, 128, 128)
DARK_TEXT = "#1a1a1a"
LIGHT_TEXT = "#ffffff"
LUMINANCE_THRESHOLD = 0.5


def parse_hex(value: str) -> Optional[Tuple[int, int, int]]:
    """Return the (r, g, b) triple for a 6-digit hex color, or None."""

    match = _HEX_PATTERN.match(value or "")
    if not match:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b


def _format_alpha(alpha: float) -> str:
    # 1.0 renders as "1" and 0.40 as "0.4", the way the card frontend expects.
    if float(alpha).is_integer():
        return str(int(alpha))
    return repr(float(alpha))


def hex_to_rgba(value: str, alpha: float = 1) -> str:
    """Convert ``#rrggbb`` to an ``rgba()`` string; malformed input yields gray."""

    rgb = parse_hex(value) or FALLBACK_RGB
    return f"rgba({rgb[0]}, {rgb[1]}, {rgb[2]}, {_format_alpha(alpha)})"


def luminance(value: str) -> Optional[float]:
    rgb = parse_hex(value)
    if rgb is None:
        return None
    r, g, b = rgb
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def best_text_color(value: str) -> str:
    """Pick a readable foreground for text drawn on top of ``value``."""

    lum = luminance(value)
    if lum is None:
        return LIGHT_TEXT
    return DARK_TEXT if lum > LUMINANCE_THRESHOLD else LIGHT_TEXT


def format_label(identifier: str) -> str:
    """Turn a camelCase identifier into a display label."""

    spaced = re.sub(r"([A-Z])", r" \1", identifier)
    if spaced:
        spaced = spaced[0].upper() + spaced[1:]
    return spaced.strip()
