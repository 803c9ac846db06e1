"""
Pure-Python color helpers for computed tokens.

Parses the color notations tokens are written in (raw "H S% L%" triples as
used by shadcn/Tailwind themes, hsl(), rgb(), hex) and converts them to hex.
No external color libraries required.
"""

from __future__ import annotations

import logging
import math
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

_HSL_FUNC_RE = re.compile(
    r"hsl\(\s*([\d.]+)\s*,?\s*([\d.]+)%?\s*,?\s*([\d.]+)%?\s*\)", re.IGNORECASE
)
_RGB_FUNC_RE = re.compile(r"rgba?\(\s*([\d.]+)\s*,?\s*([\d.]+)\s*,?\s*([\d.]+)", re.IGNORECASE)

FALLBACK_HEX = "#000000"


class HSL(NamedTuple):
    """HSL color with hue in degrees and saturation/lightness in percent."""

    h: float
    s: float
    l: float  # noqa: E741


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, like CSS engines do."""
    return math.floor(value + 0.5)


def _byte_hex(value: int) -> str:
    return f"{max(0, min(255, value)):02x}"


def parse_hsl(value: str) -> HSL | None:
    """Parse ``hsl(h, s%, l%)`` or a raw ``"H S% L%"`` triple.

    Returns:
        HSL components, or None if the string is not HSL.
    """
    match = _HSL_FUNC_RE.search(value)
    if match:
        return HSL(float(match.group(1)), float(match.group(2)), float(match.group(3)))

    parts = value.strip().split()
    if len(parts) >= 3:
        try:
            return HSL(
                float(parts[0]),
                float(parts[1].replace("%", "")),
                float(parts[2].replace("%", "")),
            )
        except ValueError:
            return None
    return None


def hsl_to_hex(h: float, s: float, l: float) -> str:  # noqa: E741
    """Convert HSL components to a ``#rrggbb`` string."""
    h = h % 360
    s /= 100
    l /= 100

    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = l - c / 2

    if h < 60:
        r, g, b = c, x, 0.0
    elif h < 120:
        r, g, b = x, c, 0.0
    elif h < 180:
        r, g, b = 0.0, c, x
    elif h < 240:
        r, g, b = 0.0, x, c
    elif h < 300:
        r, g, b = x, 0.0, c
    else:
        r, g, b = c, 0.0, x

    return "#" + "".join(_byte_hex(round_half_up((n + m) * 255)) for n in (r, g, b))


def rgb_string_to_hex(value: str) -> str:
    """Convert ``rgb()``/``rgba()`` to hex, dropping any alpha channel."""
    match = _RGB_FUNC_RE.search(value)
    if not match:
        return FALLBACK_HEX
    return "#" + "".join(_byte_hex(round_half_up(float(match.group(i)))) for i in (1, 2, 3))


def to_hex(value: str) -> str:
    """Convert any supported color notation to hex.

    Hex input is returned unchanged. Unparseable input logs a warning and
    yields black.
    """
    value = value.strip()
    if value.startswith("#"):
        return value
    if value.lower().startswith("rgb"):
        return rgb_string_to_hex(value)

    parsed = parse_hsl(value)
    if parsed is None:
        logger.warning("Could not parse color %r, using %s", value, FALLBACK_HEX)
        return FALLBACK_HEX
    return hsl_to_hex(*parsed)


def lighten(value: str, amount: float) -> str:
    """Move HSL lightness ``amount`` of the way towards white."""
    parsed = parse_hsl(value)
    if parsed is None:
        return value
    new_l = min(100.0, parsed.l + (100 - parsed.l) * amount)
    return hsl_to_hex(parsed.h, parsed.s, new_l)


def darken(value: str, amount: float) -> str:
    """Scale HSL lightness down by ``amount`` (0-1)."""
    parsed = parse_hsl(value)
    if parsed is None:
        return value
    new_l = max(0.0, parsed.l * (1 - amount))
    return hsl_to_hex(parsed.h, parsed.s, new_l)


def with_alpha(value: str, alpha: float) -> str:
    """Return the color as ``#rrggbbaa`` with the given 0-1 alpha."""
    return f"{to_hex(value)}{_byte_hex(round_half_up(alpha * 255))}"
