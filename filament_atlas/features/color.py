"""Hex colour parsing and cluster colour blending."""

from __future__ import annotations

import math
import re
from typing import Iterable

import numpy as np
from PIL import ImageColor

RGB = tuple[int, int, int]

HEX_PATTERN = re.compile(r"^#[0-9a-f]{3,8}$", re.IGNORECASE)
_PLOTTABLE_HEX = re.compile(
    r"^#?(?:[0-9a-f]{3}|[0-9a-f]{4}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE
)


def is_valid_hex(value: str) -> bool:
    """Return ``True`` when *value* is ``#`` followed by 3 to 8 hex digits."""
    return isinstance(value, str) and bool(HEX_PATTERN.fullmatch(value))


def hex_to_rgb(value: str | None) -> RGB | None:
    """Return the red, green and blue channels of *value*.

    Shorthand forms are expanded by doubling each digit and any alpha channel
    is ignored. Returns ``None`` for anything that cannot be plotted.
    """
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if not _PLOTTABLE_HEX.fullmatch(cleaned):
        return None
    try:
        channels = ImageColor.getrgb("#" + cleaned.lstrip("#"))
    except ValueError:
        return None
    red, green, blue = channels[:3]
    return int(red), int(green), int(blue)


def rgb_to_hex(rgb: Iterable[int]) -> str:
    """Format a channel triple as ``#rrggbb``."""
    red, green, blue = (max(0, min(255, int(channel))) for channel in rgb)
    return f"#{red:02x}{green:02x}{blue:02x}"


def rms_color(hexes: Iterable[str]) -> RGB:
    """Blend *hexes* by root-mean-square per channel.

    Unparseable members contribute zero but still count towards the mean.
    """
    rows = [hex_to_rgb(value) or (0, 0, 0) for value in hexes]
    if not rows:
        return 0, 0, 0
    channels = np.asarray(rows, dtype=np.float64)
    means = np.sqrt(np.square(channels).sum(axis=0) / len(rows))
    red, green, blue = (_round_half_up(value) for value in means)
    return red, green, blue


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
