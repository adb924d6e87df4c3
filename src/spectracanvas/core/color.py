"""
Hue synthesis.

Every mode seeds its palette from one base hue per frame: the user's hue
shift plus a slow sinusoidal wobble (±54° with a ~12.6s period).
"""

import colorsys
import math
from dataclasses import dataclass
from typing import Tuple

WOBBLE_DEGREES = 54.0
WOBBLE_RATE = 0.5  # rad/s

RGBA = Tuple[float, float, float, float]


def wrap_hue(hue: float) -> float:
    """Normalize any hue in degrees into [0, 360)."""
    wrapped = hue % 360.0
    # Tiny negative inputs round up to exactly 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped


def hue_wobble(elapsed: float) -> float:
    return WOBBLE_DEGREES * math.sin(WOBBLE_RATE * elapsed)


def base_hue(hue_shift: float, elapsed: float) -> float:
    """Combined frame hue: user shift plus time wobble, in [0, 360)."""
    return wrap_hue(hue_shift + hue_wobble(elapsed))


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def hsla(hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> RGBA:
    """
    CSS-style HSL to an RGBA float tuple.

    Saturation, lightness and alpha are fractions and are clamped into
    [0, 1] as a browser would.
    """
    r, g, b = colorsys.hls_to_rgb(
        wrap_hue(hue) / 360.0, _clamp01(lightness), _clamp01(saturation)
    )
    return (r, g, b, _clamp01(alpha))


def rgba(r: int, g: int, b: int, alpha: float = 1.0) -> RGBA:
    """8-bit channel color to an RGBA float tuple."""
    return (r / 255.0, g / 255.0, b / 255.0, _clamp01(alpha))


@dataclass(frozen=True)
class ColorState:
    """Color inputs for one frame."""

    hue_shift: int
    elapsed: float

    @property
    def base(self) -> float:
        return base_hue(self.hue_shift, self.elapsed)

    def offset(self, degrees: float) -> float:
        """Base hue rotated by ``degrees``, wrapped into [0, 360)."""
        return wrap_hue(self.base + degrees)
