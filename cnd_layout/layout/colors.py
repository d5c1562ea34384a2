"""Default type colors.

Colors are spread over the CIELAB a*/b* plane with a phyllotactic (golden
angle) spiral at fixed lightness, then converted to sRGB. Consecutive types
therefore get visually distinct colors regardless of how many there are.
"""

import math
from typing import Dict, List, Sequence, Tuple

GOLDEN_ANGLE = math.radians(137.5)
RADIUS = 100.0
LIGHTNESS = 50.0

# D65 reference white
_XN, _YN, _ZN = 0.950470, 1.0, 1.088830


def _lab_to_xyz_component(t: float) -> float:
    return t ** 3 if t > 6.0 / 29.0 else 3 * (6.0 / 29.0) ** 2 * (t - 4.0 / 29.0)


def _linear_to_srgb(c: float) -> float:
    if c <= 0.0031308:
        return 12.92 * c
    return 1.055 * c ** (1 / 2.4) - 0.055


def lab_to_rgb(l: float, a: float, b: float) -> Tuple[int, int, int]:
    """Convert a CIELAB color to clamped 8-bit sRGB."""
    fy = (l + 16.0) / 116.0
    fx = fy + a / 500.0
    fz = fy - b / 200.0
    x = _XN * _lab_to_xyz_component(fx)
    y = _YN * _lab_to_xyz_component(fy)
    z = _ZN * _lab_to_xyz_component(fz)

    r = 3.2404542 * x - 1.5371385 * y - 0.4985314 * z
    g = -0.9692660 * x + 1.8760108 * y + 0.0415560 * z
    bl = 0.0556434 * x - 0.2040259 * y + 1.0572252 * z

    def to_byte(c: float) -> int:
        value = 255.0 * _linear_to_srgb(c)
        return int(round(min(255.0, max(0.0, value))))

    return to_byte(r), to_byte(g), to_byte(bl)


def phyllotactic_color(index: int) -> str:
    angle = index * GOLDEN_ANGLE
    r, g, b = lab_to_rgb(LIGHTNESS, RADIUS * math.cos(angle), RADIUS * math.sin(angle))
    return f"rgb({r}, {g}, {b})"


class ColorPicker:
    """Hands out ``total`` precomputed colors, cycling when exhausted."""

    def __init__(self, total: int):
        self.colors: List[str] = [phyllotactic_color(i) for i in range(max(total, 1))]
        self.index = 0

    def next_color(self) -> str:
        if self.index >= len(self.colors):
            self.index = 0
        color = self.colors[self.index]
        self.index += 1
        return color


def type_colors(type_ids: Sequence[str]) -> Dict[str, str]:
    """One default color per type, in the given order."""
    picker = ColorPicker(len(type_ids))
    return {type_id: picker.next_color() for type_id in type_ids}
