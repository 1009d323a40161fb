"""
Colour schemes for the two fluid layers.

Each scheme provides:
  - upper:  colour of the upper (lighter) fluid's particles
  - lower:  colour of the lower fluid's particles
  - bg:     background outside the pipe
  - wall:   pipe wall outline and axis marks

Layer colours end up in :class:`~stratflow.params.FluidParameters.color`;
the kinematics never read them.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Dict, List

from .params import RGB


@dataclass(frozen=True)
class ColorScheme:
    name: str
    upper: RGB
    lower: RGB
    bg: RGB = (12, 14, 18)
    wall: RGB = (120, 130, 140)


SCHEMES: Dict[str, ColorScheme] = {
    "oil_water": ColorScheme(
        name="Oil & Water",
        upper=(240, 170, 40), lower=(40, 120, 230),
    ),
    "lava": ColorScheme(
        name="Lava",
        upper=(255, 200, 50), lower=(180, 30, 10),
        bg=(18, 6, 2), wall=(110, 70, 50),
    ),
    "mint": ColorScheme(
        name="Mint",
        upper=(170, 255, 210), lower=(20, 150, 110),
        bg=(4, 16, 12), wall=(90, 140, 120),
    ),
    "ink": ColorScheme(
        name="Ink",
        upper=(235, 235, 245), lower=(60, 40, 160),
        bg=(8, 8, 14), wall=(120, 120, 150),
    ),
    "sunset": ColorScheme(
        name="Sunset",
        upper=(255, 180, 80), lower=(80, 20, 140),
        bg=(20, 6, 14), wall=(140, 90, 110),
    ),
}

DEFAULT_SCHEME = "oil_water"


def _clamp_rgb(r: float, g: float, b: float) -> RGB:
    return (
        max(0, min(255, int(r * 255))),
        max(0, min(255, int(g * 255))),
        max(0, min(255, int(b * 255))),
    )


def complementary(base: RGB) -> RGB:
    """Return the complementary (opposite hue) colour."""
    h, s, v = colorsys.rgb_to_hsv(base[0]/255, base[1]/255, base[2]/255)
    r, g, b = colorsys.hsv_to_rgb((h + 0.5) % 1.0, s, v)
    return _clamp_rgb(r, g, b)


def make_bg_from_base(base: RGB) -> RGB:
    """Very dark background tint from a layer colour."""
    return (max(1, base[0] // 12), max(1, base[1] // 12), max(1, base[2] // 12))


def create_custom_scheme(name: str, upper: RGB) -> ColorScheme:
    """Build a scheme from the upper fluid colour; the lower layer gets
    the complementary hue."""
    return ColorScheme(
        name=name,
        upper=upper,
        lower=complementary(upper),
        bg=make_bg_from_base(upper),
    )


def get_scheme(name: str) -> ColorScheme:
    if name not in SCHEMES:
        available = ", ".join(sorted(SCHEMES.keys()))
        raise KeyError(f"Unknown scheme '{name}'. Available: {available}")
    return SCHEMES[name]


def list_schemes() -> List[str]:
    return sorted(SCHEMES.keys())
