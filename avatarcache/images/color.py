"""Color space conversions."""

from __future__ import annotations

from typing import Tuple


#: An RGB color, with each component between 0 and 255.
RGBColor = Tuple[int, int, int]

MAX_DEGREE = 360
MAX_RGB = 255
MAX_PERCENT = 100


def hsl_to_rgb(
    hue: float,
    saturation: float,
    lightness: float,
) -> RGBColor:
    """Convert an HSL color to RGB.

    This uses the conversion from the CSS Color specification.

    Args:
        hue (float):
            The hue, in degrees (-360 to 360).

        saturation (float):
            The saturation, in percent (0 to 100).

        lightness (float):
            The lightness, in percent (0 to 100).

    Returns:
        tuple:
        The red, green and blue components (0 to 255).
    """
    sat = saturation / MAX_PERCENT
    light = lightness / MAX_PERCENT
    a = sat * min(light, 1 - light)

    def f(n: int) -> int:
        k = (n + hue / 30) % 12
        value = light - a * max(-1, min(k - 3, 9 - k, 1))

        return int(round(value * MAX_RGB))

    return f(0), f(8), f(4)


def normalize_hue(
    hue: int,
) -> int:
    """Normalize a hue to the range 0 to 359.

    Args:
        hue (int):
            A hue in degrees, possibly negative.

    Returns:
        int:
        The equivalent hue between 0 and 359.
    """
    return hue % MAX_DEGREE


def rgb_to_hex(
    rgb: RGBColor,
) -> str:
    """Return the ``#rrggbb`` form of an RGB color.

    Args:
        rgb (tuple):
            The red, green and blue components.

    Returns:
        str:
        The color as a lowercase hex string.
    """
    return '#%02x%02x%02x' % tuple(rgb)


def hex_to_rgb(
    value: str,
) -> RGBColor:
    """Parse a ``#rrggbb`` (or ``rrggbb``) color.

    Args:
        value (str):
            The hex color.

    Returns:
        tuple:
        The red, green and blue components.
    """
    value = value.lstrip('#')

    return (int(value[0:2], 16),
            int(value[2:4], 16),
            int(value[4:6], 16))
