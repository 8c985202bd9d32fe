"""Red-white-blue diverging color scale for TWS change.

Blue is very positive (increasing groundwater), white is zero and red is
very negative (decreasing groundwater). The color changes exponentially
with the value, so small changes near zero stay visible while extreme
values compress toward full saturation. The scale assumes ``min = -max``.

The gradient math is shared with the legend and with the tiles that were
rendered offline, so it must stay bit for bit the same.
"""
import math
from typing import NamedTuple

import numpy as np

# Scaling factor of the gradient
A = 500


class RGBColor(NamedTuple):
    """An 8 bit per channel color."""

    red: int
    green: int
    blue: int

    @property
    def hex(self) -> str:
        """The color as ``#rrggbb``."""
        return to_hex(self)


def to_hex(rgb) -> str:
    """Format three 0-255 channels as ``#rrggbb``."""
    return "#" + "".join(f"{int(channel):02x}" for channel in rgb)


def _round_channel(x: float) -> int:
    # Half up rounding, clamped to a byte
    return int(min(max(math.floor(x + 0.5), 0), 255))


def _scaled(value: float, max_value: float) -> float:
    b = max_value / 2
    if b > 0:
        return value / b
    # A vanishing scale saturates everything but zero
    if value == 0:
        return 0.0
    return math.copysign(math.inf, value)


def get_color(value: float, max_value: float) -> RGBColor:
    """Choose the color representing ``value`` on a ``[-max, max]`` scale.

    Parameters
    ----------
    value : float
        Signed value to color.
    max_value : float
        Magnitude where the scale saturates. A non-positive magnitude turns
        the scale into a step: zero stays near white, anything else becomes
        pure blue or pure red.

    Returns
    -------
    RGBColor
    """
    if value < 0:
        # negative value --> decreasing groundwater --> red
        red = 255
        loss = A * math.exp(_scaled(value, max_value))
        if loss > 255:
            green = 255
            blue = loss - 255
        else:
            green = loss
            blue = 0
    elif value >= 0:
        # positive value --> increasing groundwater --> blue
        blue = 255
        gain = A * math.exp(-_scaled(value, max_value))
        if gain > 255:
            green = 255
            red = gain - 255
        else:
            green = gain
            red = 0
    else:
        # NaN
        red = green = blue = .5
    return RGBColor(_round_channel(red), _round_channel(green), _round_channel(blue))


def get_colors(values, max_value: float) -> np.ndarray:
    """Vectorized :func:`get_color`.

    Parameters
    ----------
    values : array_like
        Values to color, any shape.
    max_value : float
        Magnitude where the scale saturates.

    Returns
    -------
    numpy.ndarray
        ``uint8`` array of shape ``values.shape + (3,)`` holding red, green
        and blue.
    """
    values = np.asarray(values, dtype=np.float64)
    b = max_value / 2
    with np.errstate(divide="ignore", invalid="ignore"):
        if b > 0:
            scaled = values / b
        else:
            scaled = np.where(values == 0, 0.0, np.copysign(np.inf, values))
        ramp = A * np.exp(-np.abs(scaled))

    loss = values < 0
    gain = values >= 0
    rgb = np.full(values.shape + (3,), .5)

    saturated = ramp > 255
    rgb[..., 0] = np.where(loss, 255, np.where(gain & saturated, ramp - 255, rgb[..., 0]))
    rgb[..., 0] = np.where(gain & ~saturated, 0, rgb[..., 0])
    rgb[..., 1] = np.where(loss | gain, np.where(saturated, 255, ramp), rgb[..., 1])
    rgb[..., 2] = np.where(gain, 255, np.where(loss & saturated, ramp - 255, rgb[..., 2]))
    rgb[..., 2] = np.where(loss & ~saturated, 0, rgb[..., 2])

    return np.clip(np.floor(rgb + 0.5), 0, 255).astype(np.uint8)


def get_hex_colors(values, max_value: float) -> list:
    """``#rrggbb`` strings for a sequence of values."""
    return [to_hex(rgb) for rgb in get_colors(values, max_value).reshape(-1, 3)]
