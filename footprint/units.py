"""Pixel-to-millimetre scaling and percentage arithmetic."""

from __future__ import annotations

import math
import sys
from typing import Any

from footprint.config import MM_PER_PIXEL


def pixels_to_millimeters(px: float, mm_per_pixel: float = MM_PER_PIXEL) -> float:
    """Scale a pixel distance by the fixed camera calibration factor."""

    return round(float(px) * mm_per_pixel, 2)


def chippaux_smirak_index(forefoot_width_px: float, isthmus_width_px: float) -> float:
    """Isthmus width as a percentage of forefoot width.

    The ratio is dimensionless, so raw pixel widths are used directly.
    """

    if forefoot_width_px <= 0:
        raise ValueError("forefoot width must be positive")
    return round(100.0 * isthmus_width_px / forefoot_width_px, 2)


def finite_or_zero(value: Any) -> float:
    """Coerce a loosely typed value to a finite float, 0.0 when impossible."""

    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except OverflowError:
        # Integers beyond float range saturate rather than fail
        return sys.float_info.max if value > 0 else -sys.float_info.max
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def clamp_percentage(value: Any) -> float:
    """Clamp to [0, 100] and round to 2 decimals; junk becomes 0."""

    return round(min(100.0, max(0.0, finite_or_zero(value))), 2)
