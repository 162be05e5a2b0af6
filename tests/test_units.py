import math

import pytest

from footprint.config import MM_PER_PIXEL
from footprint.units import chippaux_smirak_index, clamp_percentage, finite_or_zero, pixels_to_millimeters


def test_zero_pixels_is_zero_mm():
    assert pixels_to_millimeters(0) == 0


@pytest.mark.parametrize("px", [1, 13.5, 200, 812])
def test_linear(px):
    assert pixels_to_millimeters(2 * px) == pytest.approx(2 * pixels_to_millimeters(px), abs=0.01)


def test_uses_calibration_constant():
    assert pixels_to_millimeters(200) == round(200 * MM_PER_PIXEL, 2)
    assert pixels_to_millimeters(200, mm_per_pixel=0.264) == 52.8


def test_chippaux_smirak_index():
    assert chippaux_smirak_index(200, 80) == 40.0


def test_chippaux_smirak_requires_forefoot_width():
    with pytest.raises(ValueError):
        chippaux_smirak_index(0, 80)


@pytest.mark.parametrize(
    "value,expected",
    [(-5, 0.0), (150, 100.0), (float("nan"), 0.0), (float("inf"), 0.0), ("42.129", 42.13), (None, 0.0), ("abc", 0.0)],
)
def test_clamp_percentage(value, expected):
    assert clamp_percentage(value) == expected


def test_finite_or_zero_rejects_booleans():
    assert finite_or_zero(True) == 0.0
    assert math.isfinite(finite_or_zero(float("-inf")))


def test_oversized_integer_saturates():
    assert clamp_percentage(10**400) == 100.0
    assert clamp_percentage(-(10**400)) == 0.0
    assert math.isfinite(finite_or_zero(10**400))
