import numpy as np
import pytest
from PIL import Image

from footprint.imaging import synthesize_pressure_map
from footprint.models import FootAnalysisResult
from footprint.regions import analyze_locally


def test_all_background_returns_zeros():
    result = analyze_locally(Image.new("L", (50, 80), 255))
    assert result == FootAnalysisResult()


def test_band_split(banded_pressure):
    result = analyze_locally(banded_pressure)
    assert result.forefoot_pct == 50.0
    assert result.midfoot_pct == 0.0
    assert result.rearfoot_pct == 50.0
    assert result.contact_total_pct == 100.0
    assert result.forefoot_width_mm is None
    assert result.chippaux_smirak_index is None


def test_contact_is_mean_pressure_not_area():
    arr = np.full((100, 10), 255, dtype=np.uint8)
    arr[40:60, :] = 153  # p = 0.4
    result = analyze_locally(Image.fromarray(arr))
    assert result.contact_total_pct == pytest.approx(40.0)
    assert result.midfoot_pct == 100.0
    assert result.forefoot_pct == 0.0


def test_weighted_by_pressure():
    arr = np.full((100, 4), 255, dtype=np.uint8)
    arr[:35, :] = 0  # p = 1
    arr[65:, :] = 204  # p = 0.2
    result = analyze_locally(Image.fromarray(arr))
    assert result.forefoot_pct == pytest.approx(100 * 35 / 42, abs=0.01)
    assert result.rearfoot_pct == pytest.approx(100 * 7 / 42, abs=0.01)


def test_multichannel_input_is_reduced(banded_pressure):
    rgb = banded_pressure.convert("RGB")
    assert analyze_locally(rgb) == analyze_locally(banded_pressure)
    assert analyze_locally(np.asarray(rgb)) == analyze_locally(banded_pressure)


def test_deterministic(dark_glass_photo):
    pressure = synthesize_pressure_map(dark_glass_photo)
    first = analyze_locally(pressure)
    assert all(analyze_locally(pressure) == first for _ in range(3))


def test_synthetic_footprint_breakdown(dark_glass_photo):
    result = analyze_locally(synthesize_pressure_map(dark_glass_photo))
    total = result.forefoot_pct + result.midfoot_pct + result.rearfoot_pct
    assert total == pytest.approx(100.0, abs=0.01)
    for value in (result.contact_total_pct, result.forefoot_pct, result.midfoot_pct, result.rearfoot_pct):
        assert 0.0 <= value <= 100.0
    assert result.forefoot_pct > result.midfoot_pct
    assert result.rearfoot_pct > result.midfoot_pct


def test_rejects_non_image_shape():
    with pytest.raises(ValueError):
        analyze_locally(np.zeros(10))


@pytest.mark.parametrize("channels", [1, 2, 4])
def test_channel_axis_is_reduced(banded_pressure, channels):
    grey = np.asarray(banded_pressure)
    stacked = np.repeat(grey[..., np.newaxis], channels, axis=2)
    assert analyze_locally(stacked) == analyze_locally(banded_pressure)


def test_all_background_single_channel_axis():
    assert analyze_locally(np.full((100, 10, 1), 255, dtype=np.uint8)) == FootAnalysisResult()
