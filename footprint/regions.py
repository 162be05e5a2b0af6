"""Deterministic forefoot/midfoot/rearfoot breakdown from pixel intensities.

This is the guaranteed fallback of the assisted analysis: no randomness and
no remote calls, so identical pressure images always produce identical
results.
"""

from __future__ import annotations

import logging
from typing import Union

import numpy as np
from PIL import Image

from footprint.config import FOREFOOT_END_RATIO, MIDFOOT_END_RATIO
from footprint.models import FootAnalysisResult
from footprint.units import clamp_percentage


def _pressure_array(pressure_image: Union[Image.Image, np.ndarray]) -> np.ndarray:
    if isinstance(pressure_image, Image.Image):
        if pressure_image.mode != "L":
            pressure_image = pressure_image.convert("L")
        return np.asarray(pressure_image, dtype=np.float64)

    arr = np.asarray(pressure_image)
    if arr.ndim == 3 and arr.shape[2] > 0:
        # Channel count mismatch: rebuild a single-channel buffer
        if arr.shape[2] < 3:
            arr = arr[..., 0]
        else:
            rgb = np.ascontiguousarray(arr[..., :3].astype(np.uint8))
            arr = np.asarray(Image.fromarray(rgb).convert("L"))
    if arr.ndim != 2:
        raise ValueError(f"Expected a 2-D pressure image, got shape {arr.shape}")
    return arr.astype(np.float64)


def analyze_locally(pressure_image: Union[Image.Image, np.ndarray]) -> FootAnalysisResult:
    """Split normalised pressure by row bands and report region percentages.

    Each pixel contributes ``p = 1 - g/255``; pure background (``p <= 0``) is
    ignored. Rows ``[0, 0.35h)`` are forefoot, ``[0.35h, 0.65h)`` midfoot and
    the rest rearfoot. ``contact_total_pct`` is the mean normalised pressure
    over non-background pixels.
    """

    grey = _pressure_array(pressure_image)
    height = grey.shape[0]

    pressure = 1.0 - grey / 255.0
    pressure = np.where(pressure > 0, pressure, 0.0)
    count_mask = int(np.count_nonzero(pressure))

    rows = np.arange(height, dtype=np.float64)
    row_sums = pressure.sum(axis=1)
    sum_fore = float(row_sums[rows < FOREFOOT_END_RATIO * height].sum())
    sum_mid = float(row_sums[(rows >= FOREFOOT_END_RATIO * height) & (rows < MIDFOOT_END_RATIO * height)].sum())
    sum_rear = float(row_sums[rows >= MIDFOOT_END_RATIO * height].sum())
    sum_all = sum_fore + sum_mid + sum_rear

    if count_mask == 0 or sum_all <= 0:
        logging.info("Local analysis found no pressure signal")
        return FootAnalysisResult()

    result = FootAnalysisResult(
        contact_total_pct=clamp_percentage(100.0 * sum_all / count_mask),
        forefoot_pct=clamp_percentage(100.0 * sum_fore / sum_all),
        midfoot_pct=clamp_percentage(100.0 * sum_mid / sum_all),
        rearfoot_pct=clamp_percentage(100.0 * sum_rear / sum_all),
    )
    logging.debug(
        "Local analysis: fore=%.2f mid=%.2f rear=%.2f contact=%.2f (%d px)",
        result.forefoot_pct, result.midfoot_pct, result.rearfoot_pct,
        result.contact_total_pct, count_mask,
    )
    return result
