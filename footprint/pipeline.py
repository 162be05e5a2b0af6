"""End-to-end run: photo → mask → pressure map → analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from footprint.analysis import PressureAnalyzer
from footprint.config import EDGE_THRESHOLD, Settings
from footprint.imaging import encode_png, extract_mask, load_image, synthesize_pressure_map
from footprint.models import FootAnalysisResult, RawImage
from footprint.vision import VisionClient


@dataclass(frozen=True)
class FootprintReport:
    """Derived images and the analysis for one photo."""

    mask: Image.Image
    pressure_map: Image.Image
    result: FootAnalysisResult

    def pressure_png(self) -> bytes:
        return encode_png(self.pressure_map)

    def mask_png(self) -> bytes:
        return encode_png(self.mask)


def build_analyzer(settings: Settings, *, offline: bool = False) -> PressureAnalyzer:
    """Wire a ``PressureAnalyzer`` to the vision client described by ``settings``."""

    client = None if offline else VisionClient.from_settings(settings)
    if client is None:
        logging.info("Vision analysis disabled; results come from local analysis")
    return PressureAnalyzer(
        client.request_vision_analysis if client else None,
        mm_per_pixel=settings.mm_per_pixel,
        timeout=settings.vision_timeout,
    )


def analyze_footprint(
    raw: RawImage,
    analyzer: Optional[PressureAnalyzer] = None,
    *,
    edge_threshold: float = EDGE_THRESHOLD,
) -> FootprintReport:
    """Run the full pipeline for one photo.

    Raises:
        InvalidImageError: if the photo is empty or undecodable. No other
            error escapes; remote failures fall back to local analysis.
    """

    analyzer = analyzer or PressureAnalyzer()
    photo = load_image(raw)
    logging.info("Analysing %s (%dx%d)", raw.filename, photo.width, photo.height)

    mask = extract_mask(photo)
    pressure_map = synthesize_pressure_map(photo, edge_threshold=edge_threshold, mask=mask)
    result = analyzer.analyze(pressure_map)

    logging.info(
        "Result for %s: fore=%.2f%% mid=%.2f%% rear=%.2f%% contact=%.2f%%",
        raw.filename, result.forefoot_pct, result.midfoot_pct,
        result.rearfoot_pct, result.contact_total_pct,
    )
    return FootprintReport(mask=mask, pressure_map=pressure_map, result=result)
