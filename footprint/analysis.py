"""Assisted footprint analysis with a deterministic local fallback.

The remote vision model is asked for region percentages and two widths. Its
reply is validated, repaired and normalised here. Any failure of the remote
call, or a reply without region data, resolves to ``analyze_locally`` on the
same pressure image, so callers always receive a usable result.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Callable, Mapping, Optional, Union

from PIL import Image

from footprint.config import MM_PER_PIXEL, VISION_TIMEOUT
from footprint.models import NO_FOOTPRINT_NOTE, FootAnalysisResult, no_footprint_result
from footprint.regions import analyze_locally
from footprint.units import (
    chippaux_smirak_index,
    clamp_percentage,
    finite_or_zero,
    pixels_to_millimeters,
)
from footprint.vision import parse_analysis_response

VisionResponse = Union[str, Mapping[str, Any], None]
VisionCapability = Callable[[Image.Image], VisionResponse]

PERCENT_FIELDS = ("contactTotalPct", "forefootPct", "midfootPct", "rearfootPct")
WIDTH_FIELDS = ("forefootWidthPx", "isthmusWidthPx")


def _as_mapping(response: VisionResponse) -> Mapping[str, Any]:
    if isinstance(response, Mapping):
        return response
    if isinstance(response, (str, bytes)):
        text = response.decode("utf-8", errors="replace") if isinstance(response, bytes) else response
        return parse_analysis_response(text)
    if response is not None:
        logging.warning("Unexpected vision response type: %s", type(response).__name__)
    return {}


def _note_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _is_no_footprint_note(note: Optional[str]) -> bool:
    if note is None:
        return False
    return note.strip().rstrip(".").strip().casefold() == NO_FOOTPRINT_NOTE.casefold()


class PressureAnalyzer:
    """Orchestrates the assisted analysis of a pressure image.

    Args:
        capability: Callable sending the image to the vision model and
            returning its reply (text or mapping). None runs offline.
        mm_per_pixel: Calibration factor for the width fields.
        timeout: Upper bound, in seconds, for ``analyze_async``.
    """

    def __init__(
        self,
        capability: Optional[VisionCapability] = None,
        *,
        mm_per_pixel: float = MM_PER_PIXEL,
        timeout: float = VISION_TIMEOUT,
    ) -> None:
        self.capability = capability
        self.mm_per_pixel = mm_per_pixel
        self.timeout = timeout

    def analyze(self, pressure_image: Image.Image) -> FootAnalysisResult:
        """Analyse ``pressure_image``; never raises."""

        if self.capability is None:
            logging.info("No vision capability configured; using local analysis")
            return analyze_locally(pressure_image)

        try:
            response = self.capability(pressure_image)
            return self.interpret(response, pressure_image)
        except Exception as exc:
            logging.warning("Assisted analysis failed (%s); using local analysis", exc)
            return analyze_locally(pressure_image)

    async def analyze_async(self, pressure_image: Image.Image) -> FootAnalysisResult:
        """Asynchronous variant bounded by ``self.timeout``.

        A timed-out worker thread cannot be interrupted; it keeps running
        until the capability returns, so the capability needs its own limit.
        ``build_analyzer`` gives the HTTP client the same timeout.
        """

        if self.capability is None:
            return analyze_locally(pressure_image)

        try:
            response = await asyncio.wait_for(
                asyncio.to_thread(self.capability, pressure_image),
                timeout=self.timeout,
            )
            return self.interpret(response, pressure_image)
        except asyncio.TimeoutError:
            logging.warning("Assisted analysis timed out after %.1fs; using local analysis", self.timeout)
            return analyze_locally(pressure_image)
        except Exception as exc:
            logging.warning("Assisted analysis failed (%s); using local analysis", exc)
            return analyze_locally(pressure_image)

    def interpret(self, response: VisionResponse, pressure_image: Image.Image) -> FootAnalysisResult:
        """Turn an untrusted vision reply into a result, falling back when it carries no data."""

        data = _as_mapping(response)
        pct = {field: clamp_percentage(data.get(field)) for field in PERCENT_FIELDS}
        widths = {field: finite_or_zero(data.get(field)) for field in WIDTH_FIELDS}
        note = _note_text(data.get("note"))

        if (
            all(value == 0 for value in pct.values())
            and all(value == 0 for value in widths.values())
            and _is_no_footprint_note(note)
        ):
            logging.info("Vision model reported no footprint")
            return no_footprint_result()

        region_sum = pct["forefootPct"] + pct["midfootPct"] + pct["rearfootPct"]
        if region_sum <= 0:
            logging.warning("Vision response carried no region data; using local analysis")
            return analyze_locally(pressure_image)

        scale = 100.0 / region_sum
        forefoot_width_mm = isthmus_width_mm = index = None
        forefoot_px, isthmus_px = widths["forefootWidthPx"], widths["isthmusWidthPx"]
        if forefoot_px > 0 and isthmus_px > 0:
            forefoot_width_mm = pixels_to_millimeters(forefoot_px, self.mm_per_pixel)
            isthmus_width_mm = pixels_to_millimeters(isthmus_px, self.mm_per_pixel)
            index = chippaux_smirak_index(forefoot_px, isthmus_px)
            if not all(math.isfinite(v) for v in (forefoot_width_mm, isthmus_width_mm, index)):
                logging.warning("Vision widths out of range; leaving widths unset")
                forefoot_width_mm = isthmus_width_mm = index = None

        return FootAnalysisResult(
            contact_total_pct=pct["contactTotalPct"],
            forefoot_pct=clamp_percentage(pct["forefootPct"] * scale),
            midfoot_pct=clamp_percentage(pct["midfootPct"] * scale),
            rearfoot_pct=clamp_percentage(pct["rearfootPct"] * scale),
            forefoot_width_mm=forefoot_width_mm,
            isthmus_width_mm=isthmus_width_mm,
            chippaux_smirak_index=index,
            note=note,
        )
