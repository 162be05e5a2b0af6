"""Plantar pressure analysis of footprint-on-glass photographs."""

from footprint.analysis import PressureAnalyzer
from footprint.errors import ExternalAnalysisFailure, InvalidImageError
from footprint.imaging import extract_mask, synthesize_pressure_map
from footprint.models import NO_FOOTPRINT_NOTE, FootAnalysisResult, RawImage
from footprint.pipeline import FootprintReport, analyze_footprint
from footprint.regions import analyze_locally
from footprint.units import pixels_to_millimeters

__all__ = [
    "NO_FOOTPRINT_NOTE",
    "ExternalAnalysisFailure",
    "FootAnalysisResult",
    "FootprintReport",
    "InvalidImageError",
    "PressureAnalyzer",
    "RawImage",
    "analyze_footprint",
    "analyze_locally",
    "extract_mask",
    "pixels_to_millimeters",
    "synthesize_pressure_map",
]
