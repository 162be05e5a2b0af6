"""Calibration constants and environment-driven settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


# Camera calibration: millimetres covered by one pixel at the fixed glass distance
MM_PER_PIXEL = 0.5

# Laplacian response needed for a pixel to join the edge overlay
EDGE_THRESHOLD = 40

# Above this share of white pixels the threshold picked the background
MAX_FOREGROUND_PCT = 60.0

# Row split between forefoot/midfoot and midfoot/rearfoot (toes up, heel down)
FOREFOOT_END_RATIO = 0.35
MIDFOOT_END_RATIO = 0.65

BODY_BLUR_SIGMA = 1.0
EDGE_BLUR_SIGMA = 1.0
PRESSURE_GAMMA = 1.5

VISION_ENDPOINT = "https://api.anthropic.com/v1/messages"
VISION_MODEL = "claude-sonnet-4-5-20250929"
VISION_TIMEOUT = 30.0
VISION_MAX_TOKENS = 1024

API_KEY_ENV = "ANTHROPIC_API_KEY"
API_KEY_FILE = Path.home() / ".ANTHROPIC_API_KEY"


def get_api_key() -> Optional[str]:
    """Return the vision API key, or None when no credentials are configured.

    The environment variable wins; a key file in the home directory is
    accepted with a warning.
    """

    api_key = os.environ.get(API_KEY_ENV)
    if api_key:
        return api_key.strip()

    if API_KEY_FILE.exists():
        logging.warning(
            "Using API key from %s. Please set %s environment variable instead.",
            API_KEY_FILE, API_KEY_ENV,
        )
        return API_KEY_FILE.read_text().strip() or None

    return None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for one process.

    Fields:
        mm_per_pixel: Calibration factor used by the unit converter.
        edge_threshold: Binarisation threshold for the edge overlay.
        vision_endpoint: URL of the messages API.
        vision_model: Vision-capable model id.
        vision_timeout: Seconds before the remote call is abandoned.
        api_key: Credentials; None means the analysis runs offline.
    """

    mm_per_pixel: float = MM_PER_PIXEL
    edge_threshold: float = EDGE_THRESHOLD
    vision_endpoint: str = VISION_ENDPOINT
    vision_model: str = VISION_MODEL
    vision_timeout: float = VISION_TIMEOUT
    api_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            mm_per_pixel=_env_float("FOOTPRINT_MM_PER_PIXEL", MM_PER_PIXEL),
            edge_threshold=_env_float("FOOTPRINT_EDGE_THRESHOLD", EDGE_THRESHOLD),
            vision_endpoint=os.environ.get("FOOTPRINT_VISION_ENDPOINT", VISION_ENDPOINT),
            vision_model=os.environ.get("FOOTPRINT_VISION_MODEL", VISION_MODEL),
            vision_timeout=_env_float("FOOTPRINT_VISION_TIMEOUT", VISION_TIMEOUT),
            api_key=get_api_key(),
        )
        if settings.mm_per_pixel <= 0:
            raise ValueError("FOOTPRINT_MM_PER_PIXEL must be positive")
        if settings.vision_timeout <= 0:
            raise ValueError("FOOTPRINT_VISION_TIMEOUT must be positive")
        return settings
