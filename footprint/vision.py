"""Client for the remote vision model that reads pressure maps.

The model is asked for a JSON object with region percentages and two widths
in pixels. Everything returned here is untrusted; validation happens in
``footprint.analysis``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests
from PIL import Image

from footprint.config import VISION_ENDPOINT, VISION_MAX_TOKENS, VISION_MODEL, VISION_TIMEOUT, Settings
from footprint.errors import ExternalAnalysisFailure
from footprint.imaging import encode_png_base64
from footprint.models import NO_FOOTPRINT_NOTE

ANALYSIS_PROMPT = f"""This is a plantar pressure map derived from a photo of a foot pressed on glass.
Darker pixels mean MORE pressure; white is background. A thin white line traces the foot outline.
The toes point to the top of the image and the heel to the bottom.

Estimate:
1. contactTotalPct: overall contact intensity of the footprint, 0-100.
2. forefootPct, midfootPct, rearfootPct: share of the load on the forefoot (top ~35%),
   midfoot (middle ~30%) and rearfoot (bottom ~35%); the three should add up to 100.
3. forefootWidthPx: widest width of the forefoot, in pixels of this image.
4. isthmusWidthPx: narrowest width of the midfoot (isthmus), in pixels of this image.
5. note: one short clinical observation.

Respond with ONLY a JSON object with this exact structure:
{{
  "contactTotalPct": 0,
  "forefootPct": 0,
  "midfootPct": 0,
  "rearfootPct": 0,
  "forefootWidthPx": 0,
  "isthmusWidthPx": 0,
  "note": ""
}}

If no footprint is visible, set every numeric field to 0 and note to exactly "{NO_FOOTPRINT_NOTE}"."""


def parse_analysis_response(response: str) -> Dict[str, Any]:
    """Decode the model's JSON reply, tolerating markdown code fences.

    Returns an empty dict when the reply is not a JSON object.
    """

    if not response:
        return {}

    text = response
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logging.warning("Vision response was not valid JSON")
        return {}

    if not isinstance(data, dict):
        logging.warning("Vision response was JSON but not an object")
        return {}
    return data


class VisionClient:
    """Sends a pressure map to the messages API and returns the reply text.

    A single attempt is made; any failure raises ``ExternalAnalysisFailure``.
    """

    def __init__(
        self,
        api_key: str,
        *,
        model: str = VISION_MODEL,
        endpoint: str = VISION_ENDPOINT,
        timeout: float = VISION_TIMEOUT,
        max_tokens: int = VISION_MAX_TOKENS,
        prompt: str = ANALYSIS_PROMPT,
    ) -> None:
        if not api_key:
            raise ValueError("An API key is required for the vision client")
        self.api_key = api_key
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.prompt = prompt

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["VisionClient"]:
        """Build a client, or None when no credentials are configured."""

        if not settings.api_key:
            return None
        return cls(
            settings.api_key,
            model=settings.vision_model,
            endpoint=settings.vision_endpoint,
            timeout=settings.vision_timeout,
        )

    def _build_request(self, pressure_image: Image.Image) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": 0.0,
            "messages": [{
                "role": "user",
                "content": [
                    {"type": "text", "text": self.prompt},
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": "image/png",
                            "data": encode_png_base64(pressure_image),
                        },
                    },
                ],
            }],
        }

    def request_vision_analysis(self, pressure_image: Image.Image) -> str:
        """Return the model's text reply for ``pressure_image``."""

        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }
        logging.info("Requesting vision analysis from %s", self.model)
        try:
            response = requests.post(
                self.endpoint,
                headers=headers,
                json=self._build_request(pressure_image),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise ExternalAnalysisFailure(f"Vision request timed out after {self.timeout}s") from exc
        except requests.exceptions.RequestException as exc:
            raise ExternalAnalysisFailure(f"Vision request failed: {exc}") from exc

        if response.status_code != 200:
            logging.error("Vision API error %d: %s", response.status_code, response.text[:500])
            raise ExternalAnalysisFailure(f"API error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ExternalAnalysisFailure("Vision API returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise ExternalAnalysisFailure("Vision API returned an unexpected body")

        for item in payload.get("content") or []:
            if isinstance(item, dict) and item.get("type") == "text":
                return item.get("text", "")
        raise ExternalAnalysisFailure("Vision API reply contained no text")
