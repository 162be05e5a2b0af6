"""Data models for raw photos and analysis results.

Both models are frozen: a photo belongs to the caller and a result is built
once per analysis.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, Optional, Union

NO_FOOTPRINT_NOTE = "No footprint detected"


@dataclass(frozen=True)
class RawImage:
    """Encoded photo bytes as received from the caller.

    Fields:
        data: PNG/JPEG/... file contents.
        filename: Original file name, used for the declared extension.
    """

    data: bytes
    filename: str = "upload.png"

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower() or ".png"

    @property
    def size_bytes(self) -> int:
        return len(self.data) if self.data else 0


@dataclass(frozen=True)
class FootAnalysisResult:
    """Plantar pressure breakdown for one footprint.

    Percentages are in [0, 100]. When the three regions carry data they sum
    to 100 (within rounding). Width and index fields are only set when the
    assisted analysis measured both widths.
    """

    contact_total_pct: float = 0.0
    forefoot_pct: float = 0.0
    midfoot_pct: float = 0.0
    rearfoot_pct: float = 0.0
    forefoot_width_mm: Optional[float] = None
    isthmus_width_mm: Optional[float] = None
    chippaux_smirak_index: Optional[float] = None
    note: Optional[str] = None

    @property
    def region_total(self) -> float:
        return self.forefoot_pct + self.midfoot_pct + self.rearfoot_pct

    @property
    def is_no_footprint(self) -> bool:
        return self.note == NO_FOOTPRINT_NOTE and self.region_total == 0 and self.contact_total_pct == 0

    def to_dict(self) -> Dict[str, Union[float, str]]:
        """Serialise with the wire names used by the persistence layer."""

        payload: Dict[str, Union[float, str]] = {
            "contactTotalPct": self.contact_total_pct,
            "forefootPct": self.forefoot_pct,
            "midfootPct": self.midfoot_pct,
            "rearfootPct": self.rearfoot_pct,
        }
        optional = {
            "forefootWidthMm": self.forefoot_width_mm,
            "isthmusWidthMm": self.isthmus_width_mm,
            "chippauxSmirakIndex": self.chippaux_smirak_index,
            "note": self.note,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


def no_footprint_result() -> FootAnalysisResult:
    """Terminal result for a photo that shows no analysable footprint."""

    return FootAnalysisResult(note=NO_FOOTPRINT_NOTE)
