"""
models.py — canonical home of the pipeline's data types.

UploadedImage   → what the upload layer hands in (one per image)
PackagingAnalysis → validated scores + suggestions for one image
AnalysisResult  → what goes back to the caller (one per UploadedImage)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

SCORE_MIN = 1.0
SCORE_MAX = 10.0
MAX_SUGGESTIONS = 5

# Python attribute → wire (JSON) key used by the model and by callers
SCORE_FIELDS: dict[str, str] = {
    "attention_score":  "attentionScore",
    "color_impact":     "colorImpact",
    "readability":      "readability",
    "brand_visibility": "brandVisibility",
}


def clamp_score(value: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, float(value)))


@dataclass(frozen=True)
class UploadedImage:
    """An uploaded packaging image. The pipeline only ever reads it."""
    id: str
    raw_bytes: bytes
    preview: Optional[str] = None     # displayable reference, e.g. a data URI


@dataclass(frozen=True)
class PackagingAnalysis:
    attention_score: float
    color_impact: float
    readability: float
    brand_visibility: float
    suggestions: list[str] = field(default_factory=list)
    analysis: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Wire form, matching the JSON schema the model is asked for."""
        data: dict[str, Any] = {
            wire: getattr(self, attr) for attr, wire in SCORE_FIELDS.items()
        }
        data["suggestions"] = list(self.suggestions)
        data["analysis"] = self.analysis
        return data


@dataclass(frozen=True)
class AnalysisResult:
    image_id: str
    original_src: Optional[str]
    heatmap_src: Optional[str]        # JPEG data URI, None if rendering failed
    attention_score: float
    color_impact: float
    readability: float
    brand_visibility: float
    suggestions: list[str]
    analysis: str

    @classmethod
    def build(
        cls,
        image: UploadedImage,
        heatmap_src: Optional[str],
        analysis: PackagingAnalysis,
        original_src: Optional[str] = None,
    ) -> "AnalysisResult":
        return cls(
            image_id=image.id,
            original_src=original_src if original_src is not None else image.preview,
            heatmap_src=heatmap_src,
            attention_score=analysis.attention_score,
            color_impact=analysis.color_impact,
            readability=analysis.readability,
            brand_visibility=analysis.brand_visibility,
            suggestions=list(analysis.suggestions),
            analysis=analysis.analysis,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "imageId":     self.image_id,
            "originalSrc": self.original_src,
            "heatmapSrc":  self.heatmap_src,
        }
        data.update({wire: getattr(self, attr) for attr, wire in SCORE_FIELDS.items()})
        data["suggestions"] = list(self.suggestions)
        data["aiAnalysis"] = self.analysis
        return data
