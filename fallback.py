"""
Simulated analysis — what the user sees when the vision provider is down.

One score is drawn for the whole pack and reused for every sub-score; the
lower the score, the more tips are offered (2–5), sampled without
replacement from a fixed pool of generic packaging advice.
"""
from __future__ import annotations

import math
import random
from typing import Optional

from models import PackagingAnalysis

SIMULATED_NARRATIVE = "Simulated analysis due to API error."

SCORE_LOW  = 4.0
SCORE_HIGH = 9.5
MIN_TIPS = 2
MAX_TIPS = 5

PACKAGING_TIPS: tuple[str, ...] = (
    "Increase contrast between product name and background.",
    "Use a larger font for key claims.",
    "Position the logo in the top third for maximum noticeability.",
    "Reduce visual clutter to focus attention on core message.",
    "Consider higher-saturation colors for stronger shelf pop.",
    "Add negative space around hero elements.",
    "Try a distinctive die-cut or silhouette.",
    "Apply the rule of thirds to layout.",
    "Add texture contrast to make elements pop.",
    "Re-evaluate hierarchy based on consumer priorities.",
)


def tip_count(score: float) -> int:
    # half-up rounding: a 5.5 score gets 5 tips, not 4
    return max(MIN_TIPS, min(MAX_TIPS, math.floor(10 - score + 0.5)))


def simulated_analysis(rng: Optional[random.Random] = None) -> PackagingAnalysis:
    rng = rng or random.Random()
    score = round(SCORE_LOW + rng.random() * (SCORE_HIGH - SCORE_LOW), 1)
    tips = rng.sample(PACKAGING_TIPS, tip_count(score))
    return PackagingAnalysis(
        attention_score=score,
        color_impact=score,
        readability=score,
        brand_visibility=score,
        suggestions=tips,
        analysis=SIMULATED_NARRATIVE,
    )
