# -*- coding: utf-8 -*-
"""
mt_brain.aggregator

Confidence / risk aggregation.

aggregate(result, attrs) blends the decision engine's confidence with how
complete the scenario record is:

    score = clamp(0.7 * confidence + 0.3 * completeness)

completeness = known tracked fields / all tracked fields.

Bands
-----
- score < 0.4          -> needs_review
- 0.4 <= score <= 0.7  -> moderate
- score > 0.7          -> high

With no usable evidence (no result yet, or an unknown design with nothing
known) the score is the neutral 0.5, flagged insufficient_evidence and
banded needs_review. The assessment is advisory; it never changes the
classification.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .schema import ClassificationResult, DesignType, ScenarioAttributes

CONFIDENCE_WEIGHT = 0.7
COMPLETENESS_WEIGHT = 0.3

NEEDS_REVIEW_BELOW = 0.4
HIGH_ABOVE = 0.7

NEUTRAL_SCORE = 0.5


class RiskBand(str, Enum):
    NEEDS_REVIEW = "needs_review"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass(frozen=True)
class RiskAssessment:
    score: float
    band: RiskBand
    completeness: float
    insufficient_evidence: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "band": self.band.value,
            "completeness": self.completeness,
            "insufficient_evidence": self.insufficient_evidence,
        }


def band_for(score: float) -> RiskBand:
    if score < NEEDS_REVIEW_BELOW:
        return RiskBand.NEEDS_REVIEW
    if score > HIGH_ABOVE:
        return RiskBand.HIGH
    return RiskBand.MODERATE


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def aggregate(
    result: Optional[ClassificationResult],
    attrs: Optional[ScenarioAttributes],
) -> RiskAssessment:
    attrs = attrs if attrs is not None else ScenarioAttributes()
    completeness = round(attrs.completeness(), 4)

    no_evidence = result is None or (
        result.design_type is DesignType.UNKNOWN and not attrs.known_fields()
    )
    if no_evidence:
        return RiskAssessment(
            score=NEUTRAL_SCORE,
            band=RiskBand.NEEDS_REVIEW,
            completeness=completeness,
            insufficient_evidence=True,
        )

    score = _clamp(CONFIDENCE_WEIGHT * result.confidence + COMPLETENESS_WEIGHT * completeness)
    score = round(score, 4)
    return RiskAssessment(score=score, band=band_for(score), completeness=completeness)
