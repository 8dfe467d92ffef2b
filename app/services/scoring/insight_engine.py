"""SAFE-8 insight generator.

Pure function of (overall_score, dimension_scores, assessment_type): no I/O,
no clock, no randomness. Identical inputs always produce identical output,
which is what lets the backfill regenerate stored documents safely.

Thresholds live in scoring_constants.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from app.schemas.insights import (
    CriticalImpactArea,
    ImprovementArea,
    PillarScore,
    Strength,
    WeightedPriority,
)
from app.services.errors import ScoringValidationError
from app.services.scoring.scoring_constants import (
    BAND_ADOPTER_MIN,
    BAND_LEADER_MIN,
    BAND_NARRATIVES,
    BAND_OPENING_RECOMMENDATIONS,
    CRITICAL_SCORE_MAX,
    CRITICAL_WEIGHT_MIN,
    DEFAULT_ASSESSMENT_TYPE,
    EXPERT_ENGAGEMENT_RECOMMENDATION,
    IMPACT_DECIMALS,
    IMPROVEMENT_CEILING,
    PILLAR_KEYWORD_RECOMMENDATIONS,
    PRIORITY_HIGH,
    PRIORITY_HIGH_MIN_GAP,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_MEDIUM_MIN_GAP,
    STRENGTH_THRESHOLD,
    score_band,
)


@dataclass(frozen=True)
class _Pillar:
    area: str
    score: float
    weight: float


@dataclass(frozen=True)
class InsightResult:
    """Raw generator output, before formatting into the stored document."""

    assessment_type: str
    overall_score: float
    score_category: str
    overall_assessment: str
    strengths: list[Strength] = field(default_factory=list)
    improvement_areas: list[ImprovementArea] = field(default_factory=list)
    weighted_priorities: list[WeightedPriority] = field(default_factory=list)
    critical_impact_areas: list[CriticalImpactArea] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


def fmt_number(value: float) -> str:
    """Render 10.0 as '10' and 12.5 as '12.5'."""
    return f"{value:g}"


def _require_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScoringValidationError(f"{name} must be a number, got {type(value).__name__}")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ScoringValidationError(f"{name} must be a finite number")
    return number


def validate_overall_score(value: Any) -> float:
    """Return overall_score as float or raise ScoringValidationError."""
    score = _require_number(value, "overall_score")
    if score < 0 or score > 100:
        raise ScoringValidationError(f"overall_score must be within 0..100, got {score}")
    return score


def normalize_assessment_type(assessment_type: Any) -> str:
    """Upper-case and trim; blank falls back to GENERAL."""
    if assessment_type is None:
        return DEFAULT_ASSESSMENT_TYPE
    if not isinstance(assessment_type, str):
        raise ScoringValidationError("assessment_type must be a string")
    cleaned = assessment_type.strip().upper()
    return cleaned or DEFAULT_ASSESSMENT_TYPE


def _coerce_pillar(entry: Any, idx: int) -> _Pillar:
    if isinstance(entry, PillarScore):
        return _Pillar(area=entry.pillar_name, score=entry.score, weight=entry.weight)
    if not isinstance(entry, Mapping):
        raise ScoringValidationError(f"dimension_scores[{idx}] must be an object")
    area = entry.get("area") or entry.get("pillar_name")
    if not area:
        raise ScoringValidationError(f"dimension_scores[{idx}] is missing a pillar name")
    score = _require_number(entry.get("score"), f"dimension_scores[{idx}].score")
    if score < 0 or score > 100:
        raise ScoringValidationError(f"dimension_scores[{idx}].score must be within 0..100")
    weight = _require_number(entry.get("weight", 0), f"dimension_scores[{idx}].weight")
    if weight < 0:
        raise ScoringValidationError(f"dimension_scores[{idx}].weight must not be negative")
    return _Pillar(area=str(area), score=score, weight=weight)


def _improvement_priority(score: float) -> str:
    gap = STRENGTH_THRESHOLD - score
    if gap >= PRIORITY_HIGH_MIN_GAP:
        return PRIORITY_HIGH
    if gap >= PRIORITY_MEDIUM_MIN_GAP:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def _improvement_description(area: str, priority: str) -> str:
    if priority == PRIORITY_HIGH:
        return f"{area} is a significant gap requiring immediate attention"
    if priority == PRIORITY_MEDIUM:
        return f"{area} requires focused attention"
    return f"{area} is close to target and needs targeted refinement"


def _raw_impact(pillar: _Pillar) -> float:
    return pillar.weight * (IMPROVEMENT_CEILING - pillar.score) / 100.0


def _impact_score(pillar: _Pillar) -> float:
    quantum = Decimal(1).scaleb(-IMPACT_DECIMALS)
    return float(Decimal(repr(_raw_impact(pillar))).quantize(quantum, rounding=ROUND_HALF_UP))


def _overall_assessment(band: str, overall_score: float, assessment_type: str) -> str:
    return (
        f"{BAND_NARRATIVES[band]} ({band}, {fmt_number(round(overall_score, 1))}% "
        f"on the {assessment_type} assessment)"
    )


def _recommendations(
    band: str,
    overall_score: float,
    improvement: list[_Pillar],
    priorities: list[WeightedPriority],
) -> list[str]:
    recs = [BAND_OPENING_RECOMMENDATIONS[band]]
    if priorities:
        top = priorities[0]
        recs.append(
            f"Prioritize improvements in {top.area} - highest impact opportunity "
            f"({fmt_number(top.weight)}% of overall score)"
        )
    weak_names = [p.area.lower() for p in improvement]
    for keywords, text in PILLAR_KEYWORD_RECOMMENDATIONS:
        if any(k in name for name in weak_names for k in keywords) and text not in recs:
            recs.append(text)
    if overall_score < BAND_LEADER_MIN and (improvement or overall_score < BAND_ADOPTER_MIN):
        recs.append(EXPERT_ENGAGEMENT_RECOMMENDATION)
    return recs


def generate_insights(
    overall_score: Any,
    dimension_scores: list[Any] | None,
    assessment_type: Any,
) -> InsightResult:
    """Derive strengths, gaps, weighted priorities and recommendations.

    Raises ScoringValidationError for non-numeric or out-of-range input.
    An empty (or None) dimension_scores list yields empty derived lists and
    a narrative driven by overall_score alone.
    """
    score = validate_overall_score(overall_score)
    a_type = normalize_assessment_type(assessment_type)
    pillars = [_coerce_pillar(entry, i) for i, entry in enumerate(dimension_scores or [])]
    band = score_band(score)

    strengths: list[Strength] = []
    improvement: list[_Pillar] = []
    improvement_areas: list[ImprovementArea] = []
    for pillar in pillars:
        if pillar.score >= STRENGTH_THRESHOLD:
            strengths.append(
                Strength(
                    area=pillar.area,
                    score=pillar.score,
                    description=f"Strong performance in {pillar.area}",
                )
            )
            continue
        priority = _improvement_priority(pillar.score)
        improvement.append(pillar)
        improvement_areas.append(
            ImprovementArea(
                area=pillar.area,
                score=pillar.score,
                priority=priority,
                description=_improvement_description(pillar.area, priority),
            )
        )

    # sorted() is stable: equal impact keeps original pillar order
    ranked = sorted(improvement, key=lambda p: -_raw_impact(p))
    weighted_priorities = [
        WeightedPriority(
            area=p.area,
            score=p.score,
            weight=p.weight,
            impact_score=_impact_score(p),
            priority=rank,
            description=(
                f"{p.area} ({fmt_number(p.weight)}% weight) has "
                f"{fmt_number(round(IMPROVEMENT_CEILING - p.score, 1))}% improvement potential"
            ),
        )
        for rank, p in enumerate(ranked, start=1)
    ]

    critical_impact_areas = [
        CriticalImpactArea(
            area=p.area,
            score=p.score,
            weight=p.weight,
            priority=_improvement_priority(p.score),
            description=(
                f"High-weight pillar below {fmt_number(CRITICAL_SCORE_MAX)}% "
                "with outsized effect on the overall score"
            ),
        )
        for p in improvement
        if p.weight >= CRITICAL_WEIGHT_MIN and p.score < CRITICAL_SCORE_MAX
    ]

    return InsightResult(
        assessment_type=a_type,
        overall_score=score,
        score_category=band,
        overall_assessment=_overall_assessment(band, score, a_type),
        strengths=strengths,
        improvement_areas=improvement_areas,
        weighted_priorities=weighted_priorities,
        critical_impact_areas=critical_impact_areas,
        recommendations=_recommendations(band, score, improvement, weighted_priorities),
    )
