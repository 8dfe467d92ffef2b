"""SAFE-8 scoring: pillar normalization, insight generation and formatting."""

from app.services.scoring.gap_formatter import (
    build_insight_document,
    format_gap_analysis,
    format_service_recommendations,
)
from app.services.scoring.insight_engine import (
    InsightResult,
    generate_insights,
    normalize_assessment_type,
    validate_overall_score,
)
from app.services.scoring.pillar_normalizer import (
    PillarConfig,
    compute_overall_score,
    normalize_pillar_scores,
    pillar_scores_from_raw,
)

__all__ = [
    "InsightResult",
    "PillarConfig",
    "build_insight_document",
    "compute_overall_score",
    "format_gap_analysis",
    "format_service_recommendations",
    "generate_insights",
    "normalize_assessment_type",
    "normalize_pillar_scores",
    "pillar_scores_from_raw",
    "validate_overall_score",
]
