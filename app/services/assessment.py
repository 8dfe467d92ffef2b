"""Assessment orchestration: score, derive insights, persist, read back."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.assessment import Assessment
from app.models.lead import Lead
from app.schemas.assessment import AssessmentRecord, AssessmentSummary, BenchmarkRead
from app.schemas.insights import InsightDocument, PillarScore
from app.schemas.lead import LeadProfile
from app.services.errors import NotFoundError, ScoringValidationError
from app.services.scoring import (
    PillarConfig,
    build_insight_document,
    compute_overall_score,
    generate_insights,
    normalize_assessment_type,
    normalize_pillar_scores,
    pillar_scores_from_raw,
    validate_overall_score,
)
from app.services.scoring.scoring_constants import SCORE_DECIMALS, score_band

logger = logging.getLogger(__name__)

UNKNOWN_INDUSTRY = "Unknown"
ALL_INDUSTRIES = "all"


@dataclass(frozen=True)
class AssessmentComputation:
    assessment_id: int
    overall_score: float
    dimension_scores: list[PillarScore]
    insights: InsightDocument


# ── Helpers ──────────────────────────────────────────────────────────


def _resolve_dimension_scores(
    responses: dict[str, Any],
    raw_pillar_scores: Any,
    pillar_config: list[dict[str, Any]] | None,
) -> list[PillarScore]:
    """Client-computed pillar scores win; otherwise derive from the config."""
    if raw_pillar_scores is not None:
        return pillar_scores_from_raw(raw_pillar_scores)
    if pillar_config:
        configs = [PillarConfig.from_dict(entry) for entry in pillar_config]
        return normalize_pillar_scores(responses, configs)
    return []


def _model_to_record(row: Assessment) -> AssessmentRecord:
    record = AssessmentRecord.from_model(row)
    if row.insights and record.insights.schema_version == 0:
        logger.warning("assessment_insights_unreadable: id=%s", row.id)
    return record


def _round_or_none(value: float | None) -> float | None:
    return None if value is None else round(float(value), SCORE_DECIMALS)


def _lead_profile(lead: Lead | None) -> LeadProfile:
    if lead is None:
        return LeadProfile()
    return LeadProfile.model_validate(lead)


# ── Operations ───────────────────────────────────────────────────────


def compute_and_store_assessment(
    db: Session,
    lead_id: int,
    assessment_type: str,
    industry: str | None,
    responses: dict[str, Any] | None,
    raw_pillar_scores: Any,
    *,
    overall_score: Any = None,
    completion_time_ms: int = 0,
    metadata: dict[str, Any] | None = None,
    pillar_config: list[dict[str, Any]] | None = None,
    completed_at: datetime | None = None,
) -> AssessmentComputation:
    """Score a submission, derive its insight document and persist both.

    Raises NotFoundError for an unknown lead and ScoringValidationError for
    malformed scores. Nothing is written when either is raised.
    """
    lead = db.get(Lead, lead_id)
    if lead is None:
        raise NotFoundError(f"Lead {lead_id} not found")

    responses = dict(responses or {})
    a_type = normalize_assessment_type(assessment_type)
    dimension_scores = _resolve_dimension_scores(responses, raw_pillar_scores, pillar_config)
    if overall_score is None:
        overall = compute_overall_score(dimension_scores)
    else:
        overall = validate_overall_score(overall_score)

    completed_at = completed_at or datetime.now(timezone.utc)
    result = generate_insights(overall, dimension_scores, a_type)
    document = build_insight_document(
        result,
        completion_time_ms=completion_time_ms,
        completion_date=completed_at.isoformat(),
        metadata=metadata,
    )

    row = Assessment(
        lead_id=lead.id,
        assessment_type=a_type,
        industry=industry or lead.industry or UNKNOWN_INDUSTRY,
        overall_score=overall,
        dimension_scores=[p.model_dump(mode="json") for p in dimension_scores],
        responses=responses,
        insights=document.to_stored(),
        completed_at=completed_at,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(
        "assessment_saved: id=%s lead_id=%s type=%s score=%.1f pillars=%d",
        row.id, lead.id, a_type, overall, len(dimension_scores),
    )
    return AssessmentComputation(
        assessment_id=row.id,
        overall_score=overall,
        dimension_scores=dimension_scores,
        insights=document,
    )


def get_assessment_record(db: Session, assessment_id: int) -> tuple[LeadProfile, AssessmentRecord]:
    """Return (lead profile, decoded record). Raises NotFoundError."""
    row = db.get(Assessment, assessment_id)
    if row is None:
        raise NotFoundError(f"Assessment {assessment_id} not found")
    return _lead_profile(row.lead), _model_to_record(row)


def get_current_assessment(
    db: Session, lead_id: int, assessment_type: str
) -> tuple[LeadProfile, AssessmentRecord]:
    """Latest assessment of a type for a lead (type match is case-insensitive)."""
    try:
        a_type = normalize_assessment_type(assessment_type)
    except ScoringValidationError as exc:
        raise NotFoundError(str(exc)) from exc
    row = (
        db.query(Assessment)
        .filter(
            Assessment.lead_id == lead_id,
            func.upper(Assessment.assessment_type) == a_type,
        )
        .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
        .first()
    )
    if row is None:
        raise NotFoundError(f"No {a_type} assessment found for lead {lead_id}")
    return _lead_profile(row.lead), _model_to_record(row)


def list_lead_assessments(db: Session, lead_id: int) -> list[AssessmentSummary]:
    """A lead's assessment history, newest first."""
    if db.get(Lead, lead_id) is None:
        raise NotFoundError(f"Lead {lead_id} not found")
    rows = (
        db.query(Assessment)
        .filter(Assessment.lead_id == lead_id)
        .order_by(Assessment.completed_at.desc(), Assessment.id.desc())
        .all()
    )
    summaries = []
    for row in rows:
        doc = InsightDocument.from_stored(row.insights)
        summaries.append(
            AssessmentSummary(
                id=row.id,
                assessment_type=row.assessment_type,
                overall_score=row.overall_score,
                score_category=doc.score_category or score_band(row.overall_score),
                completed_at=row.completed_at,
            )
        )
    return summaries


def get_benchmark(db: Session, assessment_type: str, industry: str) -> BenchmarkRead:
    """Industry and global score statistics for one assessment type.

    ``industry == "all"`` (any case) compares against every industry. The
    row's own industry is used, falling back to the lead's.
    """
    a_type = normalize_assessment_type(assessment_type)
    type_filter = func.upper(Assessment.assessment_type) == a_type

    industry_query = (
        db.query(
            func.avg(Assessment.overall_score),
            func.max(Assessment.overall_score),
            func.min(Assessment.overall_score),
            func.count(Assessment.id),
        )
        .outerjoin(Lead, Assessment.lead_id == Lead.id)
        .filter(type_filter)
    )
    if industry.lower() != ALL_INDUSTRIES:
        industry_query = industry_query.filter(
            func.coalesce(Assessment.industry, Lead.industry) == industry
        )
    avg_score, best, lowest, total = industry_query.one()
    global_avg = db.query(func.avg(Assessment.overall_score)).filter(type_filter).scalar()

    return BenchmarkRead(
        assessment_type=a_type,
        industry=industry,
        industry_average=_round_or_none(avg_score),
        global_average=_round_or_none(global_avg),
        best_score=_round_or_none(best),
        lowest_score=_round_or_none(lowest),
        total_assessments=int(total or 0),
    )
