"""Assessment schemas for request/response validation."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from app.schemas.insights import InsightDocument, PillarScore
from app.schemas.lead import LeadProfile

logger = logging.getLogger(__name__)


def _decode_json(raw: Any, field_name: str, row_id: Any) -> Any:
    """Return raw, parsing it first when older rows stored a JSON string."""
    if isinstance(raw, (str, bytes)):
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("assessment_json_malformed: id=%s field=%s", row_id, field_name)
            return None
    return raw


def decode_dimension_scores(raw: Any, row_id: Any = None) -> Optional[list[PillarScore]]:
    """Decode stored pillar scores. None means the row has no pillar data.

    Entries that fail validation are dropped with a warning instead of
    failing the whole row.
    """
    data = _decode_json(raw, "dimension_scores", row_id)
    if data is None:
        return None
    if not isinstance(data, list):
        logger.warning("assessment_dimension_scores_invalid: id=%s type=%s", row_id, type(data).__name__)
        return None
    scores: list[PillarScore] = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict):
            logger.warning("assessment_pillar_skipped: id=%s index=%d", row_id, idx)
            continue
        item = dict(entry)
        if "pillar_name" not in item and "area" in item:
            item["pillar_name"] = item["area"]
        try:
            scores.append(PillarScore.model_validate(item))
        except ValidationError:
            logger.warning("assessment_pillar_skipped: id=%s index=%d", row_id, idx)
    return scores


class AssessmentSubmit(BaseModel):
    """Questionnaire submission.

    ``pillar_scores`` are taken as already normalized by the client. When they
    are omitted, pillar scores are computed from ``responses`` and
    ``pillar_config``.
    """

    lead_id: int
    assessment_type: str = Field(..., min_length=1, max_length=32)
    industry: Optional[str] = Field(None, max_length=128)
    overall_score: Optional[float] = None
    responses: dict[str, Any] = Field(default_factory=dict)
    pillar_scores: Optional[list[dict[str, Any]]] = None
    pillar_config: Optional[list[dict[str, Any]]] = None
    completion_time_ms: int = Field(0, ge=0)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AssessmentSubmitResponse(BaseModel):
    """Result of a submission."""

    assessment_id: int
    overall_score: float
    dimension_scores: list[PillarScore]
    insights: InsightDocument
    email_sent: bool = False


class AssessmentRecord(BaseModel):
    """Decoded assessment row. ``dimension_scores`` is None for legacy rows."""

    id: int
    lead_id: int
    assessment_type: str
    industry: Optional[str] = None
    overall_score: float
    dimension_scores: Optional[list[PillarScore]] = None
    responses: dict[str, Any] = Field(default_factory=dict)
    insights: InsightDocument = Field(default_factory=InsightDocument)
    completed_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, row: Any) -> "AssessmentRecord":
        """Build from an ``Assessment`` row, tolerating legacy column shapes."""
        responses = _decode_json(row.responses, "responses", row.id)
        return cls(
            id=row.id,
            lead_id=row.lead_id,
            assessment_type=row.assessment_type,
            industry=row.industry,
            overall_score=row.overall_score,
            dimension_scores=decode_dimension_scores(row.dimension_scores, row.id),
            responses=responses if isinstance(responses, dict) else {},
            insights=InsightDocument.from_stored(row.insights),
            completed_at=row.completed_at,
        )


class AssessmentRead(AssessmentRecord):
    """Assessment with the submitting lead's profile (response)."""

    user: LeadProfile


class AssessmentSummary(BaseModel):
    """Row in a lead's assessment history."""

    id: int
    assessment_type: str
    overall_score: float
    score_category: Optional[str] = None
    completed_at: Optional[datetime] = None


class BenchmarkRead(BaseModel):
    """Industry/global score comparison for an assessment type."""

    assessment_type: str
    industry: str
    industry_average: Optional[float] = None
    global_average: Optional[float] = None
    best_score: Optional[float] = None
    lowest_score: Optional[float] = None
    total_assessments: int = 0


class EmailResultsRequest(BaseModel):
    """Optional recipient override for emailing a report."""

    email: Optional[str] = Field(None, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")


class EmailResultsResponse(BaseModel):
    success: bool
    message: str
