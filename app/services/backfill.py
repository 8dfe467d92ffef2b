"""Regenerate stored insight documents and audit pillar coverage.

Insight documents are a cache of ``generate_insights`` output, so any row can
be rebuilt from its own score columns. Rows whose insights are already
populated are skipped unless ``force`` is set.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.models.assessment import Assessment
from app.schemas.assessment import decode_dimension_scores
from app.schemas.insights import InsightDocument
from app.services.errors import ScoringValidationError
from app.services.scoring import build_insight_document, generate_insights
from app.services.scoring.scoring_constants import DEFAULT_ASSESSMENT_TYPE

logger = logging.getLogger(__name__)

# Keys the generator owns; everything else already stored on the row is kept.
_REGENERATED_KEYS = (
    "schema_version",
    "overall_assessment",
    "score_category",
    "strengths",
    "improvement_areas",
    "weighted_priorities",
    "critical_impact_areas",
    "gap_analysis",
    "service_recommendations",
)


@dataclass
class BackfillSummary:
    total: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    failed_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class MissingPillarRow:
    id: int
    assessment_type: str
    overall_score: float
    completed_at: datetime | None


@dataclass
class PillarAudit:
    total: int = 0
    with_pillars: int = 0
    missing: list[MissingPillarRow] = field(default_factory=list)


def _existing_insights(raw: Any) -> dict[str, Any]:
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw) if raw else {}
        except ValueError:
            return {}
    return dict(raw) if isinstance(raw, dict) else {}


def regenerate_insights(row: Assessment, *, now: datetime) -> dict[str, Any]:
    """Return the merged insight dict for ``row`` (does not assign it)."""
    existing = _existing_insights(row.insights)
    dimension_scores = decode_dimension_scores(row.dimension_scores, row.id) or []
    result = generate_insights(
        row.overall_score,
        dimension_scores,
        row.assessment_type or DEFAULT_ASSESSMENT_TYPE,
    )
    generated = build_insight_document(result).to_stored()
    merged = dict(existing)
    for key in _REGENERATED_KEYS:
        merged[key] = generated[key]
    merged.setdefault("total_score", generated["total_score"])
    merged["backfilled_at"] = now.isoformat()
    return merged


def backfill_insights(
    db: Session,
    *,
    force: bool = False,
    dry_run: bool = False,
    now: datetime | None = None,
) -> BackfillSummary:
    """Fill in missing insight documents. Per-row failures are logged and counted."""
    now = now or datetime.now(timezone.utc)
    summary = BackfillSummary()
    rows = db.query(Assessment).order_by(Assessment.id).all()
    summary.total = len(rows)
    logger.info("backfill_started: rows=%d force=%s dry_run=%s", len(rows), force, dry_run)

    for row in rows:
        if not force and InsightDocument.from_stored(row.insights).is_populated():
            summary.skipped += 1
            continue
        try:
            merged = regenerate_insights(row, now=now)
        except (ScoringValidationError, ValueError) as exc:
            summary.failed += 1
            summary.failed_ids.append(row.id)
            logger.error("backfill_row_failed: id=%s error=%s", row.id, exc)
            continue
        if not dry_run:
            row.insights = merged
        summary.updated += 1
        logger.info("backfill_row_updated: id=%s dry_run=%s", row.id, dry_run)

    if dry_run:
        db.rollback()
    else:
        db.commit()
    logger.info(
        "backfill_complete: total=%d updated=%d skipped=%d failed=%d",
        summary.total, summary.updated, summary.skipped, summary.failed,
    )
    return summary


def find_rows_missing_pillars(db: Session) -> PillarAudit:
    """Rows whose ``dimension_scores`` is absent, empty, or unreadable."""
    audit = PillarAudit()
    for row in db.query(Assessment).order_by(Assessment.id).all():
        audit.total += 1
        if decode_dimension_scores(row.dimension_scores, row.id):
            audit.with_pillars += 1
            continue
        audit.missing.append(
            MissingPillarRow(
                id=row.id,
                assessment_type=row.assessment_type,
                overall_score=row.overall_score,
                completed_at=row.completed_at,
            )
        )
    return audit
