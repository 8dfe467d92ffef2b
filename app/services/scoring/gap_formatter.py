"""Flatten generator output into the display strings stored with each assessment.

Order is part of the contract: improvement areas then critical areas for the
gap list, generic recommendations then weighted priorities for the service
list. Nothing here re-sorts.
"""

from __future__ import annotations

from typing import Any

from app.schemas.insights import INSIGHT_SCHEMA_VERSION, InsightDocument
from app.services.scoring.insight_engine import InsightResult, fmt_number


def format_gap_analysis(result: InsightResult) -> list[str]:
    items = [
        f"{area.area} ({area.score:.1f}%): {area.description}"
        for area in result.improvement_areas
    ]
    items.extend(
        f"Critical: {area.area} - Score: {area.score:.1f}%, "
        f"Weight: {fmt_number(area.weight)}% - {area.description}"
        for area in result.critical_impact_areas
    )
    return items


def format_service_recommendations(result: InsightResult) -> list[str]:
    items = list(result.recommendations)
    items.extend(
        f"Priority {p.priority}: Improve {p.area} "
        f"(current: {p.score:.1f}%, weight: {fmt_number(p.weight)}%)"
        for p in result.weighted_priorities
    )
    return items


def build_insight_document(
    result: InsightResult,
    *,
    completion_time_ms: int | None = None,
    completion_date: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> InsightDocument:
    """Assemble the persisted insight document from generator output.

    ``completion_date`` is passed in rather than read from the clock so the
    document stays a pure function of its inputs.
    """
    return InsightDocument(
        schema_version=INSIGHT_SCHEMA_VERSION,
        overall_assessment=result.overall_assessment,
        score_category=result.score_category,
        total_score=result.overall_score,
        strengths=list(result.strengths),
        improvement_areas=list(result.improvement_areas),
        weighted_priorities=list(result.weighted_priorities),
        critical_impact_areas=list(result.critical_impact_areas),
        gap_analysis=format_gap_analysis(result),
        service_recommendations=format_service_recommendations(result),
        completion_date=completion_date,
        completion_time_ms=completion_time_ms,
        metadata=dict(metadata or {}),
    )
