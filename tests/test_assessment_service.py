"""Tests for assessment persistence and read-back (SQLite)."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from app.models import Assessment, Lead
from app.schemas.insights import INSIGHT_SCHEMA_VERSION
from app.services.assessment import (
    compute_and_store_assessment,
    get_assessment_record,
    get_benchmark,
    get_current_assessment,
    list_lead_assessments,
)
from app.services.errors import NotFoundError, ScoringValidationError


def _store(db, lead, pillars, **kwargs):
    return compute_and_store_assessment(
        db,
        lead.id,
        kwargs.pop("assessment_type", "core"),
        kwargs.pop("industry", None),
        kwargs.pop("responses", {"q1": 4}),
        pillars,
        **kwargs,
    )


def test_submit_persists_scores_and_insights(db, lead, mixed_pillars, fixed_completed_at) -> None:
    computation = _store(
        db, lead, mixed_pillars,
        overall_score=67.5, completion_time_ms=1500, metadata={"source": "web"},
        completed_at=fixed_completed_at,
    )
    row = db.get(Assessment, computation.assessment_id)
    assert row.assessment_type == "CORE"
    assert row.overall_score == 67.5
    assert row.industry == "Financial Services"  # lead's industry
    assert len(row.dimension_scores) == 8
    assert row.insights["schema_version"] == INSIGHT_SCHEMA_VERSION
    assert row.insights["score_category"] == "AI Adopter"
    assert row.insights["completion_time_ms"] == 1500
    assert row.insights["completion_date"] == "2026-03-14T09:30:00"
    assert row.insights["metadata"] == {"source": "web"}
    assert computation.insights.gap_analysis == row.insights["gap_analysis"]


def test_overall_score_computed_when_omitted(db, lead) -> None:
    pillars = [
        {"pillar_name": "A", "score": 80, "weight": 75},
        {"pillar_name": "B", "score": 40, "weight": 25},
    ]
    computation = _store(db, lead, pillars)
    assert computation.overall_score == 70.0


def test_pillars_derived_from_config(db, lead) -> None:
    computation = _store(
        db, lead, None,
        responses={"q1": 5, "q2": 3, "q3": 1},
        pillar_config=[
            {"name": "Strategy", "weight": 50, "question_ids": ["q1", "q2"]},
            {"name": "Data", "weight": 50, "question_ids": ["q3"]},
        ],
    )
    assert [p.score for p in computation.dimension_scores] == [75.0, 0.0]
    assert computation.overall_score == 37.5


def test_industry_defaults_to_unknown(db) -> None:
    lead = Lead(contact_name="No Industry", email="ni@example.com")
    db.add(lead)
    db.commit()
    computation = _store(db, lead, [])
    assert db.get(Assessment, computation.assessment_id).industry == "Unknown"


def test_unknown_lead_raises(db) -> None:
    with pytest.raises(NotFoundError):
        compute_and_store_assessment(db, 999, "CORE", None, {}, [])


def test_invalid_scores_raise_and_write_nothing(db, lead) -> None:
    with pytest.raises(ScoringValidationError):
        _store(db, lead, [{"pillar_name": "A", "score": 150}])
    with pytest.raises(ScoringValidationError):
        _store(db, lead, [], overall_score=-5)
    assert db.query(Assessment).count() == 0


# ── Read-back ─────────────────────────────────────────────────


def test_get_assessment_record(db, lead, mixed_pillars) -> None:
    computation = _store(db, lead, mixed_pillars, overall_score=67.5)
    user, record = get_assessment_record(db, computation.assessment_id)
    assert user.contact_name == "Jane Doe"
    assert user.company_name == "Acme Corp"
    assert record.dimension_scores[0].pillar_name == "AI Strategy"
    assert record.insights.is_populated()


def test_get_assessment_record_missing(db) -> None:
    with pytest.raises(NotFoundError):
        get_assessment_record(db, 12345)


def test_legacy_row_decodes_defensively(db, lead) -> None:
    row = Assessment(
        lead_id=lead.id,
        assessment_type="GENERAL",
        overall_score=64.0,
        dimension_scores=None,
        responses=json.dumps({"q1": 3}),
        insights="{not json",
        completed_at=datetime(2024, 5, 1),
    )
    db.add(row)
    db.commit()
    _, record = get_assessment_record(db, row.id)
    assert record.dimension_scores is None
    assert record.responses == {"q1": 3}
    assert record.insights.schema_version == 0
    assert not record.insights.is_populated()


def test_legacy_pillars_stored_as_json_string(db, lead) -> None:
    row = Assessment(
        lead_id=lead.id,
        assessment_type="CORE",
        overall_score=60.0,
        dimension_scores=json.dumps([
            {"pillar_name": "Data", "score": 55, "weight": 10},
            {"pillar_name": "Broken", "score": "n/a"},
        ]),
        completed_at=datetime(2024, 5, 1),
    )
    db.add(row)
    db.commit()
    _, record = get_assessment_record(db, row.id)
    assert [p.pillar_name for p in record.dimension_scores] == ["Data"]


def test_current_assessment_is_latest_of_type(db, lead) -> None:
    _store(db, lead, [], overall_score=50, completed_at=datetime(2026, 1, 1))
    latest = _store(db, lead, [], overall_score=60, completed_at=datetime(2026, 2, 1))
    _store(db, lead, [], overall_score=90, assessment_type="ADVANCED", completed_at=datetime(2026, 3, 1))

    _, record = get_current_assessment(db, lead.id, "Core")
    assert record.id == latest.assessment_id
    with pytest.raises(NotFoundError):
        get_current_assessment(db, lead.id, "FRONTIER")


def test_list_lead_assessments(db, lead) -> None:
    _store(db, lead, [], overall_score=50, completed_at=datetime(2026, 1, 1))
    _store(db, lead, [], overall_score=85, completed_at=datetime(2026, 2, 1))
    history = list_lead_assessments(db, lead.id)
    assert [h.overall_score for h in history] == [85, 50]
    assert [h.score_category for h in history] == ["AI Leader", "AI Explorer"]
    with pytest.raises(NotFoundError):
        list_lead_assessments(db, 999)


# ── Benchmark ─────────────────────────────────────────────────


def test_benchmark(db, lead) -> None:
    other = Lead(contact_name="Other", email="o@example.com", industry="Retail")
    db.add(other)
    db.commit()
    _store(db, lead, [], overall_score=60)
    _store(db, lead, [], overall_score=70.25)
    _store(db, other, [], overall_score=40)
    _store(db, other, [], overall_score=99, assessment_type="ADVANCED")

    bench = get_benchmark(db, "core", "Financial Services")
    assert bench.total_assessments == 2
    assert bench.industry_average == 65.1
    assert bench.best_score == 70.2
    assert bench.lowest_score == 60.0
    assert bench.global_average == 56.8

    everyone = get_benchmark(db, "CORE", "all")
    assert everyone.total_assessments == 3


def test_benchmark_empty(db) -> None:
    bench = get_benchmark(db, "FRONTIER", "all")
    assert bench.total_assessments == 0
    assert bench.industry_average is None
    assert bench.global_average is None
