"""Tests for insight backfill and the pillar audit."""

from __future__ import annotations

import importlib.util
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from app.models import Assessment
from app.schemas.insights import INSIGHT_SCHEMA_VERSION
from app.services.backfill import backfill_insights, find_rows_missing_pillars

NOW = datetime(2026, 10, 1, 12, 0, 0)

PILLARS = [
    {"pillar_name": "Data Readiness", "score": 55, "weight": 50},
    {"pillar_name": "AI Strategy", "score": 85, "weight": 50},
]


def _row(db, lead_id: int, **kwargs) -> Assessment:
    row = Assessment(
        lead_id=lead_id,
        assessment_type=kwargs.pop("assessment_type", "CORE"),
        overall_score=kwargs.pop("overall_score", 70.0),
        completed_at=datetime(2024, 1, 1),
        **kwargs,
    )
    db.add(row)
    db.commit()
    return row


def _load_script(name: str):
    path = Path(__file__).resolve().parent.parent / "scripts" / f"{name}.py"
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_backfill_fills_missing_and_merges(db, lead) -> None:
    row = _row(
        db, lead.id,
        dimension_scores=PILLARS,
        insights={"completion_time_ms": 9000, "metadata": {"source": "import"}, "gap_analysis": []},
    )
    summary = backfill_insights(db, now=NOW)
    assert (summary.total, summary.updated, summary.skipped, summary.failed) == (1, 1, 0, 0)

    db.refresh(row)
    assert row.insights["schema_version"] == INSIGHT_SCHEMA_VERSION
    assert row.insights["completion_time_ms"] == 9000
    assert row.insights["metadata"] == {"source": "import"}
    assert row.insights["backfilled_at"] == NOW.isoformat()
    assert row.insights["gap_analysis"][0].startswith("Data Readiness (55.0%)")
    assert row.insights["service_recommendations"]


def test_backfill_is_idempotent(db, lead) -> None:
    row = _row(db, lead.id, dimension_scores=PILLARS)
    backfill_insights(db, now=NOW)
    db.refresh(row)
    first = dict(row.insights)

    summary = backfill_insights(db, now=datetime(2027, 1, 1))
    assert (summary.updated, summary.skipped) == (0, 1)
    db.refresh(row)
    assert row.insights == first


def test_force_regenerates_identically_except_timestamp(db, lead) -> None:
    row = _row(db, lead.id, dimension_scores=PILLARS)
    backfill_insights(db, now=NOW)
    db.refresh(row)
    first = dict(row.insights)

    later = datetime(2027, 1, 1)
    summary = backfill_insights(db, force=True, now=later)
    assert summary.updated == 1
    db.refresh(row)
    assert row.insights["backfilled_at"] == later.isoformat()
    assert {k: v for k, v in row.insights.items() if k != "backfilled_at"} == {
        k: v for k, v in first.items() if k != "backfilled_at"
    }


def test_legacy_row_without_pillars_is_backfilled(db, lead) -> None:
    row = _row(db, lead.id, overall_score=45.0, assessment_type="GENERAL")
    summary = backfill_insights(db, now=NOW)
    assert summary.updated == 1
    db.refresh(row)
    assert row.insights["score_category"] == "AI Explorer"
    assert row.insights["gap_analysis"] == []
    assert row.insights["service_recommendations"]


def test_dry_run_writes_nothing(db, lead) -> None:
    row = _row(db, lead.id, dimension_scores=PILLARS)
    summary = backfill_insights(db, dry_run=True, now=NOW)
    assert summary.updated == 1
    db.refresh(row)
    assert row.insights is None


def test_bad_row_is_counted_and_others_continue(db, lead) -> None:
    bad = _row(db, lead.id, overall_score=150.0)
    good = _row(db, lead.id, dimension_scores=PILLARS)
    summary = backfill_insights(db, now=NOW)
    assert summary.failed == 1
    assert summary.failed_ids == [bad.id]
    assert summary.updated == 1
    db.refresh(good)
    assert good.insights["schema_version"] == INSIGHT_SCHEMA_VERSION


def test_find_rows_missing_pillars(db, lead) -> None:
    _row(db, lead.id, dimension_scores=PILLARS)
    empty = _row(db, lead.id, dimension_scores=[])
    legacy = _row(db, lead.id, dimension_scores=None)
    audit = find_rows_missing_pillars(db)
    assert audit.total == 3
    assert audit.with_pillars == 1
    assert [m.id for m in audit.missing] == [empty.id, legacy.id]


# ── Script entry points ───────────────────────────────────────


def test_backfill_script_exit_codes(db, lead, capsys) -> None:
    script = _load_script("backfill_insights")
    # main() closes its session, which detaches the fixture's lead
    lead_id = lead.id
    _row(db, lead_id, dimension_scores=PILLARS)
    with patch.object(script, "SessionLocal", return_value=db):
        assert script.main(["--dry-run"]) == 0
    assert "updated=1" in capsys.readouterr().out

    _row(db, lead_id, overall_score=150.0)
    with patch.object(script, "SessionLocal", return_value=db):
        assert script.main([]) == 1
    captured = capsys.readouterr()
    assert "updated=1" in captured.out
    assert "failed=1" in captured.out
    assert "failed_ids=" in captured.err


def test_find_missing_pillars_script(db, lead, capsys) -> None:
    script = _load_script("find_missing_pillars")
    _row(db, lead.id, dimension_scores=None)
    with patch.object(script, "SessionLocal", return_value=db):
        assert script.main() == 0
    assert "missing_pillars=1" in capsys.readouterr().out
