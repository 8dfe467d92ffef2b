"""Tests for the PDF report assembler."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from app.schemas.assessment import AssessmentRecord
from app.schemas.insights import InsightDocument, PillarScore
from app.schemas.lead import LeadProfile
from app.services.report.layout import PageGeometry
from app.services.report.pdf_report import (
    GAPS_UNAVAILABLE,
    NO_RECOMMENDATIONS,
    NO_SIGNIFICANT_GAPS,
    PILLARS_UNAVAILABLE,
    SERVICE_CATALOGUE,
    ReportGap,
    _ReportWriter,
    compute_report_gaps,
    performance_summary,
    render_report,
)
from app.services.scoring import build_insight_document, generate_insights


def _settings(**overrides) -> SimpleNamespace:
    defaults = dict(
        report_brand_name="Forvis Mazars",
        report_logo_path="",
        advisory_contact_email="ai.advisory@example.com",
    )
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _user() -> LeadProfile:
    return LeadProfile(
        contact_name="Jane Doe",
        email="jane@example.com",
        company_name="Acme Corp",
        job_title="CTO",
    )


def _record(pillars: list[dict] | None, overall: float = 72.5, insights: bool = True) -> AssessmentRecord:
    dims = [PillarScore(**p) for p in pillars] if pillars is not None else None
    doc = InsightDocument()
    if insights:
        doc = build_insight_document(generate_insights(overall, dims or [], "CORE"))
    return AssessmentRecord(
        id=42,
        lead_id=7,
        assessment_type="CORE",
        overall_score=overall,
        dimension_scores=dims,
        insights=doc,
        completed_at=datetime(2026, 3, 14, 9, 30),
    )


def _all_eighty() -> list[dict]:
    return [{"pillar_name": f"Pillar {i}", "score": 80, "weight": 12.5} for i in range(8)]


def _drawn_text(pdf: MagicMock) -> str:
    parts = []
    for name, args, _kwargs in pdf.method_calls:
        if name in ("drawString", "drawRightString", "drawCentredString"):
            parts.append(str(args[2]))
    return " ".join(parts)


def _write(record: AssessmentRecord, settings=None) -> tuple[MagicMock, _ReportWriter]:
    pdf = MagicMock()
    writer = _ReportWriter(pdf, _user(), record, settings or _settings(), PageGeometry())
    writer.draw_cover()
    writer.draw_executive_summary()
    writer.draw_pillar_breakdown()
    writer.draw_gap_analysis()
    writer.draw_services()
    writer.draw_key_recommendations()
    writer.draw_contact_block()
    writer.finish()
    return pdf, writer


# ── Report gaps ───────────────────────────────────────────────


def test_report_gaps_tiers_and_order() -> None:
    dims = [
        PillarScore(pillar_name="A", score=75),
        PillarScore(pillar_name="B", score=30),
        PillarScore(pillar_name="C", score=60),
        PillarScore(pillar_name="D", score=80),
        PillarScore(pillar_name="E", score=40.5),
    ]
    assert compute_report_gaps(dims) == [
        ReportGap(name="B", current=30, gap=50, priority="Critical"),
        ReportGap(name="E", current=40.5, gap=39.5, priority="High"),
        ReportGap(name="C", current=60, gap=20, priority="High"),
        ReportGap(name="A", current=75, gap=5, priority="Moderate"),
    ]


def test_report_gaps_ties_keep_pillar_order() -> None:
    dims = [PillarScore(pillar_name=n, score=50) for n in ("X", "Y", "Z")]
    assert [g.name for g in compute_report_gaps(dims)] == ["X", "Y", "Z"]


def test_report_gaps_none_when_at_best_practice() -> None:
    assert compute_report_gaps([PillarScore(**p) for p in _all_eighty()]) == []
    assert compute_report_gaps(None) == []


def test_performance_summary_buckets() -> None:
    dims = [PillarScore(pillar_name=str(s), score=s) for s in (95, 80, 79.9, 60, 59.9, 0)]
    assert performance_summary(dims) == {"excellent": 2, "good": 2, "focus": 2}


# ── Section content ───────────────────────────────────────────


def test_cover_and_sections_present(mixed_pillars) -> None:
    pdf, _ = _write(_record(mixed_pillars))
    text = _drawn_text(pdf)
    assert "SAFE-8 Assessment Report" in text
    assert "CORE Assessment" in text
    assert "Jane Doe" in text
    assert "March 14, 2026" in text
    assert "AI Adopter" in text
    assert "72.5%" in text
    for heading in (
        "Executive Summary",
        "Pillar Performance Breakdown",
        "Critical Gap Analysis",
        "Performance Summary",
        "Recommended Services & Solutions",
        "Key Insights & Recommendations",
        "Need Expert Guidance?",
    ):
        assert heading in text
    for service in SERVICE_CATALOGUE:
        assert service.title in text
    assert "Data Readiness" in text
    assert "Critical Priority" in text  # Data Readiness at 40 is 40 below best practice


def test_all_strong_renders_no_gaps_placeholder() -> None:
    pdf, _ = _write(_record(_all_eighty(), overall=80))
    assert NO_SIGNIFICANT_GAPS in _drawn_text(pdf)


def test_legacy_row_renders_placeholders() -> None:
    pdf, _ = _write(_record(None, overall=64.0, insights=False))
    text = _drawn_text(pdf)
    assert PILLARS_UNAVAILABLE in text
    assert GAPS_UNAVAILABLE in text
    assert NO_RECOMMENDATIONS in text
    assert "64.0%" in text


def test_recommendations_are_numbered(mixed_pillars) -> None:
    record = _record(mixed_pillars)
    pdf, _ = _write(record)
    text = _drawn_text(pdf)
    count = len(record.insights.service_recommendations)
    assert f"{count}." in text


def test_long_recommendation_list_paginates(mixed_pillars) -> None:
    record = _record(mixed_pillars)
    record.insights.service_recommendations = [f"Recommendation number {i}" for i in range(120)]
    pdf, writer = _write(record)
    # cover, pillars, gaps, services, plus overflow pages for the list
    assert writer.cursor.page >= 6
    assert pdf.showPage.call_count == writer.cursor.page
    assert f"Page {writer.cursor.page}" in _drawn_text(pdf)


def test_missing_logo_falls_back_to_wordmark(caplog, mixed_pillars) -> None:
    settings = _settings(report_logo_path="/nonexistent/logo.png")
    with caplog.at_level(logging.WARNING):
        pdf, _ = _write(_record(mixed_pillars), settings)
    assert "report_logo_missing" in caplog.text
    assert "Forvis Mazars" in _drawn_text(pdf)
    pdf.drawImage.assert_not_called()


# ── Rendered bytes ────────────────────────────────────────────


def test_render_returns_pdf_bytes(mixed_pillars) -> None:
    content = render_report(_user(), _record(mixed_pillars), settings=_settings())
    assert content.startswith(b"%PDF")
    assert b"%%EOF" in content[-32:]


def test_render_legacy_row_does_not_raise() -> None:
    content = render_report(_user(), _record(None, overall=55.0, insights=False), settings=_settings())
    assert content.startswith(b"%PDF")


def test_render_is_byte_identical_across_calls(mixed_pillars) -> None:
    record = _record(mixed_pillars)
    first = render_report(_user(), record, settings=_settings())
    second = render_report(_user(), record, settings=_settings())
    assert first == second


def test_concurrent_renders_are_identical(mixed_pillars) -> None:
    record = _record(mixed_pillars)
    with ThreadPoolExecutor(max_workers=2) as pool:
        outputs = list(pool.map(lambda _: render_report(_user(), record, settings=_settings()), range(2)))
    assert outputs[0] == outputs[1]


def test_render_does_not_mutate_record(mixed_pillars) -> None:
    record = _record(mixed_pillars)
    before = record.model_dump()
    render_report(_user(), record, settings=_settings())
    assert record.model_dump() == before


@pytest.mark.parametrize("overall", [0.0, 100.0])
def test_render_extreme_scores(overall) -> None:
    pillars = [{"pillar_name": "Only", "score": overall, "weight": 100}]
    assert render_report(_user(), _record(pillars, overall=overall), settings=_settings()).startswith(b"%PDF")
