"""Branded SAFE-8 PDF report (reportlab canvas).

One assembler serves both delivery paths (download and email attachment).
Sections are drawn top-down against a ``LayoutCursor``; every block asks the
cursor whether it fits before drawing. Legacy rows without pillar data or
without an insight document render placeholder text instead of failing.

Output is byte-stable for a given input: the canvas runs in reportlab's
invariant mode and nothing reads the clock.
"""

from __future__ import annotations

import io
import logging
import os
from dataclasses import dataclass

from reportlab.lib.colors import HexColor, white
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from app.config import Settings, get_settings
from app.schemas.assessment import AssessmentRecord
from app.schemas.insights import PillarScore
from app.schemas.lead import LeadProfile
from app.services.report.layout import LayoutCursor, PageGeometry
from app.services.scoring.scoring_constants import (
    BAND_ADOPTER_MIN,
    BAND_COLORS,
    BEST_PRACTICE_SCORE,
    REPORT_GAP_CRITICAL,
    REPORT_GAP_CRITICAL_MIN,
    REPORT_GAP_HIGH,
    REPORT_GAP_HIGH_MIN,
    REPORT_GAP_MODERATE,
    SUMMARY_EXCELLENT_MIN,
    SUMMARY_GOOD_MIN,
    score_band,
)

logger = logging.getLogger(__name__)

PRIMARY_BLUE = HexColor("#00539F")
SECONDARY_RED = HexColor("#E31B23")
ACCENT_ORANGE = HexColor("#F7941D")
ACCENT_YELLOW = HexColor("#F7C948")
DARK_GRAY = HexColor("#333333")
MEDIUM_GRAY = HexColor("#666666")
LIGHT_GRAY = HexColor("#E5E5E5")
PANEL_GRAY = HexColor("#F5F5F5")
CARD_BLUE = HexColor("#F0F7FF")

GAP_COLORS = {
    REPORT_GAP_CRITICAL: SECONDARY_RED,
    REPORT_GAP_HIGH: ACCENT_ORANGE,
    REPORT_GAP_MODERATE: ACCENT_YELLOW,
}

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

PILLARS_UNAVAILABLE = "Pillar data not available for this assessment."
GAPS_UNAVAILABLE = "Gap analysis is not available because this assessment has no pillar data."
NO_SIGNIFICANT_GAPS = (
    "No significant gaps identified. You're performing at or above best practice levels!"
)
NO_RECOMMENDATIONS = "Complete your assessment for personalized recommendations."


@dataclass(frozen=True)
class ServiceOffering:
    title: str
    tag: str
    description: str


SERVICE_CATALOGUE: tuple[ServiceOffering, ...] = (
    ServiceOffering(
        "AI Strategy & Roadmap Development",
        f"Recommended for scores below {BAND_ADOPTER_MIN:g}%",
        "Develop a comprehensive AI strategy aligned with business objectives and "
        "create a prioritized implementation roadmap.",
    ),
    ServiceOffering(
        "Data Foundation & Governance",
        "Essential for AI success",
        "Establish robust data governance frameworks and improve data quality to "
        "support AI initiatives.",
    ),
    ServiceOffering(
        "AI Talent & Capability Building",
        "Long-term competitive advantage",
        "Build internal AI capabilities through training programs and strategic "
        "hiring recommendations.",
    ),
)


@dataclass(frozen=True)
class ReportGap:
    """Gap between a pillar and the best-practice bar."""

    name: str
    current: float
    gap: float
    priority: str


def report_gap_priority(gap: float) -> str:
    if gap >= REPORT_GAP_CRITICAL_MIN:
        return REPORT_GAP_CRITICAL
    if gap >= REPORT_GAP_HIGH_MIN:
        return REPORT_GAP_HIGH
    return REPORT_GAP_MODERATE


def compute_report_gaps(dimension_scores: list[PillarScore] | None) -> list[ReportGap]:
    """Pillars below BEST_PRACTICE_SCORE, largest gap first (stable on ties)."""
    gaps = [
        ReportGap(
            name=p.pillar_name,
            current=p.score,
            gap=BEST_PRACTICE_SCORE - p.score,
            priority=report_gap_priority(BEST_PRACTICE_SCORE - p.score),
        )
        for p in dimension_scores or []
        if BEST_PRACTICE_SCORE - p.score > 0
    ]
    return sorted(gaps, key=lambda g: -g.gap)


def performance_summary(dimension_scores: list[PillarScore] | None) -> dict[str, int]:
    """Count pillars per bucket: excellent / good / focus."""
    counts = {"excellent": 0, "good": 0, "focus": 0}
    for p in dimension_scores or []:
        if p.score >= SUMMARY_EXCELLENT_MIN:
            counts["excellent"] += 1
        elif p.score >= SUMMARY_GOOD_MIN:
            counts["good"] += 1
        else:
            counts["focus"] += 1
    return counts


class _ReportWriter:
    """Draws report sections onto a canvas, paginating through a LayoutCursor."""

    def __init__(
        self,
        pdf: canvas.Canvas,
        user: LeadProfile,
        record: AssessmentRecord,
        settings: Settings,
        geometry: PageGeometry,
    ) -> None:
        self.pdf = pdf
        self.user = user
        self.record = record
        self.settings = settings
        self.geo = geometry
        self.cursor = LayoutCursor(geometry, on_page_break=self._finish_page)

    # ── primitives ─────────────────────────────────────────────────

    def _finish_page(self, page: int) -> None:
        self._draw_footer(page)
        self.pdf.showPage()

    def _draw_footer(self, page: int) -> None:
        self.pdf.setFont(FONT, 8)
        self.pdf.setFillColor(MEDIUM_GRAY)
        self.pdf.drawString(
            self.geo.left, self.geo.margin_bottom / 2,
            f"{self.settings.report_brand_name} | SAFE-8 Assessment Report | Confidential",
        )
        self.pdf.drawRightString(self.geo.right, self.geo.margin_bottom / 2, f"Page {page}")

    def _heading(self, text: str, color=PRIMARY_BLUE, size: int = 16) -> None:
        self.cursor.ensure(size + 40)
        self.pdf.setFont(FONT_BOLD, size)
        self.pdf.setFillColor(color)
        self.pdf.drawString(self.geo.left, self.cursor.y(size), text)
        self.pdf.setStrokeColor(color)
        self.pdf.setLineWidth(2)
        line_y = self.cursor.y(size + 8)
        self.pdf.line(self.geo.left, line_y, self.geo.right, line_y)
        self.cursor.advance(size + 24)

    def _wrap(self, text: str, size: float, width: float, font: str = FONT) -> list[str]:
        return simpleSplit(text, font, size, width)

    def _paragraph(
        self,
        text: str,
        size: float = 10,
        color=DARK_GRAY,
        indent: float = 0.0,
        font: str = FONT,
        leading: float | None = None,
    ) -> None:
        leading = leading or size + 4
        width = self.geo.usable_width - indent
        for line in self._wrap(text, size, width, font):
            self.cursor.ensure(leading)
            self.pdf.setFont(font, size)
            self.pdf.setFillColor(color)
            self.pdf.drawString(self.geo.left + indent, self.cursor.y(size), line)
            self.cursor.advance(leading)

    # ── sections ───────────────────────────────────────────────────

    def _draw_logo(self) -> None:
        path = self.settings.report_logo_path
        if path and os.path.isfile(path):
            try:
                self.pdf.drawImage(
                    path, self.geo.left, self.cursor.y(50), width=180, height=50,
                    preserveAspectRatio=True, mask="auto",
                )
                self.cursor.advance(55)
                return
            except Exception as exc:
                logger.warning("report_logo_unreadable: path=%s error=%s", path, exc)
        elif path:
            logger.warning("report_logo_missing: path=%s", path)
        self.pdf.setFont(FONT_BOLD, 24)
        self.pdf.setFillColor(PRIMARY_BLUE)
        self.pdf.drawString(self.geo.left, self.cursor.y(24), self.settings.report_brand_name)
        self.cursor.advance(35)

    def draw_cover(self) -> None:
        rec = self.record
        band = score_band(rec.overall_score)
        band_color = HexColor(BAND_COLORS[band])

        self._draw_logo()
        self.pdf.setFont(FONT, 9)
        self.pdf.setFillColor(MEDIUM_GRAY)
        self.pdf.drawString(self.geo.left, self.cursor.y(9), "SAFE-8 ASSESSMENT PLATFORM")
        self.cursor.advance(25)

        self.pdf.setFillColor(PRIMARY_BLUE)
        self.pdf.rect(0, self.cursor.y(80), self.geo.width, 80, stroke=0, fill=1)
        self.pdf.setFillColor(white)
        self.pdf.setFont(FONT_BOLD, 24)
        self.pdf.drawString(self.geo.left, self.cursor.y(44), "SAFE-8 Assessment Report")
        self.pdf.setFont(FONT, 12)
        self.pdf.drawString(self.geo.left, self.cursor.y(66), f"{rec.assessment_type} Assessment")
        self.cursor.advance(100)

        self.pdf.setFont(FONT, 10)
        self.pdf.setFillColor(MEDIUM_GRAY)
        self.pdf.drawString(self.geo.left, self.cursor.y(10), "Prepared for:")
        self.cursor.advance(16)
        self.pdf.setFont(FONT_BOLD, 14)
        self.pdf.setFillColor(DARK_GRAY)
        self.pdf.drawString(self.geo.left, self.cursor.y(14), self.user.contact_name or "SAFE-8 participant")
        self.cursor.advance(18)
        self.pdf.setFont(FONT, 10)
        for line in (self.user.job_title, self.user.company_name):
            if line:
                self.pdf.drawString(self.geo.left, self.cursor.y(10), line)
                self.cursor.advance(15)
        completed = rec.completed_at.strftime("%B %d, %Y") if rec.completed_at else "Not recorded"
        self.cursor.advance(10)
        self.pdf.setFillColor(MEDIUM_GRAY)
        self.pdf.drawString(self.geo.left, self.cursor.y(10), f"Assessment Date: {completed}")
        self.cursor.advance(30)

        # Score card
        self.cursor.ensure(100)
        card_w = self.geo.usable_width
        self.pdf.setFillColor(band_color)
        self.pdf.rect(self.geo.left - 5, self.cursor.y(80), 5, 80, stroke=0, fill=1)
        self.pdf.setFillColor(PANEL_GRAY)
        self.pdf.setStrokeColor(LIGHT_GRAY)
        self.pdf.rect(self.geo.left, self.cursor.y(80), card_w, 80, stroke=1, fill=1)
        self.pdf.setFont(FONT, 10)
        self.pdf.setFillColor(MEDIUM_GRAY)
        self.pdf.drawString(self.geo.left + 20, self.cursor.y(28), "OVERALL PERFORMANCE")
        self.pdf.setFont(FONT_BOLD, 18)
        self.pdf.setFillColor(DARK_GRAY)
        self.pdf.drawString(self.geo.left + 20, self.cursor.y(52), band)
        self.pdf.setFont(FONT_BOLD, 32)
        self.pdf.setFillColor(band_color)
        self.pdf.drawRightString(
            self.geo.right - 20, self.cursor.y(52), f"{rec.overall_score:.1f}%"
        )
        self.cursor.advance(110)

    def draw_executive_summary(self) -> None:
        self._heading("Executive Summary")
        company = self.user.company_name or "your organization"
        self._paragraph(
            f"This report presents the results of the SAFE-8 {self.record.assessment_type} "
            f"assessment for {company}. The assessment evaluates AI maturity across eight "
            "critical pillars, providing insights into current capabilities and "
            "recommendations for advancement."
        )
        narrative = self.record.insights.overall_assessment
        if narrative:
            self.cursor.advance(6)
            self._paragraph(narrative, font=FONT_BOLD, color=PRIMARY_BLUE)

    def draw_pillar_breakdown(self) -> None:
        self.cursor.new_page()
        self._heading("Pillar Performance Breakdown", size=18)
        pillars = self.record.dimension_scores
        if not pillars:
            self._paragraph(PILLARS_UNAVAILABLE, color=MEDIUM_GRAY)
            return
        bar_w = self.geo.usable_width
        for pillar in pillars:
            self.cursor.ensure(55)
            self.pdf.setFont(FONT_BOLD, 11)
            self.pdf.setFillColor(DARK_GRAY)
            self.pdf.drawString(self.geo.left, self.cursor.y(11), pillar.pillar_name)
            self.pdf.setFillColor(PRIMARY_BLUE)
            self.pdf.drawRightString(self.geo.right, self.cursor.y(11), f"{pillar.score:.1f}%")
            self.cursor.advance(20)
            self.pdf.setFillColor(LIGHT_GRAY)
            self.pdf.rect(self.geo.left, self.cursor.y(15), bar_w, 15, stroke=0, fill=1)
            fill_w = bar_w * max(0.0, min(100.0, pillar.score)) / 100.0
            if fill_w > 0:
                self.pdf.setFillColor(PRIMARY_BLUE)
                self.pdf.rect(self.geo.left, self.cursor.y(15), fill_w, 15, stroke=0, fill=1)
            self.cursor.advance(35)

    def draw_gap_analysis(self) -> None:
        self.cursor.new_page()
        self._heading("Critical Gap Analysis", color=SECONDARY_RED, size=18)
        if not self.record.dimension_scores:
            self._paragraph(GAPS_UNAVAILABLE, color=MEDIUM_GRAY)
            return
        gaps = compute_report_gaps(self.record.dimension_scores)
        if not gaps:
            self._paragraph(NO_SIGNIFICANT_GAPS, color=HexColor("#00A651"), indent=25)
        for gap in gaps:
            self.cursor.ensure(55)
            color = GAP_COLORS[gap.priority]
            self.pdf.setFillColor(color)
            self.pdf.rect(self.geo.left, self.cursor.y(45), 8, 45, stroke=0, fill=1)
            self.pdf.setFillColor(PANEL_GRAY)
            self.pdf.setStrokeColor(LIGHT_GRAY)
            self.pdf.rect(self.geo.left + 8, self.cursor.y(45), self.geo.usable_width - 8, 45, stroke=1, fill=1)
            self.pdf.setFont(FONT_BOLD, 11)
            self.pdf.setFillColor(DARK_GRAY)
            self.pdf.drawString(self.geo.left + 20, self.cursor.y(18), gap.name)
            self.pdf.setFont(FONT, 9)
            self.pdf.setFillColor(MEDIUM_GRAY)
            self.pdf.drawString(
                self.geo.left + 20, self.cursor.y(34),
                f"Current: {gap.current:.1f}% | Best Practice: {BEST_PRACTICE_SCORE:g}% | "
                f"Gap: {gap.gap:.0f} points",
            )
            self.pdf.setFont(FONT_BOLD, 10)
            self.pdf.setFillColor(color)
            self.pdf.drawRightString(self.geo.right - 12, self.cursor.y(27), f"{gap.priority} Priority")
            self.cursor.advance(55)
        self._draw_performance_summary()

    def _draw_performance_summary(self) -> None:
        counts = performance_summary(self.record.dimension_scores)
        self.cursor.advance(20)
        self.cursor.ensure(110)
        self.pdf.setFont(FONT_BOLD, 14)
        self.pdf.setFillColor(PRIMARY_BLUE)
        self.pdf.drawString(self.geo.left, self.cursor.y(14), "Performance Summary")
        self.cursor.advance(30)
        box_w = (self.geo.usable_width - 20) / 3
        boxes = (
            (counts["excellent"], "Excellent", HexColor("#00A651")),
            (counts["good"], "Good", PRIMARY_BLUE),
            (counts["focus"], "Focus Areas", ACCENT_ORANGE),
        )
        for idx, (count, label, color) in enumerate(boxes):
            x = self.geo.left + idx * (box_w + 10)
            self.pdf.setFillColor(PANEL_GRAY)
            self.pdf.setStrokeColor(color)
            self.pdf.rect(x, self.cursor.y(60), box_w, 60, stroke=1, fill=1)
            self.pdf.setFont(FONT_BOLD, 22)
            self.pdf.setFillColor(color)
            self.pdf.drawCentredString(x + box_w / 2, self.cursor.y(34), str(count))
            self.pdf.setFont(FONT, 9)
            self.pdf.setFillColor(DARK_GRAY)
            self.pdf.drawCentredString(x + box_w / 2, self.cursor.y(50), label)
        self.cursor.advance(80)

    def draw_services(self) -> None:
        self.cursor.new_page()
        self._heading("Recommended Services & Solutions", size=18)
        text_x = self.geo.left + 45
        text_w = self.geo.usable_width - 65
        for service in SERVICE_CATALOGUE:
            self.cursor.ensure(115)
            self.pdf.setFillColor(CARD_BLUE)
            self.pdf.setStrokeColor(LIGHT_GRAY)
            self.pdf.rect(self.geo.left, self.cursor.y(100), self.geo.usable_width, 100, stroke=1, fill=1)
            self.pdf.setFillColor(PRIMARY_BLUE)
            self.pdf.circle(self.geo.left + 20, self.cursor.y(22), 10, stroke=0, fill=1)
            self.pdf.setFont(FONT_BOLD, 12)
            self.pdf.setFillColor(DARK_GRAY)
            self.pdf.drawString(text_x, self.cursor.y(26), service.title)
            self.pdf.setFont(FONT_BOLD, 8)
            self.pdf.setFillColor(HexColor("#004D40"))
            self.pdf.drawString(text_x, self.cursor.y(44), service.tag)
            self.pdf.setFont(FONT, 9)
            self.pdf.setFillColor(MEDIUM_GRAY)
            for i, line in enumerate(self._wrap(service.description, 9, text_w)[:3]):
                self.pdf.drawString(text_x, self.cursor.y(64 + i * 12), line)
            self.cursor.advance(115)

    def draw_key_recommendations(self) -> None:
        self.cursor.advance(15)
        self._heading("Key Insights & Recommendations")
        recs = self.record.insights.service_recommendations
        if not recs:
            self._paragraph(NO_RECOMMENDATIONS, color=MEDIUM_GRAY, indent=25)
            return
        for idx, rec in enumerate(recs, start=1):
            lines = self._wrap(rec, 10, self.geo.usable_width - 25)
            self.cursor.ensure(len(lines) * 14 + 8)
            self.pdf.setFont(FONT_BOLD, 10)
            self.pdf.setFillColor(PRIMARY_BLUE)
            self.pdf.drawString(self.geo.left, self.cursor.y(10), f"{idx}.")
            self.pdf.setFont(FONT, 10)
            self.pdf.setFillColor(DARK_GRAY)
            for i, line in enumerate(lines):
                self.pdf.drawString(self.geo.left + 25, self.cursor.y(10 + i * 14), line)
            self.cursor.advance(len(lines) * 14 + 8)

    def draw_contact_block(self) -> None:
        self.cursor.advance(20)
        self.cursor.ensure(110)
        self.pdf.setFillColor(PANEL_GRAY)
        self.pdf.setStrokeColor(LIGHT_GRAY)
        self.pdf.rect(self.geo.left, self.cursor.y(100), self.geo.usable_width, 100, stroke=1, fill=1)
        self.pdf.setFont(FONT_BOLD, 14)
        self.pdf.setFillColor(PRIMARY_BLUE)
        self.pdf.drawString(self.geo.left + 20, self.cursor.y(28), "Need Expert Guidance?")
        text = (
            f"Our specialists at {self.settings.report_brand_name} can help you translate these "
            "insights into actionable strategies tailored to your organization's needs."
        )
        self.pdf.setFont(FONT, 9)
        self.pdf.setFillColor(DARK_GRAY)
        for i, line in enumerate(self._wrap(text, 9, self.geo.usable_width - 40)[:3]):
            self.pdf.drawString(self.geo.left + 20, self.cursor.y(46 + i * 12), line)
        self.pdf.setFont(FONT_BOLD, 9)
        self.pdf.setFillColor(PRIMARY_BLUE)
        self.pdf.drawString(
            self.geo.left + 20, self.cursor.y(88),
            f"Contact our AI Advisory Team: {self.settings.advisory_contact_email}",
        )
        self.cursor.advance(110)

    def finish(self) -> None:
        self._draw_footer(self.cursor.page)
        self.pdf.showPage()
        self.pdf.save()


def render_report(
    user_profile: LeadProfile,
    assessment_record: AssessmentRecord,
    *,
    settings: Settings | None = None,
) -> bytes:
    """Render the assessment report and return the PDF bytes.

    Never mutates ``assessment_record``; allocates a fresh buffer per call.
    """
    if settings is None:
        settings = get_settings()
    geometry = PageGeometry()
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(geometry.width, geometry.height), invariant=1)
    pdf.setTitle(f"SAFE-8 Assessment Report - {user_profile.contact_name}")
    pdf.setAuthor(settings.report_brand_name)
    pdf.setSubject(f"{assessment_record.assessment_type} Assessment Results")

    writer = _ReportWriter(pdf, user_profile, assessment_record, settings, geometry)
    writer.draw_cover()
    writer.draw_executive_summary()
    writer.draw_pillar_breakdown()
    writer.draw_gap_analysis()
    writer.draw_services()
    writer.draw_key_recommendations()
    writer.draw_contact_block()
    writer.finish()

    content = buffer.getvalue()
    logger.info(
        "report_rendered: assessment_id=%s pages=%d bytes=%d",
        assessment_record.id, writer.cursor.page, len(content),
    )
    return content
