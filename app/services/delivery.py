"""Report delivery as an HTTP download."""

from __future__ import annotations

import re
from dataclasses import dataclass

from app.config import Settings
from app.schemas.assessment import AssessmentRecord
from app.schemas.lead import LeadProfile
from app.services.report.pdf_report import render_report

PDF_MEDIA_TYPE = "application/pdf"

_WHITESPACE = re.compile(r"\s+")
_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def report_filename(
    contact_name: str | None,
    assessment_id: int,
    product: str = "SAFE-8_Assessment",
    ext: str = "pdf",
) -> str:
    """Deterministic download name, e.g. ``SAFE-8_Assessment_Jane_Doe_42.pdf``."""
    name = _WHITESPACE.sub("_", (contact_name or "").strip())
    name = _UNSAFE.sub("", name) or "user"
    return f"{product}_{name}_{assessment_id}.{ext}"


@dataclass(frozen=True)
class ReportDownload:
    filename: str
    content: bytes
    media_type: str = PDF_MEDIA_TYPE

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def build_download(
    user: LeadProfile,
    record: AssessmentRecord,
    settings: Settings | None = None,
) -> ReportDownload:
    return ReportDownload(
        filename=report_filename(user.contact_name, record.id),
        content=render_report(user, record, settings=settings),
    )
