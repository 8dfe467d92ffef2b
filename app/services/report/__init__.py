"""Assessment report assembly."""

from app.services.report.layout import LayoutCursor, PageGeometry
from app.services.report.pdf_report import (
    SERVICE_CATALOGUE,
    ReportGap,
    compute_report_gaps,
    performance_summary,
    render_report,
)

__all__ = [
    "SERVICE_CATALOGUE",
    "LayoutCursor",
    "PageGeometry",
    "ReportGap",
    "compute_report_gaps",
    "performance_summary",
    "render_report",
]
