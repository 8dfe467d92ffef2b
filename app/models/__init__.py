"""SQLAlchemy models."""

from app.models.assessment import Assessment
from app.models.lead import Lead

__all__ = [
    "Assessment",
    "Lead",
]
