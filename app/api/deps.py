"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

from app.config import get_settings
from app.db.session import get_db  # re-export
from app.services.email_service import EmailClient, EmailConfig

__all__ = [
    "get_db",
    "get_email_client",
]


def get_email_client() -> EmailClient:
    """SMTP client built from current settings. Disabled without credentials."""
    return EmailClient(EmailConfig.from_settings(get_settings()))
