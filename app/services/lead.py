"""Lead create/read service."""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.lead import Lead
from app.schemas.lead import LeadCreate, LeadRead
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def upsert_lead(db: Session, data: LeadCreate) -> tuple[LeadRead, bool]:
    """Create a lead, or update the existing one with the same email.

    Returns (lead, is_new). Email match is case-insensitive.
    """
    email = data.email.strip()
    lead = db.query(Lead).filter(func.lower(Lead.email) == email.lower()).first()
    is_new = lead is None
    if lead is None:
        lead = Lead(email=email, contact_name=data.contact_name)
        db.add(lead)
    lead.contact_name = data.contact_name
    lead.company_name = data.company_name
    lead.job_title = data.job_title
    lead.industry = data.industry
    db.commit()
    db.refresh(lead)
    logger.info("lead_saved: id=%s new=%s", lead.id, is_new)
    return LeadRead.model_validate(lead), is_new


def get_lead(db: Session, lead_id: int) -> LeadRead:
    lead = db.get(Lead, lead_id)
    if lead is None:
        raise NotFoundError(f"Lead {lead_id} not found")
    return LeadRead.model_validate(lead)
