"""Lead API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.assessment import AssessmentSummary
from app.schemas.lead import LeadCreate, LeadRead
from app.services.assessment import list_lead_assessments
from app.services.errors import NotFoundError
from app.services.lead import get_lead, upsert_lead

router = APIRouter()


@router.post(
    "",
    response_model=LeadRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create or update a lead",
    description="Creates a lead; an existing lead with the same email is updated (200).",
)
def api_create_lead(
    data: LeadCreate,
    response: Response,
    db: Session = Depends(get_db),
) -> LeadRead:
    lead, is_new = upsert_lead(db, data)
    if not is_new:
        response.status_code = status.HTTP_200_OK
    return lead


@router.get("/{lead_id}", response_model=LeadRead)
def api_get_lead(lead_id: int, db: Session = Depends(get_db)) -> LeadRead:
    try:
        return get_lead(db, lead_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None


@router.get("/{lead_id}/assessments", response_model=list[AssessmentSummary])
def api_list_lead_assessments(
    lead_id: int, db: Session = Depends(get_db)
) -> list[AssessmentSummary]:
    """Assessment history for a lead, newest first."""
    try:
        return list_lead_assessments(db, lead_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from None
