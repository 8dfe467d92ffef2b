"""Assessment API routes: submit, read, benchmark, report download and email."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_email_client
from app.config import get_settings
from app.schemas.assessment import (
    AssessmentRead,
    AssessmentSubmit,
    AssessmentSubmitResponse,
    BenchmarkRead,
    EmailResultsRequest,
    EmailResultsResponse,
)
from app.services.assessment import (
    compute_and_store_assessment,
    get_assessment_record,
    get_benchmark,
    get_current_assessment,
)
from app.services.delivery import build_download
from app.services.email_service import EmailClient, send_assessment_results
from app.services.errors import NotFoundError, ScoringValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


def _unprocessable(exc: ScoringValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


# ── Routes ───────────────────────────────────────────────────────────


@router.post(
    "/submit",
    response_model=AssessmentSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a completed assessment",
    description="""Scores the submission, stores it with its insight document and,
when EMAIL_ON_SUBMIT is enabled, emails the PDF report to the lead.

Pillar scores may be supplied already computed (``pillar_scores``) or derived
from ``responses`` with a ``pillar_config``. ``email_sent`` reports whether the
email went out; an email failure never fails the submission.
""",
)
def api_submit_assessment(
    data: AssessmentSubmit,
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
) -> AssessmentSubmitResponse:
    try:
        computation = compute_and_store_assessment(
            db,
            data.lead_id,
            data.assessment_type,
            data.industry,
            data.responses,
            data.pillar_scores,
            overall_score=data.overall_score,
            completion_time_ms=data.completion_time_ms,
            metadata=data.metadata,
            pillar_config=data.pillar_config,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from None
    except ScoringValidationError as exc:
        raise _unprocessable(exc) from None

    email_sent = False
    settings = get_settings()
    if settings.email_on_submit and email_client.enabled:
        user, record = get_assessment_record(db, computation.assessment_id)
        result = send_assessment_results(email_client, user, record, settings=settings)
        email_sent = result.success

    return AssessmentSubmitResponse(
        assessment_id=computation.assessment_id,
        overall_score=computation.overall_score,
        dimension_scores=computation.dimension_scores,
        insights=computation.insights,
        email_sent=email_sent,
    )


@router.get(
    "/current/{lead_id}/{assessment_type}",
    response_model=AssessmentRead,
    summary="Latest assessment of a type for a lead",
)
def api_current_assessment(
    lead_id: int, assessment_type: str, db: Session = Depends(get_db)
) -> AssessmentRead:
    try:
        user, record = get_current_assessment(db, lead_id, assessment_type)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    return AssessmentRead(**record.model_dump(), user=user)


@router.get(
    "/benchmark/{assessment_type}/{industry}",
    response_model=BenchmarkRead,
    summary="Industry and global benchmark for an assessment type",
    description='Pass ``all`` as the industry to compare against every industry.',
)
def api_benchmark(
    assessment_type: str, industry: str, db: Session = Depends(get_db)
) -> BenchmarkRead:
    try:
        return get_benchmark(db, assessment_type, industry)
    except ScoringValidationError as exc:
        raise _unprocessable(exc) from None


@router.get("/{assessment_id}", response_model=AssessmentRead)
def api_get_assessment(assessment_id: int, db: Session = Depends(get_db)) -> AssessmentRead:
    try:
        user, record = get_assessment_record(db, assessment_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    return AssessmentRead(**record.model_dump(), user=user)


@router.get(
    "/{assessment_id}/export-pdf",
    response_class=Response,
    summary="Download the assessment report as PDF",
    responses={200: {"content": {"application/pdf": {}}}},
)
def api_export_pdf(assessment_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        user, record = get_assessment_record(db, assessment_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None
    download = build_download(user, record, get_settings())
    logger.info("report_downloaded: assessment_id=%s filename=%s", assessment_id, download.filename)
    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={"Content-Disposition": download.content_disposition},
    )


@router.post(
    "/{assessment_id}/email-results",
    response_model=EmailResultsResponse,
    summary="Email the assessment report",
    description="Sends to ``email`` when given, otherwise to the lead. Returns 502 when delivery fails.",
)
def api_email_results(
    assessment_id: int,
    response: Response,
    payload: EmailResultsRequest | None = Body(None),
    db: Session = Depends(get_db),
    email_client: EmailClient = Depends(get_email_client),
) -> EmailResultsResponse:
    try:
        user, record = get_assessment_record(db, assessment_id)
    except NotFoundError as exc:
        raise _not_found(exc) from None

    to = payload.email if payload is not None else None
    result = send_assessment_results(email_client, user, record, to=to, settings=get_settings())
    if not result.success:
        response.status_code = status.HTTP_502_BAD_GATEWAY
        return EmailResultsResponse(
            success=False, message=result.error or "Failed to send assessment results"
        )
    return EmailResultsResponse(success=True, message=f"Assessment results sent to {to or user.email}")
