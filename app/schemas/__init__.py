"""Pydantic schemas for request/response validation."""

from app.schemas.assessment import (
    AssessmentRead,
    AssessmentRecord,
    AssessmentSubmit,
    AssessmentSubmitResponse,
    AssessmentSummary,
    BenchmarkRead,
    EmailResultsRequest,
    EmailResultsResponse,
)
from app.schemas.insights import (
    CriticalImpactArea,
    ImprovementArea,
    InsightDocument,
    PillarScore,
    Strength,
    WeightedPriority,
)
from app.schemas.lead import LeadCreate, LeadProfile, LeadRead

__all__ = [
    "AssessmentRead",
    "AssessmentRecord",
    "AssessmentSubmit",
    "AssessmentSubmitResponse",
    "AssessmentSummary",
    "BenchmarkRead",
    "CriticalImpactArea",
    "EmailResultsRequest",
    "EmailResultsResponse",
    "ImprovementArea",
    "InsightDocument",
    "LeadCreate",
    "LeadProfile",
    "LeadRead",
    "PillarScore",
    "Strength",
    "WeightedPriority",
]
