"""API routes."""

from app.api.assessments import router as assessments_router
from app.api.leads import router as leads_router

__all__ = ["assessments_router", "leads_router"]
