"""Domain errors raised by the assessment services.

API routes translate these into HTTP responses; services never raise
HTTPException themselves.
"""

from __future__ import annotations


class ScoringValidationError(ValueError):
    """Malformed or out-of-range scoring input (maps to 422)."""


class NotFoundError(LookupError):
    """Requested lead or assessment does not exist (maps to 404)."""
