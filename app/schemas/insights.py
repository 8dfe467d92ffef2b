"""Insight document schemas (persisted as JSON in ``assessments.insights``).

The field names below are a compatibility contract with rows already stored by
earlier releases; do not rename them. ``schema_version`` was added later, so a
stored document without it is treated as legacy (version 0 or 1).
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Version 1: original rows (no schema_version key). Version 2: adds schema_version.
INSIGHT_SCHEMA_VERSION: int = 2
LEGACY_SCHEMA_VERSION: int = 1
EMPTY_SCHEMA_VERSION: int = 0


class PillarScore(BaseModel):
    """One pillar's normalized score and configured weight."""

    model_config = ConfigDict(extra="allow")

    pillar_name: str = Field(..., min_length=1)
    pillar_short_name: str | None = None
    score: float = Field(..., ge=0, le=100)
    weight: float = Field(0.0, ge=0)

    @property
    def area(self) -> str:
        return self.pillar_name


class Strength(BaseModel):
    area: str
    score: float
    description: str


class ImprovementArea(BaseModel):
    area: str
    score: float
    priority: str  # High | Medium | Low
    description: str


class WeightedPriority(BaseModel):
    area: str
    score: float
    weight: float
    impact_score: float
    priority: int  # rank, 1 = highest impact
    description: str


class CriticalImpactArea(BaseModel):
    area: str
    score: float
    weight: float
    priority: str
    description: str


class InsightDocument(BaseModel):
    """Derived insight document for one assessment.

    Unknown keys found in stored rows are kept (``extra="allow"``) so that a
    load/store cycle never drops data written by other tools.
    """

    model_config = ConfigDict(extra="allow")

    schema_version: int = EMPTY_SCHEMA_VERSION
    overall_assessment: str | None = None
    score_category: str | None = None
    strengths: list[Strength] = Field(default_factory=list)
    improvement_areas: list[ImprovementArea] = Field(default_factory=list)
    weighted_priorities: list[WeightedPriority] = Field(default_factory=list)
    critical_impact_areas: list[CriticalImpactArea] = Field(default_factory=list)
    gap_analysis: list[str] = Field(default_factory=list)
    service_recommendations: list[str] = Field(default_factory=list)
    total_score: float | None = None
    completion_date: str | None = None
    completion_time_ms: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    backfilled_at: str | None = None

    @classmethod
    def from_stored(cls, raw: Any) -> "InsightDocument":
        """Load a stored document, upgrading legacy shapes.

        Accepts None, a JSON string, or a dict. Anything unparseable yields an
        empty document rather than raising; callers log the degradation.
        """
        if raw is None or raw == "":
            return cls()
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError:
                return cls()
        if not isinstance(raw, dict) or not raw:
            return cls()
        data = dict(raw)
        if "schema_version" not in data:
            data["schema_version"] = LEGACY_SCHEMA_VERSION
        try:
            return cls.model_validate(data)
        except ValidationError:
            return cls._salvage(data)

    @classmethod
    def _salvage(cls, data: dict) -> "InsightDocument":
        """Keep the string-list and narrative fields of a partially malformed document."""
        kept: dict[str, Any] = {"schema_version": data.get("schema_version", LEGACY_SCHEMA_VERSION)}
        if isinstance(data.get("overall_assessment"), str):
            kept["overall_assessment"] = data["overall_assessment"]
        for key in ("gap_analysis", "service_recommendations"):
            value = data.get(key)
            if isinstance(value, list):
                kept[key] = [str(v) for v in value]
        return cls.model_validate(kept)

    def to_stored(self) -> dict[str, Any]:
        """Return the JSON-ready dict persisted in ``assessments.insights``."""
        return self.model_dump(mode="json")

    def is_populated(self) -> bool:
        """True when the generator output is present (backfill skip rule)."""
        return bool(self.overall_assessment) and bool(self.service_recommendations)

    @property
    def is_legacy(self) -> bool:
        return self.schema_version < INSIGHT_SCHEMA_VERSION
