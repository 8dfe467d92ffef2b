"""SAFE-8 scoring constants.

Centralized thresholds for pillar normalization, insight generation and
report gap analysis. No magic numbers inside the scoring code; every value it
compares against is defined here.
"""

from __future__ import annotations

# ── Response scale (pillar normalizer) ──────────────────────────────────

RESPONSE_SCALE_MIN: int = 1
RESPONSE_SCALE_MAX: int = 5
SCORE_DECIMALS: int = 1

# ── Overall score bands ─────────────────────────────────────────────────

BAND_LEADER_MIN: float = 80.0
BAND_ADOPTER_MIN: float = 60.0
BAND_EXPLORER_MIN: float = 40.0

BAND_LEADER: str = "AI Leader"
BAND_ADOPTER: str = "AI Adopter"
BAND_EXPLORER: str = "AI Explorer"
BAND_STARTER: str = "AI Starter"

# Ordered highest first; first band whose minimum is met wins.
SCORE_BANDS: tuple[tuple[float, str], ...] = (
    (BAND_LEADER_MIN, BAND_LEADER),
    (BAND_ADOPTER_MIN, BAND_ADOPTER),
    (BAND_EXPLORER_MIN, BAND_EXPLORER),
    (0.0, BAND_STARTER),
)

BAND_NARRATIVES: dict[str, str] = {
    BAND_LEADER: "Advanced AI maturity with strong foundations across the organization",
    BAND_ADOPTER: "Good AI maturity with opportunities for strategic enhancement",
    BAND_EXPLORER: "Developing AI maturity with significant gaps to address",
    BAND_STARTER: "Early-stage AI maturity requiring foundational investment",
}

# Report/email accent colour per band
BAND_COLORS: dict[str, str] = {
    BAND_LEADER: "#00A651",
    BAND_ADOPTER: "#0098DB",
    BAND_EXPLORER: "#F7941D",
    BAND_STARTER: "#E31B23",
}

# ── Pillar classification (insight generator) ───────────────────────────

# Pillars scoring at or above this are strengths; below are improvement areas.
STRENGTH_THRESHOLD: float = 70.0

# Improvement priority tier by gap below STRENGTH_THRESHOLD (inclusive minimums).
PRIORITY_HIGH_MIN_GAP: float = 20.0
PRIORITY_MEDIUM_MIN_GAP: float = 5.0

PRIORITY_HIGH: str = "High"
PRIORITY_MEDIUM: str = "Medium"
PRIORITY_LOW: str = "Low"

# impact_score = weight * (IMPROVEMENT_CEILING - score) / 100
IMPROVEMENT_CEILING: float = 100.0
# Stored rounded half-up; ranking uses the unrounded value
IMPACT_DECIMALS: int = 1

# Critical impact: weight >= CRITICAL_WEIGHT_MIN and score < CRITICAL_SCORE_MAX
CRITICAL_WEIGHT_MIN: float = 12.5
CRITICAL_SCORE_MAX: float = 50.0

DEFAULT_ASSESSMENT_TYPE: str = "GENERAL"
KNOWN_ASSESSMENT_TYPES: frozenset[str] = frozenset({"CORE", "ADVANCED", "FRONTIER", "GENERAL"})

# ── Recommendations ─────────────────────────────────────────────────────

BAND_OPENING_RECOMMENDATIONS: dict[str, str] = {
    BAND_LEADER: "Scale proven AI use cases across the organization and formalize enterprise AI governance",
    BAND_ADOPTER: "Expand AI adoption beyond pilot initiatives with a structured use-case portfolio",
    BAND_EXPLORER: "Focus on building foundational AI capabilities and governance",
    BAND_STARTER: "Focus on building foundational AI capabilities and governance",
}

# (keywords matched against weak pillar names, recommendation) in output order
PILLAR_KEYWORD_RECOMMENDATIONS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("data",), "Invest in data quality and governance infrastructure"),
    (("governance", "ethic", "security", "privacy", "risk"),
     "Strengthen AI governance, risk and ethics frameworks"),
    (("talent", "culture", "skill", "people"),
     "Develop AI literacy and upskilling programs across the workforce"),
    (("technology", "infrastructure", "platform"),
     "Modernize technology infrastructure to support AI workloads at scale"),
    (("change",), "Establish structured change management for AI-driven transformation"),
)

EXPERT_ENGAGEMENT_RECOMMENDATION: str = (
    "Consider engaging AI readiness experts for detailed transformation planning"
)

# ── Report gap analysis ─────────────────────────────────────────────────

BEST_PRACTICE_SCORE: float = 80.0
REPORT_GAP_CRITICAL_MIN: float = 40.0
REPORT_GAP_HIGH_MIN: float = 20.0

REPORT_GAP_CRITICAL: str = "Critical"
REPORT_GAP_HIGH: str = "High"
REPORT_GAP_MODERATE: str = "Moderate"

# Performance summary buckets
SUMMARY_EXCELLENT_MIN: float = 80.0
SUMMARY_GOOD_MIN: float = 60.0


def score_band(overall_score: float) -> str:
    """Return the named band for an overall score (0..100)."""
    for minimum, band in SCORE_BANDS:
        if overall_score >= minimum:
            return band
    return BAND_STARTER
