"""Pillar score normalization.

Turns raw questionnaire answers into per-pillar percentages using an
externally supplied pillar configuration. Weights are trusted as configured;
the sum-to-100 invariant belongs to whoever maintains the configuration.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from app.schemas.insights import PillarScore
from app.services.errors import ScoringValidationError
from app.services.scoring.scoring_constants import (
    RESPONSE_SCALE_MAX,
    RESPONSE_SCALE_MIN,
    SCORE_DECIMALS,
)


@dataclass(frozen=True)
class PillarConfig:
    """One pillar: display names, weight (percent) and the questions it owns."""

    name: str
    weight: float
    question_ids: tuple[str, ...] = field(default_factory=tuple)
    short_name: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "PillarConfig":
        name = raw.get("name") or raw.get("pillar_name")
        if not name:
            raise ScoringValidationError("pillar config entry is missing a name")
        try:
            weight = float(raw.get("weight", 0))
        except (TypeError, ValueError):
            raise ScoringValidationError(f"pillar {name!r} has a non-numeric weight") from None
        questions = raw.get("question_ids") or raw.get("questions") or ()
        return cls(
            name=str(name),
            weight=weight,
            question_ids=tuple(str(q) for q in questions),
            short_name=raw.get("short_name") or raw.get("pillar_short_name"),
        )


def _answer_value(qid: str, answer: Any) -> float | None:
    """Return a numeric answer on the response scale, or None when unanswered.

    Numeric answers outside the scale raise ScoringValidationError.
    """
    if isinstance(answer, Mapping):
        answer = answer.get("value", answer.get("score"))
    if answer is None or isinstance(answer, bool):
        return None
    try:
        value = float(answer)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    if not RESPONSE_SCALE_MIN <= value <= RESPONSE_SCALE_MAX:
        raise ScoringValidationError(
            f"answer to {qid!r} is {answer!r}; expected "
            f"{RESPONSE_SCALE_MIN}..{RESPONSE_SCALE_MAX}"
        )
    return value


def _to_percent(value: float) -> float:
    span = RESPONSE_SCALE_MAX - RESPONSE_SCALE_MIN
    return (value - RESPONSE_SCALE_MIN) / span * 100.0


def _check_disjoint(pillars: Iterable[PillarConfig]) -> None:
    owner: dict[str, str] = {}
    for pillar in pillars:
        for qid in pillar.question_ids:
            if qid in owner and owner[qid] != pillar.name:
                raise ScoringValidationError(
                    f"question {qid!r} is assigned to both {owner[qid]!r} and {pillar.name!r}"
                )
            owner[qid] = pillar.name


def normalize_pillar_scores(
    responses: Mapping[str, Any],
    pillars: list[PillarConfig],
) -> list[PillarScore]:
    """Compute one 0..100 score per pillar, in configuration order.

    A pillar with no answered questions scores 0.0.
    """
    _check_disjoint(pillars)
    results: list[PillarScore] = []
    for pillar in pillars:
        values = [
            v for v in (_answer_value(qid, responses.get(qid)) for qid in pillar.question_ids)
            if v is not None
        ]
        if values:
            score = round(sum(_to_percent(v) for v in values) / len(values), SCORE_DECIMALS)
        else:
            score = 0.0
        results.append(
            PillarScore(
                pillar_name=pillar.name,
                pillar_short_name=pillar.short_name,
                score=score,
                weight=pillar.weight,
            )
        )
    return results


def compute_overall_score(dimension_scores: list[PillarScore]) -> float:
    """Weighted mean of pillar scores; plain mean when weights are all zero."""
    if not dimension_scores:
        return 0.0
    total_weight = sum(p.weight for p in dimension_scores)
    if total_weight <= 0:
        value = sum(p.score for p in dimension_scores) / len(dimension_scores)
    else:
        value = sum(p.score * p.weight for p in dimension_scores) / total_weight
    return round(value, SCORE_DECIMALS)


def pillar_scores_from_raw(raw: Any) -> list[PillarScore]:
    """Validate client-supplied pillar scores. None is treated as no pillars."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ScoringValidationError("pillar_scores must be a list")
    scores: list[PillarScore] = []
    for idx, entry in enumerate(raw):
        if isinstance(entry, PillarScore):
            scores.append(entry)
            continue
        if not isinstance(entry, Mapping):
            raise ScoringValidationError(f"pillar_scores[{idx}] must be an object")
        data = dict(entry)
        if "pillar_name" not in data and "area" in data:
            data["pillar_name"] = data["area"]
        try:
            scores.append(PillarScore.model_validate(data))
        except ValidationError as exc:
            raise ScoringValidationError(f"pillar_scores[{idx}] is invalid: {exc.errors()[0]['msg']}") from exc
    return scores
