# screener/tools/calculator.py
from __future__ import annotations

"""
Deterministic questionnaire scoring.

- scale/select answers add weights[condition][option index] to each condition.
- select answers on age-adjusted questions get a young (<= 8) or older (>= 13)
  additive tweak when the chosen option is the configured target.
- multiselect answers add weights for every selected option (no age tweak, no features).
- number answers contribute nothing (age is passed in separately).

Also tracks the 4-domain impairment profile, the sleep confounder score and the
flat feature map used by the pattern matcher.

Unknown question ids and values that are not among a question's options are
skipped silently; the ids of skipped values are reported in `ignored_responses`.
"""

import logging
from functools import partial, reduce
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .catalog import AgeAdjustments, Question, QuestionCatalog, get_config
from .conditions import (
    CONDITIONS,
    IMPAIRMENT_DOMAINS,
    ConditionScores,
    FeatureKey,
    FeatureValue,
    ImpairmentProfile,
)

logger = logging.getLogger("screener")

SLEEP_QUESTION_ID = "sleep_issues"

YOUNG_MAX_AGE = 8     # young band: age <= 8
OLDER_MIN_AGE = 13    # older band: age >= 13

IMPAIRMENT_SIGNIFICANT_LEVEL = 2
IMPAIRMENT_SIGNIFICANT_DOMAINS = 2
SLEEP_CONFOUNDER_THRESHOLD = 8

Responses = Mapping[str, Any]


class RawScoreResult(BaseModel):
    """Output of one scoring pass. Built once, never mutated."""
    model_config = ConfigDict(frozen=True)

    scores: ConditionScores
    impairment: ImpairmentProfile
    sleep_score: float = 0.0
    features: Dict[FeatureKey, FeatureValue] = Field(default_factory=dict)
    ignored_responses: Tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------

class _Tally(NamedTuple):
    scores: Dict[str, float]
    impairment: Dict[str, int]
    sleep_score: float
    features: Dict[FeatureKey, FeatureValue]
    ignored: Tuple[str, ...]

    @classmethod
    def empty(cls) -> "_Tally":
        return cls(
            scores={c: 0.0 for c in CONDITIONS},
            impairment={d: 0 for d in IMPAIRMENT_DOMAINS},
            sleep_score=0.0,
            features={},
            ignored=(),
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def apply_age_adjustment(score: float, index: int, age: float, rules: AgeAdjustments) -> float:
    """Add the young/older band adjustment when `index` is that band's target option."""
    if age <= YOUNG_MAX_AGE and rules.young is not None and index == rules.young.index:
        score += rules.young.adjustment
    if age >= OLDER_MIN_AGE and rules.older is not None and index == rules.older.index:
        score += rules.older.adjustment
    return score


def _add_weights(
    scores: Dict[str, float],
    question: Question,
    index: int,
    age: Optional[float] = None,
) -> Dict[str, float]:
    out = dict(scores)
    for condition, vector in question.weights.items():
        if condition not in out:
            continue
        weight = vector[index] if 0 <= index < len(vector) else 0.0
        if age is not None and question.age_adjusted and question.age_adjustments is not None:
            weight = apply_age_adjustment(weight, index, age, question.age_adjustments)
        out[condition] += weight
    return out


def _extract_feature(
    features: Dict[FeatureKey, FeatureValue],
    question: Question,
    index: int,
) -> Dict[FeatureKey, FeatureValue]:
    if question.ml_key is None:
        return features
    if question.ml_type == "index":
        return {**features, question.ml_key: index}
    if question.ml_values is not None:
        return {**features, question.ml_key: question.ml_values[index]}
    return features


def _fold_response(
    catalog: QuestionCatalog,
    age: float,
    tally: _Tally,
    item: Tuple[str, Any],
) -> _Tally:
    question_id, response = item
    question = catalog.find(question_id)
    if question is None:
        logger.debug("Ignoring response for unknown question %r", question_id)
        return tally

    scores, features, ignored = tally.scores, tally.features, tally.ignored

    if question.type in ("scale", "select"):
        index = question.option_index(response)
        if index == -1:
            logger.debug("Unrecognised value %r for question %r", response, question_id)
            ignored += (question_id,)
        else:
            band_age = age if question.type == "select" else None
            scores = _add_weights(scores, question, index, band_age)
            features = _extract_feature(features, question, index)

    elif question.type == "multiselect":
        selected = response if isinstance(response, (list, tuple)) else [response]
        for value in selected:
            index = question.option_index(value)
            if index == -1:
                logger.debug("Unrecognised value %r for question %r", value, question_id)
                if question_id not in ignored:
                    ignored += (question_id,)
                continue
            scores = _add_weights(scores, question, index)

    impairment = tally.impairment
    if question.impairment_domain is not None:
        index = question.option_index(response)
        if index != -1:
            impairment = {**impairment, question.impairment_domain: index}

    sleep_score = tally.sleep_score
    if question.id == SLEEP_QUESTION_ID and question.sleep_scores is not None:
        index = question.option_index(response)
        in_range = 0 <= index < len(question.sleep_scores)
        sleep_score = question.sleep_scores[index] if in_range else 0.0

    return _Tally(scores, impairment, sleep_score, features, ignored)


# ---------------------------------------------------------------------------
# Core scoring
# ---------------------------------------------------------------------------

def calculate_scores(
    responses: Responses,
    age: float,
    catalog: Optional[QuestionCatalog] = None,
) -> RawScoreResult:
    """
    Reduce a response map into raw condition scores, impairment, sleep score and features.
    Pure: the same responses, age and catalogue always give the same result.
    """
    catalog = catalog or get_config().catalog
    tally = reduce(partial(_fold_response, catalog, age), responses.items(), _Tally.empty())

    impairment = ImpairmentProfile(**tally.impairment, total=sum(tally.impairment.values()))
    return RawScoreResult(
        scores=ConditionScores.from_mapping(tally.scores),
        impairment=impairment,
        sleep_score=tally.sleep_score,
        features=tally.features,
        ignored_responses=tally.ignored,
    )


def max_possible_score(condition: str, catalog: Optional[QuestionCatalog] = None) -> float:
    """Sum over all questions of the largest weight for `condition`."""
    catalog = catalog or get_config().catalog
    return sum(
        max(q.weights[condition])
        for q in catalog.all_questions()
        if q.weights.get(condition)
    )


def percentage_score(raw_score: float, condition: str, catalog: Optional[QuestionCatalog] = None) -> float:
    max_score = max_possible_score(condition, catalog)
    return (raw_score / max_score) * 100 if max_score > 0 else 0.0


# ---------------------------------------------------------------------------
# Threshold checks
# ---------------------------------------------------------------------------

ImpairmentInput = Union[ImpairmentProfile, Mapping[str, int]]


def _domain(impairment: ImpairmentInput, domain: str) -> int:
    # pydantic model has attributes; dict has .get()
    if hasattr(impairment, domain):
        return int(getattr(impairment, domain))
    return int(impairment.get(domain, 0))  # type: ignore


def elevated_domains(impairment: ImpairmentInput) -> List[str]:
    return [d for d in IMPAIRMENT_DOMAINS if _domain(impairment, d) >= IMPAIRMENT_SIGNIFICANT_LEVEL]


def is_impairment_significant(impairment: ImpairmentInput) -> bool:
    """True when at least 2 of the 4 domains are rated 2 or higher."""
    return len(elevated_domains(impairment)) >= IMPAIRMENT_SIGNIFICANT_DOMAINS


def has_sleep_confounder(sleep_score: float) -> bool:
    return sleep_score >= SLEEP_CONFOUNDER_THRESHOLD


def impairment_level(score: int) -> str:
    if score >= 3:
        return "Significant"
    if score >= 2:
        return "Moderate"
    if score >= 1:
        return "Mild"
    return "None"


__all__ = [
    "SLEEP_QUESTION_ID",
    "RawScoreResult",
    "apply_age_adjustment",
    "calculate_scores",
    "max_possible_score",
    "percentage_score",
    "elevated_domains",
    "is_impairment_significant",
    "has_sleep_confounder",
    "impairment_level",
]
