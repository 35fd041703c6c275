# screener/tools/bayes.py
from __future__ import annotations

"""
Prior/likelihood combination for the four screened conditions.

P(condition | answers) is taken as proportional to
    sigmoid(raw_score / scaling_factor) * adjusted_prior
then normalised to percentages. Priors start from base prevalence and are
scaled by gender and family-history multipliers.

This is a heuristic re-weighting, not a validated model. In particular,
pattern boosts are added as percentage points and the set is then
re-normalised, so a boost of 25 moves a condition by less than 25 points.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .conditions import CONDITION_LABELS, CONDITIONS, ConditionScores, ImpairmentProfile
from .patterns import PatternMatches

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BASE_PREVALENCE: Dict[str, float] = {
    "adhd": 0.05,
    "autism": 0.01,
    "anxiety": 0.08,
    "trauma": 0.04,
}

GENDER_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "Male": {"adhd": 2.5, "autism": 4, "anxiety": 1, "trauma": 1},
    "Female": {"adhd": 1, "autism": 1, "anxiety": 1.2, "trauma": 1.3},
    "Other": {"adhd": 1.5, "autism": 2, "anxiety": 1.1, "trauma": 1.2},
}

FAMILY_HISTORY_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "ADHD": {"adhd": 4},
    "Autism": {"autism": 10},
    "Anxiety": {"anxiety": 3},
    "Depression": {"anxiety": 2, "adhd": 1.5},
    "Learning disabilities": {"adhd": 2},
}

SCALING_FACTORS: Dict[str, float] = {
    "adhd": 50,
    "autism": 40,
    "anxiety": 35,
    "trauma": 30,
}
DEFAULT_SCALING_FACTOR = 40

EQUAL_SHARE = 100.0 / len(CONDITIONS)


class Demographics(BaseModel):
    age: Optional[float] = None
    gender: Optional[str] = None
    family_history: Optional[Any] = None   # list of items; anything else is ignored


class BayesianResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    probabilities: ConditionScores     # percentages
    priors: ConditionScores
    likelihoods: ConditionScores


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def sigmoid(x: float) -> float:
    if x >= 0:
        return 1 / (1 + math.exp(-x))
    # exp(x) stays finite for x < 0
    z = math.exp(x)
    return z / (1 + z)


def scaling_factor(condition: str) -> float:
    return SCALING_FACTORS.get(condition, DEFAULT_SCALING_FACTOR)


def scores_to_likelihoods(scores: Mapping[str, float]) -> Dict[str, float]:
    return {c: sigmoid(score / scaling_factor(c)) for c, score in scores.items()}


def adjusted_priors(gender: Optional[str] = None, family_history: Optional[Any] = None) -> Dict[str, float]:
    """Base prevalence scaled by gender, then by each family-history item (compounding)."""
    priors = dict(BASE_PREVALENCE)

    if gender and gender in GENDER_MULTIPLIERS:
        table = GENDER_MULTIPLIERS[gender]
        priors = {c: p * table.get(c, 1) for c, p in priors.items()}

    if isinstance(family_history, (list, tuple)):
        for item in family_history:
            if not isinstance(item, str):
                continue
            for condition, multiplier in FAMILY_HISTORY_MULTIPLIERS.get(item, {}).items():
                priors[condition] *= multiplier

    return priors


def normalize_probabilities(values: Mapping[str, float]) -> Dict[str, float]:
    """Scale to percentages summing to 100; an all-zero input becomes an equal split."""
    total = sum(values.values())
    if total > 0:
        return {c: (v / total) * 100 for c, v in values.items()}
    return {c: EQUAL_SHARE for c in values}


# ---------------------------------------------------------------------------
# Core
# ---------------------------------------------------------------------------

def calculate_bayesian_probabilities(scores: ConditionScores, demographics: Demographics) -> BayesianResult:
    priors = adjusted_priors(demographics.gender, demographics.family_history)
    raw = scores.as_dict()
    likelihoods = scores_to_likelihoods(raw)
    posteriors = {c: likelihoods[c] * priors[c] for c in raw}
    return BayesianResult(
        probabilities=ConditionScores.from_mapping(normalize_probabilities(posteriors)),
        priors=ConditionScores.from_mapping(priors),
        likelihoods=ConditionScores.from_mapping(likelihoods),
    )


def apply_pattern_boosts(probabilities: ConditionScores, matches: PatternMatches) -> ConditionScores:
    """Add each matched boost as percentage points, then re-normalise to 100."""
    adjusted = probabilities.as_dict()
    for condition, match in matches.items():
        if match.matched and match.confidence_boost and condition in adjusted:
            adjusted[condition] += match.confidence_boost
    return ConditionScores.from_mapping(normalize_probabilities(adjusted))


def get_confidence_level(probabilities: ConditionScores, impairment: ImpairmentProfile) -> str:
    """
    'high'  : top > 50, lead over runner-up > 20 and impairment total >= 8
    'low'   : top < 35, lead < 10 or impairment total < 4
    otherwise 'moderate'. High is checked first.
    """
    ranked: List[float] = sorted(probabilities.as_dict().values(), reverse=True)
    top = ranked[0]
    separation = ranked[0] - ranked[1]

    if top > 50 and separation > 20 and impairment.total >= 8:
        return "high"
    if top < 35 or separation < 10 or impairment.total < 4:
        return "low"
    return "moderate"


def interpretation(condition: str, probability: float, confidence: str) -> str:
    label = CONDITION_LABELS.get(condition, condition)
    if confidence == "high" and probability > 50:
        return f"Strong indication of {label}"
    if confidence == "moderate" and probability > 35:
        return f"Moderate indication of {label}"
    if probability > 25:
        return f"Some features consistent with {label}"
    return f"Low probability of {label}"


def interpretations(probabilities: ConditionScores, confidence: str) -> Dict[str, str]:
    return {c: interpretation(c, p, confidence) for c, p in probabilities.items()}


__all__ = [
    "BASE_PREVALENCE",
    "GENDER_MULTIPLIERS",
    "FAMILY_HISTORY_MULTIPLIERS",
    "SCALING_FACTORS",
    "DEFAULT_SCALING_FACTOR",
    "Demographics",
    "BayesianResult",
    "sigmoid",
    "scaling_factor",
    "scores_to_likelihoods",
    "adjusted_priors",
    "normalize_probabilities",
    "calculate_bayesian_probabilities",
    "apply_pattern_boosts",
    "get_confidence_level",
    "interpretation",
    "interpretations",
]
