# screener/graph/nodes.py
from __future__ import annotations

"""
Screening graph nodes. Each node reads what earlier stages produced and returns
only the keys it adds, so a run never mutates shared state:

score_responses -> match_feature_patterns -> combine_priors -> apply_boosts
-> assess_confidence -> lookup_age_context -> recommend -> compose_result
"""

import logging
from typing import Any, Dict, List

from .state import ScreeningState
from ..schemas import ScreeningResult
from ..tools.bayes import (
    apply_pattern_boosts,
    calculate_bayesian_probabilities,
    get_confidence_level,
    interpretations,
)
from ..tools.calculator import (
    calculate_scores,
    has_sleep_confounder,
    impairment_level,
    is_impairment_significant,
)
from ..tools.norms import age_context
from ..tools.patterns import (
    check_pattern_coherence,
    diagnostic_suggestions,
    match_patterns,
    matched_patterns_summary,
    total_confidence_boost,
)
from ..tools.recommend import generate_recommendations

logger = logging.getLogger("screener")

YOUNG_CHILD_NOTICE_AGE = 8

SLEEP_NOTICE = (
    "Sleep issues detected: sleep difficulties can cause inattention, restlessness and mood "
    "problems that look like ADHD. A sleep evaluation is recommended before an ADHD assessment."
)
LOW_IMPAIRMENT_NOTICE = (
    "Limited functional impairment: the answers suggest limited impact on daily life across "
    "school, friendships and family. A diagnosis needs significant impairment in more than one setting."
)


def _young_child_notice(age: float) -> str:
    return (
        f"At age {age:g}, high activity levels and some impulsivity are developmentally normal. "
        "Look for behaviour that is extreme compared with same-age peers."
    )


# ---- Scoring ----------------------------------------------------------------

def score_responses(state: ScreeningState) -> Dict[str, Any]:
    raw = calculate_scores(state["responses"], state["age"], state["config"].catalog)
    if raw.ignored_responses:
        logger.debug("Unrecognised answers skipped for: %s", ", ".join(raw.ignored_responses))
    return {"raw": raw}


def match_feature_patterns(state: ScreeningState) -> Dict[str, Any]:
    features = state["raw"].features
    matches = match_patterns(features, state["pattern_mode"], state["config"].patterns)
    return {"pattern_matches": matches, "coherence_warnings": check_pattern_coherence(features)}


# ---- Bayesian combination ---------------------------------------------------

def combine_priors(state: ScreeningState) -> Dict[str, Any]:
    return {"bayes": calculate_bayesian_probabilities(state["raw"].scores, state["demographics"])}


def apply_boosts(state: ScreeningState) -> Dict[str, Any]:
    return {"probabilities": apply_pattern_boosts(state["bayes"].probabilities, state["pattern_matches"])}


def assess_confidence(state: ScreeningState) -> Dict[str, Any]:
    return {"confidence": get_confidence_level(state["probabilities"], state["raw"].impairment)}


# ---- Context & recommendations ---------------------------------------------

def lookup_age_context(state: ScreeningState) -> Dict[str, Any]:
    return {"age_context": age_context(state["age"], state["config"].age_norms)}


def recommend(state: ScreeningState) -> Dict[str, Any]:
    raw = state["raw"]
    return {"recommendations": generate_recommendations(state["probabilities"], raw.impairment, raw.sleep_score)}


def compose_result(state: ScreeningState) -> Dict[str, Any]:
    raw = state["raw"]
    probabilities = state["probabilities"]
    matches = state["pattern_matches"]
    significant = is_impairment_significant(raw.impairment)
    sleep_confounder = has_sleep_confounder(raw.sleep_score)

    notices: List[str] = []
    if sleep_confounder:
        notices.append(SLEEP_NOTICE)
    if not significant:
        notices.append(LOW_IMPAIRMENT_NOTICE)
    if state["age"] <= YOUNG_CHILD_NOTICE_AGE:
        notices.append(_young_child_notice(state["age"]))

    result = ScreeningResult(
        age=state["age"],
        pattern_mode=state["pattern_mode"],
        scores=raw.scores,
        impairment=raw.impairment,
        impairment_significant=significant,
        impairment_levels={d: impairment_level(score) for d, score in raw.impairment.domains().items()},
        sleep_score=raw.sleep_score,
        sleep_confounder=sleep_confounder,
        features=raw.features,
        ignored_responses=list(raw.ignored_responses),
        priors=state["bayes"].priors,
        likelihoods=state["bayes"].likelihoods,
        base_probabilities=state["bayes"].probabilities,
        probabilities=probabilities,
        pattern_matches=matches,
        matched_patterns=matched_patterns_summary(matches),
        total_confidence_boost=total_confidence_boost(matches),
        coherence_warnings=state["coherence_warnings"],
        confidence=state["confidence"],
        interpretations=interpretations(probabilities, state["confidence"]),
        suggestions=diagnostic_suggestions(matches, probabilities),
        age_context=state["age_context"],
        recommendations=state["recommendations"],
        notices=notices,
    )

    top, share = probabilities.top()
    logger.info(
        "Screening complete: top=%s (%.1f%%) confidence=%s urgency=%s",
        top, share, result.confidence, result.recommendations.urgency,
    )
    return {"result": result}


__all__ = [
    "score_responses",
    "match_feature_patterns",
    "combine_priors",
    "apply_boosts",
    "assess_confidence",
    "lookup_age_context",
    "recommend",
    "compose_result",
]
