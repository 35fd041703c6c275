# screener/graph/state.py
from __future__ import annotations

from typing import Any, Dict, List, TypedDict

from ..tools.bayes import BayesianResult, Demographics
from ..tools.calculator import RawScoreResult
from ..tools.catalog import ScreeningConfig
from ..tools.conditions import ConditionScores
from ..tools.norms import AgeContext
from ..tools.patterns import PatternMatch
from ..tools.recommend import Recommendations


class ScreeningState(TypedDict, total=False):
    # Inputs (set once by the caller)
    responses: Dict[str, Any]
    age: float
    demographics: Demographics
    pattern_mode: str               # "signature" | "rules"
    config: ScreeningConfig

    # Stage outputs, in pipeline order
    raw: RawScoreResult
    pattern_matches: Dict[str, PatternMatch]
    coherence_warnings: List[str]
    bayes: BayesianResult
    probabilities: ConditionScores  # after pattern boosts
    confidence: str                 # "high" | "moderate" | "low"
    age_context: AgeContext
    recommendations: Recommendations

    # Final bundle (see pipeline.ScreeningResult)
    result: Any


def new_state(
    responses: Dict[str, Any],
    age: float,
    demographics: Demographics,
    pattern_mode: str,
    config: ScreeningConfig,
) -> ScreeningState:
    """Fresh input state for one screening run."""
    return {
        "responses": dict(responses),
        "age": age,
        "demographics": demographics,
        "pattern_mode": pattern_mode,
        "config": config,
    }


__all__ = ["ScreeningState", "new_state"]
