# screener/pipeline.py
from __future__ import annotations

"""
Pipeline entry point: responses + age -> ScreeningResult.

    result = run_screening({"age": 9, "gender": "Male", ...})

Pure with respect to its inputs and the (read-only) configuration; the compiled
graph holds no per-run state, so concurrent calls need no coordination.
"""

import math
from typing import Any, Mapping, Optional

from .graph.build import build_graph
from .graph.state import new_state
from .schemas import ScreeningResult
from .settings import settings
from .tools.bayes import Demographics
from .tools.catalog import ScreeningConfig, get_config

AGE_KEY = "age"
GENDER_KEY = "gender"
FAMILY_HISTORY_KEY = "family_history"

# Compile the LangGraph once per process
GRAPH = build_graph()


def _as_age(value: Any) -> Optional[float]:
    """Positive finite number from an int, float or numeric string; None otherwise."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def resolve_age(responses: Mapping[str, Any], age: Optional[float] = None) -> float:
    """Caller-supplied age, else a usable 'age' answer (forms may post it as text), else the configured default."""
    if age is not None:
        return age
    answered = _as_age(responses.get(AGE_KEY))
    return answered if answered is not None else settings.default_age


def demographics_from(responses: Mapping[str, Any], age: float) -> Demographics:
    gender = responses.get(GENDER_KEY)
    return Demographics(
        age=age,
        gender=gender if isinstance(gender, str) else None,
        family_history=responses.get(FAMILY_HISTORY_KEY),
    )


def run_screening(
    responses: Mapping[str, Any],
    age: Optional[float] = None,
    *,
    config: Optional[ScreeningConfig] = None,
    pattern_mode: Optional[str] = None,
) -> ScreeningResult:
    config = config or get_config()
    age = resolve_age(responses, age)
    state = new_state(
        dict(responses),
        age,
        demographics_from(responses, age),
        pattern_mode or settings.pattern_mode,
        config,
    )
    final = GRAPH.invoke(state)
    return final["result"]


__all__ = ["run_screening", "resolve_age", "demographics_from", "GRAPH"]
