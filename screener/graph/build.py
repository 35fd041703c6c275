# screener/graph/build.py
from __future__ import annotations

from langgraph.graph import StateGraph, END

from .state import ScreeningState
from .nodes import (
    score_responses,
    match_feature_patterns,
    combine_priors,
    apply_boosts,
    assess_confidence,
    lookup_age_context,
    recommend,
    compose_result,
)

# Strictly linear: each stage consumes only what earlier stages produced
PIPELINE = [
    ("score_responses", score_responses),
    ("match_feature_patterns", match_feature_patterns),
    ("combine_priors", combine_priors),
    ("apply_boosts", apply_boosts),
    ("assess_confidence", assess_confidence),
    ("lookup_age_context", lookup_age_context),
    ("recommend", recommend),
    ("compose_result", compose_result),
]


def build_graph():
    g = StateGraph(ScreeningState)

    # Nodes
    for name, fn in PIPELINE:
        g.add_node(name, fn)

    # Entry
    g.set_entry_point(PIPELINE[0][0])

    # score -> match -> combine -> boost -> confidence -> age context -> recommend -> compose
    for (a, _), (b, _) in zip(PIPELINE, PIPELINE[1:]):
        g.add_edge(a, b)

    # End
    g.add_edge(PIPELINE[-1][0], END)

    return g.compile()
