"""Shared fixtures: a small hand-built catalogue and the bundled default configuration."""

import pytest

from screener.tools.catalog import QuestionCatalog, ScreeningConfig, get_config, parse_catalog

SCALE = ["Never", "Sometimes", "Often"]
IMPACT = ["Not at all", "A little", "Somewhat", "Quite a lot", "Severely"]

SMALL_CATALOG = {
    "sections": [
        {
            "id": "demographics",
            "title": "About Your Child",
            "questions": [
                {"id": "age", "type": "number", "required": True},
                {"id": "gender", "type": "select", "required": True, "options": ["Male", "Female", "Other"]},
            ],
        },
        {
            "id": "core",
            "title": "Core",
            "questions": [
                {
                    "id": "focus",
                    "type": "scale",
                    "required": True,
                    "options": SCALE,
                    "weights": {"adhd": [0, 3, 6], "anxiety": [0, 1, 2]},
                    "ml_key": "variability",
                    "ml_type": "index",
                },
                {
                    "id": "activity",
                    "type": "select",
                    "options": ["Calm", "Active", "Very active"],
                    "weights": {"adhd": [0, 4, 8]},
                    "age_adjusted": True,
                    "age_adjustments": {
                        "young": {"index": 1, "adjustment": -2},
                        "older": {"index": 2, "adjustment": 3},
                    },
                    "ml_key": "hyperactivity",
                    "ml_values": ["absent", "mild", "present"],
                },
                {
                    "id": "events",
                    "type": "multiselect",
                    "options": ["Move", "Loss", "None"],
                    "weights": {"trauma": [2, 5, 0]},
                },
                {
                    "id": "worry",
                    "type": "scale",
                    "options": SCALE,
                    "weights": {"anxiety": [0, 2, 4]},
                    "age_adjusted": True,
                    "age_adjustments": {
                        "young": {"index": 1, "adjustment": -1},
                        "older": {"index": 2, "adjustment": 5},
                    },
                },
                {
                    "id": "fears",
                    "type": "multiselect",
                    "options": ["Dark", "Dogs", "None"],
                    "weights": {"anxiety": [1, 3, 0]},
                    "age_adjusted": True,
                    "age_adjustments": {
                        "young": {"index": 0, "adjustment": -1},
                        "older": {"index": 1, "adjustment": 5},
                    },
                },
                {
                    "id": "sleep_issues",
                    "type": "select",
                    "options": ["Good", "Poor", "Bad"],
                    "sleep_scores": [0, 6, 9],
                },
            ],
        },
        {
            "id": "impact",
            "title": "Impact",
            "questions": [
                {"id": "school", "type": "scale", "options": IMPACT, "impairment_domain": "academic"},
                {"id": "friends", "type": "scale", "options": IMPACT, "impairment_domain": "social"},
                {"id": "home", "type": "scale", "options": IMPACT, "impairment_domain": "family"},
                {"id": "mood", "type": "scale", "options": IMPACT, "impairment_domain": "emotional"},
            ],
        },
    ]
}


@pytest.fixture
def small_catalog() -> QuestionCatalog:
    return parse_catalog(SMALL_CATALOG)


@pytest.fixture
def config() -> ScreeningConfig:
    return get_config()


def adhd_heavy_responses(config: ScreeningConfig) -> dict:
    """
    Age 9 male with ADHD family history; every scored question answered at its
    highest ADHD weight, everything else at its first (lowest) option.
    """
    responses = {}
    for q in config.catalog.all_questions():
        if q.type in ("number", "multiselect"):
            continue
        adhd = q.weights.get("adhd")
        responses[q.id] = q.options[adhd.index(max(adhd))] if adhd else q.options[0]
    responses.update({
        "age": 9,
        "gender": "Male",
        "family_history": ["ADHD"],
        "adverse_experiences": ["None of these"],
    })
    return responses
