from __future__ import annotations

"""
Shared value types for the screening pipeline.

- ConditionScores: fixed record with one number per screened condition
  (adhd, autism, anxiety, trauma). Used for raw scores, priors, likelihoods
  and percentage probabilities alike.
- ImpairmentProfile: four functioning domains rated 0..4 plus their total.
- FeatureKey / FeatureValue: the flat feature map consumed by the pattern matcher.
"""

from enum import Enum
from typing import Dict, Iterator, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict

CONDITIONS: Tuple[str, ...] = ("adhd", "autism", "anxiety", "trauma")

IMPAIRMENT_DOMAINS: Tuple[str, ...] = ("academic", "social", "family", "emotional")

CONDITION_LABELS: Dict[str, str] = {
    "adhd": "ADHD",
    "autism": "Autism Spectrum",
    "anxiety": "Anxiety",
    "trauma": "Trauma/PTSD",
}


class ConditionScores(BaseModel):
    """One value per condition. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    adhd: float = 0.0
    autism: float = 0.0
    anxiety: float = 0.0
    trauma: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return {c: getattr(self, c) for c in CONDITIONS}

    def items(self) -> Iterator[Tuple[str, float]]:
        for c in CONDITIONS:
            yield c, getattr(self, c)

    def top(self) -> Tuple[str, float]:
        """Highest-valued condition (first in CONDITIONS order on ties)."""
        return max(self.items(), key=lambda kv: kv[1])

    @classmethod
    def from_mapping(cls, values: Mapping[str, float]) -> "ConditionScores":
        return cls(**{c: float(values.get(c, 0.0)) for c in CONDITIONS})


class ImpairmentProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    academic: int = 0
    social: int = 0
    family: int = 0
    emotional: int = 0
    total: int = 0

    def domains(self) -> Dict[str, int]:
        return {d: getattr(self, d) for d in IMPAIRMENT_DOMAINS}


class FeatureKey(str, Enum):
    VARIABILITY = "variability"
    NOVELTY_SEEKING = "novelty_seeking"
    REWARD_RESPONSE = "reward_response"
    HYPERACTIVITY = "hyperactivity"
    ATTENTION_CONTENT = "attention_content"
    STRUCTURE_RESPONSE = "structure_response"
    SOCIAL_RECIPROCITY = "social_reciprocity"
    SENSORY_PROFILE = "sensory_profile"
    EMOTIONAL_REGULATION = "emotional_regulation"
    TRIGGER = "trigger"
    HYPERVIGILANCE = "hypervigilance"


# Either a 0-based option index ("index" mode) or a mapped string tag
FeatureValue = Union[int, str]
FeatureMap = Dict[FeatureKey, FeatureValue]


__all__ = [
    "CONDITIONS",
    "IMPAIRMENT_DOMAINS",
    "CONDITION_LABELS",
    "ConditionScores",
    "ImpairmentProfile",
    "FeatureKey",
    "FeatureValue",
    "FeatureMap",
]
