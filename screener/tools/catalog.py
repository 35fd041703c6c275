from __future__ import annotations

"""
Configuration store: question catalogue, age norms and pattern signatures.

All three are plain JSON files validated into pydantic models once at startup.
Integrity problems (e.g., a weights vector shorter than its option list) raise
CatalogError at load time so that evaluation never has to guard against them.

Exports:
- load_catalog(path) / load_age_norms(path) / load_patterns(path)
- get_config() -> ScreeningConfig (cached, built from settings)
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator, model_validator

from .conditions import CONDITIONS, FeatureKey, FeatureValue
from ..settings import settings

logger = logging.getLogger("screener")

QuestionType = Literal["number", "select", "scale", "multiselect"]
ImpairmentDomain = Literal["academic", "social", "family", "emotional"]


class CatalogError(ValueError):
    """Configuration failed an integrity check."""


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------

class AgeAdjustment(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    adjustment: float


class AgeAdjustments(BaseModel):
    model_config = ConfigDict(frozen=True)

    young: Optional[AgeAdjustment] = None   # applied when age <= 8
    older: Optional[AgeAdjustment] = None   # applied when age >= 13


class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    type: QuestionType
    options: List[str] = Field(default_factory=list)
    required: bool = False
    hint: Optional[str] = None
    min: Optional[int] = None
    max: Optional[int] = None

    weights: Dict[str, List[float]] = Field(default_factory=dict)
    age_adjusted: bool = False
    age_adjustments: Optional[AgeAdjustments] = None
    impairment_domain: Optional[ImpairmentDomain] = None
    sleep_scores: Optional[List[float]] = None

    ml_key: Optional[FeatureKey] = None
    ml_type: Optional[Literal["index"]] = None
    ml_values: Optional[List[str]] = None

    @model_validator(mode="after")
    def _check_integrity(self) -> "Question":
        n = len(self.options)
        if self.type != "number" and n == 0:
            raise ValueError(f"question {self.id!r}: option list is empty")
        for condition, vector in self.weights.items():
            if len(vector) != n:
                raise ValueError(
                    f"question {self.id!r}: {condition} weights have {len(vector)} entries, expected {n}"
                )
        if self.sleep_scores is not None and len(self.sleep_scores) != n:
            raise ValueError(f"question {self.id!r}: sleep_scores length does not match options")
        if self.ml_values is not None and len(self.ml_values) != n:
            raise ValueError(f"question {self.id!r}: ml_values length does not match options")
        if self.age_adjustments is not None:
            for band in (self.age_adjustments.young, self.age_adjustments.older):
                if band is not None and not 0 <= band.index < n:
                    raise ValueError(f"question {self.id!r}: age adjustment index {band.index} out of range")
        return self

    def option_index(self, value: Any) -> int:
        """Position of `value` in the option list, or -1 if it is not an option."""
        try:
            return self.options.index(value)
        except ValueError:
            return -1


class Section(BaseModel):
    id: str
    title: str
    questions: List[Question]


class QuestionCatalog(BaseModel):
    sections: List[Section]

    _by_id: Dict[str, Question] = PrivateAttr(default_factory=dict)

    @model_validator(mode="after")
    def _unique_ids(self) -> "QuestionCatalog":
        seen = set()
        for q in self.all_questions():
            if q.id in seen:
                raise ValueError(f"duplicate question id {q.id!r}")
            seen.add(q.id)
        return self

    def model_post_init(self, __context: Any) -> None:
        self._by_id = {q.id: q for q in self.all_questions()}

    def find(self, question_id: str) -> Optional[Question]:
        return self._by_id.get(question_id)

    def section(self, section_id: str) -> Optional[Section]:
        for s in self.sections:
            if s.id == section_id:
                return s
        return None

    def all_questions(self) -> List[Question]:
        return [q for s in self.sections for q in s.questions]


def missing_required(responses: Mapping[str, Any], section: Section) -> List[str]:
    """
    Ids of required questions in `section` with no usable answer.
    Empty strings, empty lists and None count as unanswered.
    """
    missing = []
    for q in section.questions:
        value = responses.get(q.id)
        if q.required and (value is None or value == "" or value == []):
            missing.append(q.id)
    return missing


# ---------------------------------------------------------------------------
# Age norms & pattern signatures
# ---------------------------------------------------------------------------

class AgeNorm(BaseModel):
    model_config = ConfigDict(frozen=True)

    note: str
    attention_span: int                # expected minutes of sustained attention
    hyperactivity_expected: bool
    impulsivity_high: bool


ExpectedValue = Union[FeatureValue, List[FeatureValue]]


class PatternSignature(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    confidence_boost: float
    prevalence: Optional[str] = None
    signature: Dict[FeatureKey, ExpectedValue]

    @field_validator("signature")
    @classmethod
    def _non_empty(cls, v: Dict[FeatureKey, ExpectedValue]) -> Dict[FeatureKey, ExpectedValue]:
        if not v:
            raise ValueError("pattern signature must name at least one feature")
        return v


class ScreeningConfig(BaseModel):
    """Everything the pipeline reads. Loaded once, never mutated."""
    catalog: QuestionCatalog
    age_norms: Dict[int, AgeNorm]
    patterns: Dict[str, List[PatternSignature]]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _read_json(path: Union[str, Path]) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as e:
        raise CatalogError(f"{path}: invalid JSON ({e})") from e


def parse_catalog(raw: Dict[str, Any]) -> QuestionCatalog:
    try:
        return QuestionCatalog.model_validate(raw)
    except ValidationError as e:
        raise CatalogError(f"question catalogue failed validation: {e}") from e


def parse_age_norms(raw: Dict[str, Any]) -> Dict[int, AgeNorm]:
    try:
        norms = {int(k): AgeNorm.model_validate(v) for k, v in raw.items()}
    except (ValueError, ValidationError) as e:
        raise CatalogError(f"age norms failed validation: {e}") from e
    if not norms:
        raise CatalogError("age norms table is empty")
    # Ascending numeric key order decides ties in the closest-age lookup
    return dict(sorted(norms.items()))


def parse_patterns(raw: Dict[str, Any]) -> Dict[str, List[PatternSignature]]:
    unknown = set(raw) - set(CONDITIONS)
    if unknown:
        raise CatalogError(f"pattern table names unknown conditions: {sorted(unknown)}")
    try:
        return {c: [PatternSignature.model_validate(p) for p in raw.get(c, [])] for c in CONDITIONS}
    except ValidationError as e:
        raise CatalogError(f"pattern signatures failed validation: {e}") from e


def load_catalog(path: Union[str, Path]) -> QuestionCatalog:
    return parse_catalog(_read_json(path))


def load_age_norms(path: Union[str, Path]) -> Dict[int, AgeNorm]:
    return parse_age_norms(_read_json(path))


def load_patterns(path: Union[str, Path]) -> Dict[str, List[PatternSignature]]:
    return parse_patterns(_read_json(path))


@lru_cache(maxsize=1)
def get_config() -> ScreeningConfig:
    """Load and cache the process-wide configuration named in settings."""
    config = ScreeningConfig(
        catalog=load_catalog(settings.questions_path),
        age_norms=load_age_norms(settings.age_norms_path),
        patterns=load_patterns(settings.patterns_path),
    )
    logger.info(
        "Loaded screening config: %d questions, %d age norms, %d patterns",
        len(config.catalog.all_questions()),
        len(config.age_norms),
        sum(len(p) for p in config.patterns.values()),
    )
    return config


__all__ = [
    "CatalogError",
    "AgeAdjustment",
    "AgeAdjustments",
    "Question",
    "Section",
    "missing_required",
    "QuestionCatalog",
    "AgeNorm",
    "PatternSignature",
    "ScreeningConfig",
    "parse_catalog",
    "parse_age_norms",
    "parse_patterns",
    "load_catalog",
    "load_age_norms",
    "load_patterns",
    "get_config",
]
