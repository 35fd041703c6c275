# screener/schemas.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .tools.conditions import ConditionScores, FeatureKey, FeatureValue, ImpairmentProfile
from .tools.norms import AgeContext
from .tools.patterns import DiagnosticSuggestion, PatternMatch, PatternSummary
from .tools.recommend import Recommendations

PatternMode = Literal["signature", "rules"]


class ScreeningResult(BaseModel):
    """Everything produced by one screening run; the contract the front end renders."""
    age: float
    pattern_mode: str

    scores: ConditionScores
    impairment: ImpairmentProfile
    impairment_significant: bool
    impairment_levels: Dict[str, str]   # per domain: None | Mild | Moderate | Significant
    sleep_score: float
    sleep_confounder: bool
    features: Dict[FeatureKey, FeatureValue]
    ignored_responses: List[str]

    priors: ConditionScores
    likelihoods: ConditionScores
    base_probabilities: ConditionScores   # before pattern boosts
    probabilities: ConditionScores        # final, after boosts

    pattern_matches: Dict[str, PatternMatch]
    matched_patterns: List[PatternSummary]
    total_confidence_boost: float
    coherence_warnings: List[str]

    confidence: str
    interpretations: Dict[str, str]
    suggestions: List[DiagnosticSuggestion]
    age_context: AgeContext
    recommendations: Recommendations
    notices: List[str]


class ScreeningRequest(BaseModel):
    """One-shot evaluation of a complete response map."""
    responses: Dict[str, Any] = Field(..., examples=[{"age": 9, "gender": "Male", "attention_variability": "Often"}])
    age: Optional[float] = Field(None, ge=0, le=120)
    pattern_mode: Optional[PatternMode] = None


class SessionRequest(BaseModel):
    """Request that only needs a session id (e.g., submit or reset)."""
    session_id: str = Field(..., min_length=1, examples=["demo-123"])


class AnswerRequest(SessionRequest):
    """Merge one or more answers into a draft screening."""
    answers: Dict[str, Any] = Field(..., examples=[{"attention_variability": "Often"}])
    section_id: Optional[str] = Field(None, examples=["tier1"])


class SubmitRequest(SessionRequest):
    pattern_mode: Optional[PatternMode] = None


class DraftResponse(BaseModel):
    session_id: str
    responses: Dict[str, Any]
    missing_required: List[str] = Field(default_factory=list)


class SubmitResponse(BaseModel):
    session_id: str
    missing_required: List[str]
    result: ScreeningResult
