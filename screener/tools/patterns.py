# screener/tools/patterns.py
from __future__ import annotations

"""
Pattern matching over the extracted feature map.

Two engine modes (one active per deployment, see settings.pattern_mode):

- "signature": each configured pattern lists expected feature values; a pattern
  matches when >= 75% of its keys match. Best (highest fraction) match wins,
  first in catalogue order on ties.
- "rules": ordered compound rules per condition; the first rule whose clauses
  all hold wins and later rules for that condition are not evaluated.

Also:
- check_pattern_coherence(features) -> list of warnings for contradictory answers
- diagnostic_suggestions(matches, probabilities) -> conditions ranked by strength
"""

import math
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from .catalog import ExpectedValue, PatternSignature, get_config
from .conditions import CONDITIONS, ConditionScores, FeatureKey, FeatureMap, FeatureValue

MATCH_THRESHOLD = 0.75

PATTERN_MODES = ("signature", "rules")


class PatternMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    matched: bool = False
    pattern_name: Optional[str] = None
    confidence_boost: float = 0.0
    prevalence: Optional[str] = None
    match_score: float = 0.0          # fraction of the pattern's keys that matched
    matched_features: int = 0
    total_features: int = 0
    matched_keys: Tuple[FeatureKey, ...] = ()


NO_MATCH = PatternMatch()

PatternMatches = Dict[str, PatternMatch]


# ---------------------------------------------------------------------------
# Signature-threshold mode
# ---------------------------------------------------------------------------

def matches_value(actual: FeatureValue, expected: ExpectedValue) -> bool:
    """Exact match, or membership when the expectation is a list of values."""
    if isinstance(expected, list):
        return actual in expected
    return actual == expected


def score_signature(features: FeatureMap, pattern: PatternSignature) -> PatternMatch:
    total = len(pattern.signature)
    hits = tuple(
        key
        for key, expected in pattern.signature.items()
        if features.get(key) is not None and matches_value(features[key], expected)
    )
    score = len(hits) / total if total else 0.0
    return PatternMatch(
        matched=score >= MATCH_THRESHOLD,
        pattern_name=pattern.name,
        confidence_boost=pattern.confidence_boost,
        prevalence=pattern.prevalence,
        match_score=score,
        matched_features=len(hits),
        total_features=total,
        matched_keys=hits,
    )


def find_best_match(features: FeatureMap, patterns: Sequence[PatternSignature]) -> PatternMatch:
    best: PatternMatch = NO_MATCH
    for pattern in patterns:
        result = score_signature(features, pattern)
        if result.matched and result.match_score > best.match_score:
            best = result
    return best


def match_signatures(
    features: FeatureMap,
    patterns: Optional[Mapping[str, Sequence[PatternSignature]]] = None,
) -> PatternMatches:
    table = patterns if patterns is not None else get_config().patterns
    return {c: find_best_match(features, table.get(c, ())) for c in CONDITIONS}


# ---------------------------------------------------------------------------
# Compound-rule mode
# ---------------------------------------------------------------------------

Check = Callable[[Optional[FeatureValue]], bool]


def equals(*values: FeatureValue) -> Check:
    return lambda v: v is not None and v in values


def at_least(threshold: int) -> Check:
    return lambda v: isinstance(v, int) and v >= threshold


class CompoundRule(NamedTuple):
    pattern_name: str
    confidence_boost: float
    clauses: Tuple[Tuple[FeatureKey, Check], ...]

    def holds(self, features: FeatureMap) -> bool:
        return all(check(features.get(key)) for key, check in self.clauses)


# Priority order matters: the first rule that holds wins for its condition.
COMPOUND_RULES: Dict[str, Tuple[CompoundRule, ...]] = {
    "adhd": (
        CompoundRule("ADHD Combined Type", 25, (
            (FeatureKey.VARIABILITY, at_least(3)),
            (FeatureKey.NOVELTY_SEEKING, equals("strong")),
            (FeatureKey.REWARD_RESPONSE, equals("dramatic")),
            (FeatureKey.HYPERACTIVITY, equals("present")),
        )),
        CompoundRule("ADHD Inattentive Type", 20, (
            (FeatureKey.VARIABILITY, at_least(3)),
            (FeatureKey.ATTENTION_CONTENT, equals("drifting")),
            (FeatureKey.HYPERACTIVITY, equals("absent", "mild")),
        )),
    ),
    "autism": (
        CompoundRule("Autism Social-Communication Profile", 25, (
            (FeatureKey.STRUCTURE_RESPONSE, equals("rigid")),
            (FeatureKey.SOCIAL_RECIPROCITY, equals("limited")),
            (FeatureKey.TRIGGER, equals("always")),
        )),
        CompoundRule("Autism Sensory-Dominant Profile", 15, (
            (FeatureKey.SENSORY_PROFILE, equals("avoidant")),
            (FeatureKey.EMOTIONAL_REGULATION, equals("meltdown")),
        )),
    ),
    "anxiety": (
        CompoundRule("Generalised Anxiety Pattern", 20, (
            (FeatureKey.ATTENTION_CONTENT, equals("worry")),
            (FeatureKey.EMOTIONAL_REGULATION, equals("anxious")),
        )),
        CompoundRule("Social Anxiety Pattern", 15, (
            (FeatureKey.SOCIAL_RECIPROCITY, equals("anxious")),
            (FeatureKey.TRIGGER, equals("situational")),
        )),
    ),
    "trauma": (
        CompoundRule("Post-Traumatic Stress Pattern", 25, (
            (FeatureKey.TRIGGER, equals("event")),
            (FeatureKey.EMOTIONAL_REGULATION, equals("trauma_response")),
            (FeatureKey.HYPERVIGILANCE, at_least(3)),
        )),
        CompoundRule("Developmental Trauma Pattern", 20, (
            (FeatureKey.SOCIAL_RECIPROCITY, equals("withdrawn")),
            (FeatureKey.HYPERVIGILANCE, at_least(2)),
        )),
    ),
}


def first_rule_match(features: FeatureMap, rules: Sequence[CompoundRule]) -> PatternMatch:
    for rule in rules:
        if rule.holds(features):
            n = len(rule.clauses)
            return PatternMatch(
                matched=True,
                pattern_name=rule.pattern_name,
                confidence_boost=rule.confidence_boost,
                match_score=1.0,
                matched_features=n,
                total_features=n,
                matched_keys=tuple(key for key, _ in rule.clauses),
            )
    return NO_MATCH


def match_compound_rules(
    features: FeatureMap,
    rules: Optional[Mapping[str, Sequence[CompoundRule]]] = None,
) -> PatternMatches:
    table = rules if rules is not None else COMPOUND_RULES
    return {c: first_rule_match(features, table.get(c, ())) for c in CONDITIONS}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def match_patterns(
    features: FeatureMap,
    mode: str = "signature",
    patterns: Optional[Mapping[str, Sequence[PatternSignature]]] = None,
) -> PatternMatches:
    """Per condition: the single best match for the active engine mode, or NO_MATCH."""
    if mode == "signature":
        return match_signatures(features, patterns)
    if mode == "rules":
        return match_compound_rules(features)
    raise ValueError(f"unknown pattern mode {mode!r}; expected one of {PATTERN_MODES}")


# ---------------------------------------------------------------------------
# Coherence & summaries
# ---------------------------------------------------------------------------

def check_pattern_coherence(features: FeatureMap) -> List[str]:
    """Informational warnings for answer combinations that rarely occur together."""
    warnings: List[str] = []
    f = features

    variability = f.get(FeatureKey.VARIABILITY)
    if isinstance(variability, int) and variability <= 1 and f.get(FeatureKey.REWARD_RESPONSE) == "dramatic":
        warnings.append("Unusual pattern: Low variability with dramatic reward response")

    if f.get(FeatureKey.NOVELTY_SEEKING) == "strong" and f.get(FeatureKey.STRUCTURE_RESPONSE) == "rigid":
        warnings.append("Unusual pattern: Strong novelty seeking with rigid structure needs")

    if f.get(FeatureKey.ATTENTION_CONTENT) == "worry" and f.get(FeatureKey.EMOTIONAL_REGULATION) == "regulated":
        warnings.append("Unusual pattern: Worry-based attention with regulated emotions")

    if f.get(FeatureKey.TRIGGER) == "always" and f.get(FeatureKey.EMOTIONAL_REGULATION) == "trauma_response":
        warnings.append("Unusual pattern: Lifelong symptoms with acute trauma response")

    return warnings


class DiagnosticSuggestion(BaseModel):
    condition: str
    probability: float
    has_pattern_match: bool
    pattern_name: Optional[str] = None
    strength: float


def diagnostic_suggestions(matches: PatternMatches, probabilities: ConditionScores) -> List[DiagnosticSuggestion]:
    """Conditions ranked by probability plus matched confidence boost (highest first)."""
    suggestions = []
    for condition, probability in probabilities.items():
        match = matches.get(condition, NO_MATCH)
        strength = probability + (match.confidence_boost if match.matched else 0.0)
        suggestions.append(DiagnosticSuggestion(
            condition=condition,
            probability=probability,
            has_pattern_match=match.matched,
            pattern_name=match.pattern_name if match.matched else None,
            strength=strength,
        ))
    suggestions.sort(key=lambda s: s.strength, reverse=True)
    return suggestions


class PatternSummary(BaseModel):
    condition: str
    pattern_name: str
    confidence_boost: float
    match_percentage: int
    matched_features: int
    total_features: int


def matched_patterns_summary(matches: PatternMatches) -> List[PatternSummary]:
    summary = [
        PatternSummary(
            condition=condition,
            pattern_name=m.pattern_name or "",
            confidence_boost=m.confidence_boost,
            match_percentage=int(math.floor(m.match_score * 100 + 0.5)),
            matched_features=m.matched_features,
            total_features=m.total_features,
        )
        for condition, m in matches.items()
        if m.matched
    ]
    summary.sort(key=lambda s: s.confidence_boost, reverse=True)
    return summary


def total_confidence_boost(matches: PatternMatches) -> float:
    return sum(m.confidence_boost for m in matches.values())


__all__ = [
    "MATCH_THRESHOLD",
    "PATTERN_MODES",
    "PatternMatch",
    "PatternMatches",
    "NO_MATCH",
    "matches_value",
    "score_signature",
    "find_best_match",
    "match_signatures",
    "CompoundRule",
    "COMPOUND_RULES",
    "equals",
    "at_least",
    "first_rule_match",
    "match_compound_rules",
    "match_patterns",
    "check_pattern_coherence",
    "DiagnosticSuggestion",
    "diagnostic_suggestions",
    "PatternSummary",
    "matched_patterns_summary",
    "total_confidence_boost",
]
