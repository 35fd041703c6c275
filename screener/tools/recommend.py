# screener/tools/recommend.py
from __future__ import annotations

"""
Threshold rules that turn final probabilities, impairment and sleep score into
an urgency level plus referrals, support strategies and flags.

Every rule is checked independently, in the order below; list order follows
that check order. Nothing is de-duplicated afterwards.
"""

from typing import List

from pydantic import BaseModel, Field

from .conditions import ConditionScores, ImpairmentProfile

URGENT_THRESHOLD = 70
PRIORITY_THRESHOLD = 50

SLEEP_REFERRAL_THRESHOLD = 6

# ---------------------------------------------------------------------------
# Copy
# ---------------------------------------------------------------------------

REFERRAL_ADHD = "Refer for a specialist ADHD assessment (community paediatrics or CAMHS)"
REFERRAL_AUTISM = "Refer for an autism diagnostic assessment (multidisciplinary team, ADOS-2/ADI-R)"
REFERRAL_ANXIETY = "CAMHS referral for anxiety assessment and CBT-based support"
REFERRAL_TRAUMA = "Referral for trauma-informed therapy (e.g., TF-CBT or EMDR)"
REFERRAL_SLEEP = "Sleep study or paediatric sleep assessment to rule out a sleep disorder"
REFERRAL_EDPSYCH = "Educational psychology assessment"

FLAG_SLEEP = "Sleep problems may mimic ADHD symptoms; address sleep before drawing conclusions about attention"
FLAG_EMOTIONAL = "Monitor self-esteem and depression risk"

SUPPORT_SENCO = "Request a meeting with the school SENCO to agree classroom support"
SUPPORT_COUNSELING = "Consider school counselling or an emotional wellbeing service"

ADHD_SUPPORT = [
    "Break tasks into short steps with clear checkpoints",
    "Use visual timers, checklists and schedules",
    "Build regular movement breaks into the day",
    "Seat near the teacher and away from distractions",
    "Give immediate, specific praise and small rewards",
]

AUTISM_SUPPORT = [
    "Keep routines predictable and give advance warning of changes",
    "Use visual supports and clear, literal language",
    "Provide a quiet space for sensory regulation",
    "Make social rules and expectations explicit",
    "Reduce sensory load (noise, lighting, clothing textures)",
]

ANXIETY_SUPPORT = [
    "Acknowledge worries without reinforcing avoidance",
    "Practise breathing and grounding techniques together",
    "Plan gradual, supported steps towards feared situations",
    "Keep reassurance brief, calm and consistent",
]

TRAUMA_SUPPORT = [
    "Create a safe, predictable environment at home and school",
    "Identify triggers and reduce exposure where possible",
    "Name and validate emotions calmly",
    "Build trusted relationships with key adults",
]


class Recommendations(BaseModel):
    urgency: str                       # "urgent" | "priority" | "routine"
    referrals: List[str] = Field(default_factory=list)
    support: List[str] = Field(default_factory=list)
    flags: List[str] = Field(default_factory=list)


def urgency_for(top_probability: float) -> str:
    if top_probability > URGENT_THRESHOLD:
        return "urgent"
    if top_probability > PRIORITY_THRESHOLD:
        return "priority"
    return "routine"


def generate_recommendations(
    probabilities: ConditionScores,
    impairment: ImpairmentProfile,
    sleep_score: float,
) -> Recommendations:
    _, top = probabilities.top()
    p = probabilities

    referrals: List[str] = []
    support: List[str] = []
    flags: List[str] = []

    if p.adhd > 40:
        referrals.append(REFERRAL_ADHD)
    if p.autism > 30:
        referrals.append(REFERRAL_AUTISM)
    if p.anxiety > 50:
        referrals.append(REFERRAL_ANXIETY)
    if p.trauma > 30:
        referrals.append(REFERRAL_TRAUMA)

    if sleep_score > SLEEP_REFERRAL_THRESHOLD:
        referrals.append(REFERRAL_SLEEP)
        flags.append(FLAG_SLEEP)

    if impairment.academic >= 3:
        referrals.append(REFERRAL_EDPSYCH)
        support.append(SUPPORT_SENCO)

    if impairment.emotional >= 4:
        flags.append(FLAG_EMOTIONAL)
        support.append(SUPPORT_COUNSELING)

    if p.adhd > 30:
        support.extend(ADHD_SUPPORT)
    if p.autism > 30:
        support.extend(AUTISM_SUPPORT)
    if p.anxiety > 40:
        support.extend(ANXIETY_SUPPORT)
    if p.trauma > 25:
        support.extend(TRAUMA_SUPPORT)

    return Recommendations(urgency=urgency_for(top), referrals=referrals, support=support, flags=flags)


__all__ = [
    "Recommendations",
    "ADHD_SUPPORT",
    "AUTISM_SUPPORT",
    "ANXIETY_SUPPORT",
    "TRAUMA_SUPPORT",
    "urgency_for",
    "generate_recommendations",
]
