# screener/tools/norms.py
from __future__ import annotations

"""
Age-context lookup against the configured age-norm table.

The table is sparse (e.g., 5, 6, 9, 12, 15, 18); a child's age maps to the
numerically closest entry, the lower key winning when two are equally close.
"""

from typing import Mapping, Optional, Tuple

from pydantic import BaseModel

from .catalog import AgeNorm, get_config


class AgeContext(BaseModel):
    age: float
    norm_age: int
    norm: AgeNorm


def closest_age_norm(age: float, norms: Optional[Mapping[int, AgeNorm]] = None) -> Tuple[int, AgeNorm]:
    table = norms if norms is not None else get_config().age_norms
    # min() keeps the first of equally close keys, in table order
    key = min(table, key=lambda k: abs(k - age))
    return key, table[key]


def age_context(age: float, norms: Optional[Mapping[int, AgeNorm]] = None) -> AgeContext:
    key, norm = closest_age_norm(age, norms)
    return AgeContext(age=age, norm_age=key, norm=norm)


__all__ = ["AgeContext", "closest_age_norm", "age_context"]
