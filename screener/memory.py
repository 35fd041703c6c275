# screener/memory.py
from __future__ import annotations

"""
In-memory draft-screening store.

- get_session / set_answers: the answers collected so far for a session_id.
- save_result / get_result: the last ScreeningResult produced for that session.
- reset_session: "start new screening" (drops answers and result).

Drafts expire after _TTL_SEC of inactivity.

Note: This storage is per-process. Use a DB/Redis in production.
"""

import time
from typing import Any, Dict, Mapping, Optional, TypedDict

from .schemas import ScreeningResult


class DraftSession(TypedDict, total=False):
    responses: Dict[str, Any]
    result: Optional[ScreeningResult]


_TTL_SEC = 60 * 60  # 1 hour
_SESSIONS: Dict[str, DraftSession] = {}
_expiry: Dict[str, float] = {}


def _now() -> float:
    return time.time()


def _new_session() -> DraftSession:
    return {"responses": {}, "result": None}


def _touch(session_id: str) -> None:
    _expiry[session_id] = _now() + _TTL_SEC


def get_session(session_id: str) -> DraftSession:
    """Fetch (or lazily create) the draft for a session_id; expired drafts start over."""
    exp = _expiry.get(session_id, 0.0)
    if exp and exp < _now():
        _SESSIONS.pop(session_id, None)
        _expiry.pop(session_id, None)
    st = _SESSIONS.get(session_id)
    if st is None:
        st = _new_session()
        _SESSIONS[session_id] = st
    _touch(session_id)
    return st


def set_answers(session_id: str, answers: Mapping[str, Any]) -> DraftSession:
    """Merge answers into the draft. A stale result is discarded once answers change."""
    st = get_session(session_id)
    updated: DraftSession = {"responses": {**st.get("responses", {}), **answers}, "result": None}
    _SESSIONS[session_id] = updated
    return updated


def save_result(session_id: str, result: ScreeningResult) -> DraftSession:
    st = get_session(session_id)
    updated: DraftSession = {"responses": dict(st.get("responses", {})), "result": result}
    _SESSIONS[session_id] = updated
    return updated


def get_result(session_id: str) -> Optional[ScreeningResult]:
    return get_session(session_id).get("result")


def reset_session(session_id: str) -> DraftSession:
    """Clear and recreate a session."""
    st = _new_session()
    _SESSIONS[session_id] = st
    _touch(session_id)
    return st


def list_sessions() -> Dict[str, DraftSession]:
    """Return the full in-memory session map (debug only)."""
    return _SESSIONS


__all__ = [
    "DraftSession",
    "get_session",
    "set_answers",
    "save_result",
    "get_result",
    "reset_session",
    "list_sessions",
]
