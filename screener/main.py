# screener/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import __version__, memory
from .pipeline import run_screening
from .schemas import (
    AnswerRequest,
    DraftResponse,
    ScreeningRequest,
    ScreeningResult,
    SessionRequest,
    SubmitRequest,
    SubmitResponse,
)
from .settings import settings
from .tools.catalog import Section, get_config, missing_required
from .tools.norms import AgeContext, age_context

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger("screener")

app = FastAPI(
    title="Neurodevelopmental Screener API",
    version=__version__,
    description="Questionnaire scoring, pattern matching and Bayesian weighting for child screening.",
)

# Open CORS for local testing (tighten in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Load (and validate) configuration once at startup; a broken catalogue fails here
CONFIG = get_config()


@app.get("/health")
def health():
    return {"ok": True, "service": "neuro-screener", "pattern_mode": settings.pattern_mode}


# ====== Configuration ======

@app.get("/questions", response_model=list[Section])
def list_sections():
    return CONFIG.catalog.sections


@app.get("/questions/{section_id}", response_model=Section)
def get_section(section_id: str):
    section = CONFIG.catalog.section(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Unknown section {section_id!r}")
    return section


@app.get("/age-context/{age}", response_model=AgeContext)
def get_age_context(age: float):
    return age_context(age, CONFIG.age_norms)


# ====== Screening ======

@app.post("/screenings", response_model=ScreeningResult)
def screen(req: ScreeningRequest):
    """
    Stateless evaluation of a full response map.
    Unknown question ids and unrecognised answers are skipped (see `ignored_responses`).
    """
    return run_screening(req.responses, req.age, config=CONFIG, pattern_mode=req.pattern_mode)


# ====== Draft sessions ======

@app.post("/sessions/answer", response_model=DraftResponse)
def session_answer(req: AnswerRequest):
    """
    Merge answers into the session draft.
    If section_id is given, also report required questions in that section still unanswered.
    """
    missing = []
    if req.section_id is not None:
        section = CONFIG.catalog.section(req.section_id)
        if section is None:
            raise HTTPException(status_code=404, detail=f"Unknown section {req.section_id!r}")
    st = memory.set_answers(req.session_id, req.answers)
    if req.section_id is not None:
        missing = missing_required(st["responses"], section)
    return {"session_id": req.session_id, "responses": st["responses"], "missing_required": missing}


@app.post("/sessions/submit", response_model=SubmitResponse)
def session_submit(req: SubmitRequest):
    """
    Run the pipeline on the stored draft. Missing required answers are reported
    but do not block scoring.
    """
    st = memory.get_session(req.session_id)
    responses = st.get("responses") or {}
    if not responses:
        raise HTTPException(status_code=400, detail="No answers recorded for this session")

    missing = [qid for s in CONFIG.catalog.sections for qid in missing_required(responses, s)]
    if missing:
        logger.warning("Session %s submitted with %d required answers missing", req.session_id, len(missing))

    result = run_screening(responses, config=CONFIG, pattern_mode=req.pattern_mode)
    memory.save_result(req.session_id, result)
    return {"session_id": req.session_id, "missing_required": missing, "result": result}


@app.get("/sessions/{session_id}/result", response_model=ScreeningResult)
def session_result(session_id: str):
    result = memory.get_result(session_id)
    if result is None:
        raise HTTPException(status_code=404, detail="No result for this session yet")
    return result


@app.post("/sessions/reset", response_model=DraftResponse)
def session_reset(req: SessionRequest):
    """Start a new screening: drop answers and any stored result."""
    st = memory.reset_session(req.session_id)
    return {"session_id": req.session_id, "responses": st["responses"]}
