from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env before reading defaults (e.g., SCREENER_PATTERN_MODE)
load_dotenv()

DATA_DIR = Path(__file__).parent / "data"


class Settings(BaseModel):
    questions_path: str = os.getenv("SCREENER_QUESTIONS_PATH", str(DATA_DIR / "questions.json"))
    patterns_path: str = os.getenv("SCREENER_PATTERNS_PATH", str(DATA_DIR / "patterns.json"))
    age_norms_path: str = os.getenv("SCREENER_AGE_NORMS_PATH", str(DATA_DIR / "age_norms.json"))
    pattern_mode: str = os.getenv("SCREENER_PATTERN_MODE", "signature")  # "signature" | "rules"
    default_age: int = int(os.getenv("SCREENER_DEFAULT_AGE", "10"))
    log_level: str = os.getenv("SCREENER_LOG_LEVEL", "INFO")

settings = Settings()
