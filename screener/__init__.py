"""Questionnaire-driven screening engine for ADHD, autism, anxiety and trauma patterns."""

__version__ = "1.0.0"
