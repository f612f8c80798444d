"""
Row Parser Module for Supabase Responses
========================================

This module converts the JSON rows returned by the backend's REST interface
into the dataclasses from models.quiz_models.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import pandas as pd

from models.quiz_models import DEFAULT_PASSING_SCORE, Question, Quiz, QuizAttempt

logger = logging.getLogger(__name__)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parses an ISO-8601 timestamp into a timezone-aware datetime.
    Example: "2025-06-08T08:27:04.513+00:00"
    """
    if not value:
        return None
    try:
        return pd.to_datetime(value, utc=True).to_pydatetime()
    except (ValueError, TypeError):
        logger.warning("Ignoring unparseable timestamp %r", value)
        return None


def parse_option_index(value: Any) -> Optional[int]:
    """Integer option index, or None for bools, strings, fractions and missing values."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def parse_answers(raw: Any) -> Dict[str, int]:
    """Keeps only entries whose selected option is an integer index."""
    if not isinstance(raw, dict):
        return {}

    answers = {}
    for question_id, selected in raw.items():
        index = parse_option_index(selected)
        if index is None:
            logger.warning("Dropping answer %r for question %s", selected, question_id)
            continue
        answers[str(question_id)] = index
    return answers


def parse_question(row: Dict[str, Any]) -> Question:
    correct_option = parse_option_index(row.get("correct_option"))
    if correct_option is None:
        logger.warning("Question %s has invalid correct_option %r",
                       row.get("id"), row.get("correct_option"))
        # Out of range, so no answer can match it
        correct_option = -1

    return Question(
        id=str(row["id"]),
        question_text=row.get("question_text") or "",
        options=[str(opt) for opt in (row.get("options") or [])],
        correct_option=correct_option,
        points=row.get("points") or 1,
        order_index=row.get("order_index") or 0,
    )


def parse_attempt(row: Dict[str, Any]) -> Optional[QuizAttempt]:
    """Returns None for rows without a user_id, which cannot be attributed to anyone."""
    if row.get("user_id") is None:
        logger.warning("Skipping attempt %s without user_id", row.get("id"))
        return None

    profile = row.get("profiles") or {}
    return QuizAttempt(
        id=row.get("id"),
        user_id=str(row["user_id"]),
        user_name=profile.get("name"),
        score=float(row.get("score") or 0),
        max_score=float(row.get("max_score") or 0),
        started_at=parse_timestamp(row.get("started_at")),
        completed_at=parse_timestamp(row.get("completed_at")),
        answers=parse_answers(row.get("answers")),
    )


def parse_passing_score(rows: List[Dict[str, Any]]) -> float:
    """
    Reads passingScore from the quiz's section_content row.
    Falls back to the default when the row or the key is missing.
    """
    if not rows:
        return DEFAULT_PASSING_SCORE

    content = rows[0].get("content_data") or {}
    score = content.get("passingScore")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return DEFAULT_PASSING_SCORE
    return float(score)


def parse_quiz(row: Dict[str, Any], passing_score: float = DEFAULT_PASSING_SCORE) -> Quiz:
    return Quiz(
        id=str(row["id"]),
        title=row.get("title") or "",
        description=row.get("description") or "",
        course_id=row.get("course_id"),
        passing_score=passing_score,
    )
