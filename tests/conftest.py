from datetime import datetime, timedelta, timezone

import pytest

from models.quiz_models import Question, QuizAttempt

START = datetime(2025, 6, 8, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_attempt():
    def _make(user_id="u1", score=80, max_score=100, minutes=None, answers=None,
              started_at=START, user_name=None, completed_at=None):
        if completed_at is None and minutes is not None:
            completed_at = started_at + timedelta(minutes=minutes)
        return QuizAttempt(
            user_id=user_id,
            score=score,
            max_score=max_score,
            started_at=started_at,
            completed_at=completed_at,
            answers=answers or {},
            user_name=user_name,
        )
    return _make


@pytest.fixture
def abc_question():
    return Question(id="q1", question_text="Pick B", options=["A", "B", "C"], correct_option=1)
