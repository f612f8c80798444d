import pickle
from datetime import datetime, timedelta, timezone

from models.quiz_models import Question, Quiz, QuizAnalytics, QuizAttempt


def save_data(data, filename="quiz_cache.pkl"):
    with open(filename, "wb") as f:
        pickle.dump(data, f)


START = datetime(2025, 6, 9, 14, 0, tzinfo=timezone.utc)


def make_attempt(user_id, name, score, answers, minutes=None, offset_hours=0):
    started = START + timedelta(hours=offset_hours)
    return QuizAttempt(
        id=f"{user_id}-{offset_hours}",
        user_id=user_id,
        user_name=name,
        score=score,
        max_score=3,
        started_at=started,
        completed_at=started + timedelta(minutes=minutes) if minutes is not None else None,
        answers=answers,
    )


questions = [
    Question(id="q1", question_text="2 + 2 = ?", options=["3", "4", "5"], correct_option=1),
    Question(id="q2", question_text="Capital of France?", options=["Paris", "Rome"], correct_option=0),
    Question(id="q3", question_text="Largest planet?", options=["Mars", "Earth", "Jupiter"],
             correct_option=2),
]

# Mock data to test different behaviors: retries, skipped questions, missing timestamps
mock_data = QuizAnalytics(
    quiz=Quiz(id="demo", title="Demo Quiz", description="Mock data for offline runs"),
    questions=questions,
    attempts=[
        # Retry: failed first, then perfect score
        make_attempt("u1", "Alice", 3, {"q1": 1, "q2": 0, "q3": 2}, minutes=8, offset_hours=5),
        make_attempt("u1", "Alice", 1, {"q1": 0, "q2": 0, "q3": 0}, minutes=12, offset_hours=1),
        # Skipped q3, no completion timestamp
        make_attempt("u2", "Bob", 2, {"q1": 1, "q2": 0}, offset_hours=3),
        # Single failing attempt
        make_attempt("u3", "Carol", 1, {"q1": 2, "q2": 1, "q3": 2}, minutes=20, offset_hours=2),
    ],
)

if __name__ == "__main__":
    save_data(mock_data)
    print("Mock quiz data saved to quiz_cache.pkl")
