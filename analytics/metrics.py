"""
Analytics and Metrics Calculation Module
=========================================

This module reduces a quiz's completed attempts and its questions into
summary statistics: quiz-level scores and pass rates, timing, and per-question
answer distributions.

Every function here is pure. Inputs are never mutated and the same inputs
always produce the same output, so the dashboard can call them on every rerun.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from models.quiz_models import OptionStat, Question, QuestionStats, QuizAttempt, QuizStats

logger = logging.getLogger(__name__)

# (label, lower bound inclusive, upper bound exclusive)
SCORE_BANDS = [
    ("90-100%", 90.0, None),
    ("80-89%", 80.0, 90.0),
    ("70-79%", 70.0, 80.0),
    ("60-69%", 60.0, 70.0),
    ("Below 60%", None, 60.0),
]


def attempt_percentage(attempt: QuizAttempt) -> float:
    """Score of an attempt as a percentage of its maximum; 0 when max_score is 0."""
    if not attempt.max_score:
        return 0.0
    return attempt.score / attempt.max_score * 100


def elapsed_minutes(attempt: QuizAttempt) -> Optional[float]:
    """Minutes between start and completion, or None if either timestamp is missing."""
    if attempt.started_at is None or attempt.completed_at is None:
        return None
    return (attempt.completed_at - attempt.started_at).total_seconds() / 60


def is_grading_disabled(passing_threshold: float) -> bool:
    """A passing threshold of 0 means the quiz is not graded."""
    return passing_threshold == 0


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _rate(part: int, whole: int) -> float:
    return part / whole * 100 if whole else 0.0


def compute_question_stats(question: Question, attempts: Sequence[QuizAttempt]) -> QuestionStats:
    """
    Counts the answers recorded for one question.

    Attempts without an entry for the question are skipped, not counted as
    wrong. A correct_option outside the option range matches nothing.
    """
    recorded = [a.answers[question.id] for a in attempts if question.id in a.answers]
    total_answered = len(recorded)

    option_count = len(question.options)
    if 0 <= question.correct_option < option_count:
        correct_count = sum(1 for answer in recorded if answer == question.correct_option)
    else:
        logger.warning("Question %s has correct_option %s outside its %d options",
                       question.id, question.correct_option, option_count)
        correct_count = 0

    distribution = []
    for idx in range(option_count):
        count = sum(1 for answer in recorded if answer == idx)
        distribution.append(OptionStat(option=idx, count=count,
                                       percentage=_rate(count, total_answered)))

    return QuestionStats(
        question_id=question.id,
        question_text=question.question_text,
        options=list(question.options),
        correct_option=question.correct_option,
        correct_count=correct_count,
        total_answered=total_answered,
        success_rate=_rate(correct_count, total_answered),
        option_distribution=distribution,
    )


def compute_quiz_statistics(attempts: Sequence[QuizAttempt],
                            questions: Sequence[Question],
                            passing_threshold: float) -> Tuple[QuizStats, List[QuestionStats]]:
    """
    Computes quiz-level and per-question statistics:
    1. Attempt counts and distinct users
    2. Average, best and worst percentage
    3. Pass rate per attempt and per user (best attempt of each user)
    4. Average time spent, over attempts that have both timestamps
    5. Answer distribution for every question

    A threshold of 0 still runs the comparisons, so every attempt passes;
    callers check is_grading_disabled() before showing the pass rates.
    """
    if not attempts:
        return QuizStats(), []

    percentages = [attempt_percentage(a) for a in attempts]
    total_attempts = len(attempts)

    user_best: Dict[str, float] = {}
    for attempt, pct in zip(attempts, percentages):
        if attempt.user_id not in user_best or user_best[attempt.user_id] < pct:
            user_best[attempt.user_id] = pct

    passed_attempts = sum(1 for pct in percentages if pct >= passing_threshold)
    passed_users = sum(1 for pct in user_best.values() if pct >= passing_threshold)

    times = [m for m in (elapsed_minutes(a) for a in attempts) if m is not None]

    stats = QuizStats(
        total_attempts=total_attempts,
        unique_users=len(user_best),
        average_score=_mean(percentages),
        pass_rate=_rate(passed_attempts, total_attempts),
        average_time_minutes=_mean(times),
        best_score=max(percentages),
        worst_score=min(percentages),
        user_pass_rate=_rate(passed_users, len(user_best)),
    )

    question_stats = [compute_question_stats(q, attempts) for q in questions]
    return stats, question_stats


def score_distribution(attempts: Sequence[QuizAttempt]) -> pd.Series:
    """Number of attempts per score band, highest band first. Empty bands are kept."""
    counts = {label: 0 for label, _, _ in SCORE_BANDS}
    for attempt in attempts:
        pct = attempt_percentage(attempt)
        for label, low, high in SCORE_BANDS:
            if (low is None or pct >= low) and (high is None or pct < high):
                counts[label] += 1
                break

    return pd.Series(counts, dtype="int64")
