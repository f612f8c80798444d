"""
Tests for the quiz statistics aggregator and its helpers.
"""
import pytest

from analytics.metrics import (attempt_percentage, compute_question_stats, compute_quiz_statistics,
                               elapsed_minutes, is_grading_disabled, score_distribution)
from models.quiz_models import Question, QuizStats


class TestComputeQuizStatistics:

    def test_empty_input_returns_zeroed_stats(self):
        stats, question_stats = compute_quiz_statistics([], [], 70)

        assert stats == QuizStats()
        assert stats.total_attempts == 0
        assert stats.unique_users == 0
        assert stats.average_score == 0
        assert stats.pass_rate == 0
        assert stats.average_time_minutes == 0
        assert stats.best_score == 0
        assert stats.worst_score == 0
        assert stats.user_pass_rate == 0
        assert question_stats == []

    def test_no_attempts_gives_no_question_stats(self, abc_question):
        stats, question_stats = compute_quiz_statistics([], [abc_question], 70)

        assert stats.total_attempts == 0
        assert question_stats == []

    def test_no_questions_gives_no_question_stats(self, make_attempt):
        stats, question_stats = compute_quiz_statistics([make_attempt()], [], 70)

        assert stats.total_attempts == 1
        assert question_stats == []

    def test_single_passing_attempt(self, make_attempt):
        stats, _ = compute_quiz_statistics([make_attempt(score=80, max_score=100)], [], 70)

        assert stats.average_score == pytest.approx(80)
        assert stats.pass_rate == pytest.approx(100)
        assert stats.best_score == pytest.approx(80)
        assert stats.worst_score == pytest.approx(80)
        assert stats.user_pass_rate == pytest.approx(100)

    def test_user_best_attempt_counts_once(self, make_attempt):
        attempts = [
            make_attempt(user_id="A", score=40),
            make_attempt(user_id="A", score=90),
            make_attempt(user_id="B", score=60),
        ]
        stats, _ = compute_quiz_statistics(attempts, [], 70)

        assert stats.total_attempts == 3
        assert stats.unique_users == 2
        assert stats.pass_rate == pytest.approx(100 / 3)
        assert stats.user_pass_rate == pytest.approx(50)
        assert stats.best_score == pytest.approx(90)
        assert stats.worst_score == pytest.approx(40)
        assert stats.average_score == pytest.approx(190 / 3)

    def test_threshold_is_inclusive(self, make_attempt):
        stats, _ = compute_quiz_statistics([make_attempt(score=70)], [], 70)

        assert stats.pass_rate == pytest.approx(100)

    def test_time_average_excludes_incomplete_records(self, make_attempt):
        attempts = [
            make_attempt(minutes=10),
            make_attempt(minutes=20),
            make_attempt(minutes=None),
        ]
        stats, _ = compute_quiz_statistics(attempts, [], 70)

        assert stats.average_time_minutes == pytest.approx(15)
        # Incomplete record still counts everywhere else
        assert stats.total_attempts == 3

    def test_missing_start_time_excluded_from_time_average(self, make_attempt):
        attempts = [make_attempt(minutes=6), make_attempt(started_at=None, minutes=None)]
        stats, _ = compute_quiz_statistics(attempts, [], 70)

        assert stats.average_time_minutes == pytest.approx(6)

    def test_no_timestamps_gives_zero_time(self, make_attempt):
        stats, _ = compute_quiz_statistics([make_attempt(started_at=None)], [], 70)

        assert stats.average_time_minutes == 0

    def test_zero_max_score_is_zero_percent(self, make_attempt):
        stats, _ = compute_quiz_statistics([make_attempt(score=0, max_score=0)], [], 70)

        assert stats.average_score == 0
        assert stats.best_score == 0
        assert stats.pass_rate == 0

    def test_grading_disabled_counts_everyone_as_passing(self, make_attempt):
        attempts = [make_attempt(user_id="A", score=0), make_attempt(user_id="B", score=35)]
        stats, _ = compute_quiz_statistics(attempts, [], 0)

        assert stats.pass_rate == pytest.approx(100)
        assert stats.user_pass_rate == pytest.approx(100)

    def test_is_deterministic(self, make_attempt, abc_question):
        attempts = [
            make_attempt(user_id="A", score=33, minutes=7, answers={"q1": 1}),
            make_attempt(user_id="B", score=67, minutes=13, answers={"q1": 2}),
            make_attempt(user_id="A", score=100, answers={"q1": 1}),
        ]

        first = compute_quiz_statistics(attempts, [abc_question], 70)
        second = compute_quiz_statistics(attempts, [abc_question], 70)

        assert first == second

    def test_inputs_are_not_mutated(self, make_attempt, abc_question):
        attempt = make_attempt(answers={"q1": 1})
        compute_quiz_statistics([attempt], [abc_question], 70)

        assert attempt.answers == {"q1": 1}
        assert abc_question.options == ["A", "B", "C"]


class TestQuestionStats:

    def test_option_distribution(self, make_attempt, abc_question):
        attempts = [make_attempt(answers={"q1": answer}) for answer in (1, 1, 2)]
        _, (q_stats,) = compute_quiz_statistics(attempts, [abc_question], 70)

        assert q_stats.question_id == "q1"
        assert q_stats.total_answered == 3
        assert q_stats.correct_count == 2
        assert q_stats.success_rate == pytest.approx(200 / 3)
        assert [o.option for o in q_stats.option_distribution] == [0, 1, 2]
        assert [o.count for o in q_stats.option_distribution] == [0, 2, 1]
        assert [o.percentage for o in q_stats.option_distribution] == pytest.approx(
            [0, 200 / 3, 100 / 3])

    def test_missing_answers_are_not_penalized(self, make_attempt, abc_question):
        attempts = [
            make_attempt(answers={"q1": 1}),
            make_attempt(answers={"q1": 0}),
            make_attempt(answers={}),
            make_attempt(answers={"other": 1}),
            make_attempt(answers={}),
        ]
        q_stats = compute_question_stats(abc_question, attempts)

        assert q_stats.total_answered == 2
        assert q_stats.correct_count == 1
        assert q_stats.success_rate == pytest.approx(50)

    def test_unanswered_question_has_zero_rates(self, make_attempt, abc_question):
        q_stats = compute_question_stats(abc_question, [make_attempt(answers={})])

        assert q_stats.total_answered == 0
        assert q_stats.success_rate == 0
        assert [o.percentage for o in q_stats.option_distribution] == [0, 0, 0]

    def test_out_of_range_correct_option_scores_zero(self, make_attempt):
        question = Question(id="q9", question_text="Broken", options=["A", "B"], correct_option=5)
        attempts = [make_attempt(answers={"q9": 5}), make_attempt(answers={"q9": 0})]

        q_stats = compute_question_stats(question, attempts)

        assert q_stats.total_answered == 2
        assert q_stats.correct_count == 0
        assert q_stats.success_rate == 0
        assert [o.count for o in q_stats.option_distribution] == [1, 0]

    def test_questions_keep_input_order(self, make_attempt):
        questions = [
            Question(id="b", question_text="B", options=["x", "y"], correct_option=0),
            Question(id="a", question_text="A", options=["x", "y"], correct_option=1),
        ]
        _, question_stats = compute_quiz_statistics([make_attempt()], questions, 70)

        assert [q.question_id for q in question_stats] == ["b", "a"]


class TestHelpers:

    def test_attempt_percentage(self, make_attempt):
        assert attempt_percentage(make_attempt(score=3, max_score=4)) == pytest.approx(75)
        assert attempt_percentage(make_attempt(score=3, max_score=0)) == 0

    def test_elapsed_minutes(self, make_attempt):
        assert elapsed_minutes(make_attempt(minutes=12.5)) == pytest.approx(12.5)
        assert elapsed_minutes(make_attempt(minutes=None)) is None

    def test_is_grading_disabled(self):
        assert is_grading_disabled(0)
        assert is_grading_disabled(0.0)
        assert not is_grading_disabled(70)

    def test_score_distribution_bands(self, make_attempt):
        attempts = [make_attempt(score=s) for s in (100, 90, 89.9, 75, 60, 59, 0)]
        bands = score_distribution(attempts)

        assert list(bands.index) == ["90-100%", "80-89%", "70-79%", "60-69%", "Below 60%"]
        assert list(bands.values) == [2, 1, 1, 1, 2]

    def test_score_distribution_empty(self):
        bands = score_distribution([])

        assert len(bands) == 5
        assert bands.sum() == 0
