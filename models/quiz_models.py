"""
Data Models for Quiz Analytics
==============================

This module defines the data structures used to represent quizzes, attempts and
their computed statistics throughout the loading and analysis pipeline. All
models are implemented as dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

DEFAULT_PASSING_SCORE = 70.0


@dataclass
class Question:
    id: str
    question_text: str
    options: List[str] = field(default_factory=list)
    correct_option: int = 0
    points: float = 1
    order_index: int = 0


@dataclass
class QuizAttempt:
    user_id: str
    score: float
    max_score: float
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    # question id -> index of the selected option
    answers: Dict[str, int] = field(default_factory=dict)
    id: Optional[str] = None
    user_name: Optional[str] = None


@dataclass
class Quiz:
    id: str
    title: str
    description: str = ""
    course_id: Optional[str] = None
    passing_score: float = DEFAULT_PASSING_SCORE


@dataclass
class QuizStats:
    total_attempts: int = 0
    unique_users: int = 0
    average_score: float = 0.0
    pass_rate: float = 0.0
    average_time_minutes: float = 0.0
    best_score: float = 0.0
    worst_score: float = 0.0
    user_pass_rate: float = 0.0


@dataclass
class OptionStat:
    option: int
    count: int
    percentage: float


@dataclass
class QuestionStats:
    question_id: str
    question_text: str
    options: List[str]
    correct_option: int
    correct_count: int
    total_answered: int
    success_rate: float
    option_distribution: List[OptionStat] = field(default_factory=list)


@dataclass
class QuizAnalytics:
    """Everything loaded from the backend for a single quiz."""
    quiz: Quiz
    questions: List[Question] = field(default_factory=list)
    attempts: List[QuizAttempt] = field(default_factory=list)
