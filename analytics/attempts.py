"""
Attempts Table Module
=====================

Builds the per-attempt table shown in the dashboard, with the search, status
filter and sort options of the "Attempts" tab, and its CSV export.
"""

from typing import Sequence

import pandas as pd

from analytics.metrics import attempt_percentage, elapsed_minutes, is_grading_disabled
from models.quiz_models import QuizAttempt

COLUMNS = ["Student", "Score", "Percentage", "Status", "Time Spent (min)", "Completed"]
EXPORT_COLUMNS = ["Name", "Score", "Percentage", "Completed At", "Time Spent (min)"]

STATUS_FILTERS = {"all": None, "passed": "Passed", "failed": "Failed"}
SORT_COLUMNS = {"date": "Completed", "score": "Percentage", "name": "Student"}


def _format_score(value: float) -> str:
    return f"{value:g}"


def attempt_status(attempt: QuizAttempt, passing_threshold: float) -> str:
    if is_grading_disabled(passing_threshold):
        return "Grading Disabled"
    return "Passed" if attempt_percentage(attempt) >= passing_threshold else "Failed"


def build_attempts_table(attempts: Sequence[QuizAttempt], passing_threshold: float) -> pd.DataFrame:
    """One row per attempt, in input order."""
    rows = []
    for attempt in attempts:
        minutes = elapsed_minutes(attempt)
        rows.append({
            "Student": attempt.user_name or "Unknown",
            "Score": f"{_format_score(attempt.score)}/{_format_score(attempt.max_score)}",
            "Percentage": attempt_percentage(attempt),
            "Status": attempt_status(attempt, passing_threshold),
            "Time Spent (min)": round(minutes, 1) if minutes is not None else None,
            "Completed": attempt.completed_at,
        })
    return pd.DataFrame(rows, columns=COLUMNS)


def filter_attempts(table: pd.DataFrame, search: str = "", status: str = "all") -> pd.DataFrame:
    """Case-insensitive name search combined with a passed/failed filter."""
    if status not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status!r}")

    mask = pd.Series(True, index=table.index)
    if search:
        mask &= table["Student"].str.lower().str.contains(search.lower(), regex=False)

    wanted = STATUS_FILTERS[status]
    if wanted is not None:
        mask &= table["Status"] == wanted

    return table[mask]


def _sort_key(by: str):
    if by == "date":
        return lambda col: pd.to_datetime(col, utc=True)
    if by == "name":
        return lambda col: col.str.lower()
    return None


def sort_attempts(table: pd.DataFrame, by: str = "date", ascending: bool = False) -> pd.DataFrame:
    """Sorts by completion date, percentage or student name. Missing dates go last."""
    if by not in SORT_COLUMNS:
        raise ValueError(f"Unknown sort key: {by!r}")

    return table.sort_values(
        SORT_COLUMNS[by],
        ascending=ascending,
        kind="stable",
        na_position="last",
        key=_sort_key(by),
    )


def export_attempts_csv(table: pd.DataFrame) -> str:
    export_df = pd.DataFrame({
        "Name": table["Student"],
        "Score": table["Score"],
        "Percentage": table["Percentage"].map(lambda pct: f"{pct:.1f}%"),
        "Completed At": table["Completed"].map(
            lambda ts: "N/A" if pd.isna(ts) else ts.strftime("%Y-%m-%d")),
        "Time Spent (min)": table["Time Spent (min)"].map(
            lambda m: "N/A" if pd.isna(m) else f"{m:.1f}"),
    }, columns=EXPORT_COLUMNS)
    return export_df.to_csv(index=False, lineterminator="\n")


def export_filename(quiz_title: str) -> str:
    return f"quiz-analytics-{quiz_title or 'quiz'}.csv"
