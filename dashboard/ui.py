"""
UI
==

This module implements the dashboard UI.
"""

import os

import pandas as pd
import plotly.express as px
import streamlit as st
from streamlit_autorefresh import st_autorefresh

from analytics.attempts import (build_attempts_table, export_attempts_csv, export_filename,
                                filter_attempts, sort_attempts)
from analytics.metrics import (attempt_percentage, compute_quiz_statistics, is_grading_disabled,
                               score_distribution)
from dashboard.data_management import clear_local_cache, load_local_cache, sync_with_backend
from models.quiz_models import QuizAnalytics

SORT_OPTIONS = {
    "Latest First": ("date", False),
    "Oldest First": ("date", True),
    "Highest Score": ("score", False),
    "Lowest Score": ("score", True),
    "Name A-Z": ("name", True),
    "Name Z-A": ("name", False),
}


def render_top_indicators(stats, grading_disabled):
    """Renders top indicators."""
    pass_rate = "Grading Disabled" if grading_disabled else f"{stats.pass_rate:.1f}%"
    user_pass_rate = "Grading Disabled" if grading_disabled else f"{stats.user_pass_rate:.1f}%"

    with st.container():
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Total Attempts", stats.total_attempts)
        c2.metric("Unique Users", stats.unique_users)
        c3.metric("Average Score", f"{stats.average_score:.1f}%")
        c4.metric("Pass Rate", pass_rate)

        c5, c6, c7, c8 = st.columns(4)
        c5.metric("Avg. Time", f"{stats.average_time_minutes:.1f}m")
        c6.metric("Best Score", f"{stats.best_score:.1f}%")
        c7.metric("Worst Score", f"{stats.worst_score:.1f}%")
        c8.metric("User Pass Rate", user_pass_rate)
        c8.caption(f"Last Sync: {st.session_state.last_sync}")


def render_sidebar():
    with st.sidebar:
        st.title("📊 Quiz Analytics")
        st.header("Settings")
        url = st.text_input("Supabase URL", value=os.getenv("SUPABASE_URL", ""))
        api_key = st.text_input("API Key", type="password", value=os.getenv("SUPABASE_ANON_KEY", ""))
        token = st.text_input("Access Token", type="password",
                              value=os.getenv("SUPABASE_ACCESS_TOKEN", ""))
        qid = st.text_input("Quiz ID", value=os.getenv("QUIZ_ID", ""))

        st.divider()
        st.subheader("Data Management")
        if st.button("📂 Load Last Sync"):
            load_local_cache()

        with st.expander("⚠️ Danger Zone"):
            st.write("Clearing the cache deletes the last synced quiz data.")
            if st.button("🗑️ Clear Cache"):
                st.session_state.confirm_reset = True

            if st.session_state.get('confirm_reset'):
                st.warning("Are you sure?")
                col_yes, col_no = st.columns(2)
                if col_yes.button("Yes, delete"):
                    clear_local_cache()
                    st.session_state.confirm_reset = False
                    st.rerun()
                if col_no.button("Cancel"):
                    st.session_state.confirm_reset = False
                    st.rerun()

        st.divider()
        st.subheader("Update Settings")
        enable_auto_sync = st.checkbox("Enable Auto-sync", value=False)
        interval = st.slider("Interval (minutes)", 2, 10, 5, disabled=not enable_auto_sync)

        if enable_auto_sync:
            refresh_count = st_autorefresh(interval=interval * 60 * 1000, key="quiz_auto_sync")
            if refresh_count > st.session_state.last_auto_refresh:
                st.session_state.last_auto_refresh = refresh_count
                st.session_state.raw_data = "loading"

        if st.button("🚀 Sync Now"):
            st.session_state.raw_data = "loading"
            st.rerun()

    return url, api_key, token, qid


def render_overview(attempts, grading_disabled):
    column1, column2 = st.columns(2)

    with column1:
        st.subheader("Score Distribution")
        if grading_disabled:
            st.info("Score distribution is not available when grading is disabled.")
        else:
            bands = score_distribution(attempts)
            fig = px.bar(
                x=bands.values,
                y=bands.index,
                orientation="h",
                color=bands.index,
                color_discrete_sequence=["#2ca02c", "#1f77b4", "#e0c000", "#ff7f0e", "#d62728"],
            )
            fig.update_layout(
                xaxis=dict(title=None),
                yaxis=dict(title=None, autorange="reversed"),
                height=260,
                margin=dict(l=10, r=10, t=10, b=10),
                showlegend=False
            )
            st.plotly_chart(fig, width="stretch", key="score_distribution")

    with column2:
        st.subheader("Recent Activity")
        if not attempts:
            st.info("No attempts yet.")
        for attempt in attempts[:5]:
            completed = attempt.completed_at.strftime("%d/%m/%Y") if attempt.completed_at else "N/A"
            c1, c2 = st.columns([3, 1])
            c1.markdown(f"**{attempt.user_name or 'Unknown'}**  \n{completed}")
            c2.markdown(f"{attempt.score:g}/{attempt.max_score:g}  \n"
                        f"{attempt_percentage(attempt):.1f}%")


def render_attempts(data: QuizAnalytics, grading_disabled):
    table = build_attempts_table(data.attempts, data.quiz.passing_score)

    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search by name", key="attempt_search")
    status = "all"
    if not grading_disabled:
        threshold = data.quiz.passing_score
        status = c2.selectbox(
            "Status",
            ["all", "passed", "failed"],
            format_func=lambda s: {"all": "All Attempts",
                                   "passed": f"Passed (≥{threshold:g}%)",
                                   "failed": f"Failed (<{threshold:g}%)"}[s],
        )
    sort_label = c3.selectbox("Sort", list(SORT_OPTIONS))
    by, ascending = SORT_OPTIONS[sort_label]

    view = sort_attempts(filter_attempts(table, search, status), by, ascending)

    if view.empty:
        st.info("No attempts match the current filters.")
    else:
        st.dataframe(
            view.style.format({"Percentage": "{:.1f}%", "Time Spent (min)": "{:.1f}"},
                              na_rep="N/A"),
            width="stretch",
            hide_index=True
        )

    st.download_button(
        "⬇️ Export Data",
        data=export_attempts_csv(view),
        file_name=export_filename(data.quiz.title),
        mime="text/csv",
    )


def render_questions(question_stats):
    if not question_stats:
        st.info("No question data available.")
        return

    for idx, q_stats in enumerate(question_stats):
        title = f"Question {idx + 1}: {q_stats.question_text}"
        with st.expander(title, expanded=False):
            c1, c2, c3 = st.columns(3)
            c1.metric("Success Rate", f"{q_stats.success_rate:.1f}%")
            c2.metric("Correct", q_stats.correct_count)
            c3.metric("Answered", q_stats.total_answered)

            df_plot = pd.DataFrame([
                {
                    "Option": q_stats.options[o.option],
                    "Count": o.count,
                    "Percentage": o.percentage,
                    "Correct": "Correct" if o.option == q_stats.correct_option else "Wrong",
                }
                for o in q_stats.option_distribution
            ])
            if df_plot.empty:
                continue

            fig = px.bar(
                df_plot,
                x="Percentage",
                y="Option",
                orientation="h",
                color="Correct",
                color_discrete_map={"Correct": "#2ca02c", "Wrong": "#d62728"},
                text="Count",
            )
            fig.update_layout(
                xaxis=dict(title=None, range=[0, 100]),
                yaxis=dict(title=None, autorange="reversed"),
                height=120 + (len(df_plot) * 30),
                margin=dict(l=10, r=10, t=10, b=10),
                showlegend=False
            )
            st.plotly_chart(fig, width="stretch", key=f"plot_q_{q_stats.question_id}")


def initialize_session_state():
    """Initializes page config and session variables."""
    st.set_page_config(page_title="Quiz Analytics", layout="wide")

    if 'raw_data' not in st.session_state:
        st.session_state.raw_data = None
    if 'last_sync' not in st.session_state:
        st.session_state.last_sync = None
    if 'last_auto_refresh' not in st.session_state:
        st.session_state.last_auto_refresh = 0


def run_dashboard():
    initialize_session_state()

    url, api_key, token, quiz_id = render_sidebar()

    if st.session_state.raw_data == "loading":
        sync_with_backend(url, api_key, token, quiz_id)

    data = st.session_state.raw_data
    if isinstance(data, QuizAnalytics):
        threshold = data.quiz.passing_score
        grading_disabled = is_grading_disabled(threshold)
        stats, question_stats = compute_quiz_statistics(data.attempts, data.questions, threshold)

        st.header(data.quiz.title)
        if data.quiz.description:
            st.caption(data.quiz.description)

        render_top_indicators(stats, grading_disabled)

        tab_overview, tab_attempts, tab_questions = st.tabs(["📊 Overview", "👥 Attempts", "🧠 Questions"])
        with tab_overview:
            render_overview(data.attempts, grading_disabled)
        with tab_attempts:
            render_attempts(data, grading_disabled)
        with tab_questions:
            render_questions(question_stats)
    else:
        st.info("Please enter the backend settings in the sidebar and click 'Sync Now'.")
