"""
Data Management
===============

This module handles loading quiz data into the session and the local cache.
"""
import asyncio
import os
import pickle
from datetime import datetime

import streamlit as st

from datasource.supabase_client import DataSourceError, SupabaseClient

CACHE_PATH = "quiz_cache.pkl"


def save_local_cache(data, path=CACHE_PATH):
    with open(path, "wb") as f:
        pickle.dump(data, f)


def load_local_cache(path=CACHE_PATH):
    if os.path.exists(path):
        with open(path, "rb") as f:
            st.session_state.raw_data = pickle.load(f)
            st.session_state.last_sync = f"Cache: {datetime.now().strftime('%H:%M:%S')}"
        st.success("Data loaded from local cache!")
        st.rerun()
    else:
        st.error("Cache file not found.")


def clear_local_cache(path=CACHE_PATH):
    """Deletes the cached sync."""
    if os.path.exists(path):
        os.remove(path)
        st.success("Local cache deleted.")
    else:
        st.error("No cache file found to delete.")


async def run_loader_async(url, api_key, access_token, quiz_id, status_box):
    client = SupabaseClient(url, api_key, access_token)
    try:
        return await client.load_quiz_analytics(quiz_id, status_box)
    finally:
        await client.close()


def sync_with_backend(url, api_key, access_token, quiz_id):
    if not (url and api_key and quiz_id):
        st.session_state.raw_data = None
        st.error("Backend URL, API key and Quiz ID are required.")
        return

    with st.status("Loading quiz data from Supabase...", expanded=True) as status:
        try:
            fetched_data = asyncio.run(
                run_loader_async(url, api_key, access_token, quiz_id, status))
        except DataSourceError as e:
            st.session_state.raw_data = None
            status.update(label=f"Load failed: {e}", state="error")
            return

        st.session_state.raw_data = fetched_data
        st.session_state.last_sync = datetime.now().strftime('%H:%M:%S')
        save_local_cache(fetched_data)
        st.rerun()
