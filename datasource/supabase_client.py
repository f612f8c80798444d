"""
Supabase Client Module (Async Version)
======================================
Loads a quiz, its questions and its completed attempts from the backend's REST
interface using httpx.AsyncClient and asyncio.gather.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from datasource.parser import parse_attempt, parse_passing_score, parse_question, parse_quiz
from models.quiz_models import Question, QuizAnalytics, QuizAttempt

logger = logging.getLogger(__name__)


class DataSourceError(Exception):
    """Raised when the backend cannot be reached or answers with an error."""


class QuizNotFoundError(DataSourceError):
    pass


class SupabaseClient:
    def __init__(self, base_url: str, api_key: str, access_token: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Accept": "application/json",
            },
            timeout=60.0,
            transport=transport,
        )

    async def _select(self, table: str, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            resp = await self.client.get(f"/{table}", params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", table, e)
            raise DataSourceError(f"Failed to load {table}: {e}") from e
        except ValueError as e:
            logger.error("Invalid JSON from %s: %s", table, e)
            raise DataSourceError(f"Invalid response for {table}") from e

    async def fetch_quiz_row(self, quiz_id: str) -> Dict[str, Any]:
        rows = await self._select("quizzes", {"select": "*", "id": f"eq.{quiz_id}"})
        if not rows:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")
        return rows[0]

    async def fetch_questions(self, quiz_id: str) -> List[Question]:
        rows = await self._select("questions", {
            "select": "*",
            "quiz_id": f"eq.{quiz_id}",
            "order": "order_index.asc",
        })
        return [parse_question(row) for row in rows]

    async def fetch_completed_attempts(self, quiz_id: str) -> List[QuizAttempt]:
        """Completed attempts with the user's profile name, latest first."""
        rows = await self._select("quiz_attempts", {
            "select": "*,profiles(name)",
            "quiz_id": f"eq.{quiz_id}",
            "completed": "is.true",
            "order": "completed_at.desc",
        })
        attempts = (parse_attempt(row) for row in rows)
        return [attempt for attempt in attempts if attempt is not None]

    async def fetch_passing_score(self, quiz_id: str) -> float:
        rows = await self._select("section_content", {
            "select": "content_data",
            "content_type": "eq.quiz",
            "content_data": f"cs.{json.dumps({'quiz_id': quiz_id})}",
            "limit": "1",
        })
        return parse_passing_score(rows)

    async def fetch_quiz(self, quiz_id: str):
        quiz_row, passing_score = await asyncio.gather(
            self.fetch_quiz_row(quiz_id),
            self.fetch_passing_score(quiz_id),
        )
        return parse_quiz(quiz_row, passing_score)

    async def load_quiz_analytics(self, quiz_id: str, status_container=None) -> QuizAnalytics:
        """
        Main execution flow:
        1. Quiz details and passing score
        2. Questions in display order
        3. Completed attempts
        All requests run in parallel.
        """
        if status_container:
            status_container.write(f"🚀 Loading quiz {quiz_id}...")

        quiz, questions, attempts = await asyncio.gather(
            self.fetch_quiz(quiz_id),
            self.fetch_questions(quiz_id),
            self.fetch_completed_attempts(quiz_id),
        )

        if status_container:
            status_container.write(f"🟢 {len(questions)} questions, {len(attempts)} attempts")
        logger.info("Loaded quiz %s: %d questions, %d attempts",
                    quiz_id, len(questions), len(attempts))

        return QuizAnalytics(quiz=quiz, questions=questions, attempts=attempts)

    async def close(self):
        """Closes the async client session."""
        await self.client.aclose()
