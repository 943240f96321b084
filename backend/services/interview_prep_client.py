# ========================================
# services/interview_prep_client.py - Interview Prep REST client
# ========================================
"""
HTTP client for the Interview Prep backend.

Covers the four collaborator contracts the practice workspace relies on:
session persistence, question persistence, question generation and answer
evaluation. Each call is one JSON request and one JSON response; any failure
is raised as ServiceError with the server's message.
"""
import httpx
from typing import Any, Dict, List, Optional, Tuple

from config import get_settings
from models.interview import InterviewQuestion, InterviewSession, QuestionId, SessionConfig
from services.exceptions import ServiceError
from utils.logger import get_logger

logger = get_logger("InterviewPrepClient")

API_PREFIX = "/api/agents/interview-prep"


class InterviewPrepAPIClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        user_id: Optional[int] = None,
        api_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.user_id = user_id if user_id is not None else settings.interview_prep_user_id
        token = api_token if api_token is not None else settings.api_token
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.interview_prep_api_url).rstrip("/") + API_PREFIX,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    # ------------------------------------------------------------------ #
    # Session persistence
    # ------------------------------------------------------------------ #
    async def list_sessions(self, user_id: Optional[int] = None) -> List[InterviewSession]:
        data = await self._request("GET", "/sessions", params={"userId": user_id or self.user_id})
        return [InterviewSession.model_validate(s) for s in data]

    async def get_session(self, session_id: int) -> InterviewSession:
        data = await self._request("GET", f"/sessions/{session_id}", params={"userId": self.user_id})
        return InterviewSession.model_validate(data)

    async def create_session(self, config: SessionConfig) -> Tuple[int, InterviewSession]:
        payload = {"userId": self.user_id, **config.to_api()}
        data = await self._request("POST", "/sessions", json=payload)
        return data["id"], InterviewSession.model_validate(data["session"])

    async def update_session(self, session_id: int, patch: Dict[str, Any]) -> InterviewSession:
        payload = {"userId": self.user_id, **patch}
        data = await self._request("PUT", f"/sessions/{session_id}", json=payload)
        return InterviewSession.model_validate(data["session"])

    async def delete_session(self, session_id: int) -> bool:
        data = await self._request("DELETE", f"/sessions/{session_id}", params={"userId": self.user_id})
        return bool(data.get("success"))

    # ------------------------------------------------------------------ #
    # Question persistence
    # ------------------------------------------------------------------ #
    async def list_questions(self, session_id: int) -> List[InterviewQuestion]:
        data = await self._request("GET", f"/sessions/{session_id}/questions")
        return [InterviewQuestion.model_validate(q) for q in data]

    async def create_question(self, session_id: int, question: InterviewQuestion) -> InterviewQuestion:
        payload = question.to_api()
        payload.pop("id", None)
        data = await self._request("POST", f"/sessions/{session_id}/questions", json=payload)
        return InterviewQuestion.model_validate(data["question"])

    async def update_question(self, session_id: int, question_id: QuestionId, patch: Dict[str, Any]) -> InterviewQuestion:
        data = await self._request("PUT", f"/sessions/{session_id}/questions/{question_id}", json=patch)
        return InterviewQuestion.model_validate(data["question"])

    # ------------------------------------------------------------------ #
    # AI services
    # ------------------------------------------------------------------ #
    async def generate_questions(self, request: Dict[str, Any]) -> Any:
        """Raw generation payload; shape checking belongs to the coordinator."""
        return await self._request("POST", "/ai/generate-questions", json=request)

    async def evaluate_answer(self, question: str, answer: str) -> Any:
        return await self._request("POST", "/ai/evaluate-answer", json={"question": question, "answer": answer})

    async def get_history(self, user_id: Optional[int] = None) -> List[Dict[str, Any]]:
        return await self._request("GET", "/history", params={"userId": user_id or self.user_id})

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #
    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}", exc_info=True)
            raise ServiceError(f"Request to {path} failed: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.error(f"{method} {path} -> {response.status_code}: {message}")
            raise ServiceError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ServiceError(f"Invalid JSON from {path}", status_code=response.status_code) from e


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        detail = body.get("error") or body.get("detail")
        if isinstance(detail, str):
            return detail
        if detail:
            return str(detail)
    return f"HTTP {response.status_code}"
