"""Tests for the Interview Prep HTTP routes (store and AI service mocked)."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from main import app
from utils.auth import verify_api_token

BASE = "/api/agents/interview-prep"

STORED_SESSION = {
    "id": 7, "userId": 1, "title": "Mock", "interviewType": "technical",
    "metadata": {"numberOfQuestions": 5},
    "createdAt": "2026-10-19T10:00:00Z", "updatedAt": "2026-10-19T10:00:00Z",
}
STORED_QUESTION = {"id": 11, "sessionId": 7, "question": "Explain indexes.", "interviewType": "technical"}


@pytest.fixture
def store():
    with patch("routes.interview_prep.store") as mock_store:
        for name in (
            "next_id", "save_session", "get_session", "list_user_sessions", "delete_session",
            "save_question", "get_question", "list_questions", "track_interaction", "get_history",
        ):
            setattr(mock_store, name, AsyncMock())
        mock_store.next_id.return_value = 7
        yield mock_store


@pytest.fixture
def client(store):
    app.dependency_overrides[verify_api_token] = lambda: None
    with patch("routes.interview_prep.check_rate_limit", new_callable=AsyncMock):
        yield TestClient(app)
    app.dependency_overrides.clear()


class TestAuth:

    def test_missing_token_rejected(self, store):
        response = TestClient(app).get(f"{BASE}/sessions", params={"userId": 1})
        assert response.status_code == 401


class TestSessionRoutes:

    def test_create_session(self, client, store):
        response = client.post(f"{BASE}/sessions", json={
            "userId": 1, "title": "Mock", "interviewType": "technical", "numberOfQuestions": 3,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 7
        assert body["session"]["interviewType"] == "technical"
        assert body["session"]["metadata"] == {"numberOfQuestions": 3}
        store.save_session.assert_awaited_once()
        assert store.track_interaction.await_args.args[1] == "session_created"

    def test_create_session_requires_fields(self, client, store):
        response = client.post(f"{BASE}/sessions", json={"userId": 1, "title": "Mock"})
        assert response.status_code == 422
        store.save_session.assert_not_awaited()

    def test_list_sessions(self, client, store):
        store.list_user_sessions.return_value = [STORED_SESSION]

        response = client.get(f"{BASE}/sessions", params={"userId": 1})

        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [7]
        store.list_user_sessions.assert_awaited_once_with(1)

    def test_get_session_of_other_user_is_404(self, client, store):
        store.get_session.return_value = STORED_SESSION
        response = client.get(f"{BASE}/sessions/7", params={"userId": 2})
        assert response.status_code == 404

    def test_update_session_score(self, client, store):
        store.get_session.return_value = STORED_SESSION

        response = client.put(f"{BASE}/sessions/7", json={"userId": 1, "score": 70})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["session"]["score"] == 70
        assert body["session"]["title"] == "Mock"
        saved = store.save_session.await_args.args[0]
        assert saved["score"] == 70

    def test_update_missing_session(self, client, store):
        store.get_session.return_value = None
        response = client.put(f"{BASE}/sessions/9", json={"userId": 1, "score": 70})
        assert response.status_code == 404

    def test_delete_session(self, client, store):
        store.get_session.return_value = STORED_SESSION

        response = client.delete(f"{BASE}/sessions/7", params={"userId": 1})

        assert response.json() == {"success": True}
        store.delete_session.assert_awaited_once_with(7, 1)

    def test_store_failure_is_500(self, client, store):
        store.list_user_sessions.side_effect = ConnectionError("redis down")
        response = client.get(f"{BASE}/sessions", params={"userId": 1})
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch sessions"


class TestQuestionRoutes:

    def test_create_question(self, client, store):
        store.get_session.return_value = STORED_SESSION
        store.next_id.return_value = 11

        response = client.post(f"{BASE}/sessions/7/questions", json={
            "question": "Explain indexes.", "interviewType": "technical", "difficulty": "medium",
        })

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == 11
        assert body["question"]["sessionId"] == 7
        store.save_question.assert_awaited_once()

    def test_update_question_with_evaluation(self, client, store):
        store.get_question.return_value = STORED_QUESTION

        response = client.put(f"{BASE}/sessions/7/questions/11", json={
            "userAnswer": "Use a B-tree.",
            "evaluation": {"score": 80, "strengths": ["clarity"], "improvements": ["depth"], "feedback": "Good start"},
            "timeSpent": 42,
        })

        assert response.status_code == 200
        question = response.json()["question"]
        assert question["userAnswer"] == "Use a B-tree."
        assert question["evaluation"]["score"] == 80
        assert question["timeSpent"] == 42

    def test_update_question_rejects_bad_score(self, client, store):
        store.get_question.return_value = STORED_QUESTION
        response = client.put(f"{BASE}/sessions/7/questions/11", json={
            "evaluation": {"score": 150, "strengths": [], "improvements": [], "feedback": ""},
        })
        assert response.status_code == 422

    def test_list_questions(self, client, store):
        store.list_questions.return_value = [STORED_QUESTION]
        response = client.get(f"{BASE}/sessions/7/questions")
        assert response.json()[0]["question"] == "Explain indexes."


class TestAIRoutes:

    def test_generate_questions(self, client):
        service = MagicMock()
        service.generate_questions = AsyncMock(return_value=[
            {"question": "Q1", "interviewType": "coding", "difficulty": "medium"},
        ])
        with patch("routes.interview_prep.interview_prep_service", service):
            response = client.post(f"{BASE}/ai/generate-questions", json={"interviewType": "coding", "count": 1})

        assert response.status_code == 200
        assert response.json()[0]["question"] == "Q1"

    def test_generate_questions_count_bounds(self, client):
        response = client.post(f"{BASE}/ai/generate-questions", json={"interviewType": "coding", "count": 51})
        assert response.status_code == 422

    def test_evaluate_answer(self, client):
        service = MagicMock()
        service.evaluate_answer = AsyncMock(return_value={
            "score": 80, "strengths": [], "improvements": [], "feedback": "ok",
        })
        with patch("routes.interview_prep.interview_prep_service", service):
            response = client.post(f"{BASE}/ai/evaluate-answer", json={"question": "Q?", "answer": "A"})

        assert response.json()["score"] == 80
        service.evaluate_answer.assert_awaited_once_with("Q?", "A")

    def test_history(self, client, store):
        store.get_history.return_value = [{"metadata": {"type": "session_created"}}]
        response = client.get(f"{BASE}/history", params={"userId": 1})
        assert response.json()[0]["metadata"]["type"] == "session_created"

    def test_count_limit_follows_settings(self, client, monkeypatch):
        from config import get_settings
        monkeypatch.setattr(get_settings(), "max_questions_per_session", 10)
        response = client.post(f"{BASE}/ai/generate-questions", json={"interviewType": "coding", "count": 11})
        assert response.status_code == 422


class TestHealth:

    def test_reports_llm_and_redis_status(self, client):
        service = MagicMock()
        service.llm.is_configured = False
        with patch("routes.interview_prep.interview_prep_service", service), \
                patch("main.test_connection", new_callable=AsyncMock, return_value=True):
            response = client.get("/health")

        assert response.json()["services"] == {"gemini": False, "redis": True}
