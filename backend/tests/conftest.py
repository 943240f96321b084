"""Shared fixtures for the interview prep tests."""
import pytest
from unittest.mock import AsyncMock

from models.interview import (
    DifficultyLevel, InterviewQuestion, InterviewSession, InterviewType, QuestionEvaluation, SessionConfig,
)
from services.session_state import PracticeSessionState
from services.session_timer import SessionTimer


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timer(clock):
    return SessionTimer(clock=clock)


@pytest.fixture
def config():
    return SessionConfig(
        title="Backend Engineer Interview",
        interview_type=InterviewType.TECHNICAL,
        difficulty=DifficultyLevel.MEDIUM,
        target_role="Backend Engineer",
        number_of_questions=3,
    )


@pytest.fixture
def session():
    return InterviewSession(
        id=7,
        user_id=1,
        title="Backend Engineer Interview",
        interview_type=InterviewType.TECHNICAL,
        difficulty=DifficultyLevel.MEDIUM,
        metadata={"numberOfQuestions": 3},
    )


def make_question(qid, interview_type=InterviewType.TECHNICAL, **fields) -> InterviewQuestion:
    return InterviewQuestion(
        id=qid,
        question=fields.pop("question", f"Question {qid}?"),
        interview_type=interview_type,
        **fields,
    )


def make_evaluation(score: int) -> QuestionEvaluation:
    return QuestionEvaluation(score=score, strengths=["clarity"], improvements=["depth"], feedback="Good start")


@pytest.fixture
def questions():
    """Three persisted questions with serial ids."""
    return [make_question(1), make_question(2), make_question(3)]


@pytest.fixture
def active_state(timer, questions, session):
    """State machine populated with three questions and activated."""
    state = PracticeSessionState(timer)
    state.populate(questions, session)
    state.activate()
    return state


@pytest.fixture
def api_client(session, questions):
    """AsyncMock standing in for InterviewPrepAPIClient."""
    client = AsyncMock()
    client.create_session.return_value = (session.id, session)
    client.generate_questions.return_value = [
        {"question": q.question, "interviewType": "technical", "difficulty": "medium"} for q in questions
    ]
    client.create_question.side_effect = lambda session_id, q: q.model_copy(
        update={"id": int(str(q.id).removeprefix("q_")), "session_id": session_id}
    )
    client.evaluate_answer.return_value = make_evaluation(80).to_api()
    client.update_question.return_value = None
    client.update_session.return_value = session
    return client
