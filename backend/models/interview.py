# ========================================
# models/interview.py - Interview Prep models
# ========================================

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any, List, Union
from datetime import datetime, timezone
from enum import Enum

from config import get_settings


class InterviewType(str, Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"
    CASE_STUDY = "case_study"
    SYSTEM_DESIGN = "system_design"
    CODING = "coding"
    GENERAL = "general"


class DifficultyLevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


QuestionId = Union[int, str]


def default_question_count() -> int:
    return get_settings().default_question_count


def check_question_count(value: int) -> int:
    """Bound a requested question count by the configured per-session maximum."""
    limit = get_settings().max_questions_per_session
    if not 1 <= value <= limit:
        raise ValueError(f"Number of questions must be between 1 and {limit}")
    return value


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class QuestionEvaluation(CamelModel):
    score: int = Field(..., ge=0, le=100)
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    feedback: str = ""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class InterviewQuestion(CamelModel):
    id: Optional[QuestionId] = None
    session_id: Optional[int] = None
    question: str = Field(..., min_length=1)
    interview_type: InterviewType
    difficulty: Optional[DifficultyLevel] = None
    user_answer: Optional[str] = None
    ai_suggestion: Optional[str] = None
    evaluation: Optional[QuestionEvaluation] = None
    time_spent: Optional[int] = Field(None, ge=0)  # seconds
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_answered(self) -> bool:
        return bool(self.user_answer and self.user_answer.strip())


class InterviewSession(CamelModel):
    id: Optional[int] = None
    user_id: int
    title: str = Field(..., min_length=1, max_length=255)
    interview_type: InterviewType
    difficulty: Optional[DifficultyLevel] = None
    target_role: Optional[str] = Field(None, max_length=255)
    target_company: Optional[str] = Field(None, max_length=255)
    duration: Optional[int] = Field(None, ge=0)  # minutes
    score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SessionConfig(CamelModel):
    """Configuration for starting a new practice session."""
    title: str = Field(..., max_length=255)
    interview_type: InterviewType
    difficulty: Optional[DifficultyLevel] = None
    target_role: Optional[str] = Field(None, max_length=255)
    target_company: Optional[str] = Field(None, max_length=255)
    number_of_questions: int = Field(default_factory=default_question_count)

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Session title is required")
        return v.strip()

    @field_validator("number_of_questions")
    @classmethod
    def question_count_in_range(cls, v: int) -> int:
        return check_question_count(v)
