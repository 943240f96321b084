from pydantic import Field, field_validator
from typing import Optional, Dict, Any

from models.interview import (
    CamelModel, InterviewType, DifficultyLevel, QuestionEvaluation,
    check_question_count, default_question_count,
)


class CreateSessionRequest(CamelModel):
    user_id: int = Field(..., gt=0, examples=[1])
    title: str = Field(..., min_length=1, max_length=255, examples=["Backend Engineer Interview"])
    interview_type: InterviewType
    difficulty: Optional[DifficultyLevel] = None
    target_role: Optional[str] = Field(None, max_length=255)
    target_company: Optional[str] = Field(None, max_length=255)
    number_of_questions: int = Field(default_factory=default_question_count)

    @field_validator("number_of_questions")
    @classmethod
    def question_count_in_range(cls, v: int) -> int:
        return check_question_count(v)


class UpdateSessionRequest(CamelModel):
    user_id: int = Field(..., gt=0)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None
    duration: Optional[int] = Field(None, ge=0)


class CreateQuestionRequest(CamelModel):
    question: str = Field(..., min_length=1)
    interview_type: InterviewType
    difficulty: Optional[DifficultyLevel] = None
    user_answer: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class UpdateQuestionRequest(CamelModel):
    user_answer: Optional[str] = None
    evaluation: Optional[QuestionEvaluation] = None
    time_spent: Optional[int] = Field(None, ge=0)


class GenerateQuestionsRequest(CamelModel):
    interview_type: InterviewType
    difficulty: DifficultyLevel = DifficultyLevel.MEDIUM
    target_role: Optional[str] = None
    count: int = Field(default_factory=default_question_count)

    @field_validator("count")
    @classmethod
    def count_in_range(cls, v: int) -> int:
        return check_question_count(v)


class EvaluateAnswerRequest(CamelModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
