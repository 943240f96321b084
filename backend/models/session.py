from pydantic import BaseModel, Field
from typing import List
from enum import Enum

from models.interview import InterviewType


class SessionPhase(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    ACTIVE = "active"
    ENDED = "ended"


class Direction(str, Enum):
    NEXT = "next"
    PREVIOUS = "previous"


class SessionStatistics(BaseModel):
    """Derived from the question store on demand; never persisted."""
    average_score: int = 0
    completion_percentage: int = 0
    recommended_focus_areas: List[InterviewType] = Field(default_factory=list)
    total_questions: int = 0
    answered_count: int = 0
    scored_count: int = 0
    total_time_spent: int = 0
    score_category: str = "Poor"

    model_config = {"frozen": True}
