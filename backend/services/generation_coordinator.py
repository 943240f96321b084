# services/generation_coordinator.py
from typing import Any, List

from pydantic import ValidationError

from models.interview import InterviewQuestion, SessionConfig
from models.request import GenerateQuestionsRequest
from services.exceptions import GenerationError, InterviewPrepError
from utils.logger import get_logger

logger = get_logger("QuestionGenerationCoordinator")


class QuestionGenerationCoordinator:
    """Issues one generation request per configuration and shapes the result."""

    def __init__(self, generation_service):
        self.generation_service = generation_service

    async def generate(self, config: SessionConfig) -> List[InterviewQuestion]:
        request = GenerateQuestionsRequest(
            interview_type=config.interview_type,
            target_role=config.target_role,
            count=config.number_of_questions,
            **({"difficulty": config.difficulty} if config.difficulty else {}),
        )
        try:
            raw = await self.generation_service.generate_questions(request.to_api())
        except InterviewPrepError as e:
            logger.error(f"Question generation request failed: {e}")
            raise GenerationError(f"Failed to generate questions: {e}") from e

        questions = self._build_questions(raw, config)
        logger.info(f"Generated {len(questions)} {config.interview_type.value} questions")
        return questions

    def _build_questions(self, raw: Any, config: SessionConfig) -> List[InterviewQuestion]:
        if not isinstance(raw, list) or not raw:
            raise GenerationError("Question generation returned no questions")

        questions = []
        for position, item in enumerate(raw, start=1):
            if not isinstance(item, dict):
                raise GenerationError(f"Generated question {position} is not an object")
            entry = dict(item)
            entry.setdefault("interviewType", config.interview_type)
            if config.difficulty:
                entry.setdefault("difficulty", config.difficulty)
            if entry.get("id") is None:
                entry["id"] = f"q_{position}"
            try:
                questions.append(InterviewQuestion.model_validate(entry))
            except ValidationError as e:
                raise GenerationError(f"Generated question {position} is malformed: {e}") from e
        return questions
