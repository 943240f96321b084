# services/evaluation_coordinator.py
from pydantic import ValidationError

from models.interview import InterviewQuestion, QuestionEvaluation
from services.exceptions import EvaluationError, InterviewPrepError
from utils.logger import get_logger

logger = get_logger("AnswerEvaluationCoordinator")


class AnswerEvaluationCoordinator:
    """
    Issues one evaluation request per submitted answer.

    Only the question text and the answer go upstream; merging the result
    into the right question is the state machine's job.
    """

    def __init__(self, evaluation_service):
        self.evaluation_service = evaluation_service

    async def evaluate(self, question: InterviewQuestion, answer: str) -> QuestionEvaluation:
        try:
            raw = await self.evaluation_service.evaluate_answer(question.question, answer)
        except InterviewPrepError as e:
            logger.error(f"Evaluation request failed for question {question.id!r}: {e}")
            raise EvaluationError(f"Failed to evaluate answer: {e}") from e

        try:
            evaluation = QuestionEvaluation.model_validate(raw)
        except ValidationError as e:
            logger.error(f"Malformed evaluation for question {question.id!r}: {e}")
            raise EvaluationError("Evaluation service returned a malformed result") from e

        logger.info(f"Question {question.id!r} evaluated: score={evaluation.score}")
        return evaluation
