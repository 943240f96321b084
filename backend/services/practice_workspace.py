# services/practice_workspace.py
"""
Interview practice workspace.

Orchestrates one user's practice run: create the session record, generate
and persist questions, drive the state machine, submit answers for
evaluation and persist the final score. The workspace object is the single
owner of its PracticeSessionState; callers hold a reference to the workspace
rather than to any shared global.
"""
import asyncio
from typing import Callable, Optional

from models.interview import InterviewQuestion, QuestionEvaluation, SessionConfig
from models.session import SessionStatistics
from services.aggregator import calculate_completion
from services.evaluation_coordinator import AnswerEvaluationCoordinator
from services.exceptions import GenerationError, InterviewPrepError
from services.generation_coordinator import QuestionGenerationCoordinator
from services.interview_prep_client import InterviewPrepAPIClient
from services.session_state import PracticeSessionState
from services.session_timer import SessionTimer
from utils.formatting import export_session_as_json, format_duration, format_time_spent
from utils.logger import get_logger

logger = get_logger("InterviewPrepWorkspace")


class InterviewPrepWorkspace:
    def __init__(
        self,
        client: Optional[InterviewPrepAPIClient] = None,
        state: Optional[PracticeSessionState] = None,
        on_tick: Optional[Callable[[int], None]] = None,
    ):
        self.client = client if client is not None else InterviewPrepAPIClient()
        self.state = state if state is not None else PracticeSessionState(SessionTimer(on_tick=on_tick))
        self.generator = QuestionGenerationCoordinator(self.client)
        self.evaluator = AnswerEvaluationCoordinator(self.client)
        self.is_generating = False
        self.evaluating: set = set()
        self.unsaved_result: Optional[SessionStatistics] = None

    # ------------------------------------------------------------------ #
    # Session lifecycle
    # ------------------------------------------------------------------ #
    async def start_session(self, config) -> bool:
        """
        Create, populate and activate a new practice session.

        Returns False when a generation is already in flight. Configuration
        errors raise before any request is made; generation and persistence
        errors propagate and leave the current state untouched.
        """
        config = self.state.configure(config)
        if self.is_generating:
            logger.debug("Session creation already in progress; ignoring request")
            return False

        self.is_generating = True
        try:
            session_id, session = await self.client.create_session(config)
            try:
                generated = await self.generator.generate(config)
                saved = await asyncio.gather(
                    *(self.client.create_question(session_id, q) for q in generated),
                    return_exceptions=True,
                )
                failures = [r for r in saved if isinstance(r, Exception)]
                if failures:
                    raise failures[0]
            except InterviewPrepError:
                await self._discard_session(session_id)
                raise
        except InterviewPrepError as e:
            logger.error(f"Failed to start practice session: {e}")
            raise
        finally:
            self.is_generating = False

        questions = [
            q if q.id is not None else generated[i].model_copy(update={"session_id": session_id})
            for i, q in enumerate(saved)
        ]
        if not questions:
            raise GenerationError("No questions were saved for the new session")

        self.state.reset()
        self.unsaved_result = None
        self.state.populate(questions, session)
        self.state.activate()
        logger.info(f"Practice session {session_id} started with {len(questions)} questions")
        return True

    async def submit_answer(self, answer: str, question_id=None) -> Optional[QuestionEvaluation]:
        """
        Evaluate an answer for the current question (or the given one) and
        merge the result by question id.

        Time spent is captured before the evaluation request goes out, so it
        reflects time-to-submit. For a question other than the one on screen
        it is the time recorded when that question was last left.
        """
        if not self.state.is_active or not answer or not answer.strip():
            return None
        question = self.state.get_question(question_id) if question_id is not None else self.state.current_question
        if question is None:
            return None
        if question.id in self.evaluating:
            logger.debug(f"Evaluation already in flight for question {question.id}")
            return None

        time_spent = self.state.time_on_question(question.id)
        self.evaluating.add(question.id)
        try:
            evaluation = await self.evaluator.evaluate(question, answer)
        finally:
            self.evaluating.discard(question.id)

        # The cursor may have moved while the request was in flight; the
        # update is keyed by id, not by what is currently displayed.
        applied = self.state.update_question(
            question.id, user_answer=answer, evaluation=evaluation, time_spent=time_spent
        )

        if applied and self.state.session is not None and self.state.session.id is not None:
            patch = {"userAnswer": answer, "evaluation": evaluation.to_api()}
            if time_spent is not None:
                patch["timeSpent"] = time_spent
            await self.client.update_question(self.state.session.id, question.id, patch)
        logger.info(
            f"Question {question.id} scored {evaluation.score}"
            + (f" after {format_time_spent(time_spent)}" if time_spent is not None else "")
        )
        return evaluation

    async def end_session(self) -> Optional[SessionStatistics]:
        """
        End the active session and persist its final score.

        If the save fails the session stays ENDED with the result held in
        `unsaved_result`; calling end_session again re-sends it.
        """
        stats = self.state.end()
        if stats is None:
            if self.unsaved_result is None:
                return None
            stats = self.unsaved_result
            logger.info("Retrying save of the final session score")

        self.unsaved_result = stats
        session = self.state.session
        if session is not None and session.id is not None:
            patch = {"score": stats.average_score}
            if session.duration:
                patch["duration"] = session.duration
            await self.client.update_session(session.id, patch)
        self.unsaved_result = None

        duration = format_duration(session.duration or 0) if session is not None else "n/a"
        logger.info(
            f"Practice session ended: score={stats.average_score} "
            f"completion={stats.completion_percentage}% duration={duration}"
        )
        return stats

    def reset(self) -> None:
        self.state.reset()
        self.unsaved_result = None

    # ------------------------------------------------------------------ #
    # Navigation
    # ------------------------------------------------------------------ #
    def next_question(self) -> bool:
        return self.state.next_question()

    def previous_question(self) -> bool:
        return self.state.previous_question()

    def jump_to(self, index: int) -> bool:
        return self.state.jump_to(index)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #
    @property
    def current_question(self) -> Optional[InterviewQuestion]:
        return self.state.current_question

    @property
    def statistics(self) -> SessionStatistics:
        return self.state.statistics()

    @property
    def progress_percentage(self) -> int:
        total = len(self.state.questions)
        return calculate_completion(self.state.cursor + 1, total)

    def export(self) -> str:
        return export_session_as_json(self.state.session, self.state.questions)

    async def list_sessions(self):
        return await self.client.list_sessions()

    async def close(self) -> None:
        await self.client.close()

    async def _discard_session(self, session_id: int) -> None:
        """Best-effort removal of a session record whose questions could not be saved."""
        try:
            await self.client.delete_session(session_id)
            logger.warning(f"Discarded incomplete practice session {session_id}")
        except InterviewPrepError as e:
            logger.error(f"Could not discard incomplete practice session {session_id}: {e}")
