# services/session_state.py
"""
Practice session state machine.

    EMPTY -> POPULATED -> ACTIVE -> ENDED
      ^__________________ reset() ____|

Owns the question store and the cursor for one practice session. Transitions
are synchronous. Transitions that are not valid from the current phase leave
everything untouched and return False (or None); they never raise, so rapid
double clicks in the workspace cannot break a running session.
"""
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from models.interview import InterviewQuestion, InterviewSession, QuestionId, SessionConfig
from models.session import Direction, SessionPhase, SessionStatistics
from services.aggregator import aggregate
from services.exceptions import ConfigurationError
from services.session_timer import SessionTimer
from utils.logger import get_logger

logger = get_logger("PracticeSessionState")

_UPDATABLE_FIELDS = ("user_answer", "evaluation", "time_spent")


class PracticeSessionState:
    def __init__(self, timer: Optional[SessionTimer] = None):
        self.timer = timer or SessionTimer()
        self.phase = SessionPhase.EMPTY
        self.session: Optional[InterviewSession] = None
        self.cursor = 0
        self.activated_at: Optional[float] = None
        self._questions: List[InterviewQuestion] = []
        self._positions: Dict[QuestionId, int] = {}
        self._visit_times: Dict[QuestionId, int] = {}

    # ------------------------------------------------------------------ #
    # Read access
    # ------------------------------------------------------------------ #
    @property
    def questions(self) -> List[InterviewQuestion]:
        return list(self._questions)

    @property
    def is_active(self) -> bool:
        return self.phase == SessionPhase.ACTIVE

    @property
    def current_question(self) -> Optional[InterviewQuestion]:
        if not self._questions:
            return None
        return self._questions[self.cursor]

    def get_question(self, question_id: QuestionId) -> Optional[InterviewQuestion]:
        position = self._positions.get(question_id)
        return self._questions[position] if position is not None else None

    def statistics(self) -> SessionStatistics:
        return aggregate(self._questions)

    def time_on_question(self, question_id: QuestionId) -> Optional[int]:
        """Seconds spent on the latest visit to a question; None if it was never shown."""
        current = self.current_question
        if current is not None and current.id == question_id:
            return self.timer.elapsed()
        return self._visit_times.get(question_id)

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #
    def configure(self, config) -> SessionConfig:
        """Validate a session configuration. Does not touch the state."""
        if isinstance(config, SessionConfig):
            return config
        try:
            return SessionConfig.model_validate(config)
        except ValidationError as e:
            raise ConfigurationError([err["msg"] for err in e.errors()]) from e

    def populate(self, questions: Sequence[InterviewQuestion], session: Optional[InterviewSession] = None) -> bool:
        if self.phase != SessionPhase.EMPTY:
            return self._ignored("populate")
        if not questions:
            return self._ignored("populate", "no questions")

        self._questions = list(questions)
        self._positions = {q.id: i for i, q in enumerate(self._questions) if q.id is not None}
        self.session = session
        self.cursor = 0
        self.phase = SessionPhase.POPULATED
        logger.info(f"Session populated with {len(self._questions)} questions")
        return True

    def activate(self) -> bool:
        if self.phase != SessionPhase.POPULATED:
            return self._ignored("activate")

        self.cursor = 0
        self.timer.start()
        self.activated_at = self.timer.clock()
        self.phase = SessionPhase.ACTIVE
        logger.info(f"Session activated (id={self.session.id if self.session else None})")
        return True

    def update_question(self, question_id: QuestionId, **changes) -> bool:
        """Merge answer/evaluation/time-spent changes into one question by id."""
        if self.phase != SessionPhase.ACTIVE:
            return self._ignored("update_question")
        position = self._positions.get(question_id)
        if position is None:
            return self._ignored("update_question", f"unknown question id {question_id!r}")

        update = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS and v is not None}
        if "evaluation" in update and "time_spent" not in update:
            time_spent = self.time_on_question(question_id)
            if time_spent is not None:
                update["time_spent"] = time_spent

        current = self._questions[position]
        self._questions[position] = InterviewQuestion.model_validate({**current.model_dump(), **update})
        return True

    def advance(self, direction) -> bool:
        if self.phase != SessionPhase.ACTIVE:
            return self._ignored("advance")
        step = 1 if Direction(direction) == Direction.NEXT else -1
        return self._move_to(self.cursor + step)

    def next_question(self) -> bool:
        return self.advance(Direction.NEXT)

    def previous_question(self) -> bool:
        return self.advance(Direction.PREVIOUS)

    def jump_to(self, index: int) -> bool:
        if self.phase != SessionPhase.ACTIVE:
            return self._ignored("jump_to")
        return self._move_to(index)

    def end(self) -> Optional[SessionStatistics]:
        if self.phase != SessionPhase.ACTIVE:
            self._ignored("end")
            return None

        self.timer.stop()
        stats = aggregate(self._questions)
        if self.session is not None:
            elapsed = max(0.0, self.timer.clock() - (self.activated_at or self.timer.clock()))
            self.session = self.session.model_copy(
                update={"score": stats.average_score, "duration": int(elapsed // 60)}
            )
        self.phase = SessionPhase.ENDED
        logger.info(f"Session ended with average score {stats.average_score}")
        return stats

    def reset(self) -> None:
        self.timer.reset()
        self.session = None
        self._questions = []
        self._positions = {}
        self._visit_times = {}
        self.cursor = 0
        self.activated_at = None
        self.phase = SessionPhase.EMPTY

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _move_to(self, index: int) -> bool:
        if not 0 <= index < len(self._questions) or index == self.cursor:
            return False
        leaving = self._questions[self.cursor]
        if leaving.id is not None:
            self._visit_times[leaving.id] = self.timer.elapsed()
        self.cursor = index
        self.timer.start()
        return True

    def _ignored(self, transition: str, reason: str = None) -> bool:
        logger.debug(f"Ignored {transition} in phase {self.phase.value}" + (f": {reason}" if reason else ""))
        return False
