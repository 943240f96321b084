# services/aggregator.py
"""
Session statistics derived from the question store.

Everything here is a pure function of the question list: no clock, no
randomness, no dependence on the order evaluations arrived in.
"""
import math
from typing import Dict, Iterable, List, Sequence

from models.interview import InterviewQuestion, InterviewType
from models.session import SessionStatistics

FOCUS_SCORE_THRESHOLD = 60
MAX_FOCUS_AREAS = 3

INTERVIEW_TYPE_LABELS = {
    InterviewType.BEHAVIORAL: "Behavioral",
    InterviewType.TECHNICAL: "Technical",
    InterviewType.CASE_STUDY: "Case Study",
    InterviewType.SYSTEM_DESIGN: "System Design",
    InterviewType.CODING: "Coding",
    InterviewType.GENERAL: "General",
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def interview_type_label(interview_type: InterviewType) -> str:
    return INTERVIEW_TYPE_LABELS[InterviewType(interview_type)]


def score_category(score: int) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 75:
        return "Good"
    if score >= 60:
        return "Fair"
    if score >= 40:
        return "Needs Improvement"
    return "Poor"


def calculate_average_score(questions: Iterable[InterviewQuestion]) -> int:
    """Mean evaluation score over evaluated questions, 0 when none are scored."""
    scores = [q.evaluation.score for q in questions if q.evaluation is not None]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def calculate_completion(answered: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(answered / total * 100)


def recommended_focus_areas(questions: Iterable[InterviewQuestion]) -> List[InterviewType]:
    """
    Interview types whose low-scoring answers (< 60) have the weakest mean,
    weakest first, at most three. Ties keep first-appearance order.
    """
    totals: Dict[InterviewType, List[int]] = {}
    for q in questions:
        if q.evaluation is None or q.evaluation.score >= FOCUS_SCORE_THRESHOLD:
            continue
        totals.setdefault(q.interview_type, []).append(q.evaluation.score)

    ranked = sorted(totals.items(), key=lambda item: sum(item[1]) / len(item[1]))
    return [interview_type for interview_type, _ in ranked[:MAX_FOCUS_AREAS]]


def aggregate(questions: Sequence[InterviewQuestion]) -> SessionStatistics:
    questions = list(questions)
    answered = sum(1 for q in questions if q.is_answered)
    average = calculate_average_score(questions)

    return SessionStatistics(
        average_score=average,
        completion_percentage=calculate_completion(answered, len(questions)),
        recommended_focus_areas=recommended_focus_areas(questions),
        total_questions=len(questions),
        answered_count=answered,
        scored_count=sum(1 for q in questions if q.evaluation is not None),
        total_time_spent=sum(q.time_spent or 0 for q in questions),
        score_category=score_category(average),
    )
