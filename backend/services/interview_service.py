# services/interview_service.py
import json
from typing import Any, Dict, List, Optional

from models.interview import DifficultyLevel, InterviewType, QuestionEvaluation
from services.aggregator import interview_type_label
from services.gemini_service import GeminiService
from utils.logger import get_logger

logger = get_logger("InterviewPrepService")


TYPE_TOPICS = {
    InterviewType.BEHAVIORAL: "behavioral scenarios (teamwork, conflict resolution, ownership, failure)",
    InterviewType.TECHNICAL: "technical depth in the candidate's stack (languages, frameworks, debugging)",
    InterviewType.CASE_STUDY: "business case studies (market sizing, prioritisation, trade-offs)",
    InterviewType.SYSTEM_DESIGN: "system design (scalability, storage, consistency, APIs)",
    InterviewType.CODING: "coding problems (data structures, algorithms, complexity)",
    InterviewType.GENERAL: "general fit and motivation",
}

FALLBACK_PROMPTS = {
    InterviewType.BEHAVIORAL: "Tell me about a time you had to {verb} while working as a {role}.",
    InterviewType.TECHNICAL: "Walk me through how you would {verb} in your day-to-day work as a {role}.",
    InterviewType.CASE_STUDY: "As a {role}, how would you approach a case where you must {verb}?",
    InterviewType.SYSTEM_DESIGN: "Design a system a {role} would build to {verb}.",
    InterviewType.CODING: "Write a function that helps a {role} {verb}. Explain its complexity.",
    InterviewType.GENERAL: "Why does a {role} need to {verb}, and how have you done it?",
}

FALLBACK_VERBS = [
    "resolve a conflicting requirement",
    "debug a production incident",
    "prioritise competing deadlines",
    "scale a service to ten times its traffic",
    "de-duplicate a stream of events",
    "explain a complex idea to a non-expert",
]


def _extract_json(text: str) -> Any:
    """Parse JSON out of an LLM reply that may be wrapped in code fences."""
    resp = text.strip().strip('`').strip()
    if resp.lower().startswith('json'):
        resp = resp[4:]
    starts = [i for i in (resp.find('['), resp.find('{')) if i != -1]
    if not starts:
        raise ValueError("no JSON found in response")
    start = min(starts)
    end = max(resp.rfind(']'), resp.rfind('}')) + 1
    return json.loads(resp[start:end])


class InterviewPrepService:
    def __init__(self, llm: Optional[GeminiService] = None):
        self.llm = llm or GeminiService()

    async def generate_questions(
        self,
        interview_type: InterviewType,
        difficulty: DifficultyLevel = DifficultyLevel.MEDIUM,
        target_role: Optional[str] = None,
        count: int = 5,
    ) -> List[Dict[str, Any]]:
        """Generate `count` practice questions as plain question dicts."""
        role = target_role or "software engineer"
        prompt = f"""You are preparing a candidate for a {interview_type_label(interview_type)} interview.
Target role: {role}
Difficulty: {difficulty.value}
Topic focus: {TYPE_TOPICS[interview_type]}

Generate exactly {count} distinct interview questions.

Return ONLY a valid JSON array (no markdown, no backticks, no explanation):
[
    {{"question": "The question text"}}
]"""

        response = await self.llm.generate_text(prompt, temperature=0.8)
        if response:
            try:
                items = _extract_json(response)
                questions = [
                    {
                        "question": str(item["question"]).strip(),
                        "interviewType": interview_type.value,
                        "difficulty": difficulty.value,
                    }
                    for item in items
                    if isinstance(item, dict) and str(item.get("question", "")).strip()
                ][:count]
                if questions:
                    logger.info(f"✅ Generated {len(questions)} {interview_type.value} questions")
                    return questions
                logger.warning("LLM returned no usable questions; using fallback set")
            except (ValueError, KeyError, TypeError) as e:
                logger.error(f"❌ Failed to parse generated questions: {e}", exc_info=True)

        return self._get_fallback_questions(interview_type, difficulty, role, count)

    async def evaluate_answer(self, question: str, answer: str) -> Dict[str, Any]:
        """Score an answer 0-100 with strengths, improvements and feedback."""
        prompt = f"""Evaluate this interview answer.

Question: {question}
Answer: {answer}

Return ONLY valid JSON:
{{
    "score": 0-100 integer,
    "strengths": ["strength 1", "strength 2"],
    "improvements": ["improvement 1", "improvement 2"],
    "feedback": "Two or three sentences of overall feedback"
}}"""

        response = await self.llm.generate_text(prompt, temperature=0.3)
        if response:
            try:
                data = _extract_json(response)
                evaluation = QuestionEvaluation.model_validate({
                    "score": max(0, min(100, int(round(float(data["score"]))))),
                    "strengths": [str(s) for s in data.get("strengths", [])],
                    "improvements": [str(s) for s in data.get("improvements", [])],
                    "feedback": str(data.get("feedback", "")),
                })
                return evaluation.to_api()
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.error(f"❌ Failed to parse evaluation: {e}", exc_info=True)

        return self._get_fallback_evaluation(answer)

    def _get_fallback_questions(
        self,
        interview_type: InterviewType,
        difficulty: DifficultyLevel,
        role: str,
        count: int,
    ) -> List[Dict[str, Any]]:
        """Template questions used when the LLM is unavailable."""
        template = FALLBACK_PROMPTS[interview_type]
        return [
            {
                "question": template.format(role=role, verb=FALLBACK_VERBS[i % len(FALLBACK_VERBS)])
                + ("" if i < len(FALLBACK_VERBS) else f" (variation {i // len(FALLBACK_VERBS) + 1})"),
                "interviewType": interview_type.value,
                "difficulty": difficulty.value,
            }
            for i in range(count)
        ]

    def _get_fallback_evaluation(self, answer: str) -> Dict[str, Any]:
        """Deterministic length-based evaluation used when the LLM is unavailable."""
        words = len(answer.split())
        score = min(95, 40 + words // 2)

        strengths = ["Clear communication"]
        improvements = []
        if words >= 60:
            strengths.append("Good structure")
        else:
            improvements.append("Elaborate on key points")
        if not any(ch.isdigit() for ch in answer):
            improvements.append("Add more specific examples and measurable outcomes")

        return QuestionEvaluation(
            score=score,
            strengths=strengths,
            improvements=improvements or ["Tie the answer back to the role's requirements"],
            feedback="Good answer overall. Consider providing more concrete examples to strengthen your response."
            if score >= 60 else
            "The answer is too brief. Walk through the situation, your actions and the result in more detail.",
        ).to_api()
