# ========================================
# routes/interview_prep.py - Interview Prep endpoints
# ========================================

from fastapi import APIRouter, HTTPException, Depends, Query, status
from datetime import datetime, timezone

from services.interview_service import InterviewPrepService
from models.interview import InterviewSession, InterviewQuestion
from models.request import (
    CreateSessionRequest, UpdateSessionRequest,
    CreateQuestionRequest, UpdateQuestionRequest,
    GenerateQuestionsRequest, EvaluateAnswerRequest,
)
from utils import redis_client as store
from utils.auth import verify_api_token
from utils.rate_limit import check_rate_limit
from utils.logger import get_logger
from config import get_settings

router = APIRouter(prefix="/api/agents/interview-prep", tags=["Interview Prep"])
logger = get_logger("InterviewPrepRoutes")

interview_prep_service = InterviewPrepService()


async def _get_owned_session(session_id: int, user_id: int) -> InterviewSession:
    data = await store.get_session(session_id)
    if not data:
        raise HTTPException(404, "Session not found or access denied")
    session = InterviewSession.model_validate(data)
    if session.user_id != user_id:
        raise HTTPException(404, "Session not found or access denied")
    return session


# ------------------------------------------------------------------ #
# Sessions
# ------------------------------------------------------------------ #
@router.get("/sessions")
async def list_sessions(
    user_id: int = Query(..., alias="userId"),
    auth: None = Depends(verify_api_token)
):
    """Get all sessions for a user, newest first"""
    try:
        sessions = await store.list_user_sessions(user_id)
        return [InterviewSession.model_validate(s).to_api() for s in sessions]
    except Exception as e:
        logger.error(f"Error fetching sessions: {e}", exc_info=True)
        raise HTTPException(500, "Failed to fetch sessions")


@router.get("/sessions/{session_id}")
async def get_session_details(
    session_id: int,
    user_id: int = Query(..., alias="userId"),
    auth: None = Depends(verify_api_token)
):
    try:
        session = await _get_owned_session(session_id, user_id)
        return session.to_api()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching session: {e}", exc_info=True)
        raise HTTPException(500, "Failed to fetch session")


@router.post("/sessions")
async def create_session(
    request: CreateSessionRequest,
    auth: None = Depends(verify_api_token)
):
    """Create a new practice session"""
    settings = get_settings()
    await check_rate_limit(str(request.user_id), "create_session", limit=settings.session_rate_limit_per_minute)
    try:
        session = InterviewSession(
            id=await store.next_id("session"),
            user_id=request.user_id,
            title=request.title,
            interview_type=request.interview_type,
            difficulty=request.difficulty,
            target_role=request.target_role or None,
            target_company=request.target_company or None,
            metadata={"numberOfQuestions": request.number_of_questions},
        )
        await store.save_session(session.to_api())
        await store.track_interaction(request.user_id, "session_created", {
            "sessionId": session.id,
            "title": session.title,
            "interviewType": session.interview_type.value,
        }, limit=settings.history_limit)

        logger.info(f"Created practice session {session.id} for user {request.user_id}")
        return {"id": session.id, "session": session.to_api()}

    except Exception as e:
        logger.error(f"Error creating session: {e}", exc_info=True)
        raise HTTPException(500, "Failed to create session")


@router.put("/sessions/{session_id}")
async def update_session(
    session_id: int,
    request: UpdateSessionRequest,
    auth: None = Depends(verify_api_token)
):
    """Patch title, score, feedback or duration of an owned session"""
    try:
        existing = await _get_owned_session(session_id, request.user_id)
        changes = request.model_dump(exclude_unset=True, exclude={"user_id"})
        changes = {k: v for k, v in changes.items() if v is not None}
        changes["updated_at"] = datetime.now(timezone.utc)

        session = existing.model_copy(update=changes)
        await store.save_session(session.to_api())
        await store.track_interaction(request.user_id, "session_updated", {
            "sessionId": session.id,
            "title": session.title,
        }, limit=get_settings().history_limit)

        return {"success": True, "session": session.to_api()}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating session: {e}", exc_info=True)
        raise HTTPException(500, "Failed to update session")


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: int,
    user_id: int = Query(..., alias="userId"),
    auth: None = Depends(verify_api_token)
):
    try:
        await _get_owned_session(session_id, user_id)
        await store.delete_session(session_id, user_id)
        await store.track_interaction(user_id, "session_deleted", {"sessionId": session_id},
                                      limit=get_settings().history_limit)
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting session: {e}", exc_info=True)
        raise HTTPException(500, "Failed to delete session")


# ------------------------------------------------------------------ #
# Questions
# ------------------------------------------------------------------ #
@router.get("/sessions/{session_id}/questions")
async def list_questions(
    session_id: int,
    auth: None = Depends(verify_api_token)
):
    try:
        questions = await store.list_questions(session_id)
        return [InterviewQuestion.model_validate(q).to_api() for q in questions]
    except Exception as e:
        logger.error(f"Error fetching questions: {e}", exc_info=True)
        raise HTTPException(500, "Failed to fetch questions")


@router.post("/sessions/{session_id}/questions")
async def create_question(
    session_id: int,
    request: CreateQuestionRequest,
    auth: None = Depends(verify_api_token)
):
    try:
        if not await store.get_session(session_id):
            raise HTTPException(404, "Session not found")

        now = datetime.now(timezone.utc)
        question = InterviewQuestion(
            id=await store.next_id("question"),
            session_id=session_id,
            question=request.question,
            interview_type=request.interview_type,
            difficulty=request.difficulty,
            user_answer=request.user_answer or None,
            metadata=request.metadata,
            created_at=now,
            updated_at=now,
        )
        await store.save_question(session_id, question.to_api())
        return {"id": question.id, "question": question.to_api()}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error creating question: {e}", exc_info=True)
        raise HTTPException(500, "Failed to create question")


@router.put("/sessions/{session_id}/questions/{question_id}")
async def update_question(
    session_id: int,
    question_id: int,
    request: UpdateQuestionRequest,
    auth: None = Depends(verify_api_token)
):
    """Store the user's answer, its evaluation and the time spent"""
    try:
        data = await store.get_question(session_id, question_id)
        if not data:
            raise HTTPException(404, "Question not found")

        changes = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
        if request.evaluation is not None:
            changes["evaluation"] = request.evaluation
        changes["updated_at"] = datetime.now(timezone.utc)

        question = InterviewQuestion.model_validate(data).model_copy(update=changes)
        await store.save_question(session_id, question.to_api())
        return {"success": True, "question": question.to_api()}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating question: {e}", exc_info=True)
        raise HTTPException(500, "Failed to update question")


# ------------------------------------------------------------------ #
# AI
# ------------------------------------------------------------------ #
@router.post("/ai/generate-questions")
async def generate_questions(
    request: GenerateQuestionsRequest,
    auth: None = Depends(verify_api_token)
):
    try:
        return await interview_prep_service.generate_questions(
            request.interview_type,
            request.difficulty,
            request.target_role,
            request.count,
        )
    except Exception as e:
        logger.error(f"Error generating questions: {e}", exc_info=True)
        raise HTTPException(500, "Failed to generate questions")


@router.post("/ai/evaluate-answer")
async def evaluate_answer(
    request: EvaluateAnswerRequest,
    auth: None = Depends(verify_api_token)
):
    try:
        return await interview_prep_service.evaluate_answer(request.question, request.answer)
    except Exception as e:
        logger.error(f"Error evaluating answer: {e}", exc_info=True)
        raise HTTPException(500, "Failed to evaluate answer")


# ------------------------------------------------------------------ #
# History
# ------------------------------------------------------------------ #
@router.get("/history")
async def get_history(
    user_id: int = Query(..., alias="userId"),
    auth: None = Depends(verify_api_token)
):
    try:
        return await store.get_history(user_id, limit=get_settings().history_limit)
    except Exception as e:
        logger.error(f"Error fetching history: {e}", exc_info=True)
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch history")
