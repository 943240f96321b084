import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder

from db import get_redis
from utils.logger import get_logger

log = get_logger(__name__)

PREFIX = "interview-prep"


def _session_key(session_id: int) -> str:
    return f"{PREFIX}:session:{session_id}"


def _user_sessions_key(user_id: int) -> str:
    return f"{PREFIX}:user:{user_id}:sessions"


def _questions_key(session_id: int) -> str:
    return f"{PREFIX}:session:{session_id}:questions"


def _history_key(user_id: int) -> str:
    return f"{PREFIX}:history:{user_id}"


# ------------------------------------------------------------------ #
# Connection test
# ------------------------------------------------------------------ #
async def test_connection():
    try:
        pong = await get_redis().ping()
        if pong:
            log.info("✅ Redis connection successful!")
            return True
    except Exception as e:
        log.error(f"❌ Redis connection failed: {e}", exc_info=True)
    return False


async def next_id(kind: str) -> int:
    """Serial integer ids per record kind."""
    return int(await get_redis().incr(f"{PREFIX}:ids:{kind}"))


# ------------------------------------------------------------------ #
# Sessions (JSON documents + per-user index)
# ------------------------------------------------------------------ #
async def save_session(session: Dict[str, Any]) -> None:
    """Create or overwrite a session document and index it under its owner."""
    try:
        safe = jsonable_encoder(session)
        redis = get_redis()
        await redis.set(_session_key(safe["id"]), json.dumps(safe))
        await redis.zadd(_user_sessions_key(safe["userId"]), {str(safe["id"]): int(safe["id"])})
        log.info(f"Session {safe['id']} saved.")
    except Exception as e:
        log.error(f"Error saving session {session.get('id')}: {e}", exc_info=True)
        raise


async def get_session(session_id: int) -> Optional[Dict[str, Any]]:
    try:
        raw = await get_redis().get(_session_key(session_id))
        if raw:
            return json.loads(raw)
    except Exception as e:
        log.error(f"Error retrieving session {session_id}: {e}", exc_info=True)
        raise
    return None


async def list_user_sessions(user_id: int) -> List[Dict[str, Any]]:
    """All sessions of a user, newest first."""
    try:
        redis = get_redis()
        ids = await redis.zrevrange(_user_sessions_key(user_id), 0, -1)
        if not ids:
            return []
        raws = await redis.mget([_session_key(int(i)) for i in ids])
        return [json.loads(raw) for raw in raws if raw]
    except Exception as e:
        log.error(f"Error listing sessions for user {user_id}: {e}", exc_info=True)
        raise


async def delete_session(session_id: int, user_id: int) -> bool:
    """Delete a session together with its questions."""
    try:
        redis = get_redis()
        result = await redis.delete(_session_key(session_id), _questions_key(session_id))
        await redis.zrem(_user_sessions_key(user_id), str(session_id))
        if result:
            log.info(f"Session {session_id} deleted.")
            return True
    except Exception as e:
        log.error(f"Error deleting session {session_id}: {e}", exc_info=True)
        raise
    return False


# ------------------------------------------------------------------ #
# Questions (hash per session, field = question id)
# ------------------------------------------------------------------ #
async def save_question(session_id: int, question: Dict[str, Any]) -> None:
    try:
        safe = jsonable_encoder(question)
        await get_redis().hset(_questions_key(session_id), str(safe["id"]), json.dumps(safe))
    except Exception as e:
        log.error(f"Error saving question for session {session_id}: {e}", exc_info=True)
        raise


async def get_question(session_id: int, question_id: int) -> Optional[Dict[str, Any]]:
    try:
        raw = await get_redis().hget(_questions_key(session_id), str(question_id))
        return json.loads(raw) if raw else None
    except Exception as e:
        log.error(f"Error retrieving question {question_id}: {e}", exc_info=True)
        raise


async def list_questions(session_id: int) -> List[Dict[str, Any]]:
    """Questions in creation order (ids are serial)."""
    try:
        raws = await get_redis().hvals(_questions_key(session_id))
        questions = [json.loads(raw) for raw in raws]
        return sorted(questions, key=lambda q: int(q["id"]))
    except Exception as e:
        log.error(f"Error listing questions for session {session_id}: {e}", exc_info=True)
        raise


# ------------------------------------------------------------------ #
# Interaction history
# ------------------------------------------------------------------ #
async def track_interaction(user_id: int, action_type: str, metadata: Dict[str, Any], limit: int = 50) -> None:
    now = datetime.now(timezone.utc)
    entry = {
        "userId": user_id,
        "agentSlug": "interview-prep",
        "agentCategory": "job-seeker-agents",
        "sessionId": f"session_{int(now.timestamp() * 1000)}_{user_id}",
        "metadata": {
            "type": action_type,
            "data": jsonable_encoder(metadata),
            "timestamp": now.isoformat(),
        },
        "createdAt": now.isoformat(),
    }
    try:
        redis = get_redis()
        await redis.lpush(_history_key(user_id), json.dumps(entry))
        await redis.ltrim(_history_key(user_id), 0, limit - 1)
    except Exception as e:
        log.error(f"Error tracking interaction {action_type} for user {user_id}: {e}", exc_info=True)
        raise


async def get_history(user_id: int, limit: int = 50) -> List[Dict[str, Any]]:
    try:
        raws = await get_redis().lrange(_history_key(user_id), 0, limit - 1)
        return [json.loads(raw) for raw in raws]
    except Exception as e:
        log.error(f"Error retrieving history for user {user_id}: {e}", exc_info=True)
        raise
