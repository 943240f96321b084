"""Display helpers for practice sessions."""
import json
import random
import string
import time
from datetime import datetime, timezone
from typing import Iterable

from models.interview import InterviewQuestion, InterviewSession


def generate_question_id() -> str:
    """Client-side question id: q_<epoch ms>_<9 random chars>."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"q_{int(time.time() * 1000)}_{suffix}"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if mins else f"{hours}h"


def format_time_spent(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    minutes, secs = divmod(seconds, 60)
    return f"{minutes}:{secs:02d}"


def export_session_as_json(session: InterviewSession, questions: Iterable[InterviewQuestion]) -> str:
    export = {
        "session": session.to_api() if session is not None else None,
        "questions": [q.to_api() for q in questions],
        "exportedAt": datetime.now(timezone.utc).isoformat(),
    }
    return json.dumps(export, indent=2)
