# ========================================
# config.py - Interview Prep configuration
# ========================================

import os
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ---------- LLM Configuration (Gemini) ----------------------------- #
    llm_api_key: str = ""
    llm_model: str = "gemini-1.5-flash"
    llm_temperature: float = 0.7
    llm_max_tokens: int = 6000

    # ---------- Database ----------------------------------------------- #
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str = ""

    # ---------- Security ----------------------------------------------- #
    api_token: str = os.getenv("API_TOKEN", "")

    # ---------- CORS --------------------------------------------------- #
    allowed_origins: str = "http://localhost:3000,http://localhost:5173,http://localhost:5174"

    # ---------- Interview Prep Settings -------------------------------- #
    default_question_count: int = 5
    max_questions_per_session: int = 50
    history_limit: int = 50
    session_rate_limit_per_minute: int = 20
    timer_tick_seconds: float = 1.0

    # ---------- Interview Prep API Client ------------------------------ #
    interview_prep_api_url: str = "http://localhost:8000"
    interview_prep_user_id: int = 1
    request_timeout_seconds: float = 30.0

    # ---------- Logging ------------------------------------------------ #
    log_level: str = "INFO"
    log_format: str = "console"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
