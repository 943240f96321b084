# backend/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from routes import interview_prep
from config import get_settings
from utils.logger import setup_logging, get_logger
from utils.redis_client import test_connection

setup_logging()
log = get_logger(__name__)
settings = get_settings()

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown tasks"""
    log.info(f"🚀 Starting Interview Prep API v{VERSION}")

    redis_ok = await test_connection()
    if redis_ok:
        log.info("✅ Redis connected")
    else:
        log.warning("⚠️ Redis connection failed")

    llm_ready = interview_prep.interview_prep_service.llm.is_configured
    log.info(f"LLM: {'✅ Gemini' if llm_ready else 'fallback templates (no LLM key)'}")
    yield
    log.info("🛑 Shutting down...")


app = FastAPI(
    title="Interview Prep API",
    version=VERSION,
    description="Practice interview sessions with AI-generated questions and answer evaluation",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(interview_prep.router)


@app.get("/")
async def root():
    return {
        "message": f"Interview Prep API v{VERSION}",
        "status": "operational",
        "features": [
            "🎯 Practice sessions by interview type and difficulty",
            "🤖 AI question generation (Gemini)",
            "📝 AI answer evaluation",
            "📊 Session history"
        ],
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check"""
    return {
        "status": "healthy",
        "version": VERSION,
        "services": {
            "gemini": interview_prep.interview_prep_service.llm.is_configured,
            "redis": await test_connection(),
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
