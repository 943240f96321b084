import secrets
from fastapi import Request, HTTPException, status
from config import get_settings


async def verify_api_token(request: Request):
    """Bearer-token guard for the interview prep routes."""
    settings = get_settings()
    token = request.headers.get("Authorization") or ""
    expected = f"Bearer {settings.api_token}"
    if not settings.api_token or not secrets.compare_digest(token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: Invalid or missing API token"
        )
