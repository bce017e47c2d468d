"""
Token helpers for authenticated requests.
"""

from jose import jwt

from app.core.config import settings


def make_token(user_id: str) -> str:
    """Sign a token the way the identity provider does."""
    return jwt.encode({"sub": user_id}, settings.AUTH_SECRET_KEY, algorithm=settings.AUTH_ALGORITHM)


def headers_for(user_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}
