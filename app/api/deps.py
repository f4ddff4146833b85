from __future__ import annotations

import uuid

from fastapi import Cookie, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import decode_session_token
from app.db.session import get_db_session
from app.models.user import User

COOKIE_NAME = "jwt"


async def get_current_user(
    db: AsyncSession = Depends(get_db_session),
    token: str | None = Cookie(default=None, alias=COOKIE_NAME),
) -> User:
    """Resolve the session cookie into the calling user, or fail with 401."""
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - No token provided")

    subject, reason = decode_session_token(token)
    if subject is None:
        detail = "Unauthorized - Token expired" if reason == "expired" else "Unauthorized - Invalid token"
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

    try:
        user_id = uuid.UUID(subject)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - Invalid token")

    user = await db.get(User, user_id)
    if not user:
        # This is the “stale cookie / DB reset” case
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized - User not found")

    return user
