from __future__ import annotations

import logging

import httpx
from jose import JWTError, jwt

from app.core.config import settings
from app.models.user import User
from app.services.errors import InternalError

logger = logging.getLogger(__name__)

STREAM_TOKEN_ALGORITHM = "HS256"


def _require_stream_secret() -> str:
    if not settings.stream_configured():
        raise InternalError("chat_not_configured")
    return (settings.stream_api_secret or "").strip()


def create_chat_token(user_id: str) -> str:
    """Sign a Stream Chat user token; the provider verifies it with the shared secret."""
    secret = _require_stream_secret()
    try:
        return jwt.encode({"user_id": user_id}, secret, algorithm=STREAM_TOKEN_ALGORITHM)
    except JWTError as exc:
        raise InternalError("chat_token_failed") from exc


def _server_token() -> str:
    return jwt.encode({"server": True}, _require_stream_secret(), algorithm=STREAM_TOKEN_ALGORITHM)


async def upsert_chat_user(*, user_id: str, name: str, image: str) -> None:
    payload = {
        "users": {
            user_id: {"id": user_id, "name": name, "image": image},
        },
    }

    headers = {
        "Authorization": _server_token(),
        "stream-auth-type": "jwt",
        "Content-Type": "application/json",
    }
    params = {"api_key": (settings.stream_api_key or "").strip()}

    async with httpx.AsyncClient(base_url=settings.stream_api_url, timeout=10) as client:
        try:
            response = await client.post("/users", json=payload, headers=headers, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = "Chat provider rejected the request"
            try:
                body = exc.response.json()
                if isinstance(body, dict) and isinstance(body.get("message"), str):
                    parsed = body["message"].strip()
                    if parsed:
                        message = parsed
            except ValueError:
                raw = exc.response.text.strip()
                if raw:
                    message = raw
            raise RuntimeError(message) from exc
        except httpx.RequestError as exc:
            raise RuntimeError("Could not reach chat provider") from exc


async def sync_chat_user(user: User) -> bool:
    """Best-effort mirror of the user's name and avatar to the chat provider."""
    if not settings.stream_configured():
        logger.info("Stream Chat is not configured; skipping chat sync for user %s", user.id)
        return False

    try:
        await upsert_chat_user(user_id=str(user.id), name=user.full_name, image=user.profile_pic or "")
    except RuntimeError as exc:
        logger.warning("Chat sync failed for user %s: %s", user.id, exc)
        return False

    logger.info("Chat user synced for %s", user.id)
    return True
