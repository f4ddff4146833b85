from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.api.http_errors import internal_error
from app.models.user import User
from app.schemas.chat import ChatTokenResponse
from app.services.chat import create_chat_token
from app.services.errors import InternalError

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/token", response_model=ChatTokenResponse)
async def get_chat_token(user: User = Depends(get_current_user)):
    try:
        token = create_chat_token(str(user.id))
    except InternalError as e:
        raise internal_error() from e
    return ChatTokenResponse(token=token)
