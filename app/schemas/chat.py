from __future__ import annotations

from pydantic import BaseModel


class ChatTokenResponse(BaseModel):
    token: str
