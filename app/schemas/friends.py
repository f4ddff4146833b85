from __future__ import annotations

import uuid
from datetime import datetime

from app.schemas.base import CamelModel


class UserBrief(CamelModel):
    id: uuid.UUID
    full_name: str
    profile_pic: str


class FriendSummary(UserBrief):
    native_language: str
    learning_language: str


class FriendRequestResponse(CamelModel):
    id: uuid.UUID
    sender_id: uuid.UUID
    recipient_id: uuid.UUID
    status: str
    created_at: datetime


class IncomingFriendRequest(CamelModel):
    id: uuid.UUID
    status: str
    created_at: datetime
    sender: FriendSummary


class AcceptedFriendRequest(CamelModel):
    id: uuid.UUID
    status: str
    created_at: datetime
    recipient: UserBrief


class OutgoingFriendRequest(CamelModel):
    id: uuid.UUID
    status: str
    created_at: datetime
    recipient: FriendSummary


class FriendRequestsResponse(CamelModel):
    incoming_reqs: list[IncomingFriendRequest]
    accepted_reqs: list[AcceptedFriendRequest]


class AcceptFriendRequestResponse(CamelModel):
    message: str
