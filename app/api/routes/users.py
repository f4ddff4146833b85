from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.api.http_errors import permission_error, value_error
from app.db.session import get_db_session
from app.models.user import User
from app.schemas.auth import UserResponse
from app.schemas.friends import (
    AcceptedFriendRequest,
    AcceptFriendRequestResponse,
    FriendRequestResponse,
    FriendRequestsResponse,
    FriendSummary,
    IncomingFriendRequest,
    OutgoingFriendRequest,
)
from app.services.friends import (
    accept_friend_request,
    list_friend_requests,
    list_friends,
    list_outgoing_requests,
    list_recommended_users,
    send_friend_request,
)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/recommended", response_model=list[UserResponse])
async def get_recommended_users(
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    users = await list_recommended_users(db, user.id)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/friends", response_model=list[FriendSummary])
async def get_my_friends(
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    friends = await list_friends(db, user.id)
    return [FriendSummary.model_validate(f) for f in friends]


@router.post("/send-friend-request/{recipient_id}", response_model=FriendRequestResponse, status_code=201)
async def send_request(
    recipient_id: str,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    try:
        friend_request = await send_friend_request(db, user.id, recipient_id)
        await db.commit()
        return FriendRequestResponse.model_validate(friend_request)
    except ValueError as e:
        await db.rollback()
        raise value_error(
            e,
            code_statuses={
                "self_request": 400,
                "recipient_not_found": 404,
                "already_friends": 400,
                "duplicate_request": 400,
            },
            detail_overrides={
                "self_request": "You can't send friend request to yourself",
                "recipient_not_found": "Recipient not found",
                "already_friends": "You are already friends with this user",
                "duplicate_request": "A friend request already exists between you and this user",
            },
            default_detail="Could not send friend request",
        ) from e


@router.post("/accept-friend-request/{request_id}", response_model=AcceptFriendRequestResponse)
async def accept_request(
    request_id: str,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    try:
        await accept_friend_request(db, user.id, request_id)
        await db.commit()
        return AcceptFriendRequestResponse(message="Friend request accepted")
    except PermissionError as e:
        await db.rollback()
        raise permission_error(e) from e
    except ValueError as e:
        await db.rollback()
        raise value_error(
            e,
            code_statuses={"request_not_found": 404},
            detail_overrides={"request_not_found": "Friend request not found"},
            default_detail="Could not accept friend request",
        ) from e


@router.get("/friend-requests", response_model=FriendRequestsResponse)
async def get_friend_requests(
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    incoming, accepted = await list_friend_requests(db, user.id)
    return FriendRequestsResponse(
        incoming_reqs=[IncomingFriendRequest.model_validate(r) for r in incoming],
        accepted_reqs=[AcceptedFriendRequest.model_validate(r) for r in accepted],
    )


@router.get("/outgoing-requests", response_model=list[OutgoingFriendRequest])
async def get_outgoing_requests(
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    requests = await list_outgoing_requests(db, user.id)
    return [OutgoingFriendRequest.model_validate(r) for r in requests]
