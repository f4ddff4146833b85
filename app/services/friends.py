from __future__ import annotations

import uuid

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.models.friend_request import FriendRequest, FriendRequestStatus
from app.models.friendship import Friendship
from app.models.user import User
from app.services.errors import (
    AlreadyFriendsError,
    DuplicateRequestError,
    ForbiddenError,
    NotFoundError,
    SelfRequestError,
)


def _pair(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    return (a, b) if str(a) < str(b) else (b, a)


def _parse_id(value: object) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


async def friend_ids(db: AsyncSession, user_id: uuid.UUID) -> list[uuid.UUID]:
    rows = await db.execute(
        select(Friendship.user_low_id, Friendship.user_high_id).where(
            or_(Friendship.user_low_id == user_id, Friendship.user_high_id == user_id)
        )
    )
    return [high if low == user_id else low for low, high in rows.all()]


async def are_friends(db: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
    low, high = _pair(a, b)
    existing = (
        await db.execute(
            select(Friendship.id).where(
                and_(Friendship.user_low_id == low, Friendship.user_high_id == high)
            )
        )
    ).scalar_one_or_none()
    return existing is not None


async def add_friendship(db: AsyncSession, a: uuid.UUID, b: uuid.UUID) -> bool:
    """Link two users. Returns False when they were already friends."""
    if await are_friends(db, a, b):
        return False

    low, high = _pair(a, b)
    db.add(Friendship(user_low_id=low, user_high_id=high))
    await db.flush()
    return True


async def list_recommended_users(db: AsyncSession, current_user_id: uuid.UUID) -> list[User]:
    excluded = await friend_ids(db, current_user_id)
    q = select(User).where(
        User.id != current_user_id,
        User.is_onboarded.is_(True),
    )
    if excluded:
        q = q.where(User.id.not_in(excluded))

    rows = (await db.execute(q.order_by(User.created_at.desc()))).scalars().all()
    return list(rows)


async def list_friends(db: AsyncSession, current_user_id: uuid.UUID) -> list[User]:
    # friendship row can contain you in either low/high
    f = Friendship
    u = aliased(User)

    q = (
        select(u)
        .join(
            f,
            ((f.user_low_id == current_user_id) & (u.id == f.user_high_id))
            | ((f.user_high_id == current_user_id) & (u.id == f.user_low_id)),
        )
        .order_by(u.full_name.asc())
    )

    rows = (await db.execute(q)).scalars().all()
    return list(rows)


async def send_friend_request(db: AsyncSession, current_user_id: uuid.UUID, recipient_id: str) -> FriendRequest:
    recipient_uuid = _parse_id(recipient_id)
    if recipient_uuid is not None and recipient_uuid == current_user_id:
        raise SelfRequestError()

    recipient = await db.get(User, recipient_uuid) if recipient_uuid is not None else None
    if recipient is None:
        raise NotFoundError("recipient_not_found")

    if await are_friends(db, current_user_id, recipient.id):
        raise AlreadyFriendsError()

    # Any earlier request between the pair blocks a new one, whatever its status.
    existing = (
        await db.execute(
            select(FriendRequest.id)
            .where(
                or_(
                    and_(FriendRequest.sender_id == current_user_id, FriendRequest.recipient_id == recipient.id),
                    and_(FriendRequest.sender_id == recipient.id, FriendRequest.recipient_id == current_user_id),
                )
            )
            .limit(1)
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise DuplicateRequestError()

    friend_request = FriendRequest(
        sender_id=current_user_id,
        recipient_id=recipient.id,
        status=FriendRequestStatus.pending.value,
    )
    db.add(friend_request)
    await db.flush()
    return friend_request


async def accept_friend_request(db: AsyncSession, current_user_id: uuid.UUID, request_id: str) -> FriendRequest:
    request_uuid = _parse_id(request_id)
    friend_request = await db.get(FriendRequest, request_uuid) if request_uuid is not None else None
    if friend_request is None:
        raise NotFoundError("request_not_found")

    if friend_request.recipient_id != current_user_id:
        raise ForbiddenError("You are not authorized to accept this request")

    if friend_request.status != FriendRequestStatus.accepted.value:
        friend_request.status = FriendRequestStatus.accepted.value

    await add_friendship(db, friend_request.sender_id, friend_request.recipient_id)
    await db.flush()
    return friend_request


async def list_friend_requests(
    db: AsyncSession,
    current_user_id: uuid.UUID,
) -> tuple[list[FriendRequest], list[FriendRequest]]:
    """Incoming pending requests, plus the caller's sent requests that were accepted."""
    incoming = (
        await db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.recipient_id == current_user_id,
                FriendRequest.status == FriendRequestStatus.pending.value,
            )
            .options(selectinload(FriendRequest.sender))
            .order_by(FriendRequest.created_at.desc())
            .execution_options(populate_existing=True)
        )
    ).scalars().all()

    accepted = (
        await db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.sender_id == current_user_id,
                FriendRequest.status == FriendRequestStatus.accepted.value,
            )
            .options(selectinload(FriendRequest.recipient))
            .order_by(FriendRequest.updated_at.desc())
            .execution_options(populate_existing=True)
        )
    ).scalars().all()

    return list(incoming), list(accepted)


async def list_outgoing_requests(db: AsyncSession, current_user_id: uuid.UUID) -> list[FriendRequest]:
    rows = (
        await db.execute(
            select(FriendRequest)
            .where(
                FriendRequest.sender_id == current_user_id,
                FriendRequest.status == FriendRequestStatus.pending.value,
            )
            .options(selectinload(FriendRequest.recipient))
            .order_by(FriendRequest.created_at.desc())
            .execution_options(populate_existing=True)
        )
    ).scalars().all()
    return list(rows)
