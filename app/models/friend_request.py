from __future__ import annotations

import enum
import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base, utcnow


class FriendRequestStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"


class FriendRequest(Base):
    __tablename__ = "friend_requests"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    sender_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, index=True)
    recipient_id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, index=True)

    # pending -> accepted is the only transition.
    status: Mapped[str] = mapped_column(
        sa.String(16),
        nullable=False,
        default=FriendRequestStatus.pending.value,
        server_default=FriendRequestStatus.pending.value,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), default=utcnow, server_default=sa.func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=utcnow,
        server_default=sa.func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    sender = relationship("User", foreign_keys=[sender_id], lazy="raise")
    recipient = relationship("User", foreign_keys=[recipient_id], lazy="raise")

    __table_args__ = (
        sa.CheckConstraint("sender_id <> recipient_id", name="ck_friend_requests_not_self"),
        sa.CheckConstraint("status IN ('pending', 'accepted')", name="ck_friend_requests_status"),
    )
