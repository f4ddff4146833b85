from __future__ import annotations

import random
import re
import uuid
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import BCRYPT_MAX_BYTES, hash_password, verify_password
from app.models.user import User
from app.services.errors import AuthError, ConflictError, NotFoundError, ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
AVATAR_URL_TEMPLATE = "https://avatar.iran.liara.run/public/{index}.png"
AVATAR_COUNT = 100

# Attribute name -> wire name, in the order missing fields are reported.
ONBOARDING_FIELDS: dict[str, str] = {
    "full_name": "fullName",
    "bio": "bio",
    "native_language": "nativeLanguage",
    "learning_language": "learningLanguage",
    "location": "location",
}


def _clean_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    return normalized or None


def _clean_email(value: object) -> str | None:
    normalized = _clean_text(value)
    if not normalized:
        return None
    return normalized.lower()


def random_avatar_url() -> str:
    return AVATAR_URL_TEMPLATE.format(index=random.randint(1, AVATAR_COUNT))


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def signup(
    db: AsyncSession,
    *,
    email: str | None,
    password: str | None,
    full_name: str | None,
) -> User:
    cleaned_email = _clean_email(email)
    cleaned_name = _clean_text(full_name)
    if not cleaned_email or not password or not cleaned_name:
        raise ValidationError("missing_fields")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password_too_short")
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValidationError("password_too_long")

    if not EMAIL_RE.match(cleaned_email):
        raise ValidationError("invalid_email")

    if await get_user_by_email(db, cleaned_email) is not None:
        raise ConflictError("email_taken")

    user = User(
        email=cleaned_email,
        full_name=cleaned_name,
        password_hash=hash_password(password),
        profile_pic=random_avatar_url(),
        is_onboarded=False,
    )
    db.add(user)
    await db.flush()
    return user


async def authenticate(db: AsyncSession, *, email: str | None, password: str | None) -> User:
    cleaned_email = _clean_email(email)
    if not cleaned_email or not password:
        raise ValidationError("missing_fields")

    user = await get_user_by_email(db, cleaned_email)
    # Unknown email and wrong password must be indistinguishable.
    if not user or not verify_password(password, user.password_hash):
        raise AuthError("invalid_credentials")
    return user


def missing_onboarding_fields(fields: Mapping[str, object]) -> list[str]:
    return [
        wire_name
        for attr, wire_name in ONBOARDING_FIELDS.items()
        if _clean_text(fields.get(attr)) is None
    ]


async def complete_onboarding(
    db: AsyncSession,
    user_id: uuid.UUID,
    fields: Mapping[str, object],
) -> User:
    missing = missing_onboarding_fields(fields)
    if missing:
        raise ValidationError("missing_fields", fields=missing)

    user = await get_user(db, user_id)
    if user is None:
        raise NotFoundError("user_not_found")

    for attr in ONBOARDING_FIELDS:
        setattr(user, attr, _clean_text(fields.get(attr)))

    profile_pic = _clean_text(fields.get("profile_pic"))
    if profile_pic:
        user.profile_pic = profile_pic

    user.is_onboarded = True
    await db.flush()
    return user
