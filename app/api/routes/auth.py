from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import COOKIE_NAME, get_current_user
from app.api.http_errors import value_error
from app.core.config import settings
from app.core.security import create_session_token
from app.db.session import get_db_session
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    MeResponse,
    OnboardRequest,
    SignupRequest,
    UserResponse,
)
from app.services.accounts import authenticate, complete_onboarding, signup
from app.services.chat import sync_chat_user
from app.services.errors import NotFoundError, ValidationError

router = APIRouter(prefix="/auth", tags=["auth"])

_EMAIL_TAKEN_DETAIL = "Email already exists, please use a different one"
_INVALID_CREDENTIALS_DETAIL = "Invalid email or password"


def _auth_cookie_options() -> dict[str, object]:
    return {
        "httponly": True,
        "secure": settings.auth_cookie_secure_value(),
        "samesite": settings.auth_cookie_samesite_value(),
        "domain": settings.auth_cookie_domain,
        "path": "/",
    }


def _set_auth_cookie(response: Response, user_id: str) -> None:
    token = create_session_token(subject=user_id)
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age_seconds(),
        **_auth_cookie_options(),
    )


def _clear_auth_cookie(response: Response) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value="",
        max_age=0,
        expires=0,
        **_auth_cookie_options(),
    )


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup_route(payload: SignupRequest, response: Response, db: AsyncSession = Depends(get_db_session)):
    try:
        user = await signup(
            db,
            email=payload.email,
            password=payload.password,
            full_name=payload.full_name,
        )
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise value_error(
            e,
            code_statuses={
                "missing_fields": 400,
                "password_too_short": 400,
                "password_too_long": 400,
                "invalid_email": 400,
                "email_taken": 400,
            },
            detail_overrides={
                "missing_fields": "All fields are required",
                "password_too_short": "Password must be at least 6 characters",
                "password_too_long": "Password must be 72 bytes or fewer",
                "invalid_email": "Invalid email format",
                "email_taken": _EMAIL_TAKEN_DETAIL,
            },
            default_detail="Could not create account",
        ) from e
    except IntegrityError as e:
        # Lost a race with a concurrent signup for the same email.
        await db.rollback()
        raise HTTPException(status_code=400, detail=_EMAIL_TAKEN_DETAIL) from e

    await db.refresh(user)
    await sync_chat_user(user)

    _set_auth_cookie(response, str(user.id))
    return AuthResponse(success=True, user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, response: Response, db: AsyncSession = Depends(get_db_session)):
    try:
        user = await authenticate(db, email=payload.email, password=payload.password)
    except ValueError as e:
        raise value_error(
            e,
            code_statuses={
                "missing_fields": 400,
                "invalid_credentials": status.HTTP_401_UNAUTHORIZED,
            },
            detail_overrides={
                "missing_fields": "All fields are required",
                "invalid_credentials": _INVALID_CREDENTIALS_DETAIL,
            },
            default_status=status.HTTP_401_UNAUTHORIZED,
            default_detail=_INVALID_CREDENTIALS_DETAIL,
        ) from e

    _set_auth_cookie(response, str(user.id))
    return AuthResponse(success=True, user=UserResponse.model_validate(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response):
    _clear_auth_cookie(response)
    return LogoutResponse(success=True, message="Logout successful")


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    return MeResponse(user=UserResponse.model_validate(user))


@router.post("/onboard", response_model=AuthResponse)
async def onboard(
    payload: OnboardRequest,
    db: AsyncSession = Depends(get_db_session),
    user: User = Depends(get_current_user),
):
    try:
        updated = await complete_onboarding(db, user.id, payload.model_dump())
        await db.commit()
    except ValidationError as e:
        await db.rollback()
        raise HTTPException(
            status_code=400,
            detail={"message": "All fields are required", "missingFields": e.fields},
        ) from e
    except NotFoundError as e:
        await db.rollback()
        raise value_error(
            e,
            code_statuses={"user_not_found": 404},
            detail_overrides={"user_not_found": "User not found"},
        ) from e

    await db.refresh(updated)
    await sync_chat_user(updated)

    return AuthResponse(success=True, user=UserResponse.model_validate(updated))
