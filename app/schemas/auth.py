from __future__ import annotations

import uuid

from app.schemas.base import CamelModel


# Fields are optional here so that missing values reach the service layer and
# are reported as 400s with a readable message instead of 422s.
class SignupRequest(CamelModel):
    email: str | None = None
    password: str | None = None
    full_name: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class OnboardRequest(CamelModel):
    full_name: str | None = None
    bio: str | None = None
    native_language: str | None = None
    learning_language: str | None = None
    location: str | None = None
    profile_pic: str | None = None


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    full_name: str
    profile_pic: str
    bio: str
    native_language: str
    learning_language: str
    location: str
    is_onboarded: bool


class AuthResponse(CamelModel):
    success: bool
    user: UserResponse


class MeResponse(CamelModel):
    user: UserResponse


class LogoutResponse(CamelModel):
    success: bool
    message: str
