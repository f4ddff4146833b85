import json

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator

_LOCAL_ENVS = {"local", "test"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = Field(default="local", alias="ENV")
    database_url: str = Field(alias="DATABASE_URL")

    jwt_secret: str = Field(alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    session_expire_days: int = Field(default=7, alias="SESSION_EXPIRE_DAYS")

    cors_origins: str = Field(default="http://localhost:5173", alias="CORS_ORIGINS")

    # ─────────────────────────────────────────────
    # Session cookie
    # ─────────────────────────────────────────────
    auth_cookie_samesite: str | None = Field(default=None, alias="AUTH_COOKIE_SAMESITE")
    auth_cookie_secure: bool | None = Field(default=None, alias="AUTH_COOKIE_SECURE")
    auth_cookie_domain: str | None = Field(default=None, alias="AUTH_COOKIE_DOMAIN")

    # ─────────────────────────────────────────────
    # Stream Chat
    # ─────────────────────────────────────────────
    stream_api_key: str | None = Field(default=None, alias="STREAM_API_KEY")
    stream_api_secret: str | None = Field(default=None, alias="STREAM_API_SECRET")
    stream_api_url: str = Field(default="https://chat.stream-io-api.com", alias="STREAM_API_URL")

    @field_validator("env", mode="before")
    @classmethod
    def normalize_env(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        return value.strip().lower() or "local"

    @field_validator("database_url", mode="before")
    @classmethod
    def normalize_database_url(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        cleaned = value.strip()
        if cleaned.startswith("postgres://"):
            cleaned = f"postgresql://{cleaned[len('postgres://'):]}"
        if cleaned.startswith("postgresql://") and not cleaned.startswith("postgresql+"):
            cleaned = cleaned.replace("postgresql://", "postgresql+asyncpg://", 1)
        return cleaned

    @field_validator("auth_cookie_samesite", mode="before")
    @classmethod
    def normalize_auth_cookie_samesite(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        return value.strip().lower() or None

    @model_validator(mode="after")
    def validate_cookie_settings(self) -> "Settings":
        samesite = self.auth_cookie_samesite_value()
        if samesite not in {"lax", "strict", "none"}:
            raise ValueError("AUTH_COOKIE_SAMESITE must be one of: lax, strict, none")
        if samesite == "none" and not self.auth_cookie_secure_value():
            raise ValueError("AUTH_COOKIE_SAMESITE=none requires AUTH_COOKIE_SECURE=true")
        if self.session_expire_days < 1:
            raise ValueError("SESSION_EXPIRE_DAYS must be at least 1")
        return self

    def is_production(self) -> bool:
        return self.env == "production"

    def auth_cookie_samesite_value(self) -> str:
        if self.auth_cookie_samesite is not None:
            return self.auth_cookie_samesite
        # The frontend is served from another origin in production.
        return "none" if self.is_production() else "lax"

    def auth_cookie_secure_value(self) -> bool:
        if self.auth_cookie_secure is not None:
            return self.auth_cookie_secure
        return self.env not in _LOCAL_ENVS

    def session_max_age_seconds(self) -> int:
        return self.session_expire_days * 24 * 60 * 60

    def stream_configured(self) -> bool:
        return bool((self.stream_api_key or "").strip() and (self.stream_api_secret or "").strip())

    def cors_origin_list(self) -> list[str]:
        raw = (self.cors_origins or "").strip()
        if not raw:
            return []

        values: list[str]
        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, list):
                values = [str(v) for v in parsed if isinstance(v, str)]
            else:
                values = [raw]
        else:
            values = raw.split(",")

        normalized: list[str] = []
        seen: set[str] = set()
        for value in values:
            cleaned = value.strip().strip("\"'")
            if not cleaned:
                continue
            # CORS origins are scheme + host (+ optional port) with no path slash.
            if cleaned != "*" and cleaned.endswith("/"):
                cleaned = cleaned.rstrip("/")
            if cleaned in seen:
                continue
            seen.add(cleaned)
            normalized.append(cleaned)

        return normalized

settings = Settings()
