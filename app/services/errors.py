from __future__ import annotations

# Service errors carry a stable code as their message; routes map codes to
# HTTP statuses in app.api.http_errors.


class ValidationError(ValueError):
    def __init__(self, code: str = "invalid_input", *, fields: list[str] | None = None) -> None:
        super().__init__(code)
        self.fields = fields or []


class AuthError(ValueError):
    pass


class NotFoundError(ValueError):
    pass


class ConflictError(ValueError):
    pass


class DuplicateRequestError(ConflictError):
    def __init__(self) -> None:
        super().__init__("duplicate_request")


class AlreadyFriendsError(ConflictError):
    def __init__(self) -> None:
        super().__init__("already_friends")


class SelfRequestError(ConflictError):
    def __init__(self) -> None:
        super().__init__("self_request")


class ForbiddenError(PermissionError):
    pass


class InternalError(RuntimeError):
    pass
