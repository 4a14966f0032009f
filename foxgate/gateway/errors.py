"""Error kinds surfaced by gateway operations."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Why a gateway operation was rejected."""

    AUTH = "auth"
    VALIDATION = "validation"
    SESSION_CONFLICT = "session_conflict"
    INVALID_LENGTH = "invalid_length"


class GatewayError(Exception):
    """Base class for rejections raised by gateway components."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SessionConflictError(GatewayError):
    kind = ErrorKind.SESSION_CONFLICT

    def __init__(self, message: str = "Session already in progress") -> None:
        super().__init__(message)


class InvalidLengthError(GatewayError):
    kind = ErrorKind.INVALID_LENGTH

    def __init__(self, min_length: int, max_length: int | None = None) -> None:
        if max_length is None:
            bound = f"at least {min_length}"
        else:
            bound = f"at most {max_length}"
        super().__init__(f"Invalid password length, needs to be {bound} characters")
        self.min_length = min_length
        self.max_length = max_length
