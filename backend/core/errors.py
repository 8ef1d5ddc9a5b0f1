"""Typed application errors translated to HTTP responses at the app boundary."""

from __future__ import annotations

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto a client-facing HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(AppError):
    """No live session where one is required."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class InvalidCredentials(Unauthorized):
    """Login failed; never says which half of the credentials was wrong."""

    default_detail = "Invalid credentials"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class ValidationFailure(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class PayloadTooLarge(AppError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE
    default_detail = "Upload too large"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


__all__ = [
    "AppError",
    "Unauthorized",
    "InvalidCredentials",
    "NotFound",
    "Conflict",
    "ValidationFailure",
    "PayloadTooLarge",
    "InternalError",
]
