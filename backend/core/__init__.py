"""Core configuration, security and error primitives."""

from .config import settings
from .errors import (
    AppError,
    Conflict,
    InternalError,
    InvalidCredentials,
    NotFound,
    PayloadTooLarge,
    Unauthorized,
    ValidationFailure,
)
from .security import hash_password, needs_rehash, verify_password

__all__ = [
    "settings",
    "hash_password",
    "verify_password",
    "needs_rehash",
    "AppError",
    "Unauthorized",
    "InvalidCredentials",
    "NotFound",
    "Conflict",
    "ValidationFailure",
    "PayloadTooLarge",
    "InternalError",
]
