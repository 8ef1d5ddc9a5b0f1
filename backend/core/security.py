"""Password hashing helpers."""

from __future__ import annotations

import bcrypt

from .config import settings

# bcrypt ignores everything past 72 bytes; newer releases reject it outright.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _encode_password(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


def hash_password(password: str, *, rounds: int | None = None) -> str:
    """Return a bcrypt hash of ``password`` using the configured cost factor."""
    salt = bcrypt.gensalt(rounds=rounds or settings.password_hash_rounds)
    return bcrypt.hashpw(_encode_password(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check ``password`` against a stored hash in constant time."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode_password(password), password_hash.encode("utf-8"))
    except ValueError:
        return False


def hash_rounds(password_hash: str) -> int | None:
    # $2b$<rounds>$<salt+digest>
    parts = password_hash.split("$")
    if len(parts) < 4:
        return None
    try:
        return int(parts[2])
    except ValueError:
        return None


def needs_rehash(password_hash: str | None) -> bool:
    """Return True when the stored hash was produced with a different cost."""
    if not password_hash:
        return False
    return hash_rounds(password_hash) != settings.password_hash_rounds
