"""Database error helpers."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(original or error).lower()
    # Postgres reports "duplicate key"; SQLite reports "UNIQUE constraint failed"
    # for unique indexes and primary keys alike.
    return "duplicate key" in message or "unique constraint" in message


__all__ = ["UNIQUE_VIOLATION_SQLSTATE", "is_unique_violation"]
