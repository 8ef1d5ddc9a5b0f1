"""User domain model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String, Text, func
from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """Registered application user, local or Google-linked."""

    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    username: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True)
    )
    # Empty for accounts that have only ever signed in through Google.
    password_hash: str | None = Field(
        default=None, sa_column=Column(String(255), nullable=True)
    )
    google_id: str | None = Field(
        default=None, sa_column=Column(String(255), unique=True, nullable=True)
    )
    profile_pic_url: str | None = Field(
        default=None, sa_column=Column(String(1024), nullable=True)
    )
    bio: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )
    )
