"""Directed follow edge model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlmodel import Field, SQLModel


class Follow(SQLModel, table=True):
    """``follower_id`` follows ``following_id``."""

    __tablename__ = "follows"

    follower_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id"),
            primary_key=True,
        )
    )
    following_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id"),
            primary_key=True,
            index=True,
        )
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
