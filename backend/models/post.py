"""Image post model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlmodel import Field, SQLModel


class Post(SQLModel, table=True):
    """An uploaded image with an optional caption."""

    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_created_at_id", "created_at", "id"),
        Index("ix_posts_user_created_at", "user_id", "created_at"),
    )

    id: int | None = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True),
    )
    user_id: str = Field(
        sa_column=Column(String(36), ForeignKey("users.id"), nullable=False)
    )
    # Denormalized copy of the owner's username at upload time.
    username: str = Field(
        sa_column=Column(String(255), nullable=False)
    )
    caption: str | None = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    image_url: str = Field(
        sa_column=Column(String(1024), nullable=False)
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
