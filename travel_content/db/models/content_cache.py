from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Float, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from travel_content.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SocialContentCache(Base):
    """Snapshot of one external post, keyed by (platform, platform_post_id)."""

    __tablename__ = "social_content_cache"
    __table_args__ = (
        UniqueConstraint(
            "platform", "platform_post_id", name="uq_social_content_cache_platform_post"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    platform: Mapped[str] = mapped_column(String(32), index=True)
    platform_post_id: Mapped[str] = mapped_column(String(255))

    query: Mapped[str] = mapped_column(String(500), index=True)
    destination: Mapped[str] = mapped_column(String(200), index=True)

    title: Mapped[str] = mapped_column(Text)
    content: Mapped[str] = mapped_column(Text)
    content_lang: Mapped[str] = mapped_column(String(8), default="en", index=True)
    summary: Mapped[str] = mapped_column(Text, default="")
    images: Mapped[list[str]] = mapped_column(JSON, default=list)
    video_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    author_name: Mapped[str] = mapped_column(String(255))
    author_id: Mapped[str] = mapped_column(String(255))
    author_avatar: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    engagement_score: Mapped[int] = mapped_column(Integer, default=0, index=True)
    likes: Mapped[int] = mapped_column(Integer, default=0)
    comments: Mapped[int] = mapped_column(Integer, default=0)
    shares: Mapped[int] = mapped_column(Integer, default=0)
    quality_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    post_url: Mapped[str] = mapped_column(String(2048), default="")
    location: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    platform_meta: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    usage_count: Mapped[int] = mapped_column(Integer, default=0, index=True)
    # Recency window is measured from the last time a provider returned the post
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
