"""Persistent content cache backed by the ``social_content_cache`` table."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel
from sqlalchemy import func, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from travel_content.content.base import SearchOptions, TravelContent
from travel_content.db.models import SocialContentCache

logger = logging.getLogger(__name__)

TOP_ENTRIES_LIMIT = 10


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PlatformCacheStats(BaseModel):
    platform: str
    count: int
    total_usage: int
    avg_engagement: float


class LanguageCacheStats(BaseModel):
    language: str
    count: int


class TopCacheEntry(BaseModel):
    platform: str
    title: str
    usage_count: int
    engagement_score: int
    content_lang: str


class CacheStats(BaseModel):
    total_cached: int
    total_usage: int
    avg_engagement: float
    by_platform: list[PlatformCacheStats]
    by_language: list[LanguageCacheStats]
    top_entries: list[TopCacheEntry]


def row_to_content(row: SocialContentCache) -> TravelContent:
    return TravelContent(
        platform=row.platform,  # type: ignore[arg-type]
        platform_post_id=row.platform_post_id,
        title=row.title,
        content=row.content,
        content_lang=row.content_lang,  # type: ignore[arg-type]
        summary=row.summary or None,
        images=list(row.images or []),
        video_url=row.video_url,
        tags=list(row.tags or []),
        author_name=row.author_name,
        author_id=row.author_id,
        author_avatar=row.author_avatar,
        likes=row.likes,
        comments=row.comments,
        shares=row.shares,
        post_url=row.post_url,
        location=row.location,
        published_at=row.published_at,
        platform_meta=dict(row.platform_meta or {}),
        engagement_score=row.engagement_score,
        quality_score=row.quality_score,
    )


class ContentCacheRepository:
    """Upsert-keyed store of previously fetched content.

    Every read and every write runs in its own session, so concurrent
    upserts never share a transaction and one failed write cannot poison
    the others.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        recency_days: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_maker = session_maker
        self._recency = timedelta(days=recency_days)
        self._clock = clock

    async def find_recent(self, options: SearchOptions) -> list[TravelContent]:
        """Return cached entries for the destination and bump their usage counts."""
        cutoff = self._clock() - self._recency
        stmt = select(SocialContentCache).where(
            func.lower(SocialContentCache.destination).contains(
                options.destination.lower(), autoescape=True
            ),
            SocialContentCache.fetched_at >= cutoff,
        )
        if options.language != "all":
            stmt = stmt.where(SocialContentCache.content_lang == options.language)
        if options.platforms:
            stmt = stmt.where(SocialContentCache.platform.in_(options.platforms))
        stmt = stmt.order_by(
            SocialContentCache.usage_count.desc(),
            SocialContentCache.engagement_score.desc(),
            SocialContentCache.id,
        ).limit(options.limit)

        async with self._session_maker() as session:
            rows = list((await session.execute(stmt)).scalars().all())
            if not rows:
                return []
            items = [row_to_content(row) for row in rows]
            await session.execute(
                update(SocialContentCache)
                .where(SocialContentCache.id.in_([row.id for row in rows]))
                .values(usage_count=SocialContentCache.usage_count + 1)
            )
            await session.commit()

        logger.info(f"Found {len(items)} cached posts for '{options.destination}'")
        return items

    async def upsert(self, item: TravelContent, query: str, destination: str) -> None:
        """Insert the item, or refresh summary, score and recency when it already exists."""
        now = self._clock()
        values: dict[str, Any] = {
            "platform": item.platform,
            "platform_post_id": item.platform_post_id,
            "query": query,
            "destination": destination,
            "title": item.title,
            "content": item.content,
            "content_lang": item.content_lang,
            "summary": item.summary or "",
            "images": item.images,
            "video_url": item.video_url,
            "tags": item.tags,
            "author_name": item.author_name,
            "author_id": item.author_id,
            "author_avatar": item.author_avatar,
            "engagement_score": item.engagement_score or 0,
            "likes": item.likes,
            "comments": item.comments,
            "shares": item.shares,
            "quality_score": item.quality_score,
            "post_url": item.post_url,
            "location": item.location,
            "published_at": item.published_at,
            "platform_meta": item.platform_meta,
            "usage_count": 1,
            "fetched_at": now,
        }

        async with self._session_maker() as session:
            insert = _dialect_insert(session)
            stmt = insert(SocialContentCache).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[
                    SocialContentCache.platform,
                    SocialContentCache.platform_post_id,
                ],
                set_={
                    "usage_count": SocialContentCache.usage_count + 1,
                    "summary": stmt.excluded.summary,
                    "engagement_score": stmt.excluded.engagement_score,
                    "fetched_at": stmt.excluded.fetched_at,
                    "updated_at": now,
                },
            )
            await session.execute(stmt)
            await session.commit()

    async def upsert_many(
        self, items: Sequence[TravelContent], query: str, destination: str
    ) -> int:
        """Write every item independently; returns how many writes succeeded."""
        results = await asyncio.gather(
            *(self.upsert(item, query, destination) for item in items),
            return_exceptions=True,
        )
        written = 0
        for item, result in zip(items, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(
                    f"Failed to cache {item.platform}/{item.platform_post_id}. Error: {result}"
                )
                continue
            written += 1
        return written

    async def stats(self) -> CacheStats:
        async with self._session_maker() as session:
            total_cached, total_usage, avg_engagement = (
                await session.execute(
                    select(
                        func.count(SocialContentCache.id),
                        func.coalesce(func.sum(SocialContentCache.usage_count), 0),
                        func.coalesce(func.avg(SocialContentCache.engagement_score), 0),
                    )
                )
            ).one()

            platform_rows = (
                await session.execute(
                    select(
                        SocialContentCache.platform,
                        func.count(SocialContentCache.id),
                        func.coalesce(func.sum(SocialContentCache.usage_count), 0),
                        func.coalesce(func.avg(SocialContentCache.engagement_score), 0),
                    )
                    .group_by(SocialContentCache.platform)
                    .order_by(SocialContentCache.platform)
                )
            ).all()

            language_rows = (
                await session.execute(
                    select(SocialContentCache.content_lang, func.count(SocialContentCache.id))
                    .group_by(SocialContentCache.content_lang)
                    .order_by(func.count(SocialContentCache.id).desc())
                )
            ).all()

            top_rows = (
                await session.execute(
                    select(SocialContentCache)
                    .order_by(SocialContentCache.usage_count.desc(), SocialContentCache.id)
                    .limit(TOP_ENTRIES_LIMIT)
                )
            ).scalars().all()

        return CacheStats(
            total_cached=int(total_cached),
            total_usage=int(total_usage),
            avg_engagement=round(float(avg_engagement), 2),
            by_platform=[
                PlatformCacheStats(
                    platform=platform,
                    count=int(count),
                    total_usage=int(usage),
                    avg_engagement=round(float(avg), 2),
                )
                for platform, count, usage, avg in platform_rows
            ],
            by_language=[
                LanguageCacheStats(language=language, count=int(count))
                for language, count in language_rows
            ],
            top_entries=[
                TopCacheEntry(
                    platform=row.platform,
                    title=row.title,
                    usage_count=row.usage_count,
                    engagement_score=row.engagement_score,
                    content_lang=row.content_lang,
                )
                for row in top_rows
            ],
        )


def _dialect_insert(session: AsyncSession) -> Callable[..., Any]:
    """Pick the ``INSERT ... ON CONFLICT`` construct for the bound database."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Unsupported database dialect for upserts: {dialect}")
