"""Caller-facing card shapes built from aggregated content."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, Field

from travel_content.content.base import TravelContent
from travel_content.content.trip import ItemType

DEFAULT_DURATION: Final[str] = "half day"
SUMMARY_PREVIEW_LENGTH: Final[int] = 200


class Quote(BaseModel):
    original: str = ""
    translated: str = ""


class SourceLink(BaseModel):
    url: str
    label: str


class PlatformMeta(BaseModel):
    author_name: str
    author_avatar: str | None = None
    likes: int = 0
    comments: int = 0
    shares: int = 0
    platform: str
    content_lang: str = "en"
    engagement_score: int = 0
    location: str | None = None
    best_time: str | None = None


class ActivityDetailCard(BaseModel):
    """Enriched card for one named activity already on an itinerary."""

    id: str
    title: str
    images: list[str] = Field(default_factory=list)
    summary: str
    detailed_description: str | None = None
    quotes: list[Quote] = Field(default_factory=list)
    source_links: list[SourceLink] = Field(default_factory=list)
    item_type: ItemType
    duration: str | None = None
    photo_query: str | None = None
    source: str
    platform_meta: PlatformMeta | None = None


class SuggestionCard(ActivityDetailCard):
    """A candidate item the caller may insert into an itinerary day."""

    default_day_index: int | None = None


def content_to_suggestion(
    item: TravelContent, item_type: ItemType, default_day_index: int | None = 0
) -> SuggestionCard:
    """Map one aggregated post straight onto a suggestion card."""
    return SuggestionCard(
        id=f"{item.platform}-{item.platform_post_id}",
        title=item.title,
        images=item.images,
        summary=item.summary or item.content[:SUMMARY_PREVIEW_LENGTH],
        quotes=[],
        source_links=(
            [SourceLink(url=item.post_url, label=f"View on {item.platform.capitalize()}")]
            if item.post_url
            else []
        ),
        item_type=item_type,
        default_day_index=default_day_index,
        duration=item.platform_meta.get("duration") or DEFAULT_DURATION,
        photo_query=item.platform_meta.get("photo_keywords") or item.title,
        source=item.platform,
        platform_meta=PlatformMeta(
            author_name=item.author_name,
            author_avatar=item.author_avatar,
            likes=item.likes,
            comments=item.comments,
            shares=item.shares,
            platform=item.platform,
            content_lang=item.content_lang,
            engagement_score=item.engagement_score or 0,
            location=item.location,
            best_time=item.platform_meta.get("best_time"),
        ),
    )
