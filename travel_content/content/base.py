"""Unified content model shared by every platform provider.

A provider turns one upstream (a scraped site, a public JSON API or the
language model itself) into ``TravelContent`` records. The pair
``(platform, platform_post_id)`` identifies a record everywhere: it is the
dedup key and the persistent cache key.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

Platform = Literal["xiaohongshu", "reddit", "ai-agent"]
Language = Literal["en", "zh", "ja", "ko", "es", "fr", "de"]

AI_AGENT_PLATFORM: Final[Platform] = "ai-agent"
MAX_ENGAGEMENT_SCORE: Final[int] = 1000

_CHINESE_PATTERN = re.compile(r"[\u4e00-\u9fa5]")
_KANA_PATTERN = re.compile(r"[\u3040-\u309f\u30a0-\u30ff]")
_SCRIPT_SHARE_THRESHOLD: Final[float] = 0.3


class TravelContent(BaseModel):
    """One normalized external post or language-model-authored item."""

    platform: Platform
    platform_post_id: str
    title: str
    content: str
    content_lang: Language = "en"
    summary: str | None = None
    images: list[str] = Field(default_factory=list)
    video_url: str | None = None
    tags: list[str] = Field(default_factory=list)
    author_name: str
    author_id: str
    author_avatar: str | None = None
    likes: int = 0
    comments: int = 0
    shares: int = 0
    post_url: str = ""
    location: str | None = None
    published_at: datetime | None = None
    platform_meta: dict[str, Any] = Field(default_factory=dict)
    engagement_score: int | None = None
    quality_score: float | None = None

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.platform, self.platform_post_id)


class SearchOptions(BaseModel):
    """Parameters for one aggregation call."""

    model_config = ConfigDict(frozen=True)

    query: str
    destination: str
    activity_type: str = ""
    item_type: str | None = None
    language: Literal["all"] | Language = "all"
    platforms: tuple[Platform, ...] | None = None
    limit: int = Field(default=10, ge=1)
    min_engagement: int = Field(default=0, ge=0)


class ContentProvider(ABC):
    """Search, scoring and quality contract implemented once per platform.

    ``search`` must never raise: upstream failures resolve to an empty list
    (or to the provider's documented fallback items).
    """

    platform: Platform

    @abstractmethod
    async def search(self, options: SearchOptions) -> list[TravelContent]:
        """Search the platform for travel content."""
        raise NotImplementedError

    @abstractmethod
    def calculate_engagement_score(self, content: TravelContent) -> int:
        """Normalize raw likes/comments/shares onto the 0-1000 scale."""
        raise NotImplementedError

    @abstractmethod
    def is_high_quality(self, content: TravelContent) -> bool:
        """Platform-specific minimum engagement and content gate."""
        raise NotImplementedError


def clamp_score(value: float) -> int:
    return max(0, min(MAX_ENGAGEMENT_SCORE, round(value)))


def detect_language(text: str) -> Language:
    """Classify text as zh or ja when over 30% of it is in that script, else en."""
    if not text:
        return "en"
    threshold = len(text) * _SCRIPT_SHARE_THRESHOLD
    if len(_CHINESE_PATTERN.findall(text)) > threshold:
        return "zh"
    if len(_KANA_PATTERN.findall(text)) > threshold:
        return "ja"
    return "en"
