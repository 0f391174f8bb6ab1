"""Response models for content API endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from travel_content.content.cache import CacheStats
from travel_content.content.cards import SuggestionCard


class SearchMeta(BaseModel):
    total: int
    platforms: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)


class ContentSearchResponse(BaseModel):
    """Suggestion cards built from aggregated posts."""

    suggestions: list[SuggestionCard]
    meta: SearchMeta


ContentStatsResponse = CacheStats
