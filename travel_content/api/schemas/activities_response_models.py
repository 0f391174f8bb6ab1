"""Response models for activity API endpoints."""

from __future__ import annotations

from pydantic import BaseModel

from travel_content.content.cards import ActivityDetailCard, SuggestionCard


class ActivityRecommendationResponse(BaseModel):
    recommendations: list[SuggestionCard]
    count: int


class ActivityDetailsResponse(BaseModel):
    card: ActivityDetailCard
