"""Request models for activity API endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from travel_content.content.trip import ItineraryItem, Trip


class ActivityRecommendationRequest(BaseModel):
    """Request model for activity recommendations on an existing trip."""

    trip: Trip
    day_index: int | None = Field(default=None, ge=0, description="Recommend for one day only")
    activity_type: str | None = Field(default=None, max_length=200, examples=["hiking"])
    limit: int = Field(default=5, ge=1, le=10)
    mode: Literal["basic", "contextual"] = "basic"


class ActivityDetailsRequest(BaseModel):
    """Request model for the detail card of one itinerary item."""

    trip: Trip
    item: ItineraryItem
