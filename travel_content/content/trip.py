"""Itinerary shapes consumed from the trip-planning layer."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ItemType = Literal["sight", "food", "museum", "hike", "experience", "transport", "rest"]


class ItineraryItem(BaseModel):
    title: str = Field(..., min_length=1)
    type: ItemType = "experience"
    description: str = ""
    location_hint: str | None = None
    duration: str | None = None


class Day(BaseModel):
    date: str | None = None
    location: str | None = None
    items: list[ItineraryItem] = Field(default_factory=list)


class Trip(BaseModel):
    id: str | None = None
    destination: str = Field(..., min_length=1)
    days: list[Day] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    must_see: list[str] = Field(default_factory=list)
