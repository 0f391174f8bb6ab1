"""Request models for content API endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from travel_content.content.base import Language, Platform
from travel_content.content.trip import ItemType


class ContentSearchRequest(BaseModel):
    """Request model for a multi-platform content search."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "destination": "Tokyo",
                    "activity_type": "food",
                    "item_type": "food",
                    "language": "all",
                    "limit": 10,
                }
            ]
        }
    )

    destination: str = Field(..., min_length=1, max_length=200, examples=["Tokyo"])
    activity_type: str = Field(..., min_length=1, max_length=200, examples=["food"])
    item_type: ItemType = Field(..., description="Itinerary item type for returned cards")
    language: Literal["all"] | Language = "all"
    platforms: list[Platform] | None = Field(
        default=None, description="Restrict the search to these platforms"
    )
    limit: int = Field(default=10, ge=1, le=20)
    min_engagement: int = Field(default=0, ge=0, le=1000)
    default_day_index: int | None = Field(default=None, ge=0)
