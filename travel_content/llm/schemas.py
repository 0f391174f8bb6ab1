from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _join_tips(value: Any) -> Any:
    if isinstance(value, list):
        joined = "; ".join(str(tip).strip() for tip in value if str(tip).strip())
        return joined or None
    return value


class ExtractedActivity(BaseModel):
    """One actionable activity the LLM pulled out of a single post."""

    model_config = ConfigDict(populate_by_name=True)

    activity_name: str = Field(..., min_length=1, alias="activityName")
    activity_type: str = Field(default="experience", alias="activityType")
    description: str = ""
    detailed_description: str | None = Field(default=None, alias="detailedDescription")
    photo_keywords: str = Field(default="", alias="photoKeywords")
    location: str | None = None
    estimated_duration: str | None = Field(default=None, alias="estimatedDuration")
    best_time_to_visit: str | None = Field(default=None, alias="bestTimeToVisit")
    tips: str | None = None

    @field_validator("tips", mode="before")
    @classmethod
    def normalize_tips(cls, value: Any) -> Any:
        return _join_tips(value)


class GeneratedActivity(BaseModel):
    """An activity authored by the LLM acting as a content source."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    location: str | None = None
    description: str = ""
    detailed_description: str | None = Field(default=None, alias="detailedDescription")
    duration: str | None = None
    best_time: str | None = Field(default=None, alias="bestTime")
    tags: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)
    photo_keywords: str | None = Field(default=None, alias="photoKeywords")


class GeneratedActivities(BaseModel):
    activities: list[GeneratedActivity] = Field(default_factory=list)


class CardQuote(BaseModel):
    """A quote from source content with its English rendering."""

    original: str = Field(default="", validation_alias=AliasChoices("original", "zh"))
    translated: str = Field(default="", validation_alias=AliasChoices("translated", "en"))


class DetailCardSynthesis(BaseModel):
    """Structured output from LLM for one activity detail card."""

    model_config = ConfigDict(populate_by_name=True)

    summary: str = ""
    detailed_description: str | None = Field(default=None, alias="detailedDescription")
    quotes: list[CardQuote] = Field(default_factory=list)
    photo_query: str | None = Field(default=None, alias="photoQuery")
    duration: str | None = None
    best_time: str | None = Field(default=None, alias="bestTime")
    location: str | None = None

    @field_validator("quotes")
    @classmethod
    def limit_quotes(cls, value: list[CardQuote]) -> list[CardQuote]:
        """Keep at most two non-empty quotes."""
        return [quote for quote in value if quote.original or quote.translated][:2]
