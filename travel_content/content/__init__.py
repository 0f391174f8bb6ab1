from travel_content.content.aggregator import AggregatorConfig, ContentAggregator
from travel_content.content.base import (
    ContentProvider,
    SearchOptions,
    TravelContent,
    detect_language,
)
from travel_content.content.cache import CacheStats, ContentCacheRepository
from travel_content.content.cards import (
    ActivityDetailCard,
    SuggestionCard,
    content_to_suggestion,
)
from travel_content.content.trip import Day, ItemType, ItineraryItem, Trip

__all__ = [
    "AggregatorConfig",
    "ContentAggregator",
    "ContentProvider",
    "SearchOptions",
    "TravelContent",
    "detect_language",
    "CacheStats",
    "ContentCacheRepository",
    "ActivityDetailCard",
    "SuggestionCard",
    "content_to_suggestion",
    "Day",
    "ItemType",
    "ItineraryItem",
    "Trip",
]
