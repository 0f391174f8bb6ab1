"""Unit tests for ActivityRecommendationService."""

from __future__ import annotations

from typing import cast

import pytest

from tests.fakes import FakeContentCache, FakeLLMClient, FakeProvider, StaticAggregator, make_content
from travel_content.content.aggregator import AggregatorConfig, ContentAggregator
from travel_content.content.cache import ContentCacheRepository
from travel_content.content.trip import Day, ItineraryItem, Trip
from travel_content.llm import ExtractedActivity, LLMUnavailableError
from travel_content.services.activity_extractor import Activity, ActivityExtractor, SourcePost
from travel_content.services.activity_recommendation import (
    ActivityRecommendationService,
    activity_to_suggestion,
    build_trip_context,
    existing_activity_titles,
    map_activity_type_to_item_type,
    resolve_day_location,
)

TOKYO_TRIP = Trip(
    destination="Japan",
    days=[
        Day(
            date="2025-04-01",
            location="Tokyo",
            items=[ItineraryItem(title="Shibuya Crossing", type="sight")],
        ),
        Day(
            date="2025-04-02",
            items=[ItineraryItem(title="Fushimi Inari", location_hint="Kyoto, Japan")],
        ),
    ],
    interests=["food", "temples"],
)


def _service(aggregator: StaticAggregator, llm: FakeLLMClient) -> ActivityRecommendationService:
    return ActivityRecommendationService(
        cast(ContentAggregator, aggregator), ActivityExtractor(llm), llm
    )


class TestTripHelpers:
    def test_existing_titles_are_lowercased(self) -> None:
        assert existing_activity_titles(TOKYO_TRIP) == ["shibuya crossing", "fushimi inari"]

    def test_day_location_falls_back_to_location_hint(self) -> None:
        assert resolve_day_location(TOKYO_TRIP.days[0]) == "Tokyo"
        assert resolve_day_location(TOKYO_TRIP.days[1]) == "Kyoto"
        assert resolve_day_location(Day()) is None

    @pytest.mark.parametrize(
        ("activity_type", "expected"),
        [("Sightseeing", "sight"), ("dining", "food"), ("hiking", "hike"), ("nightlife", "experience")],
    )
    def test_activity_type_mapping(self, activity_type: str, expected: str) -> None:
        assert map_activity_type_to_item_type(activity_type) == expected

    def test_trip_context_for_one_day(self) -> None:
        context = build_trip_context(TOKYO_TRIP, day_index=0)
        assert "Trip destination: Japan" in context
        assert "Analyzing Day 1 (2025-04-01):" in context
        assert "1. Shibuya Crossing (sight, unknown duration)" in context

    def test_trip_context_for_whole_trip(self) -> None:
        context = build_trip_context(TOKYO_TRIP)
        assert "Day 2: Unknown - 1 activities" in context
        assert "Suggest diverse activities" in context


class TestActivityToSuggestion:
    def test_multi_platform_activity(self) -> None:
        # Arrange
        activity = Activity(
            id="activity-1",
            name="Tsukiji Outer Market",
            type="food",
            description="Street food stalls.",
            tips=["Go hungry"],
            source_posts=[
                SourcePost(platform="reddit", post_url="https://reddit.com/a", author_name="amy", likes=1500),
                SourcePost(platform="xiaohongshu", post_url="", author_name="lin", likes=200, comments=5),
            ],
        )

        # Act
        card = activity_to_suggestion(activity, default_day_index=1)

        # Assert
        assert card.item_type == "food"
        assert card.source == "multi-platform"
        assert card.duration == "half day"
        assert card.default_day_index == 1
        assert card.quotes[0].translated == "Go hungry"
        assert [link.label for link in card.source_links] == ["reddit - amy (1,500 likes)"]
        assert card.platform_meta is not None
        assert card.platform_meta.platform == "2 sources"
        assert card.platform_meta.author_name == "amy"
        assert card.platform_meta.likes == 1700

    def test_ai_generated_activity(self) -> None:
        activity = Activity(
            id="activity-1",
            name="Tea Ceremony",
            type="experience",
            description="Matcha.",
            is_ai_generated=True,
            source_posts=[SourcePost(platform="ai-agent", author_name="Travel Content AI")],
        )

        card = activity_to_suggestion(activity, default_day_index=None)

        assert card.source == "ai-generated"
        assert card.platform_meta is not None
        assert card.platform_meta.platform == "AI-generated"
        assert card.source_links == []


class TestGenerateRecommendations:
    @pytest.mark.asyncio
    async def test_day_targeted_search_uses_day_city(self) -> None:
        """Test that a day index narrows the search and the extraction to its city."""
        # Arrange
        llm = FakeLLMClient()
        llm.extractions = {
            "Kyoto tips": [
                ExtractedActivity(activity_name="Nishiki Market", location="Kyoto, Japan"),
                ExtractedActivity(activity_name="Dotonbori", location="Osaka, Japan"),
                ExtractedActivity(activity_name="Fushimi Inari Shrine", location="Kyoto, Japan"),
            ]
        }
        aggregator = StaticAggregator([make_content(title="Kyoto tips")])
        service = _service(aggregator, llm)

        # Act
        cards = await service.generate_recommendations(TOKYO_TRIP, day_index=1, limit=5)

        # Assert
        options = aggregator.calls[0]
        assert options.destination == "Kyoto"
        assert options.query == "Kyoto travel activities recommendations"
        assert options.limit == 10
        assert [card.title for card in cards] == ["Nishiki Market"]
        assert cards[0].default_day_index == 1

    @pytest.mark.asyncio
    async def test_activity_type_shapes_query_and_limit_caps_posts(self) -> None:
        # Arrange
        aggregator = StaticAggregator([])
        service = _service(aggregator, FakeLLMClient())

        # Act
        cards = await service.generate_recommendations(TOKYO_TRIP, activity_type="hiking", limit=10)

        # Assert
        assert cards == []
        assert aggregator.calls[0].query == "Japan hiking travel activities"
        assert aggregator.calls[0].limit == 15

    @pytest.mark.asyncio
    async def test_country_filter_end_to_end(self) -> None:
        """Test that only activities in the trip's country survive aggregation and grouping."""
        # Arrange
        llm = FakeLLMClient()
        llm.extractions = {
            "Eiffel Tower at Night": [
                ExtractedActivity(activity_name="Eiffel Tower at Night", location="Paris, France")
            ],
            "Rainbow Mountain Trek": [
                ExtractedActivity(activity_name="Rainbow Mountain Trek", location="Cusco, Peru")
            ],
        }
        aggregator = ContentAggregator(
            AggregatorConfig(
                providers=(
                    FakeProvider("xiaohongshu", [make_content("xiaohongshu", "x1", title="Eiffel Tower at Night")]),
                    FakeProvider("reddit", [make_content("reddit", "r1", title="Rainbow Mountain Trek")]),
                )
            ),
            cast(ContentCacheRepository, FakeContentCache()),
            llm,
        )
        service = ActivityRecommendationService(aggregator, ActivityExtractor(llm), llm)

        # Act
        cards = await service.generate_recommendations(
            Trip(destination="Peru"), activity_type="hiking"
        )

        # Assert
        assert [card.title for card in cards] == ["Rainbow Mountain Trek"]
        assert cards[0].source == "reddit"


class TestContextualRecommendations:
    @pytest.mark.asyncio
    async def test_runs_one_search_per_query_and_dedupes(self) -> None:
        """Test that repeated activities across queries appear once."""
        # Arrange
        llm = FakeLLMClient()
        llm.queries = ["ramen tour", "temple walk"]
        llm.extractions = {
            "Food post": [ExtractedActivity(activity_name="Ichiran Ramen", location="Japan")],
        }
        aggregator = StaticAggregator([make_content(title="Food post")])
        service = _service(aggregator, llm)

        # Act
        cards = await service.generate_contextual_recommendations(TOKYO_TRIP, limit=5)

        # Assert
        assert [card.title for card in cards] == ["Ichiran Ramen"]
        assert [options.activity_type for options in aggregator.calls] == ["ramen tour", "temple walk"]
        assert all(options.limit == 4 for options in aggregator.calls)
        assert llm.query_calls[0][1] == 5

    @pytest.mark.asyncio
    async def test_stops_once_limit_is_reached(self) -> None:
        # Arrange
        llm = FakeLLMClient()
        llm.queries = ["first", "second", "third"]
        llm.extractions = {
            "Post": [
                ExtractedActivity(activity_name="Meiji Shrine", location="Japan"),
                ExtractedActivity(activity_name="Yoyogi Park", location="Japan"),
            ]
        }
        aggregator = StaticAggregator([make_content(title="Post")])
        service = _service(aggregator, llm)

        # Act
        cards = await service.generate_contextual_recommendations(TOKYO_TRIP, limit=2)

        # Assert
        assert len(aggregator.calls) == 1
        assert [card.title for card in cards] == ["Meiji Shrine", "Yoyogi Park"]

    @pytest.mark.asyncio
    async def test_query_suggestion_failure_returns_empty(self) -> None:
        # Arrange
        llm = FakeLLMClient()
        llm.queries_error = LLMUnavailableError("LLM request timed out. Try again.")
        aggregator = StaticAggregator([make_content()])
        service = _service(aggregator, llm)

        # Act
        cards = await service.generate_contextual_recommendations(TOKYO_TRIP)

        # Assert
        assert cards == []
        assert aggregator.calls == []
