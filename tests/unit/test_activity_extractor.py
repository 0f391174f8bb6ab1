"""Unit tests for activity extraction, filtering and grouping."""

from __future__ import annotations

import itertools

import pytest

from tests.fakes import FakeLLMClient, make_content
from travel_content.content.base import TravelContent
from travel_content.llm import ExtractedActivity, LLMUnavailableError
from travel_content.services.activity_extractor import (
    ActivityExtractor,
    filter_by_city,
    filter_by_country,
    filter_itinerary_duplicates,
    group_activities,
    name_similarity,
    normalize_name,
)


def _activity(name: str, **fields: str) -> ExtractedActivity:
    return ExtractedActivity(activity_name=name, description=fields.pop("description", name), **fields)


def _ai_post(title: str, **meta: object) -> TravelContent:
    return make_content(
        "ai-agent",
        f"ai-{title}",
        title=title,
        content=f"{title} description",
        post_url="",
        location="Tokyo",
        platform_meta={"ai_generated": True, **meta},
    )


class TestNameMatching:
    def test_normalize_name_strips_punctuation(self) -> None:
        assert normalize_name("Tsukiji Market: Sushi!") == "tsukiji market sushi"

    def test_similarity_relative_to_longer_name(self) -> None:
        assert name_similarity("shibuya crossing", "shibuya scramble crossing") == pytest.approx(2 / 3)
        assert name_similarity("visit shibuya crossing", "shibuya crossing at night") == 0.5
        assert name_similarity("", "") == 0.0


class TestGrouping:
    def test_similar_names_merge_into_one_activity(self) -> None:
        """Test that near-identical names from two platforms become one activity."""
        # Arrange
        forum = make_content("reddit", "r1", likes=80, title="Visit Shibuya Crossing")
        social = make_content("xiaohongshu", "sample-tokyo-1", title="Shibuya Crossing at night")
        pairs = [
            (_activity("Shibuya Crossing", description="Busy", tips="Go at dusk"), forum),
            (
                _activity("Shibuya Scramble Crossing", description="World's busiest crossing"),
                social,
            ),
        ]

        # Act
        activities = group_activities(pairs)

        # Assert
        assert len(activities) == 1
        merged = activities[0]
        assert merged.id == "activity-1"
        assert merged.name == "Shibuya Crossing"
        assert len(merged.source_posts) == 2
        assert merged.is_ai_generated is False
        assert merged.description == "World's busiest crossing"
        assert merged.tips == ["Go at dusk"]

    def test_group_is_ai_generated_only_when_every_source_is(self) -> None:
        """Test the AI-generated flag across mixed and pure groups."""
        # Arrange
        pairs = [
            (_activity("Tea Ceremony"), _ai_post("Tea Ceremony")),
            (_activity("Robot Restaurant Show"), _ai_post("Robot Restaurant Show")),
            (_activity("Robot Restaurant Show"), make_content("reddit", "r2")),
        ]

        # Act
        activities = group_activities(pairs)

        # Assert
        flags = {activity.name: activity.is_ai_generated for activity in activities}
        assert flags == {"Tea Ceremony": True, "Robot Restaurant Show": False}

    def test_duplicate_tips_are_not_repeated(self) -> None:
        # Arrange
        post = make_content()
        pairs = [
            (_activity("Fuji Hike", tips="Start early"), post),
            (_activity("Fuji Hike", tips="Start early"), post),
            (_activity("Fuji Hike", tips="Bring water"), post),
        ]

        # Act
        activities = group_activities(pairs)

        # Assert
        assert activities[0].tips == ["Start early", "Bring water"]

    def test_group_count_independent_of_input_order(self) -> None:
        """Test that reordering inputs changes representatives but not the group count."""
        # Arrange
        post = make_content()
        names = [
            "Shibuya Crossing",
            "Shibuya Scramble Crossing",
            "Tsukiji Outer Market",
            "Tsukiji Outer Market Tour",
            "Meiji Shrine",
        ]

        # Act
        counts = {
            len(group_activities([(_activity(name), post) for name in ordering]))
            for ordering in itertools.permutations(names)
        }

        # Assert
        assert counts == {3}


class TestFilters:
    def test_country_filter_drops_other_countries(self) -> None:
        # Arrange
        post = make_content()
        pairs = [
            (_activity("Eiffel Tower at Night", location="Paris, France"), post),
            (_activity("Rainbow Mountain Trek", location="Cusco, Peru"), post),
        ]

        # Act
        kept = filter_by_country(pairs, "Peru")

        # Assert
        assert [activity.activity_name for activity, _ in kept] == ["Rainbow Mountain Trek"]

    def test_country_filter_keeps_nothing_without_usable_keywords(self) -> None:
        """Test that a destination with only short words matches no activity."""
        pairs = [(_activity("Eiffel Tower at Night", location="Paris, France"), make_content())]
        assert filter_by_country(pairs, "NY") == []

    def test_city_filter_does_not_match_across_fields(self) -> None:
        """Test that a city name split between location and name is not a match."""
        # Arrange
        split = _activity("York Minster tour", location="Lincoln, New", description="Cathedral")
        whole = _activity("Pizza slice", location="Brooklyn, New York")
        pairs = [(split, make_content()), (whole, make_content(post_id="post-2"))]

        # Act
        kept = filter_by_city(pairs, "New York")

        # Assert
        assert [activity.activity_name for activity, _ in kept] == ["Pizza slice"]

    def test_city_filter_is_strict(self) -> None:
        """Test that no city match yields no results rather than everything."""
        # Arrange
        pairs = [(_activity("Nishiki Market", location="Kyoto"), make_content())]

        # Act & Assert
        assert filter_by_city(pairs, "Osaka") == []
        assert len(filter_by_city(pairs, "kyoto")) == 1

    def test_itinerary_duplicates_match_substrings_both_ways(self) -> None:
        # Arrange
        post = make_content()
        pairs = [
            (_activity("Visit Shibuya Crossing"), post),
            (_activity("Senso-ji"), post),
            (_activity("Ramen"), post),
        ]

        # Act
        kept = filter_itinerary_duplicates(pairs, ["shibuya crossing", "Senso-ji Temple", " "])

        # Assert
        assert [activity.activity_name for activity, _ in kept] == ["Ramen"]


class TestActivityExtractor:
    @pytest.mark.asyncio
    async def test_ai_posts_map_without_llm_call(self) -> None:
        """Test that AI-authored posts are converted directly."""
        # Arrange
        llm = FakeLLMClient()
        extractor = ActivityExtractor(llm)
        post = _ai_post("Sumo Practice", duration="2 hours", tips=["Arrive by 7am"])

        # Act
        activities = await extractor.extract_from_post(post, "Tokyo")

        # Assert
        assert llm.extract_calls == []
        assert activities[0].activity_name == "Sumo Practice"
        assert activities[0].estimated_duration == "2 hours"
        assert activities[0].tips == "Arrive by 7am"
        assert activities[0].photo_keywords == "Sumo Practice Tokyo"

    @pytest.mark.asyncio
    async def test_extraction_failure_yields_empty_list(self) -> None:
        # Arrange
        llm = FakeLLMClient()
        llm.extract_error = LLMUnavailableError("LLM rate limit exceeded. Try again later.")
        extractor = ActivityExtractor(llm)

        # Act
        activities = await extractor.extract_from_post(make_content(), "Tokyo")

        # Assert
        assert activities == []

    @pytest.mark.asyncio
    async def test_extract_and_group_applies_filters(self) -> None:
        """Test country, itinerary and grouping steps together."""
        # Arrange
        llm = FakeLLMClient()
        llm.extractions = {
            "Paris trip": [_activity("Eiffel Tower at Night", location="Paris, France")],
            "Peru trek": [
                _activity("Rainbow Mountain Trek", location="Cusco, Peru"),
                _activity("Machu Picchu Sunrise", location="Aguas Calientes, Peru"),
            ],
            "Peru again": [_activity("Rainbow Mountain Day Trek", location="Cusco, Peru")],
        }
        extractor = ActivityExtractor(llm)
        posts = [
            make_content("xiaohongshu", "x1", title="Paris trip"),
            make_content("reddit", "r1", title="Peru trek"),
            make_content("reddit", "r2", title="Peru again"),
        ]

        # Act
        activities = await extractor.extract_and_group(
            posts,
            "Peru",
            already_in_itinerary=["machu picchu sunrise"],
            main_destination="Peru",
        )

        # Assert
        assert [activity.name for activity in activities] == ["Rainbow Mountain Trek"]
        assert len(activities[0].source_posts) == 2
