"""Activity recommendations for an existing trip.

Basic mode searches for posts about the trip (or one day's city), extracts
and groups activities and turns the best of them into suggestion cards.
Contextual mode first asks the language model which searches would
complement the itinerary, then runs basic mode once per suggested search.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Final

from travel_content.content.aggregator import ContentAggregator
from travel_content.content.base import SearchOptions
from travel_content.content.cards import (
    DEFAULT_DURATION,
    PlatformMeta,
    Quote,
    SourceLink,
    SuggestionCard,
)
from travel_content.content.providers.ai_agent import AI_AUTHOR_NAME
from travel_content.content.trip import Day, ItemType, Trip
from travel_content.llm import LLMClient, LLMServiceError
from travel_content.services.activity_extractor import (
    Activity,
    ActivityExtractor,
    normalize_name,
)

logger = logging.getLogger(__name__)

MAX_POSTS_PER_SEARCH: Final[int] = 15
PER_QUERY_LIMIT: Final[int] = 2

_ACTIVITY_TYPE_TO_ITEM_TYPE: Final[dict[str, ItemType]] = {
    "sightseeing": "sight",
    "food": "food",
    "dining": "food",
    "restaurant": "food",
    "museum": "museum",
    "hiking": "hike",
    "hike": "hike",
    "experience": "experience",
    "transport": "transport",
    "rest": "rest",
}

_CITY_PATTERN = re.compile(r"^([^,]+)")


def existing_activity_titles(trip: Trip) -> list[str]:
    return [item.title.lower() for day in trip.days for item in day.items if item.title]


def map_activity_type_to_item_type(activity_type: str) -> ItemType:
    return _ACTIVITY_TYPE_TO_ITEM_TYPE.get(activity_type.lower(), "experience")


def resolve_day_location(day: Day) -> str | None:
    """City for one day: its own location, else the city part of the first location hint."""
    if day.location:
        return day.location
    for item in day.items:
        if item.location_hint:
            match = _CITY_PATTERN.match(item.location_hint)
            city = match.group(1).strip() if match else ""
            return city or None
    return None


def build_trip_context(trip: Trip, day_index: int | None = None) -> str:
    lines = [
        f"Trip destination: {trip.destination}",
        f"Duration: {len(trip.days)} days",
        f"Interests: {', '.join(trip.interests)}",
        f"Must-see: {', '.join(trip.must_see)}",
        "",
    ]
    if day_index is not None and 0 <= day_index < len(trip.days):
        day = trip.days[day_index]
        lines.append(f"Analyzing Day {day_index + 1} ({day.date or 'unscheduled'}):")
        lines.append(f"Location: {day.location or 'Unknown'}")
        lines.append("Existing activities:")
        for position, item in enumerate(day.items, start=1):
            lines.append(
                f"{position}. {item.title} ({item.type}, {item.duration or 'unknown duration'})"
            )
        lines.append("")
        lines.append(
            "Suggest more activities for this day that complement the existing activities "
            "and location."
        )
    else:
        lines.append("Current itinerary:")
        for position, day in enumerate(trip.days, start=1):
            lines.append(f"Day {position}: {day.location or 'Unknown'} - {len(day.items)} activities")
        lines.append("")
        lines.append("Suggest diverse activities that would enhance this trip.")
    return "\n".join(lines)


def activity_to_suggestion(activity: Activity, default_day_index: int | None) -> SuggestionCard:
    top_post = max(activity.source_posts, key=lambda post: post.likes)
    platforms = {post.platform for post in activity.source_posts}
    is_multi_platform = len(platforms) > 1

    if activity.is_ai_generated:
        source = "ai-generated"
        platform_label = "AI-generated"
    elif is_multi_platform:
        source = "multi-platform"
        platform_label = f"{len(activity.source_posts)} sources"
    else:
        source = top_post.platform
        platform_label = top_post.platform

    return SuggestionCard(
        id=f"activity-{uuid.uuid4().hex[:12]}",
        title=activity.name,
        images=[],
        summary=activity.description,
        detailed_description=activity.detailed_description,
        quotes=[Quote(original="", translated=tip) for tip in activity.tips],
        source_links=[
            SourceLink(
                url=post.post_url,
                label=f"{post.platform} - {post.author_name} ({post.likes:,} likes)",
            )
            for post in activity.source_posts
            if post.post_url
        ],
        item_type=map_activity_type_to_item_type(activity.type),
        default_day_index=default_day_index,
        duration=activity.duration or DEFAULT_DURATION,
        photo_query=activity.photo_keywords,
        source=source,
        platform_meta=PlatformMeta(
            author_name=AI_AUTHOR_NAME if activity.is_ai_generated else top_post.author_name,
            author_avatar=top_post.author_avatar,
            likes=sum(post.likes for post in activity.source_posts),
            comments=sum(post.comments for post in activity.source_posts),
            shares=0,
            platform=platform_label,
            content_lang="en",
            engagement_score=0,
            location=activity.location,
            best_time=activity.best_time,
        ),
    )


class ActivityRecommendationService:
    def __init__(
        self,
        aggregator: ContentAggregator,
        extractor: ActivityExtractor,
        llm_client: LLMClient,
    ) -> None:
        self.aggregator = aggregator
        self.extractor = extractor
        self.llm_client = llm_client

    async def generate_recommendations(
        self,
        trip: Trip,
        day_index: int | None = None,
        activity_type: str | None = None,
        limit: int = 5,
    ) -> list[SuggestionCard]:
        search_location = trip.destination
        specific_location: str | None = None
        if day_index is not None and 0 <= day_index < len(trip.days):
            specific_location = resolve_day_location(trip.days[day_index])
            search_location = specific_location or trip.destination
            logger.info(f"Targeting day {day_index + 1} in {search_location}")

        existing = existing_activity_titles(trip)
        query = (
            f"{search_location} {activity_type} travel activities"
            if activity_type
            else f"{search_location} travel activities recommendations"
        )
        logger.info(f"Recommendation search '{query}', excluding {len(existing)} existing items")

        posts = await self.aggregator.aggregate(
            SearchOptions(
                query=query,
                destination=search_location,
                activity_type=activity_type or "travel activities",
                language="all",
                limit=min(limit * 2, MAX_POSTS_PER_SEARCH),
            )
        )
        if not posts:
            logger.info("No content found for recommendations")
            return []

        activities = await self.extractor.extract_and_group(
            posts,
            search_location,
            specific_location=specific_location,
            already_in_itinerary=existing,
            main_destination=trip.destination,
        )
        if not activities:
            logger.info("No activities extracted from posts")
            return []

        recommendations = [
            activity_to_suggestion(activity, day_index) for activity in activities[:limit]
        ]
        logger.info(f"Returning {len(recommendations)} recommendations")
        return recommendations

    async def generate_contextual_recommendations(
        self,
        trip: Trip,
        day_index: int | None = None,
        limit: int = 5,
    ) -> list[SuggestionCard]:
        try:
            queries = await self.llm_client.suggest_activity_queries(
                build_trip_context(trip, day_index), limit
            )
        except LLMServiceError as e:
            logger.error(f"Could not derive activity queries ({e.error_code}). Error: {e}")
            return []
        logger.info(f"Language model suggested {len(queries)} activity queries")

        collected: list[SuggestionCard] = []
        for query in queries:
            collected.extend(
                await self.generate_recommendations(
                    trip, day_index=day_index, activity_type=query, limit=PER_QUERY_LIMIT
                )
            )
            if len(collected) >= limit:
                break

        unique: list[SuggestionCard] = []
        seen: set[str] = set()
        for card in collected:
            title = normalize_name(card.title)
            if title in seen:
                continue
            seen.add(title)
            unique.append(card)
        return unique[:limit]
