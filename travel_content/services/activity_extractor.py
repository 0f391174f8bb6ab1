"""Activity extraction and cross-source grouping.

Posts are turned into ``ExtractedActivity`` records by the language model
(language-model-authored posts map 1:1 without a call), filtered for
location relevance and itinerary duplicates, then grouped by token overlap
of their normalized names. Grouping is first-seen-wins: the first activity
of a group supplies its name, so input order can change which member is the
representative but not how many groups form.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from typing import Final

from pydantic import BaseModel, Field

from travel_content.content.base import AI_AGENT_PLATFORM, TravelContent
from travel_content.llm import ExtractedActivity, LLMClient, LLMServiceError

logger = logging.getLogger(__name__)

SIMILARITY_THRESHOLD: Final[float] = 0.6
MIN_KEYWORD_LENGTH: Final[int] = 3

_NON_WORD_PATTERN = re.compile(r"[^\w\s]")


class SourcePost(BaseModel):
    platform: str
    post_url: str = ""
    author_name: str
    author_avatar: str | None = None
    likes: int = 0
    comments: int = 0
    content_lang: str = "en"

    @classmethod
    def from_content(cls, post: TravelContent) -> SourcePost:
        return cls(
            platform=post.platform,
            post_url=post.post_url,
            author_name=post.author_name,
            author_avatar=post.author_avatar,
            likes=post.likes,
            comments=post.comments,
            content_lang=post.content_lang,
        )


class Activity(BaseModel):
    """One recommendation merged from every post that mentioned it."""

    id: str
    name: str
    type: str
    description: str
    detailed_description: str | None = None
    photo_keywords: str = ""
    location: str | None = None
    duration: str | None = None
    best_time: str | None = None
    tips: list[str] = Field(default_factory=list)
    source_posts: list[SourcePost] = Field(default_factory=list)
    is_ai_generated: bool = False


ActivityWithPost = tuple[ExtractedActivity, TravelContent]


def normalize_name(name: str) -> str:
    return _NON_WORD_PATTERN.sub("", name.lower())


def name_similarity(a: str, b: str) -> float:
    """Share of words in common, relative to the longer of the two names."""
    words_a = a.split()
    words_b = b.split()
    longest = max(len(words_a), len(words_b))
    if longest == 0:
        return 0.0
    words_b_set = set(words_b)
    shared = sum(1 for word in words_a if word in words_b_set)
    return shared / longest


def _mentions(activity: ExtractedActivity, needle: str) -> bool:
    fields = (activity.location or "", activity.activity_name, activity.description)
    return any(needle in field.lower() for field in fields)


def _merge_into(group: Activity, activity: ExtractedActivity, post: TravelContent) -> None:
    group.source_posts.append(SourcePost.from_content(post))
    if activity.tips and activity.tips not in group.tips:
        group.tips.append(activity.tips)
    if len(activity.description) > len(group.description):
        group.description = activity.description
    if activity.detailed_description and len(activity.detailed_description) > len(
        group.detailed_description or ""
    ):
        group.detailed_description = activity.detailed_description


def group_activities(pairs: Sequence[ActivityWithPost]) -> list[Activity]:
    """Merge activities whose normalized names overlap by more than 60%."""
    groups: list[tuple[str, Activity]] = []

    for activity, post in pairs:
        normalized = normalize_name(activity.activity_name)
        match = next(
            (
                group
                for group_name, group in groups
                if name_similarity(normalized, group_name) > SIMILARITY_THRESHOLD
            ),
            None,
        )
        if match is not None:
            _merge_into(match, activity, post)
            continue

        groups.append(
            (
                normalized,
                Activity(
                    id=f"activity-{len(groups) + 1}",
                    name=activity.activity_name,
                    type=activity.activity_type,
                    description=activity.description,
                    detailed_description=activity.detailed_description,
                    photo_keywords=activity.photo_keywords,
                    location=activity.location,
                    duration=activity.estimated_duration,
                    best_time=activity.best_time_to_visit,
                    tips=[activity.tips] if activity.tips else [],
                    source_posts=[SourcePost.from_content(post)],
                ),
            )
        )

    activities = [group for _, group in groups]
    for group in activities:
        group.is_ai_generated = all(
            source.platform == AI_AGENT_PLATFORM for source in group.source_posts
        )
    return activities


def filter_by_country(
    pairs: list[ActivityWithPost], main_destination: str
) -> list[ActivityWithPost]:
    """Keep activities naming a word of the main destination longer than two characters."""
    keywords = [word for word in main_destination.lower().split() if len(word) >= MIN_KEYWORD_LENGTH]
    kept = []
    for activity, post in pairs:
        if any(_mentions(activity, keyword) for keyword in keywords):
            kept.append((activity, post))
        else:
            logger.info(f"Dropping '{activity.activity_name}': not in {main_destination}")
    return kept


def filter_by_city(pairs: list[ActivityWithPost], city: str) -> list[ActivityWithPost]:
    """Keep only activities mentioning the city. No match means no results."""
    city_lower = city.lower()
    return [(activity, post) for activity, post in pairs if _mentions(activity, city_lower)]


def filter_itinerary_duplicates(
    pairs: list[ActivityWithPost], existing_names: Sequence[str]
) -> list[ActivityWithPost]:
    existing = [name.lower() for name in existing_names if name.strip()]
    if not existing:
        return pairs
    kept = []
    for activity, post in pairs:
        name = activity.activity_name.lower()
        if any(name == other or other in name or name in other for other in existing):
            logger.info(f"Dropping duplicate of itinerary item: '{activity.activity_name}'")
            continue
        kept.append((activity, post))
    return kept


class ActivityExtractor:
    def __init__(self, llm_client: LLMClient) -> None:
        self.llm_client = llm_client

    async def extract_from_post(
        self, post: TravelContent, destination: str
    ) -> list[ExtractedActivity]:
        """Extract 1-2 activities from a post; failures yield an empty list."""
        if post.platform == AI_AGENT_PLATFORM:
            return [self._from_ai_post(post, destination)]
        try:
            return await self.llm_client.extract_activities(
                post.title, post.content, post.platform, destination
            )
        except LLMServiceError as e:
            logger.error(
                f"Activity extraction failed for {post.platform} post "
                f"{post.platform_post_id} ({e.error_code}). Error: {e}"
            )
            return []
        except Exception as e:
            logger.error(
                f"Unexpected error extracting from {post.platform} post "
                f"{post.platform_post_id}. Error: {e}"
            )
            return []

    async def extract_and_group(
        self,
        posts: Sequence[TravelContent],
        destination: str,
        specific_location: str | None = None,
        already_in_itinerary: Sequence[str] | None = None,
        main_destination: str | None = None,
    ) -> list[Activity]:
        logger.info(
            f"Extracting activities from {len(posts)} posts for {specific_location or destination}"
        )
        results = await asyncio.gather(
            *(self.extract_from_post(post, destination) for post in posts),
            return_exceptions=True,
        )
        pairs: list[ActivityWithPost] = []
        for post, result in zip(posts, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Extraction task failed for {post.platform}. Error: {result}")
                continue
            pairs.extend((activity, post) for activity in result)
        logger.info(f"Extracted {len(pairs)} activities from {len(posts)} posts")

        if main_destination:
            pairs = filter_by_country(pairs, main_destination)
        if specific_location:
            pairs = filter_by_city(pairs, specific_location)
        if already_in_itinerary:
            pairs = filter_itinerary_duplicates(pairs, already_in_itinerary)

        activities = group_activities(pairs)
        logger.info(f"Grouped into {len(activities)} unique activities")
        return activities

    @staticmethod
    def _from_ai_post(post: TravelContent, destination: str) -> ExtractedActivity:
        meta = post.platform_meta
        return ExtractedActivity(
            activity_name=post.title,
            activity_type="experience",
            description=post.summary or post.content,
            detailed_description=meta.get("detailed_description"),
            photo_keywords=meta.get("photo_keywords") or f"{post.title} {destination}",
            location=post.location,
            estimated_duration=meta.get("duration"),
            best_time_to_visit=meta.get("best_time"),
            tips=meta.get("tips") or None,
        )
