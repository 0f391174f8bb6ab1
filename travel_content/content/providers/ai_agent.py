from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime
from typing import Final

from travel_content.content.base import (
    AI_AGENT_PLATFORM,
    ContentProvider,
    SearchOptions,
    TravelContent,
)
from travel_content.llm import GeneratedActivity, LLMClient, LLMServiceError

logger = logging.getLogger(__name__)

AI_AUTHOR_NAME: Final[str] = "Travel Content AI"
AI_AUTHOR_ID: Final[str] = "ai-agent"


def ai_post_id(destination: str, title: str) -> str:
    """Stable id so repeated generations of the same activity share one cache row."""
    digest = hashlib.sha1(f"{destination.lower()}|{title.lower()}".encode()).hexdigest()
    return f"ai-{digest[:12]}"


class AIAgentProvider(ContentProvider):
    """Language model acting as a content source.

    Items carry no engagement and no source URL; everything useful lives in
    ``platform_meta``.
    """

    platform = AI_AGENT_PLATFORM

    def __init__(self, llm_client: LLMClient) -> None:
        self.llm_client = llm_client

    async def search(self, options: SearchOptions) -> list[TravelContent]:
        logger.info(f"Generating activities for {options.destination}")
        try:
            activities = await self.llm_client.generate_activities(
                options.destination, options.activity_type
            )
        except LLMServiceError as e:
            logger.error(f"AI activity generation failed ({e.error_code}). Error: {e}")
            return []
        except Exception as e:
            logger.error(f"Unexpected error generating activities. Error: {e}")
            return []

        logger.info(f"Generated {len(activities)} activities")
        return [self._to_content(activity, options) for activity in activities]

    def calculate_engagement_score(self, content: TravelContent) -> int:
        return 0

    def is_high_quality(self, content: TravelContent) -> bool:
        return bool(content.title and content.content)

    @staticmethod
    def _to_content(activity: GeneratedActivity, options: SearchOptions) -> TravelContent:
        return TravelContent(
            platform=AI_AGENT_PLATFORM,
            platform_post_id=ai_post_id(options.destination, activity.title),
            title=activity.title,
            content=activity.description,
            content_lang="en",
            summary=activity.description or None,
            tags=activity.tags,
            author_name=AI_AUTHOR_NAME,
            author_id=AI_AUTHOR_ID,
            post_url="",
            location=activity.location or options.destination,
            published_at=datetime.now(UTC),
            platform_meta={
                "ai_generated": True,
                "detailed_description": activity.detailed_description,
                "duration": activity.duration,
                "best_time": activity.best_time,
                "tips": activity.tips,
                "photo_keywords": activity.photo_keywords,
            },
            engagement_score=0,
        )
