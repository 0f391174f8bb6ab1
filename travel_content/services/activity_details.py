"""Detail cards for activities already on an itinerary.

Cards are memoized per ``destination:title`` for a fixed TTL. The cache is
an interface so the per-process dictionary can be swapped for a shared
store without touching the builder.
"""

from __future__ import annotations

import logging
import time
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Final

from travel_content.content.aggregator import ContentAggregator
from travel_content.content.base import SearchOptions, TravelContent
from travel_content.content.cards import ActivityDetailCard, PlatformMeta, Quote, SourceLink
from travel_content.content.trip import ItineraryItem, Trip
from travel_content.llm import DetailCardSynthesis, LLMClient, LLMServiceError

logger = logging.getLogger(__name__)

DETAIL_SEARCH_LIMIT: Final[int] = 5
CONTEXT_ITEMS: Final[int] = 3
SOURCE_LABEL_LENGTH: Final[int] = 60
FALLBACK_DURATION: Final[str] = "2 hours"


def detail_card_cache_key(destination: str, title: str) -> str:
    return f"{destination.lower()}:{title.lower()}"


class DetailCardCache(ABC):
    """Keyed store of built cards with expiry."""

    @abstractmethod
    async def get(self, key: str) -> ActivityDetailCard | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, card: ActivityDetailCard) -> None:
        raise NotImplementedError

    @abstractmethod
    async def sweep_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        raise NotImplementedError

    @abstractmethod
    async def stats(self) -> dict[str, object]:
        raise NotImplementedError


class InMemoryDetailCardCache(DetailCardCache):
    """Per-process cache; entries expire lazily on read or on sweep."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.time) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[ActivityDetailCard, float]] = {}

    def _is_expired(self, stored_at: float) -> bool:
        return self._clock() - stored_at > self._ttl_seconds

    async def get(self, key: str) -> ActivityDetailCard | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        card, stored_at = entry
        if self._is_expired(stored_at):
            del self._entries[key]
            return None
        return card

    async def set(self, key: str, card: ActivityDetailCard) -> None:
        self._entries[key] = (card, self._clock())

    async def sweep_expired(self) -> int:
        expired = [key for key, (_, stored_at) in self._entries.items() if self._is_expired(stored_at)]
        for key in expired:
            del self._entries[key]
        logger.info(f"Cleared {len(expired)} expired detail cards")
        return len(expired)

    async def stats(self) -> dict[str, object]:
        return {"size": len(self._entries), "keys": list(self._entries)}


def _new_card_id() -> str:
    return f"activity-{uuid.uuid4().hex[:12]}"


def _source_label(title: str) -> str:
    if len(title) > SOURCE_LABEL_LENGTH:
        return f"{title[:SOURCE_LABEL_LENGTH]}..."
    return title


def _content_summary(items: list[TravelContent]) -> str:
    return "\n\n".join(
        f"[Content {index}]\nTitle: {item.title}\nSummary: {item.summary or ''}\n"
        f"Source: {item.platform}"
        for index, item in enumerate(items, start=1)
    )


class DetailCardBuilder:
    def __init__(
        self,
        aggregator: ContentAggregator,
        llm_client: LLMClient,
        cache: DetailCardCache,
    ) -> None:
        self.aggregator = aggregator
        self.llm_client = llm_client
        self.cache = cache

    async def get_or_build_card(self, trip: Trip, item: ItineraryItem) -> ActivityDetailCard:
        """Return the cached card or build one. Never raises."""
        key = detail_card_cache_key(trip.destination, item.title)
        cached = await self.cache.get(key)
        if cached is not None:
            logger.info(f"Detail card cache hit for {key}")
            return cached

        logger.info(f"Building detail card for '{item.title}' in {trip.destination}")
        try:
            card = await self._build(trip, item)
        except Exception:
            logger.exception(f"Building detail card for '{item.title}' failed")
            card = self._minimal_card(trip, item)

        await self.cache.set(key, card)
        return card

    async def _build(self, trip: Trip, item: ItineraryItem) -> ActivityDetailCard:
        contents = await self.aggregator.aggregate(
            SearchOptions(
                query=f"{item.title} {trip.destination}",
                destination=trip.destination,
                activity_type=item.type,
                item_type=item.type,
                limit=DETAIL_SEARCH_LIMIT,
            )
        )
        top = contents[:CONTEXT_ITEMS]
        logger.info(f"Fetched {len(contents)} content items for '{item.title}'")

        try:
            synthesis = await self.llm_client.synthesize_detail_card(
                title=item.title,
                destination=trip.destination,
                item_type=item.type,
                description=item.description,
                content_summary=_content_summary(top),
            )
        except LLMServiceError as e:
            logger.warning(f"Detail card synthesis unusable ({e.error_code}), using template")
            synthesis = self._templated_synthesis(trip, item)

        lead = contents[0] if contents else None
        return ActivityDetailCard(
            id=_new_card_id(),
            title=item.title,
            images=[content.images[0] for content in top if content.images],
            summary=synthesis.summary or item.description,
            detailed_description=synthesis.detailed_description,
            quotes=[
                Quote(original=quote.original, translated=quote.translated)
                for quote in synthesis.quotes
            ],
            source_links=[
                SourceLink(url=content.post_url, label=_source_label(content.title))
                for content in top
                if content.post_url
            ],
            item_type=item.type,
            duration=synthesis.duration,
            photo_query=synthesis.photo_query or f"{item.title} {trip.destination}",
            source="multi-platform" if contents else "ai-generated",
            platform_meta=(
                PlatformMeta(
                    author_name=lead.author_name or "Community",
                    author_avatar=lead.author_avatar,
                    likes=lead.likes,
                    comments=lead.comments,
                    shares=lead.shares,
                    platform=lead.platform,
                    content_lang=lead.content_lang,
                    engagement_score=lead.engagement_score or 0,
                    location=synthesis.location,
                    best_time=synthesis.best_time,
                )
                if lead is not None
                else None
            ),
        )

    @staticmethod
    def _templated_synthesis(trip: Trip, item: ItineraryItem) -> DetailCardSynthesis:
        return DetailCardSynthesis(
            summary=item.description,
            detailed_description=(
                f"{item.title} is a must-visit attraction in {trip.destination}. It offers a "
                "unique experience that showcases the best of what this destination has to offer."
            ),
            quotes=[],
            photo_query=f"{item.title} {trip.destination}",
            duration=FALLBACK_DURATION,
        )

    @staticmethod
    def _minimal_card(trip: Trip, item: ItineraryItem) -> ActivityDetailCard:
        return ActivityDetailCard(
            id=_new_card_id(),
            title=item.title,
            images=[],
            summary=item.description,
            detailed_description=(
                f"{item.title} is a notable attraction in {trip.destination}. Plan to spend "
                "some time here to fully appreciate what it has to offer."
            ),
            quotes=[],
            source_links=[],
            item_type=item.type,
            photo_query=f"{item.title} {trip.destination}",
            source="ai-generated",
        )
