"""Multi-platform content aggregation.

``ContentAggregator.aggregate`` is cache first: when the persistent cache
already holds enough recent posts for the destination, no provider is
queried. Otherwise every enabled provider is searched concurrently, the
merged posts are summarized, scored and persisted, and the filtered top
results are returned. Upstream failures only ever shrink the result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from travel_content.content.base import ContentProvider, SearchOptions, TravelContent
from travel_content.content.cache import ContentCacheRepository
from travel_content.llm import LLMClient

logger = logging.getLogger(__name__)

SUMMARY_FALLBACK_LENGTH = 200


@dataclass(frozen=True)
class AggregatorConfig:
    """Enabled providers and limits, built once at startup."""

    providers: tuple[ContentProvider, ...]
    summary_batch_size: int = 5
    provider_timeout_seconds: float = 15.0

    def provider_for(self, platform: str) -> ContentProvider | None:
        for provider in self.providers:
            if provider.platform == platform:
                return provider
        return None


class ContentAggregator:
    def __init__(
        self,
        config: AggregatorConfig,
        cache: ContentCacheRepository,
        llm_client: LLMClient,
    ) -> None:
        self.config = config
        self.cache = cache
        self.llm_client = llm_client

    async def aggregate(self, options: SearchOptions) -> list[TravelContent]:
        logger.info(f"Aggregating content for '{options.query}'")

        found = await self._find_cached(options)
        cached = [item for item in found if self._matches_filters(item, options)]
        if len(cached) >= options.limit:
            logger.info(f"Using {len(cached)} cached results")
            return cached

        providers = self._active_providers(options)
        merged = await self._search_all(providers, options)
        if not merged:
            logger.info("No content found from any provider")
            return cached

        logger.info(f"Found {len(merged)} posts from providers")

        enhanced = await self._summarize_all(merged)
        scored = [
            item.model_copy(update={"engagement_score": self._score(item)}) for item in enhanced
        ]
        # sort() is stable, so ties keep merge order
        scored.sort(key=lambda item: item.engagement_score or 0, reverse=True)

        await self._persist(scored, options)

        filtered = [item for item in scored if self._matches_filters(item, options)]
        logger.info(f"Returning {min(len(filtered), options.limit)} results")
        return filtered[: options.limit]

    async def _find_cached(self, options: SearchOptions) -> list[TravelContent]:
        try:
            return await self.cache.find_recent(options)
        except Exception as e:
            logger.error(f"Content cache lookup failed. Error: {e}")
            return []

    def _active_providers(self, options: SearchOptions) -> list[ContentProvider]:
        if options.platforms is None:
            return list(self.config.providers)
        return [p for p in self.config.providers if p.platform in options.platforms]

    async def _search_all(
        self, providers: Sequence[ContentProvider], options: SearchOptions
    ) -> list[TravelContent]:
        results = await asyncio.gather(
            *(self._search_one(provider, options) for provider in providers),
            return_exceptions=True,
        )
        merged: list[TravelContent] = []
        for provider, result in zip(providers, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"[{provider.platform}] Search failed. Error: {result}")
                continue
            merged.extend(result)
        return merged

    async def _search_one(
        self, provider: ContentProvider, options: SearchOptions
    ) -> list[TravelContent]:
        try:
            return await asyncio.wait_for(
                provider.search(options), timeout=self.config.provider_timeout_seconds
            )
        except TimeoutError:
            logger.warning(
                f"[{provider.platform}] Search timed out after "
                f"{self.config.provider_timeout_seconds}s"
            )
            return []

    async def _summarize_all(self, items: list[TravelContent]) -> list[TravelContent]:
        batch_size = self.config.summary_batch_size
        enhanced: list[TravelContent] = []
        for start in range(0, len(items), batch_size):
            batch = items[start : start + batch_size]
            enhanced.extend(await asyncio.gather(*(self._summarize(item) for item in batch)))
        return enhanced

    async def _summarize(self, item: TravelContent) -> TravelContent:
        if item.summary:
            return item
        try:
            summary = await self.llm_client.summarize(item.title, item.content, item.content_lang)
        except Exception as e:
            logger.error(
                f"Summarization failed for {item.platform}/{item.platform_post_id}. Error: {e}"
            )
            summary = ""
        return item.model_copy(
            update={"summary": summary or item.content[:SUMMARY_FALLBACK_LENGTH]}
        )

    def _score(self, item: TravelContent) -> int:
        provider = self.config.provider_for(item.platform)
        if provider is None:
            return item.engagement_score or 0
        return provider.calculate_engagement_score(item)

    async def _persist(self, items: list[TravelContent], options: SearchOptions) -> None:
        try:
            written = await self.cache.upsert_many(items, options.query, options.destination)
        except Exception as e:
            logger.error(f"Persisting aggregated content failed. Error: {e}")
            return
        logger.info(f"Cached {written}/{len(items)} posts")

    @staticmethod
    def _matches_filters(item: TravelContent, options: SearchOptions) -> bool:
        if options.language != "all" and item.content_lang != options.language:
            return False
        if options.min_engagement > 0 and (item.engagement_score or 0) < options.min_engagement:
            return False
        return True
