from __future__ import annotations

import logging

from travel_content.content.base import ContentProvider
from travel_content.content.providers.ai_agent import AIAgentProvider
from travel_content.content.providers.reddit import RedditProvider
from travel_content.content.providers.xiaohongshu import XiaohongshuProvider
from travel_content.core.config import Settings
from travel_content.llm import LLMClient

logger = logging.getLogger(__name__)


def build_enabled_providers(settings: Settings, llm_client: LLMClient) -> list[ContentProvider]:
    """Instantiate one provider per platform switched on in settings."""
    providers: list[ContentProvider] = []
    if settings.enable_platform_xiaohongshu:
        providers.append(
            XiaohongshuProvider(
                user_agent=settings.xiaohongshu_user_agent,
                timeout=settings.provider_timeout_seconds,
            )
        )
    if settings.enable_platform_reddit:
        providers.append(
            RedditProvider(
                user_agent=settings.reddit_user_agent,
                timeout=settings.provider_timeout_seconds,
            )
        )
    if settings.enable_platform_ai_agent:
        providers.append(AIAgentProvider(llm_client))

    logger.info(
        f"{len(providers)} provider(s) enabled: "
        f"{', '.join(provider.platform for provider in providers) or 'none'}"
    )
    return providers


__all__ = [
    "AIAgentProvider",
    "RedditProvider",
    "XiaohongshuProvider",
    "build_enabled_providers",
]
