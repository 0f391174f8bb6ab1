from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status

from travel_content.api.dependencies import get_aggregator, get_content_cache
from travel_content.api.openapi_responses import (
    INVALID_SEARCH_INPUT,
    RATE_LIMITED,
    error_responses,
    validation_error_example,
)
from travel_content.api.schemas.content_request_models import ContentSearchRequest
from travel_content.api.schemas.content_response_models import (
    ContentSearchResponse,
    ContentStatsResponse,
    SearchMeta,
)
from travel_content.content.aggregator import ContentAggregator
from travel_content.content.base import SearchOptions
from travel_content.content.cache import ContentCacheRepository
from travel_content.content.cards import content_to_suggestion
from travel_content.core.errors import build_http_error
from travel_content.core.rate_limit import (
    CONTENT_SEARCH_RATE_LIMIT,
    CONTENT_STATS_RATE_LIMIT,
    limit,
    rate_limit_ip_key,
)
from travel_content.core.search_input import SearchInputError, sanitize_search_text

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/search",
    summary="Search travel content across platforms",
    description=(
        "Aggregate posts about a destination from every enabled platform and return them "
        "as ready-to-use suggestion cards."
    ),
    response_model=ContentSearchResponse,
    responses=error_responses(
        INVALID_SEARCH_INPUT, validation_error_example("destination"), RATE_LIMITED
    ),
)
@limit(CONTENT_SEARCH_RATE_LIMIT, key_func=rate_limit_ip_key)
async def search_content(
    request: Request,
    request_data: ContentSearchRequest,
    aggregator: ContentAggregator = Depends(get_aggregator),
) -> ContentSearchResponse:
    """Search every enabled platform for content about a destination."""
    try:
        destination = sanitize_search_text(request_data.destination, "destination")
        activity_type = sanitize_search_text(request_data.activity_type, "activity_type")
    except SearchInputError as exc:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=exc.error_code,
            message=str(exc),
        ) from exc

    logger.info(
        f"Searching for {activity_type} in {destination} (language: {request_data.language}, "
        f"platforms: {','.join(request_data.platforms or []) or 'all'})"
    )
    contents = await aggregator.aggregate(
        SearchOptions(
            query=f"{destination} {activity_type}",
            destination=destination,
            activity_type=activity_type,
            item_type=request_data.item_type,
            language=request_data.language,
            platforms=tuple(request_data.platforms) if request_data.platforms else None,
            limit=request_data.limit,
            min_engagement=request_data.min_engagement,
        )
    )

    suggestions = [
        content_to_suggestion(item, request_data.item_type, request_data.default_day_index or 0)
        for item in contents
    ]
    return ContentSearchResponse(
        suggestions=suggestions,
        meta=SearchMeta(
            total=len(suggestions),
            platforms=list(dict.fromkeys(item.platform for item in contents)),
            languages=list(dict.fromkeys(item.content_lang for item in contents)),
        ),
    )


@router.get(
    "/stats",
    summary="Content cache statistics",
    response_model=ContentStatsResponse,
    responses=error_responses(RATE_LIMITED),
)
@limit(CONTENT_STATS_RATE_LIMIT, key_func=rate_limit_ip_key)
async def content_stats(
    request: Request,
    cache: ContentCacheRepository = Depends(get_content_cache),
) -> ContentStatsResponse:
    """Summarize what the persistent content cache holds."""
    return await cache.stats()
