"""Dependencies that resolve the application-scoped services built in ``create_app``."""

from __future__ import annotations

from typing import Any, cast

from fastapi import Request

from travel_content.content.aggregator import ContentAggregator
from travel_content.content.cache import ContentCacheRepository
from travel_content.services.activity_details import DetailCardBuilder
from travel_content.services.activity_recommendation import ActivityRecommendationService


def _resolve(request: Request, key: str) -> Any:
    return request.app.state.services[key]


def get_aggregator(request: Request) -> ContentAggregator:
    return cast(ContentAggregator, _resolve(request, "aggregator"))


def get_content_cache(request: Request) -> ContentCacheRepository:
    return cast(ContentCacheRepository, _resolve(request, "content_cache"))


def get_recommendation_service(request: Request) -> ActivityRecommendationService:
    return cast(ActivityRecommendationService, _resolve(request, "recommendation_service"))


def get_detail_card_builder(request: Request) -> DetailCardBuilder:
    return cast(DetailCardBuilder, _resolve(request, "detail_card_builder"))
