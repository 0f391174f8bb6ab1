"""API-layer dependencies: application-scoped service lookup."""

from travel_content.api.dependencies.services import (
    get_aggregator,
    get_content_cache,
    get_detail_card_builder,
    get_recommendation_service,
)

__all__ = [
    "get_aggregator",
    "get_content_cache",
    "get_detail_card_builder",
    "get_recommendation_service",
]
