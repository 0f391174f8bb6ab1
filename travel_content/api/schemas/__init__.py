"""API request and response schemas.

Import request/response models from the submodules (e.g. content_request_models,
activities_response_models) or from this package for a single entry point.
"""

from __future__ import annotations

from travel_content.api.schemas.activities_request_models import (
    ActivityDetailsRequest,
    ActivityRecommendationRequest,
)
from travel_content.api.schemas.activities_response_models import (
    ActivityDetailsResponse,
    ActivityRecommendationResponse,
)
from travel_content.api.schemas.content_request_models import ContentSearchRequest
from travel_content.api.schemas.content_response_models import (
    ContentSearchResponse,
    ContentStatsResponse,
    SearchMeta,
)
from travel_content.api.schemas.meta_response_models import HealthResponse

__all__ = [
    "ActivityDetailsRequest",
    "ActivityDetailsResponse",
    "ActivityRecommendationRequest",
    "ActivityRecommendationResponse",
    "ContentSearchRequest",
    "ContentSearchResponse",
    "ContentStatsResponse",
    "HealthResponse",
    "SearchMeta",
]
