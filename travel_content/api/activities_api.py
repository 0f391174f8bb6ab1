from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status

from travel_content.api.dependencies import get_detail_card_builder, get_recommendation_service
from travel_content.api.openapi_responses import (
    INVALID_SEARCH_INPUT,
    RATE_LIMITED,
    error_responses,
    validation_error_example,
)
from travel_content.api.schemas.activities_request_models import (
    ActivityDetailsRequest,
    ActivityRecommendationRequest,
)
from travel_content.api.schemas.activities_response_models import (
    ActivityDetailsResponse,
    ActivityRecommendationResponse,
)
from travel_content.core.errors import build_http_error
from travel_content.core.rate_limit import (
    ACTIVITY_DETAILS_RATE_LIMIT,
    ACTIVITY_RECOMMEND_RATE_LIMIT,
    limit,
    rate_limit_ip_key,
)
from travel_content.core.search_input import SearchInputError, sanitize_search_text
from travel_content.services.activity_details import DetailCardBuilder
from travel_content.services.activity_recommendation import ActivityRecommendationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/recommend",
    summary="Recommend activities for a trip",
    description=(
        "Suggest activities that complement the itinerary. ``basic`` searches the trip "
        "destination directly; ``contextual`` first derives searches from the itinerary."
    ),
    response_model=ActivityRecommendationResponse,
    responses=error_responses(
        INVALID_SEARCH_INPUT, validation_error_example("trip.destination"), RATE_LIMITED
    ),
)
@limit(ACTIVITY_RECOMMEND_RATE_LIMIT, key_func=rate_limit_ip_key)
async def recommend_activities(
    request: Request,
    request_data: ActivityRecommendationRequest,
    service: ActivityRecommendationService = Depends(get_recommendation_service),
) -> ActivityRecommendationResponse:
    """Recommend activities for an existing trip."""
    try:
        trip = request_data.trip.model_copy(
            update={"destination": sanitize_search_text(request_data.trip.destination, "destination")}
        )
        activity_type = (
            sanitize_search_text(request_data.activity_type, "activity_type")
            if request_data.activity_type
            else None
        )
    except SearchInputError as exc:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=exc.error_code,
            message=str(exc),
        ) from exc

    logger.info(f"Generating {request_data.mode} recommendations for {trip.destination}")
    if request_data.mode == "contextual":
        recommendations = await service.generate_contextual_recommendations(
            trip, day_index=request_data.day_index, limit=request_data.limit
        )
    else:
        recommendations = await service.generate_recommendations(
            trip,
            day_index=request_data.day_index,
            activity_type=activity_type,
            limit=request_data.limit,
        )
    return ActivityRecommendationResponse(
        recommendations=recommendations, count=len(recommendations)
    )


@router.post(
    "/details",
    summary="Detail card for an itinerary item",
    response_model=ActivityDetailsResponse,
    responses=error_responses(
        INVALID_SEARCH_INPUT, validation_error_example("item.title"), RATE_LIMITED
    ),
)
@limit(ACTIVITY_DETAILS_RATE_LIMIT, key_func=rate_limit_ip_key)
async def activity_details(
    request: Request,
    request_data: ActivityDetailsRequest,
    builder: DetailCardBuilder = Depends(get_detail_card_builder),
) -> ActivityDetailsResponse:
    """Build (or return the cached) detail card for one activity."""
    try:
        trip = request_data.trip.model_copy(
            update={"destination": sanitize_search_text(request_data.trip.destination, "destination")}
        )
        item = request_data.item.model_copy(
            update={"title": sanitize_search_text(request_data.item.title, "title")}
        )
    except SearchInputError as exc:
        raise build_http_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            error=exc.error_code,
            message=str(exc),
        ) from exc

    card = await builder.get_or_build_card(trip, item)
    return ActivityDetailsResponse(card=card)
