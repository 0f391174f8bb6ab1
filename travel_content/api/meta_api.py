"""Meta API endpoints (e.g. health)."""

from __future__ import annotations

from fastapi import APIRouter, Request

from travel_content.api.openapi_responses import rate_limited_response
from travel_content.api.schemas.meta_response_models import HealthResponse
from travel_content.core.rate_limit import HEALTH_RATE_LIMIT, limit, rate_limit_ip_key

router = APIRouter()


@router.get(
    "/health",
    summary="Health check",
    response_model=HealthResponse,
    responses=rate_limited_response(),
)
@limit(HEALTH_RATE_LIMIT, key_func=rate_limit_ip_key)
def health(request: Request) -> HealthResponse:
    """Check the health of the application."""
    return HealthResponse(status="ok")
