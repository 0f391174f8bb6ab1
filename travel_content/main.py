from __future__ import annotations

import logging
import sys
import types
from importlib.metadata import PackageNotFoundError, version
from typing import Any, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ExceptionHandler

from travel_content.core.config import InvalidSettingsError, MissingRequiredSettingsError

# Import settings - this may raise MissingRequiredSettingsError
try:
    from travel_content.core.config import settings
except MissingRequiredSettingsError as e:
    print("ERROR: Missing required environment variables:", file=sys.stderr)
    for field in e.missing_fields:
        print(f"  - {field}", file=sys.stderr)
    print(
        "\nPlease set these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)
except InvalidSettingsError as e:
    print("ERROR: Invalid environment variable values:", file=sys.stderr)
    for field, message in e.invalid_fields:
        print(f"  - {field}: {message}", file=sys.stderr)
    print(
        "\nPlease update these in your .env file (see env.example for reference)",
        file=sys.stderr,
    )
    sys.exit(1)

from travel_content.api.router import router as api_router  # noqa: E402
from travel_content.content.aggregator import AggregatorConfig, ContentAggregator  # noqa: E402
from travel_content.content.cache import ContentCacheRepository  # noqa: E402
from travel_content.content.providers import build_enabled_providers  # noqa: E402
from travel_content.core.errors import (  # noqa: E402
    http_exception_handler,
    rate_limit_exception_handler,
    request_validation_exception_handler,
    unhandled_exception_handler,
)
from travel_content.core.lifespan import lifespan  # noqa: E402
from travel_content.core.logging import configure_logging  # noqa: E402
from travel_content.core.rate_limit import limiter  # noqa: E402
from travel_content.db.session import get_session_maker  # noqa: E402
from travel_content.llm import LLMClient, OpenAIClient  # noqa: E402
from travel_content.services.activity_details import (  # noqa: E402
    DetailCardBuilder,
    InMemoryDetailCardCache,
)
from travel_content.services.activity_extractor import ActivityExtractor  # noqa: E402
from travel_content.services.activity_recommendation import (  # noqa: E402
    ActivityRecommendationService,
)

SECONDS_PER_DAY = 24 * 60 * 60


def build_services(llm_client: LLMClient) -> dict[str, Any]:
    """Wire the application-scoped services once per process."""
    config = AggregatorConfig(
        providers=tuple(build_enabled_providers(settings, llm_client)),
        summary_batch_size=settings.summary_batch_size,
        provider_timeout_seconds=settings.provider_timeout_seconds,
    )
    content_cache = ContentCacheRepository(
        get_session_maker(), recency_days=settings.content_cache_recency_days
    )
    aggregator = ContentAggregator(config, content_cache, llm_client)
    extractor = ActivityExtractor(llm_client)
    detail_card_cache = InMemoryDetailCardCache(
        ttl_seconds=settings.detail_card_ttl_days * SECONDS_PER_DAY
    )
    return {
        "content_cache": content_cache,
        "aggregator": aggregator,
        "recommendation_service": ActivityRecommendationService(
            aggregator, extractor, llm_client
        ),
        "detail_card_cache": detail_card_cache,
        "detail_card_builder": DetailCardBuilder(aggregator, llm_client, detail_card_cache),
    }


def create_app(llm_client: LLMClient | None = None) -> FastAPI:
    configure_logging()

    try:
        api_version = version("travel-content-api")
    except PackageNotFoundError:
        api_version = "0.1.0"  # Fallback if package not installed
        logging.warning("travel-content-api package not found, using fallback version 0.1.0")

    is_debug_mode = settings.environment == "local"
    app = FastAPI(
        title=settings.app_name,
        version=api_version,
        debug=is_debug_mode,
        lifespan=lifespan,
    )
    app.add_exception_handler(
        StarletteHTTPException, cast(ExceptionHandler, http_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, request_validation_exception_handler)
    )
    app.add_exception_handler(
        RateLimitExceeded, cast(ExceptionHandler, rate_limit_exception_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, unhandled_exception_handler))
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.include_router(api_router, prefix="/api")

    services = build_services(llm_client or OpenAIClient())
    app.state.services = types.MappingProxyType(services)

    return app


app = create_app()
