from travel_content.services.activity_details import (
    DetailCardBuilder,
    DetailCardCache,
    InMemoryDetailCardCache,
    detail_card_cache_key,
)
from travel_content.services.activity_extractor import (
    Activity,
    ActivityExtractor,
    SourcePost,
    group_activities,
)
from travel_content.services.activity_recommendation import ActivityRecommendationService

__all__ = [
    "Activity",
    "ActivityExtractor",
    "SourcePost",
    "group_activities",
    "DetailCardBuilder",
    "DetailCardCache",
    "InMemoryDetailCardCache",
    "detail_card_cache_key",
    "ActivityRecommendationService",
]
