from travel_content.llm.client import (
    LLMAuthenticationError,
    LLMClient,
    LLMInvalidResponseError,
    LLMServiceError,
    LLMUnavailableError,
    OpenAIClient,
)
from travel_content.llm.schemas import DetailCardSynthesis, ExtractedActivity, GeneratedActivity

__all__ = [
    "LLMClient",
    "OpenAIClient",
    "LLMServiceError",
    "LLMUnavailableError",
    "LLMAuthenticationError",
    "LLMInvalidResponseError",
    "ExtractedActivity",
    "GeneratedActivity",
    "DetailCardSynthesis",
]
