from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)
from openai.types.chat import ChatCompletion
from pydantic import ValidationError

from travel_content.core.config import settings
from travel_content.llm.prompts import (
    ACTIVITY_EXTRACTION_SYSTEM_PROMPT,
    ACTIVITY_GENERATION_SYSTEM_PROMPT,
    DETAIL_CARD_SYSTEM_PROMPT,
    QUERY_SUGGESTION_SYSTEM_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    get_activity_extraction_prompt,
    get_activity_generation_prompt,
    get_detail_card_prompt,
    get_summary_prompt,
)
from travel_content.llm.schemas import (
    DetailCardSynthesis,
    ExtractedActivity,
    GeneratedActivities,
    GeneratedActivity,
)

logger = logging.getLogger(__name__)

_CODE_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_CODE_FENCE_CLOSE = re.compile(r"\n?```\s*$")


class LLMServiceError(Exception):
    """Base error raised when the LLM service cannot fulfill a request."""

    def __init__(self, message: str, error_code: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class LLMUnavailableError(LLMServiceError):
    """LLM is unavailable (timeout, rate limit, or upstream outage)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_unavailable")


class LLMAuthenticationError(LLMServiceError):
    """LLM authentication failed (service credentials invalid)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_auth_failed")


class LLMInvalidResponseError(LLMServiceError):
    """LLM returned an invalid or unexpected response."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "llm_response_invalid")


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence wrapped around a JSON payload."""
    stripped = text.strip()
    stripped = _CODE_FENCE_OPEN.sub("", stripped)
    stripped = _CODE_FENCE_CLOSE.sub("", stripped)
    return stripped.strip()


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def summarize(self, title: str, body: str, source_language: str) -> str:
        """Summarize one post in a few English sentences."""
        raise NotImplementedError

    @abstractmethod
    async def extract_activities(
        self, title: str, body: str, platform: str, destination: str
    ) -> list[ExtractedActivity]:
        """Extract 1-2 specific activities from one post."""
        raise NotImplementedError

    @abstractmethod
    async def generate_activities(
        self, destination: str, activity_type: str
    ) -> list[GeneratedActivity]:
        """Author activity recommendations directly from model knowledge."""
        raise NotImplementedError

    @abstractmethod
    async def synthesize_detail_card(
        self,
        title: str,
        destination: str,
        item_type: str,
        description: str,
        content_summary: str,
    ) -> DetailCardSynthesis:
        """Build the structured body of an activity detail card."""
        raise NotImplementedError

    @abstractmethod
    async def suggest_activity_queries(self, trip_context: str, limit: int) -> list[str]:
        """Suggest search queries that complement an itinerary."""
        raise NotImplementedError


class OpenAIClient(LLMClient):
    """OpenAI implementation of LLM client."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None) -> None:
        """Initialize OpenAI client."""
        self.client = AsyncOpenAI(
            api_key=api_key or settings.openai_api_key,
            timeout=timeout or settings.llm_timeout_seconds,
        )

    def _handle_errors(self, error: Exception, operation: str) -> LLMServiceError:
        """Log error with appropriate message based on error type."""
        if isinstance(error, APIConnectionError) and not isinstance(error, APITimeoutError):
            logger.error(f"OpenAI API connection failed during {operation}. Error: {error}")
            return LLMUnavailableError("LLM service unreachable. Try again shortly.")
        elif isinstance(error, APITimeoutError):
            logger.error(f"OpenAI API request timed out during {operation}. Error: {error}")
            return LLMUnavailableError("LLM request timed out. Try again.")
        elif isinstance(error, RateLimitError):
            logger.error(f"OpenAI API rate limit exceeded during {operation}. Error: {error}")
            return LLMUnavailableError("LLM rate limit exceeded. Try again later.")
        elif isinstance(error, AuthenticationError):
            logger.error(f"OpenAI API authentication failed during {operation}. Error: {error}")
            return LLMAuthenticationError("LLM authentication failed.")
        elif isinstance(error, APIError):
            logger.error(f"OpenAI API error during {operation}. Error: {error}")
            return LLMUnavailableError("LLM service error. Try again later.")
        elif isinstance(error, (IndexError, AttributeError)):
            logger.error(f"Unexpected response structure from OpenAI. Error: {error}")
            return LLMInvalidResponseError("LLM returned an unexpected response.")
        elif isinstance(error, json.JSONDecodeError):
            logger.error(f"Invalid JSON response from OpenAI during {operation}. Error: {error}")
            return LLMInvalidResponseError("LLM returned invalid JSON.")
        elif isinstance(error, ValidationError):
            logger.error(f"Pydantic validation failed during {operation}. Error: {error}")
            return LLMInvalidResponseError("LLM response did not match expected format.")
        elif isinstance(error, ValueError):
            logger.error(f"Invalid value encountered during {operation}. Error: {error}")
            return LLMInvalidResponseError(str(error))
        else:
            logger.error(f"Unexpected error during {operation}. Error: {error}")
            return LLMServiceError("LLM request failed. Try again later.", "llm_error")

    async def _complete(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        kwargs: dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response: ChatCompletion = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
            **kwargs,
        )
        content = response.choices[0].message.content
        if not content or not content.strip():
            raise ValueError("Empty response from OpenAI")
        return content.strip()

    async def summarize(self, title: str, body: str, source_language: str) -> str:
        """Summarize one post using OpenAI."""
        try:
            return await self._complete(
                model=settings.openai_summary_model,
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                user_prompt=get_summary_prompt(title, body, source_language),
                temperature=0.7,
                max_tokens=150,
            )
        except Exception as e:
            raise self._handle_errors(e, "summarization") from e

    async def extract_activities(
        self, title: str, body: str, platform: str, destination: str
    ) -> list[ExtractedActivity]:
        """Extract activities from one post using OpenAI."""
        try:
            content = await self._complete(
                model=settings.openai_model,
                system_prompt=ACTIVITY_EXTRACTION_SYSTEM_PROMPT,
                user_prompt=get_activity_extraction_prompt(title, body, platform, destination),
                temperature=0.7,
                max_tokens=800,
            )
            parsed = json.loads(strip_code_fences(content))
            if isinstance(parsed, dict):
                parsed = parsed.get("activities", [])
            if not isinstance(parsed, list):
                raise ValueError("Expected a JSON array of activities")
            return [ExtractedActivity.model_validate(item) for item in parsed]
        except Exception as e:
            raise self._handle_errors(e, "activity extraction") from e

    async def generate_activities(
        self, destination: str, activity_type: str
    ) -> list[GeneratedActivity]:
        """Generate activities from model knowledge using OpenAI."""
        try:
            content = await self._complete(
                model=settings.openai_model,
                system_prompt=ACTIVITY_GENERATION_SYSTEM_PROMPT,
                user_prompt=get_activity_generation_prompt(destination, activity_type),
                temperature=0.8,
                max_tokens=1500,
                json_mode=True,
            )
            parsed = json.loads(strip_code_fences(content))
            return GeneratedActivities.model_validate(parsed).activities
        except Exception as e:
            raise self._handle_errors(e, "activity generation") from e

    async def synthesize_detail_card(
        self,
        title: str,
        destination: str,
        item_type: str,
        description: str,
        content_summary: str,
    ) -> DetailCardSynthesis:
        """Synthesize a detail card body using OpenAI."""
        try:
            content = await self._complete(
                model=settings.openai_model,
                system_prompt=DETAIL_CARD_SYSTEM_PROMPT,
                user_prompt=get_detail_card_prompt(
                    title, destination, item_type, description, content_summary
                ),
                temperature=0.8,
                max_tokens=1000,
            )
            parsed = json.loads(strip_code_fences(content))
            return DetailCardSynthesis.model_validate(parsed)
        except Exception as e:
            raise self._handle_errors(e, "detail card synthesis") from e

    async def suggest_activity_queries(self, trip_context: str, limit: int) -> list[str]:
        """Suggest complementary search queries using OpenAI."""
        try:
            content = await self._complete(
                model=settings.openai_model,
                system_prompt=QUERY_SUGGESTION_SYSTEM_PROMPT.format(limit=limit),
                user_prompt=trip_context,
                temperature=0.7,
                max_tokens=200,
            )
            return [line.strip() for line in content.splitlines() if line.strip()][:limit]
        except Exception as e:
            raise self._handle_errors(e, "query suggestion") from e
