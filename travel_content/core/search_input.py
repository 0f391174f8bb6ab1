from __future__ import annotations

import logging
import re
from typing import Final

logger = logging.getLogger(__name__)

MAX_SEARCH_TEXT_LENGTH: Final[int] = 200

_URL_PATTERN = re.compile(r"(https?://|www\.)\S+", re.IGNORECASE)
_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_INJECTION_PATTERNS = [
    re.compile(r"ignore (all|previous|prior) instructions", re.IGNORECASE),
    re.compile(r"system prompt", re.IGNORECASE),
    re.compile(r"developer message", re.IGNORECASE),
    re.compile(r"jailbreak", re.IGNORECASE),
]


class SearchInputError(ValueError):
    """Raised when a free-text search field is unusable.

    These strings end up both in upstream search URLs and in language model
    prompts, so anything resembling links or instructions is refused.
    """

    error_code: str = "invalid_search_input"


def sanitize_search_text(value: str, field: str = "query") -> str:
    """Validate one free-text search field and return it whitespace-collapsed."""
    if _CONTROL_CHARS_PATTERN.search(value):
        raise SearchInputError(f"{field} contains unsupported control characters.")
    if _URL_PATTERN.search(value):
        raise SearchInputError(f"{field} must not include URLs.")
    for pattern in _INJECTION_PATTERNS:
        if pattern.search(value):
            raise SearchInputError(f"{field} contains disallowed instruction patterns.")

    sanitized = " ".join(value.split())
    if not sanitized:
        raise SearchInputError(f"{field} must not be blank.")
    if len(sanitized) > MAX_SEARCH_TEXT_LENGTH:
        raise SearchInputError(f"{field} must be at most {MAX_SEARCH_TEXT_LENGTH} characters.")

    if sanitized != value:
        logger.debug(f"Collapsed whitespace in {field}")
    return sanitized
