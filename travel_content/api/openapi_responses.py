from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status

from travel_content.core.errors import ErrorResponse


@dataclass(frozen=True)
class ErrorExample:
    status_code: int
    error: str
    message: str
    description: str
    summary: str | None = None
    details: Any | None = None
    example_name: str | None = None


def error_responses(*examples: ErrorExample) -> dict[int | str, dict[str, Any]]:
    responses: dict[int | str, dict[str, Any]] = {}
    for example in examples:
        response: dict[str, Any] | None = responses.get(example.status_code)
        if response is None:
            examples_payload: dict[str, dict[str, Any]] = {}
            content: dict[str, dict[str, dict[str, Any]]] = {
                "application/json": {"examples": examples_payload}
            }
            response = {
                "model": ErrorResponse,
                "description": example.description,
                "content": content,
            }
            responses[example.status_code] = response

        example_name = example.example_name or example.error
        payload: dict[str, Any] = {
            "error": example.error,
            "message": example.message,
        }
        if example.details is not None:
            payload["details"] = example.details

        example_entry: dict[str, Any] = {
            "summary": example.summary or example.description,
            "value": payload,
        }
        response_content: dict[str, dict[str, dict[str, Any]]] = response["content"]
        response_content["application/json"]["examples"][example_name] = example_entry

    return responses


RATE_LIMITED = ErrorExample(
    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    error="rate_limited",
    message="Too many requests",
    description="Rate limit exceeded",
    summary="Too many requests",
)

INVALID_SEARCH_INPUT = ErrorExample(
    status_code=status.HTTP_400_BAD_REQUEST,
    error="invalid_search_input",
    message="query must not include URLs.",
    description="Search text rejected",
    summary="Search text rejected",
)


def validation_error_example(field: str) -> ErrorExample:
    return ErrorExample(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        error="validation_error",
        message="Request validation failed",
        description="Invalid request body",
        summary="Request validation failed",
        details=[
            {
                "loc": ["body", field],
                "msg": "String should have at least 1 character",
                "type": "string_too_short",
            }
        ],
    )


def rate_limited_response() -> dict[int | str, dict[str, Any]]:
    return error_responses(RATE_LIMITED)
