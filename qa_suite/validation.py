"""
Parsing and schema validation for generated suites.

A response is accepted only if it is JSON that validates as a TestSuite. The
only cleanup applied is removing a markdown code fence around the payload;
there is no repair, partial parse, or retry.
"""

from __future__ import annotations
import json
import re
from typing import Type, TypeVar
from pydantic import BaseModel, ValidationError
import logging

from .exceptions import SchemaViolationError
from .models import TestSuite

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)

FENCE_PATTERN = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def clean_response(response: str) -> str:
    """Strip surrounding whitespace and a single enclosing code fence."""
    text = response.strip()
    match = FENCE_PATTERN.match(text)
    if match:
        text = match.group(1).strip()
    return text


def validate_and_parse(response: str, model_class: Type[T]) -> T:
    """
    Parse an LLM response into ``model_class``.

    Raises:
        SchemaViolationError: If the response is not JSON or fails validation
    """
    cleaned = clean_response(response)

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Response is not valid JSON: {cleaned[:500]}...")
        raise SchemaViolationError(response, f"response is not valid JSON ({e})")

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Schema validation failed with {e.error_count()} errors")
        raise SchemaViolationError(
            response,
            f"{e.error_count()} schema errors, first: {_describe_first_error(e)}",
            errors=e.errors(include_url=False, include_context=False)
        )


def parse_suite_response(response: str) -> TestSuite:
    """Validate a generation response as a TestSuite."""
    return validate_and_parse(response, TestSuite)


def _describe_first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
    return f"{location}: {first.get('msg', 'invalid')}"
