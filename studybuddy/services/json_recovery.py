import json
import logging
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from studybuddy.core.errors import (
    EmptyResponseError,
    JSONParseError,
    NoJSONStructureError,
    SchemaValidationError,
)

logger = logging.getLogger(__name__)

FENCE_MARKERS = ("```json", "```")

ModelT = TypeVar("ModelT", bound=BaseModel)


def clean_and_parse_json(raw_text: str) -> Any:
    """
    Tolerant JSON extractor:
    1. Strip every ```json / ``` fence marker
    2. Slice from the first '{' to the last '}' (inclusive)
    3. Parse with json.loads
    Raises a MalformedResponseError subclass on failure; JSONParseError
    carries the slice that failed to parse.
    """
    if not raw_text:
        raise EmptyResponseError("Empty response from AI")

    cleaned = raw_text
    for marker in FENCE_MARKERS:
        cleaned = cleaned.replace(marker, "")

    first_brace = cleaned.find("{")
    last_brace = cleaned.rfind("}")
    if first_brace == -1 or last_brace == -1:
        raise NoJSONStructureError("Response did not contain valid JSON structure")

    fragment = cleaned[first_brace:last_brace + 1]

    try:
        return json.loads(fragment)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse failed on fragment (first 500 chars): {fragment[:500]}")
        raise JSONParseError(
            f"Failed to parse AI response as JSON: {e.msg} (char {e.pos})",
            fragment=fragment,
            position=e.pos,
        ) from e


def decode_model(schema: Type[ModelT], raw_text: str) -> ModelT:
    """Extract JSON from model output and validate it against `schema`."""
    parsed = clean_and_parse_json(raw_text)
    try:
        return schema.model_validate(parsed)
    except ValidationError as e:
        logger.error(f"{schema.__name__} validation failed: {e.error_count()} error(s)")
        raise SchemaValidationError(
            f"AI response does not match the expected {schema.__name__} shape",
            errors=e.errors(include_url=False),
        ) from e
