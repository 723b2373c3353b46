"""Tolerant JSON extraction for model responses.

Models asked for JSON still wrap it in markdown fences or add a sentence
before the object. Parsing tries, in order: the raw text, the first fenced
code block, and the span from the first "{" to the last "}".
"""

import json
import logging
import re
from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def extract_json(text: str):
    """Return the decoded JSON value embedded in ``text``.

    Raises:
        ValueError: If no candidate span decodes as JSON.
    """
    candidates = [text]

    match = _FENCE_RE.search(text)
    if match and match.group(1):
        candidates.append(match.group(1))

    first_brace = text.find("{")
    last_brace = text.rfind("}")
    if first_brace != -1 and last_brace > first_brace:
        candidates.append(text[first_brace:last_brace + 1])

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            continue

    raise ValueError(f"Failed to parse JSON from response: {text[:50]}...")


def clean_and_parse_json(text: str, schema: Type[ModelT]) -> ModelT:
    """Parse a model response into ``schema``.

    Args:
        text: Raw response text.
        schema: Pydantic model class to validate against.

    Returns:
        Validated schema instance.

    Raises:
        ValueError: If the text holds no JSON or it does not fit the schema.
    """
    if not text:
        raise ValueError("Empty model response")

    data = extract_json(text)
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Response did not match {schema.__name__}: {e.error_count()} error(s)")
        raise ValueError(f"Response did not match {schema.__name__}") from e
