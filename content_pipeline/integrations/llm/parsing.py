"""
Structured output parsing.

Generator output is free text that should contain one JSON document. It is
extracted and validated against a pydantic schema here, at the boundary, so
the rest of the pipeline only ever sees typed models.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ...core.models.errors import ParseError


T = TypeVar("T", bound=BaseModel)

_CODE_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

EXCERPT_LENGTH = 200


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """Either a validated value or the error explaining why there is none."""

    value: Optional[T] = None
    error: Optional[ParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


def extract_json(text: str) -> Optional[Any]:
    """
    Pull the first JSON object out of generator text.

    Fenced code blocks are tried first, then the outermost ``{...}`` span.

    Returns:
        The decoded object, or None when nothing decodes
    """
    if not text:
        return None

    candidates = [match.strip() for match in _CODE_BLOCK.findall(text)]

    match = _JSON_OBJECT.search(text)
    if match:
        candidates.append(match.group(0))

    candidates.append(text.strip())

    for candidate in candidates:
        try:
            return json.loads(candidate)
        except ValueError:
            continue

    return None


def parse_structured(text: str, schema: Type[T]) -> ParseOutcome[T]:
    """
    Validate generator text against ``schema``.

    Args:
        text: Raw generator output
        schema: Pydantic model the payload must satisfy

    Returns:
        ParseOutcome holding either the model instance or a ParseError
    """
    excerpt = (text or "")[:EXCERPT_LENGTH]
    payload = extract_json(text)

    if payload is None:
        return ParseOutcome(error=ParseError(
            f"No JSON found in generator output for {schema.__name__}",
            schema=schema.__name__,
            raw_excerpt=excerpt
        ))

    try:
        return ParseOutcome(value=schema.model_validate(payload))
    except PydanticValidationError as e:
        return ParseOutcome(error=ParseError(
            f"Generator output does not match {schema.__name__}: {e.error_count()} errors",
            schema=schema.__name__,
            raw_excerpt=excerpt
        ))
