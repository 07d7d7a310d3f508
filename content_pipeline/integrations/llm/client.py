"""
Generator client for the content pipeline.

This module provides the single entry point the stage agents use to talk to
a language model: ``generate(system_prompt, user_payload, schema)`` returns a
validated schema instance or raises.
"""

import json
import logging
import time
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import BaseModel

from .litellm_client import LiteLLMClient
from .parsing import parse_structured
from .rate_limiter import RateLimiter


logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

JSON_INSTRUCTION = (
    "Respond with a single JSON object only, no prose, "
    "matching this JSON schema:\n{schema}"
)


class LLMClient:
    """
    Structured generator client.

    This client handles:
    - Client-side rate limiting
    - Prompt assembly with the expected JSON schema
    - Validation of the structured response

    Retries are not performed here; callers wrap ``generate`` in a
    ``RetryHandler``.
    """

    def __init__(
        self,
        litellm_client: LiteLLMClient,
        rate_limiter: Optional[RateLimiter] = None
    ):
        """
        Initialize LLM client.

        Args:
            litellm_client: Raw completion client
            rate_limiter: Optional client-side throttle
        """
        self.litellm_client = litellm_client
        self.rate_limiter = rate_limiter

        logger.info(f"LLMClient initialized with model: {litellm_client.model}")

    @classmethod
    def from_config(cls, config) -> 'LLMClient':
        """Build a client from application configuration."""
        return cls(
            LiteLLMClient(
                model=config.LLM_MODEL,
                api_key=config.LLM_API_KEY or None,
                base_url=config.LLM_API_BASE or None,
                timeout=config.LLM_TIMEOUT,
                temperature=config.LLM_TEMPERATURE,
                max_tokens=config.LLM_MAX_TOKENS
            ),
            RateLimiter(requests_per_minute=config.LLM_REQUESTS_PER_MINUTE)
        )

    async def generate(
        self,
        system_prompt: str,
        user_payload: Union[str, Dict[str, Any]],
        schema: Type[T],
        temperature: Optional[float] = None,
        **extra_params
    ) -> T:
        """
        Generate a structured response.

        Args:
            system_prompt: Operational instructions for the model
            user_payload: Task input; dicts are sent as JSON
            schema: Pydantic model the response must satisfy
            temperature: Optional temperature override
            **extra_params: Provider options passed through to LiteLLM

        Returns:
            Validated ``schema`` instance

        Raises:
            RateLimitError: If the provider rate limited the request
            GeneratorError: If the provider call failed
            ParseError: If the response does not match ``schema``
        """
        if self.rate_limiter is not None:
            await self.rate_limiter.wait_if_needed()

        if isinstance(user_payload, str):
            user_prompt = user_payload
        else:
            user_prompt = json.dumps(user_payload, ensure_ascii=False, indent=2, default=str)

        system = "\n\n".join([
            system_prompt,
            JSON_INSTRUCTION.format(schema=json.dumps(schema.model_json_schema()))
        ])

        start_time = time.time()
        text = await self.litellm_client.complete(
            system, user_prompt, temperature=temperature, **extra_params
        )

        outcome = parse_structured(text, schema)
        if not outcome.ok:
            logger.error(f"Unparseable {schema.__name__} response: {outcome.error.message}")
            raise outcome.error

        logger.debug(f"Generated {schema.__name__} in {time.time() - start_time:.2f}s")

        return outcome.value
