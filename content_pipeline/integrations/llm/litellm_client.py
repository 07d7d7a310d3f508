"""
LiteLLM client implementation.

This module provides the raw completion call to the configured generator
model through LiteLLM, and maps provider exceptions onto the pipeline's
error taxonomy.
"""

import logging
import time
from typing import Optional, Dict, Any

import litellm
from litellm import acompletion
from litellm.exceptions import (
    APIConnectionError,
    APIError,
    AuthenticationError,
    BadRequestError,
    RateLimitError as LiteLLMRateLimitError,
    ServiceUnavailableError,
    Timeout
)

from ...core.models.errors import GeneratorError, RateLimitError


logger = logging.getLogger(__name__)


class LiteLLMClient:
    """
    LiteLLM client for vendor-neutral model access.

    Any model string LiteLLM understands (``openai/gpt-4o``,
    ``anthropic/claude-3-5-sonnet-20241022``, ...) can be used.
    """

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = 60,
        temperature: float = 0.3,
        max_tokens: int = 4000
    ):
        """
        Initialize LiteLLM client.

        Args:
            model: LiteLLM model string
            api_key: API key for the provider
            base_url: Base URL for the provider API
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_tokens: Maximum completion tokens
        """
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

        litellm.drop_params = True

        logger.info(f"LiteLLMClient initialized with model: {model}, timeout: {timeout}s")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **extra_params
    ) -> str:
        """
        Run one chat completion.

        Args:
            system_prompt: System instructions
            user_prompt: User message
            temperature: Override of the default temperature
            max_tokens: Override of the default token limit
            **extra_params: Provider options passed through to LiteLLM

        Returns:
            Raw completion text

        Raises:
            RateLimitError: If the provider rate limited the request
            GeneratorError: For every other provider failure
        """
        params: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            "temperature": self.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.max_tokens,
            "timeout": self.timeout
        }
        params.update(extra_params)

        if self.api_key:
            params["api_key"] = self.api_key
        if self.base_url:
            params["api_base"] = self.base_url

        start_time = time.time()

        try:
            response = await acompletion(**params)

        except LiteLLMRateLimitError as e:
            logger.warning(f"Rate limit error from {self.model}: {str(e)}")
            raise RateLimitError(f"Rate limit exceeded: {str(e)}", model=self.model) from e

        except AuthenticationError as e:
            logger.error(f"Authentication error: {str(e)}")
            raise GeneratorError(
                f"Authentication failed: {str(e)}",
                model=self.model,
                retryable=False,
                status_code=401
            ) from e

        except BadRequestError as e:
            logger.error(f"Bad request: {str(e)}")
            raise GeneratorError(f"Bad request: {str(e)}", model=self.model, status_code=400) from e

        except (Timeout, ServiceUnavailableError, APIConnectionError) as e:
            logger.error(f"Generator unavailable: {str(e)}")
            raise GeneratorError(
                f"Generator unavailable: {str(e)}",
                model=self.model,
                retryable=True,
                status_code=getattr(e, "status_code", None)
            ) from e

        except APIError as e:
            logger.error(f"API error: {str(e)}")
            raise GeneratorError(
                f"API error: {str(e)}",
                model=self.model,
                status_code=getattr(e, "status_code", None)
            ) from e

        content = response.choices[0].message.content or ""

        usage = getattr(response, "usage", None)
        logger.debug(
            f"Completion from {self.model} in {time.time() - start_time:.2f}s "
            f"({getattr(usage, 'total_tokens', 0)} tokens)"
        )

        return content
