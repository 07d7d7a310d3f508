"""
LLM integration module.

This module provides the generator client used by the stage agents, the
retry policy wrapped around external calls and the client-side throttle.
"""

from .client import LLMClient
from .litellm_client import LiteLLMClient
from .parsing import ParseOutcome, extract_json, parse_structured
from .retry_handler import RetryHandler, is_rate_limit_error
from .rate_limiter import RateLimiter

__all__ = [
    'LLMClient',
    'LiteLLMClient',
    'ParseOutcome',
    'extract_json',
    'parse_structured',
    'RetryHandler',
    'is_rate_limit_error',
    'RateLimiter'
]
