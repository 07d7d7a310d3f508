"""
Middleware components for the content pipeline API.

This module contains middleware for authentication, logging
and error handling.
"""

from .auth import AuthMiddleware, require_tenant
from .logging import LoggingMiddleware
from .error_handler import ErrorHandler

__all__ = [
    'AuthMiddleware',
    'LoggingMiddleware',
    'ErrorHandler',
    'require_tenant'
]
