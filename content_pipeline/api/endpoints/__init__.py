"""
API endpoints for the content pipeline.

This module contains all the REST API endpoints for the system.
"""

from .articles import articles_bp
from .health import health_bp

__all__ = [
    'articles_bp',
    'health_bp'
]
