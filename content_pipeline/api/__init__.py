"""
HTTP layer of the content pipeline.

The Flask application accepts content and rewrite requests, hands them to
Celery workers and exposes task status and article lineage.
"""

from .app import create_app

__all__ = ['create_app']
