"""
Persistent storage integration.

This module provides the tenant-scoped table store (Supabase or in-memory)
and the article repository built on top of it.
"""

from .base import DataStore
from .memory_store import InMemoryStore
from .repository import ArticleRepository
from .supabase_store import SupabaseStore

__all__ = [
    'DataStore',
    'InMemoryStore',
    'ArticleRepository',
    'SupabaseStore'
]
