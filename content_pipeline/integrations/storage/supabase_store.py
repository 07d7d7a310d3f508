"""
Supabase-backed persistent store.

This module implements the tenant-scoped table store on top of the
Supabase PostgREST client.
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

from .base import UNIQUE_KEYS, DataStore, tenant_column
from ...core.models.errors import ConfigurationError, StorageError, UniqueViolationError


logger = logging.getLogger(__name__)

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


class SupabaseStore(DataStore):
    """Table store over a Supabase project."""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_credentials(cls, url: str, key: str) -> 'SupabaseStore':
        """
        Create a store from project credentials.

        Raises:
            ConfigurationError: If credentials are missing
        """
        if not url or not key:
            raise ConfigurationError(
                "Supabase credentials not found (SUPABASE_URL and SUPABASE_KEY required)",
                config_key="SUPABASE_URL"
            )

        client = create_client(url, key)
        logger.info("Supabase client initialized successfully")
        return cls(client)

    def insert(self, table: str, row: Dict[str, Any], tenant_id: str) -> str:
        payload = dict(row)
        payload[tenant_column(table)] = tenant_id

        try:
            response = self.client.table(table).insert(payload).execute()
        except Exception as e:
            if getattr(e, "code", None) == UNIQUE_VIOLATION:
                raise UniqueViolationError(
                    f"Insert into {table} violates a unique key: {str(e)}",
                    table=table,
                    columns=UNIQUE_KEYS.get(table)
                ) from e
            logger.error(f"Insert into {table} failed: {str(e)}")
            raise StorageError(f"Insert into {table} failed: {str(e)}", table=table, operation="insert") from e

        if not response.data:
            raise StorageError(f"Insert into {table} returned no row", table=table, operation="insert")

        return str(response.data[0]["id"])

    def update(self, table: str, row_id: str, patch: Dict[str, Any], tenant_id: str) -> None:
        try:
            (
                self.client.table(table)
                .update(patch)
                .eq("id", row_id)
                .eq(tenant_column(table), tenant_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Update of {table}/{row_id} failed: {str(e)}")
            raise StorageError(f"Update of {table} failed: {str(e)}", table=table, operation="update") from e

    def query(
        self,
        table: str,
        tenant_id: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        try:
            request = self.client.table(table).select("*").eq(tenant_column(table), tenant_id)

            for column, value in (filters or {}).items():
                request = request.eq(column, value)
            if order_by:
                request = request.order(order_by, desc=descending)
            if limit is not None:
                request = request.limit(limit)

            response = request.execute()
        except Exception as e:
            logger.error(f"Query on {table} failed: {str(e)}")
            raise StorageError(f"Query on {table} failed: {str(e)}", table=table, operation="query") from e

        return list(response.data or [])

    def delete(self, table: str, row_id: str, tenant_id: str) -> None:
        try:
            (
                self.client.table(table)
                .delete()
                .eq("id", row_id)
                .eq(tenant_column(table), tenant_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Delete of {table}/{row_id} failed: {str(e)}")
            raise StorageError(f"Delete from {table} failed: {str(e)}", table=table, operation="delete") from e
