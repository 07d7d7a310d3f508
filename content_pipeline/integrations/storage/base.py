"""
Persistent store interface.

Every read and write is scoped by tenant. Most tables carry a ``tenant_id``
column; the ``clients`` table is keyed by the tenant id itself.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


TENANT_COLUMNS = {
    "clients": "id",
}

# Enforced among rows of one tenant where every key column is set
UNIQUE_KEYS = {
    "articles": ("parent_article_id", "version"),
}


def tenant_column(table: str) -> str:
    """Column holding the tenant scope of ``table``."""
    return TENANT_COLUMNS.get(table, "tenant_id")


class DataStore(ABC):
    """Tenant-scoped table store."""

    @abstractmethod
    def insert(self, table: str, row: Dict[str, Any], tenant_id: str) -> str:
        """
        Insert a row and return its id.

        Raises:
            UniqueViolationError: If the row collides on a unique key
        """

    @abstractmethod
    def update(self, table: str, row_id: str, patch: Dict[str, Any], tenant_id: str) -> None:
        """Apply ``patch`` to one row."""

    @abstractmethod
    def query(
        self,
        table: str,
        tenant_id: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Return rows matching every equality filter."""

    @abstractmethod
    def delete(self, table: str, row_id: str, tenant_id: str) -> None:
        """Delete one row."""
