"""
In-process store for development and tests.
"""

import copy
import threading
import uuid
from collections import defaultdict
from typing import Any, Dict, List, Optional

from .base import UNIQUE_KEYS, DataStore, tenant_column
from ...core.models.errors import StorageError, UniqueViolationError


class InMemoryStore(DataStore):
    """Dictionary-backed table store with the same scoping rules as Supabase."""

    def __init__(self):
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = defaultdict(dict)
        self._lock = threading.Lock()

    def insert(self, table: str, row: Dict[str, Any], tenant_id: str) -> str:
        record = copy.deepcopy(row)
        record.setdefault("id", str(uuid.uuid4()))
        record[tenant_column(table)] = tenant_id
        row_id = str(record["id"])

        with self._lock:
            if row_id in self._tables[table]:
                raise StorageError(f"Duplicate id {row_id} in {table}", table=table, operation="insert")
            self._check_unique(table, record)
            self._tables[table][row_id] = record

        return row_id

    def _check_unique(self, table: str, record: Dict[str, Any]):
        columns = UNIQUE_KEYS.get(table)
        if not columns or any(record.get(column) is None for column in columns):
            return

        scope = tenant_column(table)
        key = tuple(record[column] for column in columns)
        for existing in self._tables[table].values():
            if existing.get(scope) == record[scope] and tuple(existing.get(c) for c in columns) == key:
                raise UniqueViolationError(
                    f"Row with {dict(zip(columns, key))} already exists in {table}",
                    table=table,
                    columns=columns
                )

    def update(self, table: str, row_id: str, patch: Dict[str, Any], tenant_id: str) -> None:
        with self._lock:
            record = self._tables[table].get(row_id)
            if record is None or record.get(tenant_column(table)) != tenant_id:
                return
            record.update(copy.deepcopy(patch))

    def query(
        self,
        table: str,
        tenant_id: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        scope = tenant_column(table)
        filters = filters or {}

        with self._lock:
            rows = [
                copy.deepcopy(record)
                for record in self._tables[table].values()
                if record.get(scope) == tenant_id
                and all(record.get(column) == value for column, value in filters.items())
            ]

        if order_by:
            rows.sort(key=lambda record: record.get(order_by), reverse=descending)
        if limit is not None:
            rows = rows[:limit]

        return rows

    def delete(self, table: str, row_id: str, tenant_id: str) -> None:
        with self._lock:
            record = self._tables[table].get(row_id)
            if record is not None and record.get(tenant_column(table)) == tenant_id:
                del self._tables[table][row_id]

    def count(self, table: str) -> int:
        """Number of rows in ``table`` across all tenants."""
        with self._lock:
            return len(self._tables[table])
