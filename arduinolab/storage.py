"""
Row-level access to the Supabase (PostgREST) tables.

Every call is a single request and therefore individually atomic; nothing
here spans more than one request, so callers that need multi-table writes
have to compensate on their own.
"""
import logging
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class StorageError(Exception):
    """A storage call failed; carries the collaborator's message."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


def _apply_match(query, match: Optional[Row]):
    for column, value in (match or {}).items():
        if isinstance(value, (list, tuple, set)):
            query = query.in_(column, list(value))
        else:
            query = query.eq(column, value)
    return query


class SupabaseStore:
    """Thin adapter over a ``supabase.Client`` returning plain row dicts"""

    def __init__(self, client):
        self.client = client

    def _execute(self, table: str, action: str, query) -> List[Row]:
        try:
            response = query.execute()
        except APIError as e:
            logger.error("%s on %s failed: %s", action, table, e.message)
            raise StorageError(e.message or str(e), e.code) from e
        return response.data or []

    def select(self, table: str, match: Optional[Row] = None, columns: str = '*',
               order: Optional[str] = None, desc: bool = False,
               limit: Optional[int] = None) -> List[Row]:
        query = _apply_match(self.client.table(table).select(columns), match)
        if order:
            query = query.order(order, desc=desc)
        if limit:
            query = query.limit(limit)
        return self._execute(table, 'select', query)

    def insert(self, table: str, rows) -> List[Row]:
        return self._execute(table, 'insert', self.client.table(table).insert(rows))

    def update(self, table: str, values: Row, match: Row) -> List[Row]:
        query = _apply_match(self.client.table(table).update(values), match)
        return self._execute(table, 'update', query)

    def delete(self, table: str, match: Row) -> List[Row]:
        query = _apply_match(self.client.table(table).delete(), match)
        return self._execute(table, 'delete', query)
