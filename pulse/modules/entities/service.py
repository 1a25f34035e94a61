from supabase import Client
from fastapi import HTTPException, status
from pulse.core import errors
from pulse.modules.entities.tables import Table
from typing import Any, Dict, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

OPERATIONS = ("list", "filter", "get", "create", "update", "delete")
DEFAULT_LIMIT = 100

# Paging keys carried in `filters`; everything else there is an equality filter
_PAGING_KEYS = ("limit", "order", "ascending")


def parse_table(name: Optional[str]) -> Table:
    table = Table.parse(name)
    if table is None:
        raise errors.ApiError(status.HTTP_403_FORBIDDEN, errors.TABLE_NOT_ALLOWED, f"Operations on table '{name}' are not allowed")
    return table


class EntityService:
    """Owner-scoped CRUD relay over the closed Table set."""

    def __init__(self, supabase: Client, user_id: str, admin: bool = False):
        self.supabase = supabase
        self.user_id = user_id
        self.admin = admin

    def _scoped(self, query, table: Table):
        if table.owner_column:
            query = query.eq(table.owner_column, self.user_id)
        return query

    def _require_write(self, table: Table):
        if table.is_catalogue and not self.admin:
            raise errors.forbidden(f"Only admins can modify '{table.value}'")

    def execute(self, table_name: Optional[str], operation: Optional[str], filters: Dict[str, Any],
                data: Optional[Dict[str, Any]], row_id: Optional[str]) -> Dict[str, Any]:
        if not table_name or not operation:
            raise errors.missing_field("Missing table or operation in request body")
        table = parse_table(table_name)
        if operation not in OPERATIONS:
            raise errors.ApiError(status.HTTP_400_BAD_REQUEST, errors.INVALID_OPERATION, f"Unknown operation: {operation}")

        logger.info(f"{operation} on {table.value} for user {self.user_id}")
        try:
            handler = getattr(self, f"_{operation}")
            return handler(table, filters or {}, data, row_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"{operation} on {table.value} failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def _list(self, table: Table, filters: Dict[str, Any], data, row_id) -> Dict[str, Any]:
        return {"data": self._select(table, filters, equality=False)}

    def _filter(self, table: Table, filters: Dict[str, Any], data, row_id) -> Dict[str, Any]:
        return {"data": self._select(table, filters, equality=True)}

    def _select(self, table: Table, filters: Dict[str, Any], equality: bool):
        query = self._scoped(self.supabase.table(table.value).select("*"), table)
        if equality:
            for key, value in filters.items():
                if key in _PAGING_KEYS or value is None:
                    continue
                query = query.eq(key, value)
        if filters.get("order"):
            query = query.order(filters["order"], desc=not filters.get("ascending", True))
        result = query.limit(self._limit(filters.get("limit"))).execute()
        return result.data or []

    @staticmethod
    def _limit(value: Any) -> int:
        if value in (None, ""):
            return DEFAULT_LIMIT
        try:
            limit = int(value)
        except (TypeError, ValueError):
            raise errors.missing_field(f"Invalid limit: {value!r}")
        if limit <= 0:
            raise errors.missing_field(f"Invalid limit: {value!r}")
        return limit

    def _get(self, table: Table, filters, data, row_id: Optional[str]) -> Dict[str, Any]:
        if not row_id:
            raise errors.missing_field("Missing id for get operation")
        result = self._scoped(self.supabase.table(table.value).select("*").eq("id", row_id), table)\
            .maybe_single()\
            .execute()
        row = result.data if result else None
        if not row:
            raise errors.not_found(f"{table.value} row not found")
        return {"data": row}

    def _create(self, table: Table, filters, data: Optional[Dict[str, Any]], row_id) -> Dict[str, Any]:
        if not data:
            raise errors.missing_field("Missing data for create operation")
        self._require_write(table)
        create_data = dict(data)
        if table.owner_column:
            create_data[table.owner_column] = self.user_id
        result = self.supabase.table(table.value).insert(create_data).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail=f"Failed to create {table.value} row")
        return {"data": result.data[0]}

    def _update(self, table: Table, filters, data: Optional[Dict[str, Any]], row_id: Optional[str]) -> Dict[str, Any]:
        if not row_id or not data:
            raise errors.missing_field("Missing id or data for update operation")
        self._require_write(table)
        # Ownership columns are immutable through the relay
        update_data = {k: v for k, v in data.items() if k not in ("id", "user_id")}
        update_data["updated_at"] = datetime.utcnow().isoformat()
        result = self._scoped(self.supabase.table(table.value).update(update_data).eq("id", row_id), table)\
            .execute()
        if not result.data:
            raise errors.not_found(f"{table.value} row not found")
        return {"data": result.data[0]}

    def _delete(self, table: Table, filters, data, row_id: Optional[str]) -> Dict[str, Any]:
        if not row_id:
            raise errors.missing_field("Missing id for delete operation")
        self._require_write(table)
        self._scoped(self.supabase.table(table.value).delete().eq("id", row_id), table).execute()
        return {"success": True}
