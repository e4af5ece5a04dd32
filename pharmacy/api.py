"""
Generic, table-agnostic data access.

Every primitive here is single-shot and never raises on backend failure:
the error is logged with operation, table and key, and the caller gets a
sentinel instead (None for rows, False for deletes). A None therefore means
"the operation did not happen", not "no data". Programming errors (unknown
table, missing composite-key part) still raise.

Pages that must surface failures (product listing, settings) go through
pharmacy.services, which lets DataAccessError propagate.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pharmacy.db import DataAccessError, Database
from pharmacy.query import Query
from pharmacy.schema import TABLES, TableSpec, get_table

logger = logging.getLogger(__name__)


def _key_label(key: Mapping[str, Any]) -> str:
    return ", ".join(f"{k}={v}" for k, v in key.items())


class DataAccess:
    def __init__(self, db: Database):
        self.db = db

    # ---- generic primitives ----
    async def fetch_all(self, table: str) -> Optional[list[dict[str, Any]]]:
        get_table(table)
        try:
            result = await self.db.execute(Query(table=table))
        except DataAccessError as e:
            logger.error(f"Error fetching all from {table}: {e}")
            return None
        return result.rows

    async def count(self, table: str) -> Optional[int]:
        """Exact row count without downloading the rows."""
        spec = get_table(table)
        query = Query(table=table).select(spec.primary_key[0]).with_count().range(0, 0)
        try:
            result = await self.db.execute(query)
        except DataAccessError as e:
            logger.error(f"Error counting {table}: {e}")
            return None
        return int(result.count or 0)

    async def fetch_by_id(self, table: str, id: Any) -> Optional[dict[str, Any]]:
        return await self.fetch_by_key(table, {"id": id})

    async def insert_into(self, table: str, record: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        get_table(table)
        try:
            result = await self.db.execute(Query(table=table).insert(dict(record)))
        except DataAccessError as e:
            logger.error(f"Error inserting into {table}: {e}")
            return None
        if len(result.rows) != 1:
            logger.error(f"Error inserting into {table}: expected 1 row back, got {len(result.rows)}")
            return None
        return result.rows[0]

    async def update_by_id(self, table: str, id: Any, patch: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        return await self.update_by_key(table, {"id": id}, patch)

    async def delete_by_id(self, table: str, id: Any) -> bool:
        return await self.delete_by_key(table, {"id": id})

    # ---- key-addressed variants (composite keys, natural keys) ----
    def _check_key(self, spec: TableSpec, key: Mapping[str, Any]) -> dict[str, Any]:
        if not key:
            raise ValueError(f"{spec.name}: a key is required")
        if len(key) > 1:
            # Composite keys need every part; a blank single id just matches no row.
            missing = [col for col, value in key.items() if value is None or value == ""]
            if missing:
                raise ValueError(f"{spec.name}: key value(s) required for {', '.join(missing)}")
        unknown = [col for col in key if col not in spec.columns]
        if unknown:
            raise KeyError(f"{spec.name}: unknown key column(s) {', '.join(unknown)}")
        return dict(key)

    async def fetch_by_key(self, table: str, key: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        spec = get_table(table)
        key = self._check_key(spec, key)
        try:
            result = await self.db.execute(Query(table=table).match(key))
        except DataAccessError as e:
            logger.error(f"Error fetching from {table} with {_key_label(key)}: {e}")
            return None
        if len(result.rows) != 1:
            # Zero or several matches: not a single-row answer.
            logger.error(f"Error fetching from {table} with {_key_label(key)}: {len(result.rows)} rows matched")
            return None
        return result.rows[0]

    async def update_by_key(
        self, table: str, key: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> Optional[dict[str, Any]]:
        spec = get_table(table)
        key = self._check_key(spec, key)

        changes = {k: v for k, v in patch.items() if k not in spec.immutable}
        dropped = sorted(set(patch) - set(changes))
        if dropped:
            logger.warning(f"Ignoring immutable column(s) {', '.join(dropped)} in update of {table}")
        if not changes:
            logger.warning(f"Nothing to update in {table} with {_key_label(key)}")
            return None

        try:
            result = await self.db.execute(Query(table=table).match(key).update(changes))
        except DataAccessError as e:
            logger.error(f"Error updating {table} with {_key_label(key)}: {e}")
            return None
        if len(result.rows) != 1:
            logger.error(f"Error updating {table} with {_key_label(key)}: {len(result.rows)} rows matched")
            return None
        return result.rows[0]

    async def delete_by_key(self, table: str, key: Mapping[str, Any]) -> bool:
        """True only when a row was actually removed; a missing key gives False."""
        spec = get_table(table)
        key = self._check_key(spec, key)
        try:
            result = await self.db.execute(Query(table=table).match(key).delete())
        except DataAccessError as e:
            logger.error(f"Error deleting from {table} with {_key_label(key)}: {e}")
            return False
        if not result.rows:
            logger.info(f"Nothing deleted from {table} with {_key_label(key)}")
            return False
        return True

    async def upsert(self, table: str, record: Mapping[str, Any], *, on_conflict: str) -> Optional[dict[str, Any]]:
        get_table(table)
        try:
            result = await self.db.execute(Query(table=table).upsert(dict(record), on_conflict=on_conflict))
        except DataAccessError as e:
            logger.error(f"Error upserting into {table} on {on_conflict}: {e}")
            return None
        return result.rows[0] if result.rows else None

    # ---- user_roles (composite key, no surrogate id) ----
    async def fetch_user_role(self, user_id: str, role_id: str) -> Optional[dict[str, Any]]:
        return await self.fetch_by_key("user_roles", {"user_id": user_id, "role_id": role_id})

    async def update_user_role(self, user_id: str, role_id: str, patch: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        return await self.update_by_key("user_roles", {"user_id": user_id, "role_id": role_id}, patch)

    async def delete_user_role(self, user_id: str, role_id: str) -> bool:
        return await self.delete_by_key("user_roles", {"user_id": user_id, "role_id": role_id})

    # ---- per-table wrappers ----
    def table(self, name: str) -> "TableAPI":
        return TableAPI(self, get_table(name))

    def __getattr__(self, name: str) -> "TableAPI":
        if name in TABLES:
            return TableAPI(self, TABLES[name])
        raise AttributeError(name)


class TableAPI:
    """
    Convenience wrappers for one table, keyed the way the registry says.

        await data.products.fetch_by_id(product_id)
        await data.user_roles.delete(user_id, role_id)
    """

    def __init__(self, data: DataAccess, spec: TableSpec):
        self.data = data
        self.spec = spec

    def __repr__(self) -> str:
        return f"TableAPI({self.spec.name!r})"

    def _key(self, values: tuple[Any, ...]) -> dict[str, Any]:
        if len(values) != len(self.spec.primary_key):
            raise TypeError(
                f"{self.spec.name} is keyed by ({', '.join(self.spec.primary_key)}); got {len(values)} value(s)"
            )
        return dict(zip(self.spec.primary_key, values))

    async def fetch_all(self) -> Optional[list[dict[str, Any]]]:
        return await self.data.fetch_all(self.spec.name)

    async def fetch_by_id(self, *key: Any) -> Optional[dict[str, Any]]:
        return await self.data.fetch_by_key(self.spec.name, self._key(key))

    async def insert(self, record: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        return await self.data.insert_into(self.spec.name, record)

    async def update(self, *key_and_patch: Any) -> Optional[dict[str, Any]]:
        *key, patch = key_and_patch
        return await self.data.update_by_key(self.spec.name, self._key(tuple(key)), patch)

    async def delete(self, *key: Any) -> bool:
        return await self.data.delete_by_key(self.spec.name, self._key(key))
