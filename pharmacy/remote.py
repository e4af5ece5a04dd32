from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from postgrest import AsyncPostgrestClient
from postgrest.exceptions import APIError
from postgrest.types import CountMethod

from pharmacy.db import DataAccessError
from pharmacy.query import Filter, Query, QueryResult

logger = logging.getLogger(__name__)


def quote_value(value: Any) -> str:
    # Double quotes keep PostgREST's reserved characters (, . : ( )) literal.
    s = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{s}"'


def or_expression(filters: tuple[Filter, ...]) -> str:
    return ",".join(f"{f.column}.{f.op}.{quote_value(f.value)}" for f in filters)


class PostgrestBackend:
    """Hosted database reached through its PostgREST endpoint over HTTPS."""

    name = "postgrest"

    def __init__(self, url: str, key: str, *, schema: str = "public", client: Optional[Any] = None):
        if not url or not key:
            raise ValueError("Both the project URL and the API key are required.")
        self.rest_url = f"{url.rstrip('/')}/rest/v1"
        self.schema = schema
        self._key = key
        self._client = client
        self._owns_client = client is None

    async def open(self) -> None:
        if self._client is None:
            logger.debug(f"Opening PostgREST client for {self.rest_url}")
            self._client = AsyncPostgrestClient(
                self.rest_url,
                schema=self.schema,
                headers={"apikey": self._key, "Authorization": f"Bearer {self._key}"},
            )

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def build(self, query: Query):
        """Translate a Query into a postgrest request builder."""
        base = self._client.from_(query.table)

        if query.action == "select":
            columns = [c.strip() for c in query.columns.split(",") if c.strip()] or ["*"]
            builder = base.select(*columns, count=CountMethod.exact if query.count else None)
        elif query.action == "insert":
            return base.insert(query.payload or {})
        elif query.action == "upsert":
            return base.upsert(query.payload or {}, on_conflict=query.on_conflict or "")
        elif query.action == "update":
            builder = base.update(query.payload or {})
        else:
            builder = base.delete()

        for f in query.filters:
            if f.op == "eq":
                builder = builder.is_(f.column, "null") if f.value is None else builder.eq(f.column, f.value)
            elif f.op == "ilike":
                builder = builder.ilike(f.column, f.value)
            else:
                raise ValueError(f"Unsupported filter operator: {f.op!r}")
        if query.any_of:
            builder = builder.or_(or_expression(query.any_of))

        if query.action == "select":
            for column, desc in query.order:
                builder = builder.order(column, desc=desc)
            if query.window is not None:
                builder = builder.range(*query.window)
        return builder

    async def execute(self, query: Query) -> QueryResult:
        if self._client is None:
            raise DataAccessError("Database is not open.", table=query.table)
        try:
            builder = self.build(query)
            response = await builder.execute()
        except APIError as e:
            raise DataAccessError(e.message or str(e), table=query.table, cause=e) from e
        except httpx.HTTPError as e:
            raise DataAccessError(f"Transport error: {e}", table=query.table, cause=e) from e
        except ValueError as e:
            raise DataAccessError(str(e), table=query.table, cause=e) from e
        return QueryResult(rows=list(response.data or []), count=response.count)
