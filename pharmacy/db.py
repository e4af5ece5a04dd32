from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
import uuid
from pathlib import Path
from typing import Any, Iterable, Optional

from pharmacy.query import Filter, Query, QueryResult
from pharmacy.schema import NOW_SQL, SCHEMA_SQL, TableSpec, get_table

logger = logging.getLogger(__name__)


class DataAccessError(Exception):
    """A request against the database failed (transport, constraint, bad column...)."""

    def __init__(self, message: str, *, table: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.table = table
        self.cause = cause


def _connect(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SCHEMA_SQL)
    conn.commit()


def q(conn: sqlite3.Connection, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
    cur = conn.execute(sql, tuple(params))
    rows = cur.fetchall()
    cur.close()
    return rows


class SQLiteBackend:
    """
    Local stand-in for the hosted database.

    Plays the server's part for defaults: generates ids, stamps created_at via
    column defaults and refreshes updated_at on every UPDATE/upsert.
    """

    name = "sqlite"

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    async def open(self) -> None:
        if self._conn is None:
            self._conn = await asyncio.to_thread(self._open)

    def _open(self) -> sqlite3.Connection:
        try:
            conn = _connect(self.db_path)
            ensure_schema(conn)
        except (sqlite3.Error, OSError) as e:
            raise DataAccessError(f"Cannot open database at {self.db_path}: {e}", cause=e) from e
        return conn

    async def close(self) -> None:
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await asyncio.to_thread(conn.close)

    async def execute(self, query: Query) -> QueryResult:
        if self._conn is None:
            raise DataAccessError("Database is not open.", table=query.table)
        return await asyncio.to_thread(self._execute_locked, query)

    def _execute_locked(self, query: Query) -> QueryResult:
        spec = get_table(query.table)
        with self._lock:
            try:
                with self._conn:
                    return self._run(spec, query)
            except sqlite3.Error as e:
                raise DataAccessError(str(e), table=query.table, cause=e) from e
            except (TypeError, ValueError) as e:
                # Unknown columns, non-JSON values, missing filters
                raise DataAccessError(str(e), table=query.table, cause=e) from e

    async def truncate(self, tables: list[str]) -> None:
        """Delete every row of the given tables, in order (children first)."""
        if self._conn is None:
            raise DataAccessError("Database is not open.")
        await asyncio.to_thread(self._truncate_locked, [get_table(t).name for t in tables])

    def _truncate_locked(self, tables: list[str]) -> None:
        with self._lock:
            try:
                with self._conn:
                    for name in tables:
                        self._conn.execute(f"DELETE FROM {name};")
            except sqlite3.Error as e:
                raise DataAccessError(str(e), cause=e) from e

    def _run(self, spec: TableSpec, query: Query) -> QueryResult:
        if query.action == "select":
            return self._select(spec, query)
        if query.action == "insert":
            return self._insert(spec, query)
        if query.action == "update":
            return self._update(spec, query)
        if query.action == "delete":
            return self._delete(spec, query)
        return self._upsert(spec, query)

    # ---- compilation helpers ----
    def _check_columns(self, spec: TableSpec, columns: Iterable[str]) -> list[str]:
        cols = list(columns)
        unknown = [c for c in cols if c not in spec.columns]
        if unknown:
            raise ValueError(f"Unknown column(s) for {spec.name}: {', '.join(unknown)}")
        return cols

    def _projection(self, spec: TableSpec, columns: str) -> str:
        if columns.strip() == "*":
            return "*"
        cols = [c.strip() for c in columns.split(",") if c.strip()]
        return ", ".join(self._check_columns(spec, cols))

    def _condition(self, spec: TableSpec, f: Filter) -> tuple[str, list[Any]]:
        self._check_columns(spec, [f.column])
        if f.op == "eq":
            if f.value is None:
                return f"{f.column} IS NULL", []
            return f"{f.column} = ?", [f.value]
        if f.op == "ilike":
            return f"lower({f.column}) LIKE lower(?) ESCAPE '\\'", [f.value]
        raise ValueError(f"Unsupported filter operator: {f.op!r}")

    def _where(self, spec: TableSpec, query: Query) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for f in query.filters:
            sql, p = self._condition(spec, f)
            clauses.append(sql)
            params.extend(p)
        if query.any_of:
            parts = [self._condition(spec, f) for f in query.any_of]
            clauses.append("(" + " OR ".join(sql for sql, _ in parts) + ")")
            for _, p in parts:
                params.extend(p)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _encode(self, spec: TableSpec, payload: dict[str, Any]) -> dict[str, Any]:
        self._check_columns(spec, payload)
        out = dict(payload)
        for col in spec.json_columns:
            if col in out:
                out[col] = json.dumps(out[col])
        return out

    def _decode(self, spec: TableSpec, rows: list[sqlite3.Row]) -> list[dict[str, Any]]:
        out = []
        for r in rows:
            d = dict(r)
            for col in spec.json_columns:
                if d.get(col) is not None:
                    d[col] = json.loads(d[col])
            out.append(d)
        return out

    # ---- actions ----
    def _select(self, spec: TableSpec, query: Query) -> QueryResult:
        where, params = self._where(spec, query)
        sql = f"SELECT {self._projection(spec, query.columns)} FROM {spec.name}{where}"

        if query.order:
            self._check_columns(spec, [col for col, _ in query.order])
            sql += " ORDER BY " + ", ".join(f"{col} {'DESC' if desc else 'ASC'}" for col, desc in query.order)

        page_params = list(params)
        if query.window is not None:
            start, end = query.window
            sql += " LIMIT ? OFFSET ?"
            page_params += [end - start + 1, start]

        rows = self._decode(spec, q(self._conn, sql, page_params))

        count = None
        if query.count:
            count = int(q(self._conn, f"SELECT COUNT(*) AS n FROM {spec.name}{where}", params)[0]["n"])
        return QueryResult(rows=rows, count=count)

    def _insert(self, spec: TableSpec, query: Query) -> QueryResult:
        payload = self._encode(spec, query.payload or {})
        if spec.has_surrogate_id and payload.get("id") is None:
            payload["id"] = str(uuid.uuid4())

        if payload:
            cols = ", ".join(payload)
            marks = ", ".join("?" for _ in payload)
            sql = f"INSERT INTO {spec.name} ({cols}) VALUES ({marks}) RETURNING *"
        else:
            sql = f"INSERT INTO {spec.name} DEFAULT VALUES RETURNING *"
        return QueryResult(rows=self._decode(spec, q(self._conn, sql, payload.values())))

    def _update(self, spec: TableSpec, query: Query) -> QueryResult:
        if not query.filters:
            raise ValueError("UPDATE requires at least one filter.")
        payload = self._encode(spec, query.payload or {})
        payload.pop("updated_at", None)

        sets = [f"{col} = ?" for col in payload]
        if spec.has_updated_at:
            sets.append(f"updated_at = {NOW_SQL}")
        if not sets:
            raise ValueError("UPDATE has nothing to set.")

        where, params = self._where(spec, query)
        sql = f"UPDATE {spec.name} SET {', '.join(sets)}{where} RETURNING *"
        rows = q(self._conn, sql, list(payload.values()) + params)
        return QueryResult(rows=self._decode(spec, rows))

    def _delete(self, spec: TableSpec, query: Query) -> QueryResult:
        if not query.filters:
            raise ValueError("DELETE requires at least one filter.")
        where, params = self._where(spec, query)
        rows = q(self._conn, f"DELETE FROM {spec.name}{where} RETURNING *", params)
        return QueryResult(rows=self._decode(spec, rows))

    def _upsert(self, spec: TableSpec, query: Query) -> QueryResult:
        target = query.on_conflict or ",".join(spec.primary_key)
        target_cols = self._check_columns(spec, [c.strip() for c in target.split(",")])
        if tuple(target_cols) != spec.primary_key and not set(target_cols) <= set(spec.unique):
            raise ValueError(f"No unique constraint on {spec.name}({target})")

        payload = self._encode(spec, query.payload or {})
        if spec.has_surrogate_id and payload.get("id") is None:
            payload["id"] = str(uuid.uuid4())

        keep = set(target_cols) | {"id", "created_at", "updated_at"}
        sets = [f"{col} = excluded.{col}" for col in payload if col not in keep]
        if spec.has_updated_at:
            sets.append(f"updated_at = {NOW_SQL}")

        cols = ", ".join(payload)
        marks = ", ".join("?" for _ in payload)
        sql = f"INSERT INTO {spec.name} ({cols}) VALUES ({marks}) ON CONFLICT({', '.join(target_cols)}) "
        sql += f"DO UPDATE SET {', '.join(sets)} RETURNING *" if sets else "DO NOTHING RETURNING *"
        return QueryResult(rows=self._decode(spec, q(self._conn, sql, payload.values())))


class Database:
    """
    Explicitly constructed client around one backend.

    Use as an async context manager so the connection lifecycle is bounded:

        async with connect(config) as db:
            rows = await DataAccess(db).fetch_all("products")
    """

    def __init__(self, backend):
        self.backend = backend

    @property
    def backend_name(self) -> str:
        return getattr(self.backend, "name", type(self.backend).__name__)

    async def open(self) -> "Database":
        await self.backend.open()
        return self

    async def close(self) -> None:
        await self.backend.close()

    async def __aenter__(self) -> "Database":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def execute(self, query: Query) -> QueryResult:
        logger.debug(
            f"{self.backend_name}: {query.action} {query.table} "
            f"filters={list(query.filters)} any_of={list(query.any_of)} window={query.window}"
        )
        return await self.backend.execute(query)


def connect(config) -> Database:
    """Build (but do not open) the database client the configuration asks for."""
    if config.backend == "postgrest":
        from pharmacy.remote import PostgrestBackend

        return Database(PostgrestBackend(config.supabase_url, config.supabase_key))
    return Database(SQLiteBackend(config.db_path))
