from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

ACTIONS = ("select", "insert", "update", "delete", "upsert")


@dataclass(frozen=True)
class Filter:
    column: str
    op: str  # eq / ilike
    value: Any


@dataclass(frozen=True)
class Query:
    """
    Declarative description of one request against a table.

    Backends translate it (SQL for SQLite, builder calls for PostgREST).
    filters are ANDed; any_of is a single OR group ANDed with the rest.
    window is an inclusive (start, end) row range applied after ordering.
    """

    table: str
    action: str = "select"
    columns: str = "*"
    filters: tuple[Filter, ...] = ()
    any_of: tuple[Filter, ...] = ()
    order: tuple[tuple[str, bool], ...] = ()
    window: Optional[tuple[int, int]] = None
    count: bool = False
    payload: Optional[dict[str, Any]] = None
    on_conflict: Optional[str] = None

    def __post_init__(self) -> None:
        if self.action not in ACTIONS:
            raise ValueError(f"Unsupported action: {self.action!r}")

    def select(self, columns: str = "*") -> "Query":
        return replace(self, action="select", columns=columns)

    def eq(self, column: str, value: Any) -> "Query":
        return replace(self, filters=self.filters + (Filter(column, "eq", value),))

    def match(self, key: dict[str, Any]) -> "Query":
        q = self
        for column, value in key.items():
            q = q.eq(column, value)
        return q

    def ilike_any(self, columns: list[str] | tuple[str, ...], text: str) -> "Query":
        """OR of case-insensitive substring matches of text over columns."""
        pattern = contains_pattern(text)
        return replace(self, any_of=tuple(Filter(c, "ilike", pattern) for c in columns))

    def order_by(self, column: str, *, desc: bool = False) -> "Query":
        return replace(self, order=self.order + ((column, desc),))

    def range(self, start: int, end: int) -> "Query":
        if start < 0 or end < start:
            raise ValueError(f"Invalid range: {start}..{end}")
        return replace(self, window=(int(start), int(end)))

    def with_count(self) -> "Query":
        return replace(self, count=True)

    def insert(self, record: dict[str, Any]) -> "Query":
        return replace(self, action="insert", payload=dict(record))

    def update(self, patch: dict[str, Any]) -> "Query":
        return replace(self, action="update", payload=dict(patch))

    def delete(self) -> "Query":
        return replace(self, action="delete")

    def upsert(self, record: dict[str, Any], *, on_conflict: str) -> "Query":
        return replace(self, action="upsert", payload=dict(record), on_conflict=on_conflict)


@dataclass
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    count: Optional[int] = None


def escape_like(text: str) -> str:
    # Backslash is the escape character on both backends.
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(text: str) -> str:
    return f"%{escape_like(text)}%"
