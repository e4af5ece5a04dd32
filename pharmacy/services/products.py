from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from pharmacy.db import DataAccessError, Database
from pharmacy.query import Query

PAGE_SIZE = 10
ALL = "all"

PRODUCT_COLUMNS = "id, name, sku, category, price, stock_quantity, status"
PRODUCT_CATEGORIES = ["Antibiotics", "Analgesics", "Anti-inflammatory"]
PRODUCT_STATUSES = ["active", "inactive"]


@dataclass(frozen=True)
class ProductFilters:
    page: int = 0
    search: str = ""
    category: str = ALL
    status: str = ALL


@dataclass
class ProductPage:
    rows: list[dict[str, Any]] = field(default_factory=list)
    total_count: int = 0
    page: int = 0

    @property
    def page_count(self) -> int:
        return math.ceil(self.total_count / PAGE_SIZE)

    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count - 1


def page_window(page: int) -> tuple[int, int]:
    """Inclusive row range for a zero-based page."""
    if page < 0:
        raise ValueError("Page index must be >= 0.")
    start = page * PAGE_SIZE
    return start, start + PAGE_SIZE - 1


def build_products_query(filters: ProductFilters) -> Query:
    start, end = page_window(int(filters.page))

    query = Query(table="products").select(PRODUCT_COLUMNS).with_count()

    if filters.category != ALL:
        query = query.eq("category", filters.category)
    if filters.status != ALL:
        query = query.eq("status", filters.status)

    search = (filters.search or "").strip()
    if search:
        query = query.ilike_any(("name", "sku"), search)

    # id breaks ties between rows created in the same millisecond
    return query.order_by("created_at", desc=True).order_by("id").range(start, end)


async def fetch_products_page(db: Database, filters: ProductFilters) -> ProductPage:
    """
    One page of the product listing plus the exact total.

    Unlike the generic helpers this raises DataAccessError: the page has to
    show an error state rather than an empty table.
    """
    result = await db.execute(build_products_query(filters))
    return ProductPage(rows=result.rows, total_count=int(result.count or 0), page=int(filters.page))


async def create_product(db: Database, record: dict[str, Any]) -> dict[str, Any]:
    name = str(record.get("name") or "").strip()
    if not name:
        raise ValueError("Product name is required.")
    try:
        price = float(record.get("price"))
    except (TypeError, ValueError):
        raise ValueError("Price must be a number.")
    if price < 0:
        raise ValueError("Price must be >= 0.")

    payload = {k: v for k, v in record.items() if v not in (None, "")}
    payload["name"] = name
    payload["price"] = price

    result = await db.execute(Query(table="products").insert(payload))
    if not result.rows:
        raise DataAccessError("Insert returned no row.", table="products")
    return result.rows[0]
