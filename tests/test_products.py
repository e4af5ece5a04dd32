from __future__ import annotations

import pytest

from pharmacy.db import DataAccessError, Database, SQLiteBackend
from pharmacy.query import Filter
from pharmacy.services.products import (
    PAGE_SIZE,
    ProductFilters,
    ProductPage,
    build_products_query,
    create_product,
    fetch_products_page,
    page_window,
)

from conftest import add_product


def test_page_window():
    assert page_window(0) == (0, 9)
    assert page_window(3) == (30, 39)
    with pytest.raises(ValueError):
        page_window(-1)


def test_query_without_filters():
    query = build_products_query(ProductFilters())
    assert query.table == "products"
    assert query.columns == "id, name, sku, category, price, stock_quantity, status"
    assert query.filters == ()
    assert query.any_of == ()
    assert query.order == (("created_at", True), ("id", False))
    assert query.window == (0, 9)
    assert query.count is True


def test_query_with_all_filters():
    query = build_products_query(ProductFilters(page=2, search=" amox ", category="Antibiotics", status="active"))
    assert query.filters == (Filter("category", "eq", "Antibiotics"), Filter("status", "eq", "active"))
    assert query.any_of == (Filter("name", "ilike", "%amox%"), Filter("sku", "ilike", "%amox%"))
    assert query.window == (20, 29)


def test_page_navigation_flags():
    page = ProductPage(rows=[], total_count=25, page=0)
    assert page.page_count == 3
    assert not page.has_previous
    assert page.has_next

    last = ProductPage(rows=[], total_count=25, page=2)
    assert last.has_previous
    assert not last.has_next

    assert ProductPage().page_count == 0


async def test_first_page_newest_first_with_total(db, catalog):
    page = await fetch_products_page(db, ProductFilters(page=0, search="", category="all", status="all"))

    assert page.total_count == 25
    assert len(page.rows) == PAGE_SIZE
    assert [r["name"] for r in page.rows] == [f"Product {i:02d}" for i in range(24, 14, -1)]
    assert set(page.rows[0]) == {"id", "name", "sku", "category", "price", "stock_quantity", "status"}


async def test_last_page_is_partial(db, catalog):
    page = await fetch_products_page(db, ProductFilters(page=2))
    assert [r["name"] for r in page.rows] == [f"Product {i:02d}" for i in range(4, -1, -1)]
    assert page.total_count == 25
    assert page.page_count == 3


async def test_pages_do_not_overlap_when_created_at_ties(db):
    for i in range(15):
        await add_product(db, f"Batch item {i}", minute=0)

    first = await fetch_products_page(db, ProductFilters(page=0))
    second = await fetch_products_page(db, ProductFilters(page=1))

    ids = [r["id"] for r in first.rows + second.rows]
    assert len(ids) == 15
    assert len(set(ids)) == 15
    assert [r["id"] for r in first.rows] == sorted(r["id"] for r in first.rows)


async def test_page_past_the_end_is_empty_but_counted(db, catalog):
    page = await fetch_products_page(db, ProductFilters(page=5))
    assert page.rows == []
    assert page.total_count == 25


async def test_search_matches_name_or_sku_case_insensitively(db):
    await add_product(db, "Amoxicillin", minute=1, sku="ANT-001")
    await add_product(db, "Co-amoxiclav", minute=2, sku="ANT-002")
    await add_product(db, "Generic antibiotic", minute=3, sku="AMOX-500")
    await add_product(db, "Paracetamol", minute=4, sku="ANL-001")

    page = await fetch_products_page(db, ProductFilters(search="amox"))

    assert sorted(r["name"] for r in page.rows) == ["Amoxicillin", "Co-amoxiclav", "Generic antibiotic"]
    assert page.total_count == 3
    for r in page.rows:
        assert "amox" in r["name"].lower() or "amox" in (r["sku"] or "").lower()


async def test_search_text_is_literal(db):
    await add_product(db, "Alcohol 70% solution", minute=1)
    await add_product(db, "Alcohol 700 ml", minute=2)

    page = await fetch_products_page(db, ProductFilters(search="70%"))
    assert [r["name"] for r in page.rows] == ["Alcohol 70% solution"]

    page = await fetch_products_page(db, ProductFilters(search="a_c"))
    assert page.rows == []


async def test_category_and_status_filters_are_combined(db, catalog):
    page = await fetch_products_page(db, ProductFilters(category="Antibiotics", status="active"))

    expected = [r for r in catalog if r["category"] == "Antibiotics" and r["status"] == "active"]
    assert page.total_count == len(expected)
    assert all(r["category"] == "Antibiotics" and r["status"] == "active" for r in page.rows)


async def test_filters_combine_with_search(db, catalog):
    page = await fetch_products_page(db, ProductFilters(search="product 1", status="inactive"))
    # Product 10..19 with i % 4 == 0
    assert sorted(r["name"] for r in page.rows) == ["Product 12", "Product 16"]


async def test_errors_propagate(tmp_path):
    closed = Database(SQLiteBackend(tmp_path / "closed.db"))
    with pytest.raises(DataAccessError):
        await fetch_products_page(closed, ProductFilters())


async def test_create_product(db):
    created = await create_product(db, {"name": "  Celecoxib ", "price": "11.2", "sku": "", "category": "Anti-inflammatory"})
    assert created["name"] == "Celecoxib"
    assert created["price"] == 11.2
    assert created["sku"] is None

    page = await fetch_products_page(db, ProductFilters())
    assert page.total_count == 1


@pytest.mark.parametrize("record", [{"name": "", "price": 1}, {"name": "X", "price": "abc"}, {"name": "X", "price": -1}])
async def test_create_product_validation(db, record):
    with pytest.raises(ValueError):
        await create_product(db, record)
