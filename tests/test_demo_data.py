from __future__ import annotations

import pytest

from pharmacy.api import DataAccess
from pharmacy.remote import PostgrestBackend
from pharmacy.db import Database
from pharmacy.services.demo_data import DEMO_PRODUCTS, WIPE_ORDER, load_demo_data, upsert_reference_data, wipe_all
from pharmacy.services.products import ProductFilters, fetch_products_page
from pharmacy.services.settings import DEFAULT_SETTINGS, load_settings


async def test_reference_data_is_idempotent(db, data):
    await upsert_reference_data(db)
    await upsert_reference_data(db)

    assert len(await data.fetch_all("roles")) == 3
    assert len(await data.fetch_all("settings")) == len(DEFAULT_SETTINGS)
    assert await load_settings(db) == DEFAULT_SETTINGS


async def test_demo_data_links_every_table(db, data):
    n = await load_demo_data(db)
    assert n == len(DEMO_PRODUCTS)

    page = await fetch_products_page(db, ProductFilters())
    assert page.total_count == len(DEMO_PRODUCTS)
    # Newest first: the last catalog entry was created last
    assert page.rows[0]["name"] == DEMO_PRODUCTS[-1][0]

    batches = await data.fetch_all("batches")
    product_ids = {p["id"] for p in await data.fetch_all("products")}
    assert batches and all(b["product_id"] in product_ids for b in batches)

    for table in ("quality_control_records", "purchase_orders", "purchase_order_items", "sales_orders", "sales_order_items", "user_roles", "profiles"):
        assert await data.fetch_all(table), table

    (order,) = await data.fetch_all("purchase_orders")
    items = await data.fetch_all("purchase_order_items")
    assert order["total_amount"] == pytest.approx(sum(i["quantity"] * i["unit_price"] for i in items), abs=0.01)


async def test_demo_data_can_be_loaded_twice(db, data):
    await load_demo_data(db)
    await load_demo_data(db)
    assert len(await data.fetch_all("users")) == 1
    assert len(await data.fetch_all("user_roles")) == 1


async def test_wipe_all(db, data):
    await load_demo_data(db)
    await wipe_all(db)
    for table in WIPE_ORDER:
        assert await data.fetch_all(table) == [], table


async def test_wipe_refuses_hosted_database():
    db = Database(PostgrestBackend("https://demo.supabase.co", "anon-key", client=object()))
    with pytest.raises(ValueError):
        await wipe_all(db)
