from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError
from postgrest.types import CountMethod

from pharmacy.api import DataAccess
from pharmacy.db import DataAccessError, Database
from pharmacy.query import Query
from pharmacy.remote import PostgrestBackend, or_expression, quote_value
from pharmacy.services.products import ProductFilters, build_products_query, fetch_products_page
from pharmacy.services.settings import save_setting


class FakeBuilder:
    """Records every builder call; execute() returns the canned response or raises."""

    def __init__(self, calls, response=None, error=None):
        self.calls = calls
        self.response = response or SimpleNamespace(data=[], count=None)
        self.error = error

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    async def execute(self):
        if self.error is not None:
            raise self.error
        return self.response


class FakeClient:
    def __init__(self, response=None, error=None):
        self.calls = []
        self.response = response
        self.error = error

    def from_(self, table):
        self.calls.append(("from_", (table,), {}))
        return FakeBuilder(self.calls, self.response, self.error)

    async def aclose(self):
        self.calls.append(("aclose", (), {}))


def _backend(client):
    return PostgrestBackend("https://demo.supabase.co/", "anon-key", client=client)


def test_rest_url():
    assert _backend(FakeClient()).rest_url == "https://demo.supabase.co/rest/v1"


def test_requires_url_and_key():
    with pytest.raises(ValueError):
        PostgrestBackend("", "key")


def test_quote_value():
    assert quote_value("%a,b%") == '"%a,b%"'
    assert quote_value('say "hi"') == '"say \\"hi\\""'
    assert quote_value("50\\%") == '"50\\\\%"'


def test_or_expression():
    query = Query(table="products").ilike_any(("name", "sku"), "amox")
    assert or_expression(query.any_of) == 'name.ilike."%amox%",sku.ilike."%amox%"'


async def test_products_query_translation():
    client = FakeClient(SimpleNamespace(data=[{"id": "1", "name": "Amoxicillin"}], count=31))
    db = Database(_backend(client))

    page = await fetch_products_page(db, ProductFilters(page=1, search="amox", category="Antibiotics", status="active"))

    assert page.total_count == 31
    assert page.rows == [{"id": "1", "name": "Amoxicillin"}]
    assert client.calls == [
        ("from_", ("products",), {}),
        (
            "select",
            ("id", "name", "sku", "category", "price", "stock_quantity", "status"),
            {"count": CountMethod.exact},
        ),
        ("eq", ("category", "Antibiotics"), {}),
        ("eq", ("status", "active"), {}),
        ("or_", ('name.ilike."%amox%",sku.ilike."%amox%"',), {}),
        ("order", ("created_at",), {"desc": True}),
        ("order", ("id",), {"desc": False}),
        ("range", (10, 19), {}),
    ]


async def test_plain_select_has_no_count():
    client = FakeClient()
    backend = _backend(client)
    backend.build(Query(table="roles"))
    assert client.calls[1] == ("select", ("*",), {"count": None})


async def test_write_translations():
    client = FakeClient(SimpleNamespace(data=[{"id": "r1"}], count=None))
    backend = _backend(client)

    backend.build(Query(table="roles").insert({"name": "admin"}))
    backend.build(Query(table="roles").eq("id", "r1").update({"name": "root"}))
    backend.build(Query(table="user_roles").match({"user_id": "u", "role_id": "r"}).delete())
    backend.build(Query(table="settings").upsert({"key": "timezone", "value": "UTC"}, on_conflict="key"))

    assert client.calls == [
        ("from_", ("roles",), {}),
        ("insert", ({"name": "admin"},), {}),
        ("from_", ("roles",), {}),
        ("update", ({"name": "root"},), {}),
        ("eq", ("id", "r1"), {}),
        ("from_", ("user_roles",), {}),
        ("delete", (), {}),
        ("eq", ("user_id", "u"), {}),
        ("eq", ("role_id", "r"), {}),
        ("from_", ("settings",), {}),
        ("upsert", ({"key": "timezone", "value": "UTC"},), {"on_conflict": "key"}),
    ]


async def test_null_equality_uses_is():
    client = FakeClient()
    _backend(client).build(Query(table="batches").eq("product_id", None))
    assert client.calls[-1] == ("is_", ("product_id", "null"), {})


async def test_api_error_becomes_data_access_error():
    error = APIError({"message": "duplicate key value violates unique constraint", "code": "23505"})
    db = Database(_backend(FakeClient(error=error)))

    with pytest.raises(DataAccessError) as info:
        await save_setting(db, "timezone", "UTC")
    assert "duplicate key" in str(info.value)
    assert info.value.table == "settings"
    assert info.value.cause is error


async def test_transport_error_is_swallowed_by_generic_layer():
    db = Database(_backend(FakeClient(error=httpx.ConnectError("unreachable"))))
    data = DataAccess(db)
    assert await data.fetch_all("products") is None
    assert await data.delete_by_id("products", "p1") is False


async def test_delete_reports_whether_a_row_went_away():
    data = DataAccess(Database(_backend(FakeClient(SimpleNamespace(data=[], count=None)))))
    assert await data.delete_by_id("products", "missing") is False

    data = DataAccess(Database(_backend(FakeClient(SimpleNamespace(data=[{"id": "p1"}], count=None)))))
    assert await data.delete_by_id("products", "p1") is True


async def test_not_open_without_client():
    backend = PostgrestBackend("https://demo.supabase.co", "anon-key")
    with pytest.raises(DataAccessError):
        await backend.execute(build_products_query(ProductFilters()))


async def test_injected_client_is_not_closed():
    client = FakeClient()
    async with Database(_backend(client)):
        pass
    assert ("aclose", (), {}) not in client.calls


async def test_count_asks_for_one_row_and_the_exact_total():
    client = FakeClient(SimpleNamespace(data=[{"user_id": "u1"}], count=42))
    data = DataAccess(Database(_backend(client)))

    assert await data.count("user_roles") == 42
    assert client.calls == [
        ("from_", ("user_roles",), {}),
        ("select", ("user_id",), {"count": CountMethod.exact}),
        ("range", (0, 0), {}),
    ]
