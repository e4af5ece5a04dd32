from __future__ import annotations

import pytest

from pharmacy.schema import TABLES, get_table


def test_every_table_is_registered():
    assert set(TABLES) == {
        "users",
        "profiles",
        "products",
        "batches",
        "suppliers",
        "purchase_orders",
        "purchase_order_items",
        "sales_orders",
        "sales_order_items",
        "quality_control_records",
        "roles",
        "user_roles",
        "settings",
        "reports",
    }


def test_unknown_table():
    with pytest.raises(KeyError):
        get_table("customers")


def test_insert_shape_leaves_server_defaults_optional():
    products = get_table("products")
    assert products.required_insert_columns == {"name", "price"}
    assert "id" not in products.required_insert_columns
    assert "created_at" not in products.required_insert_columns


def test_update_shape_is_fully_optional_and_never_touches_created_at():
    for spec in TABLES.values():
        assert spec.update_columns <= set(spec.columns), spec.name
        assert "created_at" not in spec.update_columns, spec.name


def test_insert_shape_covers_row_columns():
    for spec in TABLES.values():
        insert_keys = set(spec.insert.__required_keys__) | set(spec.insert.__optional_keys__)
        assert insert_keys == set(spec.columns), spec.name


def test_user_roles_composite_key():
    spec = get_table("user_roles")
    assert spec.primary_key == ("user_id", "role_id")
    assert not spec.has_surrogate_id
    assert "id" not in spec.columns
    assert spec.required_insert_columns == {"user_id", "role_id"}


def test_settings_natural_key():
    spec = get_table("settings")
    assert spec.unique == ("key",)
    assert spec.json_columns == ("value",)


def test_relationships():
    assert [r.column for r in get_table("batches").references("products")] == ["product_id"]
    assert [r.column for r in get_table("purchase_order_items").references("purchase_orders")] == ["purchase_order_id"]
    assert [r.column for r in get_table("sales_order_items").references("sales_orders")] == ["sales_order_id"]
    assert [r.column for r in get_table("purchase_orders").references("suppliers")] == ["supplier_id"]
    assert [r.column for r in get_table("quality_control_records").references("batches")] == ["batch_id"]
    assert {r.references for r in get_table("user_roles").relationships} == {"users", "roles"}
    # Every table except users itself may carry an owner
    for name, spec in TABLES.items():
        if name not in ("users", "profiles", "user_roles"):
            assert spec.references("users"), name
