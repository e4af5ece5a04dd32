from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pharmacy import types as t


@dataclass(frozen=True)
class Relationship:
    column: str
    references: str
    referenced_column: str = "id"


@dataclass(frozen=True)
class TableSpec:
    """
    Registry entry tying a table tag to its three shapes.

    primary_key is the address used by fetch/update/delete; user_roles is the
    only table whose key is composite. unique lists natural keys usable as an
    upsert conflict target (settings.key).
    """

    name: str
    row: Any
    insert: Any
    update: Any
    primary_key: tuple[str, ...] = ("id",)
    relationships: tuple[Relationship, ...] = ()
    unique: tuple[str, ...] = ()
    json_columns: tuple[str, ...] = ()
    immutable: tuple[str, ...] = ("created_at",)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self.row.__annotations__)

    @property
    def required_insert_columns(self) -> frozenset[str]:
        return frozenset(self.insert.__required_keys__)

    @property
    def update_columns(self) -> frozenset[str]:
        return frozenset(self.update.__optional_keys__)

    @property
    def has_surrogate_id(self) -> bool:
        return self.primary_key == ("id",)

    @property
    def has_updated_at(self) -> bool:
        return "updated_at" in self.columns

    def references(self, table: str) -> list[Relationship]:
        return [r for r in self.relationships if r.references == table]


def _owned(*rels: Relationship) -> tuple[Relationship, ...]:
    # Every table may carry an owning user.
    return rels + (Relationship("user_id", "users"),)


TABLES: dict[str, TableSpec] = {
    s.name: s
    for s in (
        TableSpec("users", t.UserRow, t.UserInsert, t.UserUpdate),
        TableSpec(
            "profiles",
            t.ProfileRow,
            t.ProfileInsert,
            t.ProfileUpdate,
            relationships=(Relationship("id", "users"),),
        ),
        TableSpec("products", t.ProductRow, t.ProductInsert, t.ProductUpdate, relationships=_owned()),
        TableSpec(
            "batches",
            t.BatchRow,
            t.BatchInsert,
            t.BatchUpdate,
            relationships=_owned(Relationship("product_id", "products")),
        ),
        TableSpec("suppliers", t.SupplierRow, t.SupplierInsert, t.SupplierUpdate, relationships=_owned()),
        TableSpec(
            "purchase_orders",
            t.PurchaseOrderRow,
            t.PurchaseOrderInsert,
            t.PurchaseOrderUpdate,
            relationships=_owned(Relationship("supplier_id", "suppliers")),
        ),
        TableSpec(
            "purchase_order_items",
            t.PurchaseOrderItemRow,
            t.PurchaseOrderItemInsert,
            t.PurchaseOrderItemUpdate,
            relationships=_owned(
                Relationship("purchase_order_id", "purchase_orders"),
                Relationship("product_id", "products"),
            ),
        ),
        TableSpec(
            "sales_orders",
            t.SalesOrderRow,
            t.SalesOrderInsert,
            t.SalesOrderUpdate,
            relationships=_owned(),
        ),
        TableSpec(
            "sales_order_items",
            t.SalesOrderItemRow,
            t.SalesOrderItemInsert,
            t.SalesOrderItemUpdate,
            relationships=_owned(
                Relationship("sales_order_id", "sales_orders"),
                Relationship("product_id", "products"),
            ),
        ),
        TableSpec(
            "quality_control_records",
            t.QualityControlRecordRow,
            t.QualityControlRecordInsert,
            t.QualityControlRecordUpdate,
            relationships=_owned(
                Relationship("batch_id", "batches"),
                Relationship("inspector_id", "users"),
            ),
        ),
        TableSpec("roles", t.RoleRow, t.RoleInsert, t.RoleUpdate, relationships=_owned()),
        TableSpec(
            "user_roles",
            t.UserRoleRow,
            t.UserRoleInsert,
            t.UserRoleUpdate,
            primary_key=("user_id", "role_id"),
            relationships=(Relationship("user_id", "users"), Relationship("role_id", "roles")),
        ),
        TableSpec(
            "settings",
            t.SettingRow,
            t.SettingInsert,
            t.SettingUpdate,
            relationships=_owned(),
            unique=("key",),
            json_columns=("value",),
        ),
        TableSpec(
            "reports",
            t.ReportRow,
            t.ReportInsert,
            t.ReportUpdate,
            relationships=_owned(Relationship("generated_by_user_id", "users")),
        ),
    )
}


def get_table(name: str) -> TableSpec:
    try:
        return TABLES[name]
    except KeyError:
        raise KeyError(f"Unknown table: {name!r}") from None


# Local schema for the SQLite backend. The hosted database owns its own DDL;
# this mirrors it closely enough for demo mode and tests.
NOW_SQL = "(strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))"

SCHEMA_SQL = rf"""
-- Auth users (owner of every user_id)
CREATE TABLE IF NOT EXISTS users (
  id TEXT PRIMARY KEY,
  email TEXT UNIQUE,
  created_at TEXT NOT NULL DEFAULT {NOW_SQL}
);

CREATE TABLE IF NOT EXISTS profiles (
  id TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
  full_name TEXT,
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

-- Product catalog
CREATE TABLE IF NOT EXISTS products (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  sku TEXT,
  category TEXT,
  description TEXT,
  strength TEXT,                         -- e.g. 500mg
  unit TEXT,                             -- e.g. tablets, ml
  price REAL NOT NULL,
  stock_quantity INTEGER NOT NULL DEFAULT 0,
  status TEXT DEFAULT 'active',          -- active / inactive
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_products_created_at ON products(created_at);

-- Manufacturing lots of a product
CREATE TABLE IF NOT EXISTS batches (
  id TEXT PRIMARY KEY,
  batch_number TEXT NOT NULL,
  product_id TEXT REFERENCES products(id),
  quantity INTEGER NOT NULL,
  manufacture_date TEXT,                 -- ISO date
  expiry_date TEXT,                      -- ISO date
  location TEXT,
  status TEXT,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS suppliers (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  contact_person TEXT,
  email TEXT,
  phone TEXT,
  address TEXT,
  city TEXT,
  status TEXT,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS purchase_orders (
  id TEXT PRIMARY KEY,
  po_number TEXT,
  supplier_id TEXT REFERENCES suppliers(id),
  order_date TEXT NOT NULL,
  expected_delivery_date TEXT,
  status TEXT NOT NULL DEFAULT 'pending',
  total_amount REAL,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS purchase_order_items (
  id TEXT PRIMARY KEY,
  purchase_order_id TEXT REFERENCES purchase_orders(id),
  product_id TEXT REFERENCES products(id),
  quantity INTEGER NOT NULL,
  unit_price REAL NOT NULL,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS sales_orders (
  id TEXT PRIMARY KEY,
  so_number TEXT,
  customer_name TEXT NOT NULL,
  order_date TEXT NOT NULL,
  status TEXT NOT NULL DEFAULT 'pending',
  total_amount REAL,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS sales_order_items (
  id TEXT PRIMARY KEY,
  sales_order_id TEXT REFERENCES sales_orders(id),
  product_id TEXT REFERENCES products(id),
  quantity INTEGER NOT NULL,
  unit_price REAL NOT NULL,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS quality_control_records (
  id TEXT PRIMARY KEY,
  batch_id TEXT REFERENCES batches(id),
  inspection_date TEXT NOT NULL,
  inspector_id TEXT REFERENCES users(id),
  result TEXT NOT NULL,                  -- passed / failed / pending
  notes TEXT,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS roles (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  description TEXT,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

-- Role membership: composite key, no surrogate id
CREATE TABLE IF NOT EXISTS user_roles (
  user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
  role_id TEXT NOT NULL REFERENCES roles(id) ON DELETE CASCADE,
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT,
  PRIMARY KEY (user_id, role_id)
);

-- Key/value configuration; value holds JSON text
CREATE TABLE IF NOT EXISTS settings (
  id TEXT PRIMARY KEY,
  key TEXT NOT NULL UNIQUE,
  value TEXT,
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);

CREATE TABLE IF NOT EXISTS reports (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  report_type TEXT NOT NULL,
  period TEXT,
  format TEXT,
  generated_by_user_id TEXT REFERENCES users(id),
  user_id TEXT REFERENCES users(id),
  created_at TEXT NOT NULL DEFAULT {NOW_SQL},
  updated_at TEXT
);
"""
