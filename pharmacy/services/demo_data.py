from __future__ import annotations

import random
from datetime import date, datetime, timedelta, timezone

from pharmacy.db import Database, SQLiteBackend
from pharmacy.query import Query
from pharmacy.services.settings import DEFAULT_SETTINGS, save_setting

DEMO_USER_EMAIL = "admin@pharmacy.local"

DEFAULT_ROLES = [
    ("admin", "Full access"),
    ("pharmacist", "Manage products, batches and quality control"),
    ("clerk", "Sales and purchase orders"),
]

DEMO_PRODUCTS = [
    ("Amoxicillin", "Antibiotics", "500mg", "capsules", 12.5),
    ("Amoxicillin/Clavulanate", "Antibiotics", "625mg", "tablets", 18.9),
    ("Azithromycin", "Antibiotics", "250mg", "tablets", 15.0),
    ("Ciprofloxacin", "Antibiotics", "500mg", "tablets", 9.75),
    ("Doxycycline", "Antibiotics", "100mg", "capsules", 8.4),
    ("Paracetamol", "Analgesics", "500mg", "tablets", 2.1),
    ("Codeine Phosphate", "Analgesics", "30mg", "tablets", 6.3),
    ("Tramadol", "Analgesics", "50mg", "capsules", 7.8),
    ("Aspirin", "Analgesics", "300mg", "tablets", 1.9),
    ("Ibuprofen", "Anti-inflammatory", "400mg", "tablets", 3.2),
    ("Naproxen", "Anti-inflammatory", "250mg", "tablets", 4.6),
    ("Diclofenac", "Anti-inflammatory", "50mg", "tablets", 3.9),
    ("Celecoxib", "Anti-inflammatory", "200mg", "capsules", 11.2),
    ("Prednisolone", "Anti-inflammatory", "5mg", "tablets", 5.5),
]

DEMO_SUPPLIERS = [
    ("MedSupply Co.", "Nairobi"),
    ("PharmaDirect Ltd", "Mombasa"),
    ("HealthSource Distributors", "Kisumu"),
]

# Delete order respects foreign keys.
WIPE_ORDER = [
    "quality_control_records",
    "sales_order_items",
    "sales_orders",
    "purchase_order_items",
    "purchase_orders",
    "batches",
    "products",
    "suppliers",
    "user_roles",
    "roles",
    "settings",
    "reports",
    "profiles",
    "users",
]


def _ts(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


async def _insert(db: Database, table: str, record: dict) -> dict:
    return (await db.execute(Query(table=table).insert(record))).rows[0]


async def upsert_reference_data(db: Database) -> None:
    """Default settings and roles; safe to call repeatedly."""
    stored = {r["key"] for r in (await db.execute(Query(table="settings").select("key"))).rows}
    for key, value in DEFAULT_SETTINGS.items():
        if key not in stored:
            await save_setting(db, key, value)

    existing = {r["name"] for r in (await db.execute(Query(table="roles").select("name"))).rows}
    for name, description in DEFAULT_ROLES:
        if name not in existing:
            await _insert(db, "roles", {"name": name, "description": description})


async def wipe_all(db: Database) -> None:
    if not isinstance(db.backend, SQLiteBackend):
        raise ValueError("Wiping data is only available for the local database.")
    await db.backend.truncate(WIPE_ORDER)


async def load_demo_data(db: Database, *, seed: int = 7) -> int:
    """Seed a small catalog with stock, orders and QC history. Returns products created."""
    rng = random.Random(seed)
    await upsert_reference_data(db)

    users = (await db.execute(Query(table="users").eq("email", DEMO_USER_EMAIL))).rows
    user = users[0] if users else await _insert(db, "users", {"email": DEMO_USER_EMAIL})
    await db.execute(Query(table="profiles").upsert({"id": user["id"], "full_name": "Demo Admin"}, on_conflict="id"))

    admin = (await db.execute(Query(table="roles").eq("name", "admin"))).rows[0]
    await db.execute(
        Query(table="user_roles").upsert({"user_id": user["id"], "role_id": admin["id"]}, on_conflict="user_id,role_id")
    )

    suppliers = []
    for name, city in DEMO_SUPPLIERS:
        suppliers.append(
            await _insert(db, "suppliers", {"name": name, "city": city, "status": "active", "user_id": user["id"]})
        )

    now = datetime.now(timezone.utc)
    products = []
    for i, (name, category, strength, unit, price) in enumerate(DEMO_PRODUCTS):
        products.append(
            await _insert(
                db,
                "products",
                {
                    "name": name,
                    "sku": f"{category[:3].upper()}-{name[:4].upper()}-{i + 1:03d}",
                    "category": category,
                    "strength": strength,
                    "unit": unit,
                    "price": price,
                    "stock_quantity": rng.randint(0, 500),
                    "status": "inactive" if i % 6 == 5 else "active",
                    "user_id": user["id"],
                    # Spread creation times so newest-first ordering is stable
                    "created_at": _ts(now - timedelta(minutes=len(DEMO_PRODUCTS) - i)),
                },
            )
        )

    today = date.today()
    for p in products:
        made = today - timedelta(days=rng.randint(30, 300))
        batch = await _insert(
            db,
            "batches",
            {
                "batch_number": f"B{made.strftime('%y%m%d')}-{rng.randint(100, 999)}",
                "product_id": p["id"],
                "quantity": rng.randint(50, 400),
                "manufacture_date": made.isoformat(),
                "expiry_date": (made + timedelta(days=730)).isoformat(),
                "location": rng.choice(["Shelf A", "Shelf B", "Cold Room"]),
                "status": "released",
                "user_id": user["id"],
            },
        )
        await _insert(
            db,
            "quality_control_records",
            {
                "batch_id": batch["id"],
                "inspection_date": (made + timedelta(days=3)).isoformat(),
                "inspector_id": user["id"],
                "result": rng.choice(["passed", "passed", "passed", "failed"]),
                "user_id": user["id"],
            },
        )

    po = await _insert(
        db,
        "purchase_orders",
        {
            "po_number": f"PO-{today.strftime('%Y%m%d')}-001",
            "supplier_id": suppliers[0]["id"],
            "order_date": today.isoformat(),
            "expected_delivery_date": (today + timedelta(days=7)).isoformat(),
            "user_id": user["id"],
        },
    )
    so = await _insert(
        db,
        "sales_orders",
        {
            "so_number": f"SO-{today.strftime('%Y%m%d')}-001",
            "customer_name": "City Clinic",
            "order_date": today.isoformat(),
            "user_id": user["id"],
        },
    )

    po_total = so_total = 0.0
    for p in rng.sample(products, 4):
        qty = rng.randint(10, 100)
        await _insert(
            db,
            "purchase_order_items",
            {"purchase_order_id": po["id"], "product_id": p["id"], "quantity": qty, "unit_price": p["price"]},
        )
        po_total += qty * float(p["price"])
    for p in rng.sample(products, 3):
        qty = rng.randint(1, 20)
        await _insert(
            db,
            "sales_order_items",
            {"sales_order_id": so["id"], "product_id": p["id"], "quantity": qty, "unit_price": p["price"]},
        )
        so_total += qty * float(p["price"])

    await db.execute(Query(table="purchase_orders").eq("id", po["id"]).update({"total_amount": round(po_total, 2)}))
    await db.execute(Query(table="sales_orders").eq("id", so["id"]).update({"total_amount": round(so_total, 2)}))
    return len(products)
