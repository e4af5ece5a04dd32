from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from pharmacy.api import DataAccess
from pharmacy.db import Database, SQLiteBackend
from pharmacy.query import Query


@pytest.fixture
async def db(tmp_path):
    database = Database(SQLiteBackend(tmp_path / "test.db"))
    async with database:
        yield database


@pytest.fixture
def data(db):
    return DataAccess(db)


def ts(minutes: int) -> str:
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return (base + timedelta(minutes=minutes)).strftime("%Y-%m-%dT%H:%M:%S.000Z")


async def add_product(db: Database, name: str, *, minute: int, **extra) -> dict:
    record = {"name": name, "price": 1.0, "created_at": ts(minute)}
    record.update(extra)
    return (await db.execute(Query(table="products").insert(record))).rows[0]


@pytest.fixture
async def catalog(db):
    """25 products; the higher the number, the newer the row."""
    categories = ["Antibiotics", "Analgesics", "Anti-inflammatory"]
    rows = []
    for i in range(25):
        rows.append(
            await add_product(
                db,
                f"Product {i:02d}",
                minute=i,
                sku=f"SKU-{i:03d}",
                category=categories[i % 3],
                status="inactive" if i % 4 == 0 else "active",
            )
        )
    return rows
