from __future__ import annotations

import logging
from typing import Any, Mapping

from pharmacy.db import DataAccessError, Database
from pharmacy.query import Query

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    # general
    "company_name": "",
    "company_email": "",
    "company_phone": "",
    "company_website": "",
    # security
    "two_factor_auth": False,
    "session_timeout": 30,
    "login_alerts": False,
    # notifications
    "email_notifications": False,
    "low_stock_alerts": False,
    "expiry_warnings": False,
    "order_updates": False,
    # system
    "default_currency": "USD",
    "timezone": "UTC",
    "language": "English",
    "date_format": "MM/DD/YYYY",
}

SETTINGS_GROUPS: dict[str, list[str]] = {
    "general": ["company_name", "company_email", "company_phone", "company_website"],
    "security": ["two_factor_auth", "session_timeout", "login_alerts"],
    "notifications": ["email_notifications", "low_stock_alerts", "expiry_warnings", "order_updates"],
    "system": ["default_currency", "timezone", "language", "date_format"],
}


async def fetch_settings(db: Database) -> list[dict[str, Any]]:
    """All stored (key, value) pairs. Raises DataAccessError on failure."""
    result = await db.execute(Query(table="settings").select("key, value"))
    return result.rows


def fold_settings(rows: list[Mapping[str, Any]], defaults: Mapping[str, Any] = DEFAULT_SETTINGS) -> dict[str, Any]:
    merged = dict(defaults)
    for r in rows:
        merged[r["key"]] = r["value"]
    return merged


async def load_settings(db: Database) -> dict[str, Any]:
    return fold_settings(await fetch_settings(db))


async def save_setting(db: Database, key: str, value: Any) -> dict[str, Any]:
    """Insert the key or replace its value (conflict target: settings.key)."""
    if not key:
        raise ValueError("Setting key is required.")
    result = await db.execute(Query(table="settings").upsert({"key": key, "value": value}, on_conflict="key"))
    if not result.rows:
        raise DataAccessError(f"Saving setting {key!r} returned no row.", table="settings")
    return result.rows[0]


async def save_group(db: Database, group: str, values: Mapping[str, Any]) -> list[str]:
    """
    Save every key of one settings group, one upsert at a time.

    There is no transaction around the group: if a save fails, keys saved
    before it stay saved, later keys are left untouched, and the error is
    raised to the caller.
    """
    try:
        keys = SETTINGS_GROUPS[group]
    except KeyError:
        raise KeyError(f"Unknown settings group: {group!r}") from None

    saved: list[str] = []
    for key in keys:
        value = values.get(key, DEFAULT_SETTINGS.get(key))
        await save_setting(db, key, value)
        saved.append(key)
    logger.info(f"Saved {group} settings ({len(saved)} keys)")
    return saved
