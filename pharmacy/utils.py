from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

T = TypeVar("T")


def run_async(coro: Awaitable[T]) -> T:
    # Streamlit scripts run synchronously; each call gets its own event loop.
    return asyncio.run(coro)


def short_id(value: str | None) -> str:
    return (value or "")[:8]


def format_money(value: float | None, currency: str = "USD") -> str:
    return f"{currency} {float(value or 0):,.2f}"
