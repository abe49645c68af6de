"""
Pytest configuration and shared fixtures.
"""
import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from typing import List, Dict, Any
from unittest.mock import AsyncMock, MagicMock

from atelier.llm_client import LLMClient
from atelier.models import Item
from atelier.store import AtelierStore


# Fixed reference instant so windowed counts are deterministic
NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_item():
    """Factory for in-memory catalog items."""
    counter = {"n": 0}

    def _make(price: Any = None, status: str = "available", title: str = None, **kwargs) -> Item:
        counter["n"] += 1
        n = counter["n"]
        return Item(
            id=kwargs.pop("id", f"item-{n}"),
            title=title or f"Item {n}",
            slug=kwargs.pop("slug", f"item-{n}"),
            price=price,
            status=status,
            created_at=kwargs.pop("created_at", NOW - timedelta(days=30 - n)),
        )

    return _make


@pytest.fixture
def sample_catalog() -> List[Dict[str, Any]]:
    """Catalog rows covering valid, malformed and missing prices."""
    return [
        {"item_id": "kebaya-01", "title": "Kebaya Sulam", "price": "100", "status": "sold"},
        {"item_id": "kurung-02", "title": "Kurung Moden", "price": "oops", "status": "sold"},
        {"item_id": "tudung-03", "title": "Tudung Satin", "price": "50", "status": "available"},
        {"item_id": "jubah-04", "title": "Jubah Lace", "price": None, "status": "available"},
        {"item_id": "kaftan-05", "title": "Kaftan Batik", "price": "80", "status": "offline_sold"},
        {"item_id": "selendang-06", "title": "Selendang", "price": "30", "status": "draft"},
    ]


@pytest_asyncio.fixture
async def store():
    """Fresh in-memory DuckDB store per test."""
    s = AtelierStore(":memory:")
    await s.connect()
    try:
        yield s
    finally:
        await s.close()


@pytest_asyncio.fixture
async def seeded_store(store, sample_catalog, now):
    """Store with the sample catalog inserted in order, oldest first."""
    for offset, row in enumerate(sample_catalog):
        await store.catalog.add_item(
            created_at=now - timedelta(days=60 - offset),
            **row,
        )
    return store


@pytest.fixture
def mock_llm():
    """LLM client that returns a fixed completion."""
    llm = MagicMock(spec=LLMClient)
    llm.model = "claude-test"
    llm.is_available = True
    llm.complete = AsyncMock(return_value={
        "id": "msg_test",
        "content": "- Restock kebaya\n- Promote kaftan",
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 120, "output_tokens": 40},
    })
    return llm
