"""
Store facade composing the repositories over one DuckDB connection.

The store is constructed explicitly and handed to the services that need
it. The web app opens one on startup and closes it on shutdown; nothing
in this package keeps a module-level handle.

Usage:
    async with open_store(":memory:") as store:
        items = await store.catalog.load_all()
"""
from contextlib import asynccontextmanager
from typing import Dict, Any, Optional

from atelier.repositories import (
    Database,
    CatalogRepository,
    EventRepository,
    InsightRepository,
)


class AtelierStore:
    """Queryable store: catalog, events and insight log."""

    def __init__(self, db_path: Optional[str] = None, query_timeout: Optional[float] = None):
        self.db = Database(db_path, query_timeout=query_timeout)
        self.catalog = CatalogRepository(self.db)
        self.events = EventRepository(self.db)
        self.insights = InsightRepository(self.db)

    async def connect(self) -> "AtelierStore":
        await self.db.connect()
        return self

    async def close(self) -> None:
        await self.db.close()

    async def get_stats(self) -> Dict[str, Any]:
        """Row counts plus connection info, for the health endpoint."""
        stats = await self.catalog.get_stats()
        stats.update(self.db.get_connection_info())
        return stats


@asynccontextmanager
async def open_store(db_path: Optional[str] = None, query_timeout: Optional[float] = None):
    """Open a store for the duration of the block and always close it."""
    store = AtelierStore(db_path, query_timeout=query_timeout)
    await store.connect()
    try:
        yield store
    finally:
        await store.close()
