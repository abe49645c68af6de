"""
DuckDB connection management, schema initialization and the repository base.

All domain repositories share one Database instance.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Any, List

import duckdb

from atelier.config import config
from atelier.exceptions import DataSourceError, QueryTimeoutError
from atelier.observability import get_logger

logger = get_logger(__name__)

MEMORY_DB = ":memory:"

SCHEMA_SQL = """
-- Catalog items (price is free-form text from the admin form)
CREATE TABLE IF NOT EXISTS items (
    id VARCHAR PRIMARY KEY,
    title VARCHAR NOT NULL,
    slug VARCHAR,
    price VARCHAR,
    status VARCHAR,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- Page-view events
CREATE TABLE IF NOT EXISTS analytics_item_views (
    id VARCHAR PRIMARY KEY,
    item_id VARCHAR NOT NULL,
    visitor_id VARCHAR,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- Outbound WhatsApp contact clicks
CREATE TABLE IF NOT EXISTS whatsapp_clicks (
    id VARCHAR PRIMARY KEY,
    item_id VARCHAR NOT NULL,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

-- Generated insights, append-only
CREATE SEQUENCE IF NOT EXISTS ai_insight_logs_seq;
CREATE TABLE IF NOT EXISTS ai_insight_logs (
    id VARCHAR PRIMARY KEY,
    seq BIGINT DEFAULT nextval('ai_insight_logs_seq'),
    insight_text VARCHAR NOT NULL,
    metrics VARCHAR NOT NULL,
    created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_views_item_created ON analytics_item_views(item_id, created_at);
CREATE INDEX IF NOT EXISTS idx_clicks_item_created ON whatsapp_clicks(item_id, created_at);
"""


class Database:
    """
    Async-compatible DuckDB handle.

    One connection, serialized by an asyncio lock, with blocking calls
    offloaded to a single-worker thread pool so the event loop stays free.

    Lifecycle:
        db = Database(path)
        await db.connect()   # opens connection and creates schema
        ...
        await db.close()     # waits for in-flight queries, closes connection
    """

    def __init__(self, db_path: str = None, query_timeout: float = None):
        self.db_path = str(db_path or config.store.db_path)
        self.query_timeout = query_timeout or config.store.query_timeout
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = asyncio.Lock()
        self._total_queries = 0

    @property
    def is_connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        """Open the connection and create the schema if needed."""
        async with self._lock:
            if self._connection is not None:
                return
            try:
                if self.db_path != MEMORY_DB:
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._connection = duckdb.connect(self.db_path)
                self._connection.execute(SCHEMA_SQL)
            except (duckdb.Error, OSError) as e:
                self._connection = None
                raise DataSourceError("Store unreachable", str(e), operation="connect") from e

            self._executor = ThreadPoolExecutor(
                max_workers=1,  # DuckDB connections require serialized access
                thread_name_prefix="duckdb"
            )
            logger.info(f"DuckDB connected: {self.db_path}")

    async def close(self) -> None:
        """Close the thread pool and the connection."""
        async with self._lock:
            if self._executor:
                self._executor.shutdown(wait=True)
                self._executor = None
            if self._connection:
                self._connection.close()
                self._connection = None
                logger.info("DuckDB connection closed")

    @asynccontextmanager
    async def connection(self):
        """Yield the connection while holding the lock, connecting lazily."""
        if self._connection is None:
            await self.connect()
        async with self._lock:
            if self._connection is None:
                raise DataSourceError("Store is closed", operation="connection")
            yield self._connection

    async def _run(self, sql: str, params: Optional[list], fetch: str, timeout: float = None) -> Any:
        timeout = timeout or self.query_timeout
        async with self.connection() as conn:
            self._total_queries += 1

            def _work():
                cursor = conn.execute(sql, params or [])
                if fetch == "one":
                    return cursor.fetchone()
                if fetch == "all":
                    return cursor.fetchall()
                return None

            loop = asyncio.get_running_loop()
            try:
                return await asyncio.wait_for(
                    loop.run_in_executor(self._executor, _work),
                    timeout=timeout
                )
            except asyncio.TimeoutError:
                raise QueryTimeoutError(sql, timeout)
            except duckdb.Error as e:
                logger.error(f"DuckDB query failed: {e}", extra={"sql": sql[:200]})
                raise DataSourceError("Query failed", str(e), operation="query") from e

    async def execute(self, sql: str, params: list = None) -> None:
        """Execute a statement (INSERT/UPDATE/DDL)."""
        await self._run(sql, params, fetch="none")

    async def fetchone(self, sql: str, params: list = None) -> Optional[tuple]:
        """Execute query and fetch one row."""
        return await self._run(sql, params, fetch="one")

    async def fetchall(self, sql: str, params: list = None) -> List[tuple]:
        """Execute query and fetch all rows."""
        return await self._run(sql, params, fetch="all")

    def get_connection_info(self) -> dict:
        """Connection info for monitoring."""
        return {
            "status": "active" if self._connection else "not_initialized",
            "total_queries": self._total_queries,
            "db_path": self.db_path,
        }


class BaseRepository:
    """
    Base repository bound to a shared Database.

    Usage:
        class ItemsRepository(BaseRepository):
            async def get(self, item_id: str):
                return await self.db.fetchone("SELECT * FROM items WHERE id = ?", [item_id])
    """

    def __init__(self, db: Database):
        self.db = db
