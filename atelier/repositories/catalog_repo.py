"""
Catalog repository: item snapshot and status counts.

Items are a point-in-time fact and are never filtered by a report window.
"""
import uuid
from datetime import datetime, timezone
from typing import List, Dict, Any, Iterable, Optional

from atelier.models import Item
from atelier.repositories.base import BaseRepository
from atelier.observability import get_logger

logger = get_logger(__name__)

_ITEM_COLUMNS = "id, title, slug, price, status, created_at"


class CatalogRepository(BaseRepository):
    """Repository for catalog items."""

    async def load_all(self) -> List[Item]:
        """
        Load the entire catalog, unfiltered and unpaginated.

        Ordering is the catalog snapshot order: oldest first, ties by id.

        Raises:
            DataSourceError: If the store is unreachable or the query fails
        """
        rows = await self.db.fetchall(f"""
            SELECT {_ITEM_COLUMNS}
            FROM items
            ORDER BY created_at ASC NULLS LAST, id ASC
        """)
        return [Item.from_row(r) for r in rows]

    async def recent_items(self, limit: int = 5) -> List[Item]:
        """Most recently created items, newest first."""
        rows = await self.db.fetchall(f"""
            SELECT {_ITEM_COLUMNS}
            FROM items
            ORDER BY created_at DESC NULLS LAST, id DESC
            LIMIT ?
        """, [limit])
        return [Item.from_row(r) for r in rows]

    async def count_by_status(self, statuses: Optional[Iterable[str]] = None) -> int:
        """
        Count items, optionally restricted to a set of statuses.

        Args:
            statuses: Statuses to match; None counts every item
        """
        if statuses is None:
            row = await self.db.fetchone("SELECT COUNT(*) FROM items")
            return row[0]

        statuses = list(statuses)
        if not statuses:
            return 0
        placeholders = ", ".join("?" for _ in statuses)
        row = await self.db.fetchone(
            f"SELECT COUNT(*) FROM items WHERE status IN ({placeholders})",
            statuses,
        )
        return row[0]

    async def add_item(
        self,
        title: str,
        price: Any = None,
        status: str = "available",
        slug: Optional[str] = None,
        item_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> Item:
        """
        Insert a catalog item.

        Price is stored as given (text), so malformed admin input survives
        and is handled by the KPI rules rather than rejected here.
        """
        item = Item(
            id=item_id or str(uuid.uuid4()),
            title=title,
            slug=slug,
            price=None if price is None else str(price),
            status=status,
            created_at=created_at or datetime.now(timezone.utc),
        )
        await self.db.execute(
            f"INSERT INTO items ({_ITEM_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            [item.id, item.title, item.slug, item.price, item.status, item.created_at],
        )
        logger.debug(f"Item added: {item.id}")
        return item

    async def get_stats(self) -> Dict[str, int]:
        """Row counts per table for health reporting."""
        row = await self.db.fetchone("""
            SELECT
                (SELECT COUNT(*) FROM items),
                (SELECT COUNT(*) FROM analytics_item_views),
                (SELECT COUNT(*) FROM whatsapp_clicks),
                (SELECT COUNT(*) FROM ai_insight_logs)
        """)
        return {
            "items": row[0],
            "views": row[1],
            "clicks": row[2],
            "insight_logs": row[3],
        }
