"""
Event repository: view and click counts.

Both telemetry streams are append-only. Counting is available per item
(the fan-out contract) and grouped by item (the batched alternative).
"""
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, List

from atelier.models import EventKind
from atelier.repositories.base import BaseRepository
from atelier.observability import get_logger

logger = get_logger(__name__)


def _since_clause(since: Optional[datetime], params: list, prefix: str = "WHERE") -> str:
    if since is None:
        return ""
    params.append(since)
    return f" {prefix} created_at >= ?"


class EventRepository(BaseRepository):
    """Repository for page-view and WhatsApp-click events."""

    async def count_events(
        self,
        kind: EventKind,
        item_id: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> int:
        """
        Count events of one kind.

        Args:
            kind: VIEW or CLICK
            item_id: Restrict to one item (None counts every item)
            since: Only events with created_at >= since (None is unbounded)

        Returns:
            Non-negative event count
        """
        kind = EventKind(kind)
        params: list = []
        conditions = []
        if item_id is not None:
            conditions.append("item_id = ?")
            params.append(item_id)
        if since is not None:
            conditions.append("created_at >= ?")
            params.append(since)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        row = await self.db.fetchone(f"SELECT COUNT(*) FROM {kind.table}{where}", params)
        return row[0] if row else 0

    async def count_events_by_item(
        self,
        kind: EventKind,
        since: Optional[datetime] = None,
    ) -> Dict[str, int]:
        """
        Count events of one kind grouped by item id in a single query.

        Items without events are absent from the result.
        """
        kind = EventKind(kind)
        params: list = []
        where = _since_clause(since, params)
        rows = await self.db.fetchall(
            f"SELECT item_id, COUNT(*) FROM {kind.table}{where} GROUP BY item_id",
            params,
        )
        return {r[0]: r[1] for r in rows}

    async def count_distinct_visitors(self, since: Optional[datetime] = None) -> int:
        """Number of distinct non-null visitor ids among view events."""
        params: list = []
        where = _since_clause(since, params, prefix="AND")
        row = await self.db.fetchone(
            f"SELECT COUNT(DISTINCT visitor_id) FROM analytics_item_views "
            f"WHERE visitor_id IS NOT NULL{where}",
            params,
        )
        return row[0] if row else 0

    async def record_view(
        self,
        item_id: str,
        visitor_id: Optional[str],
        created_at: Optional[datetime] = None,
    ) -> str:
        """Append a page-view event and return its id."""
        event_id = str(uuid.uuid4())
        await self.db.execute(
            "INSERT INTO analytics_item_views (id, item_id, visitor_id, created_at) VALUES (?, ?, ?, ?)",
            [event_id, item_id, visitor_id, created_at or datetime.now(timezone.utc)],
        )
        return event_id

    async def record_click(self, item_id: str, created_at: Optional[datetime] = None) -> str:
        """Append a WhatsApp-click event and return its id."""
        event_id = str(uuid.uuid4())
        await self.db.execute(
            "INSERT INTO whatsapp_clicks (id, item_id, created_at) VALUES (?, ?, ?)",
            [event_id, item_id, created_at or datetime.now(timezone.utc)],
        )
        return event_id

    async def record_many(self, kind: EventKind, rows: List[Tuple]) -> int:
        """
        Bulk-append events.

        Rows are ``(item_id, visitor_id, created_at)`` for views and
        ``(item_id, created_at)`` for clicks.
        """
        kind = EventKind(kind)
        for row in rows:
            if kind is EventKind.VIEW:
                await self.record_view(*row)
            else:
                await self.record_click(*row)
        logger.debug(f"Recorded {len(rows)} {kind.value} events")
        return len(rows)
