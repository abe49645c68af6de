"""
Insight log repository.

Append-only history of generated insights. Only the newest row is ever
read back as the "current" cached insight.
"""
import json
import uuid
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from atelier.models import InsightLog
from atelier.repositories.base import BaseRepository
from atelier.observability import get_logger

logger = get_logger(__name__)


class InsightRepository(BaseRepository):
    """Repository for ai_insight_logs."""

    async def append(
        self,
        insight_text: str,
        metrics: Dict[str, Any],
        created_at: Optional[datetime] = None,
    ) -> InsightLog:
        """Insert a new insight log row. Existing rows are never touched."""
        log = InsightLog(
            id=str(uuid.uuid4()),
            insight_text=insight_text,
            metrics=dict(metrics),
            created_at=created_at or datetime.now(timezone.utc),
        )
        await self.db.execute(
            "INSERT INTO ai_insight_logs (id, insight_text, metrics, created_at) VALUES (?, ?, ?, ?)",
            [log.id, log.insight_text, json.dumps(log.metrics), log.created_at],
        )
        logger.info("Insight log appended", extra={"insight_id": log.id})
        return log

    async def latest(self) -> Optional[InsightLog]:
        """Most recently created insight log, or None if there is none."""
        row = await self.db.fetchone("""
            SELECT id, insight_text, metrics, created_at
            FROM ai_insight_logs
            ORDER BY created_at DESC, seq DESC
            LIMIT 1
        """)
        return InsightLog.from_row(row) if row else None

    async def count(self) -> int:
        row = await self.db.fetchone("SELECT COUNT(*) FROM ai_insight_logs")
        return row[0]
