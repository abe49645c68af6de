"""
Dashboard service: headline counters, recent items and the cached insight
for the admin overview page.
"""
import asyncio
import logging
from datetime import datetime
from typing import Dict, Any, Optional

from atelier.config import config
from atelier.date_range import trailing_window_start
from atelier.insight_service import InsightCache
from atelier.kpi import INSIGHT_SOLD_STATUSES
from atelier.models import ItemStatus, EventKind
from atelier.store import AtelierStore

logger = logging.getLogger(__name__)


async def get_overview(
    store: AtelierStore,
    now: Optional[datetime] = None,
    recent_limit: int = None,
) -> Dict[str, Any]:
    """
    Collect the overview counters.

    Sold follows the insight policy (sold + offline_sold). Week views are
    raw view rows in the trailing window, not distinct visitors.
    """
    recent_limit = recent_limit or config.report.recent_items_limit
    week_start = trailing_window_start(config.insight.lookback_days, now=now)

    (
        total_items,
        available_items,
        sold_items,
        total_views,
        week_views,
        total_clicks,
    ) = await asyncio.gather(
        store.catalog.count_by_status(),
        store.catalog.count_by_status([ItemStatus.AVAILABLE.value]),
        store.catalog.count_by_status(sorted(INSIGHT_SOLD_STATUSES)),
        store.events.count_events(EventKind.VIEW),
        store.events.count_events(EventKind.VIEW, since=week_start),
        store.events.count_events(EventKind.CLICK),
    )

    recent_items = await store.catalog.recent_items(recent_limit)
    cached = await InsightCache(store).get_cached()

    return {
        "totalItems": total_items,
        "availableItems": available_items,
        "soldItems": sold_items,
        "totalViews": total_views,
        "weekVisitors": week_views,
        "totalWhatsAppClicks": total_clicks,
        "recentItems": [item.to_dict() for item in recent_items],
        "cachedInsight": cached.to_dict() if cached else None,
    }
