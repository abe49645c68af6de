"""
Report generation: window resolution, catalog/event join and KPI derivation.

Flow for one request:
    DateRange -> lower bound -> catalog snapshot -> per-item counts -> KPIs

The catalog and the event streams are separate read models, so the join
happens here rather than in a single query.
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any

from atelier.config import config, JOIN_STRATEGIES
from atelier.date_range import DateRange, resolve_lower_bound
from atelier.kpi import KPIRecord, aggregate_kpis, REPORT_SOLD_STATUSES
from atelier.models import Item, ItemStat, EventKind
from atelier.observability import get_logger, timed
from atelier.store import AtelierStore

logger = get_logger(__name__)


class MetricsJoinEngine:
    """
    Join a catalog snapshot with per-item view/click counts.

    Strategies:
    - fanout: two count queries per item, at most ``max_concurrency`` in flight
    - grouped: two grouped queries for the whole catalog

    Both produce one ItemStat per item in catalog order with identical values.
    """

    def __init__(
        self,
        store: AtelierStore,
        max_concurrency: Optional[int] = None,
        strategy: Optional[str] = None,
    ):
        self.store = store
        self.max_concurrency = max_concurrency or config.report.max_concurrent_queries
        self.strategy = (strategy or config.report.join_strategy).lower()
        if self.strategy not in JOIN_STRATEGIES:
            raise ValueError(f"Unknown join strategy: {self.strategy}")

    async def build_item_stats(self, items: List[Item], since: Optional[datetime]) -> List[ItemStat]:
        """
        Produce ItemStats for ``items`` restricted to events at or after ``since``.

        Raises:
            DataSourceError: If any count query fails (no partial result)
        """
        if not items:
            return []
        if self.strategy == "grouped":
            return await self._grouped(items, since)
        return await self._fanout(items, since)

    async def _fanout(self, items: List[Item], since: Optional[datetime]) -> List[ItemStat]:
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _count(kind: EventKind, item_id: str) -> int:
            async with semaphore:
                return await self.store.events.count_events(kind, item_id, since)

        async def _stat(item: Item) -> ItemStat:
            view_count, click_count = await asyncio.gather(
                _count(EventKind.VIEW, item.id),
                _count(EventKind.CLICK, item.id),
            )
            return ItemStat(item=item, view_count=view_count, click_count=click_count)

        # gather preserves input order, so stats line up with the catalog
        return list(await asyncio.gather(*(_stat(item) for item in items)))

    async def _grouped(self, items: List[Item], since: Optional[datetime]) -> List[ItemStat]:
        views = await self.store.events.count_events_by_item(EventKind.VIEW, since)
        clicks = await self.store.events.count_events_by_item(EventKind.CLICK, since)
        return [
            ItemStat(
                item=item,
                view_count=views.get(item.id, 0),
                click_count=clicks.get(item.id, 0),
            )
            for item in items
        ]


@dataclass
class Report:
    """Result of one report request."""
    date_range: DateRange
    since: Optional[datetime]
    item_stats: List[ItemStat] = field(default_factory=list)
    kpis: KPIRecord = field(default_factory=KPIRecord)

    @property
    def label(self) -> str:
        return self.date_range.label

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the shape consumed by the report page."""
        return {
            "itemStats": [s.to_dict() for s in self.item_stats],
            "totalViews": self.kpis.total_views,
            "totalClicks": self.kpis.total_clicks,
            "conversionRate": self.kpis.conversion_rate,
            "totalRevenue": self.kpis.total_revenue,
            "soldItemsCount": self.kpis.sold_items_count,
            "availableItemsCount": self.kpis.available_items_count,
            "inventoryValue": self.kpis.inventory_value,
            "avgItemPrice": self.kpis.avg_item_price,
            "avgSalePrice": self.kpis.avg_sale_price,
            "dateRangeLabel": self.label,
            "currentRange": self.date_range.value,
        }


class ReportService:
    """Generates time-windowed catalog reports."""

    def __init__(self, store: AtelierStore, join_engine: Optional[MetricsJoinEngine] = None):
        self.store = store
        self.join_engine = join_engine or MetricsJoinEngine(store)

    @timed("generate_report")
    async def generate(self, date_range=None, now: Optional[datetime] = None) -> Report:
        """
        Build a report for a date-range selector.

        Args:
            date_range: DateRange or raw selector; unknown values mean "all"
            now: Reference instant for the window (defaults to current time)

        Raises:
            DataSourceError: If the catalog or any event count cannot be read
        """
        selected = date_range if isinstance(date_range, DateRange) else DateRange.parse(date_range)
        since = resolve_lower_bound(selected, now=now)

        items = await self.store.catalog.load_all()
        item_stats = await self.join_engine.build_item_stats(items, since)
        kpis = aggregate_kpis(items, item_stats, sold_statuses=REPORT_SOLD_STATUSES)

        logger.info(
            f"Report generated: {selected.value}",
            extra={
                "range": selected.value,
                "items": len(items),
                "total_views": kpis.total_views,
                "total_clicks": kpis.total_clicks,
            }
        )
        return Report(date_range=selected, since=since, item_stats=item_stats, kpis=kpis)
