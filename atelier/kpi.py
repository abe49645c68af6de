"""
KPI aggregation.

Pure functions over a catalog snapshot and per-item stats. Every ratio
and average is 0 when its denominator is 0, and non-numeric prices never
abort aggregation.

Two "sold" policies exist and are intentionally kept apart:

- REPORT_SOLD_STATUSES: the time-windowed report counts only ``sold``.
- INSIGHT_SOLD_STATUSES: the weekly insight snapshot and the dashboard
  overview also count ``offline_sold``.
"""
from dataclasses import dataclass, asdict
from typing import Iterable, List, FrozenSet, Dict, Any

from atelier.models import Item, ItemStat, ItemStatus

REPORT_SOLD_STATUSES: FrozenSet[str] = frozenset({ItemStatus.SOLD.value})
INSIGHT_SOLD_STATUSES: FrozenSet[str] = frozenset({
    ItemStatus.SOLD.value,
    ItemStatus.OFFLINE_SOLD.value,
})


@dataclass(frozen=True)
class KPIRecord:
    """Summary KPIs for one report window."""
    total_items: int = 0
    total_views: int = 0
    total_clicks: int = 0
    conversion_rate: float = 0.0
    sold_items_count: int = 0
    total_revenue: float = 0.0
    avg_sale_price: float = 0.0
    available_items_count: int = 0
    inventory_value: float = 0.0
    avg_item_price: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def priced_items_with_status(items: Iterable[Item], statuses: Iterable[str]) -> List[Item]:
    """Items whose status is in ``statuses`` and whose price is numeric."""
    statuses = frozenset(statuses)
    return [i for i in items if i.status in statuses and i.has_numeric_price]


def conversion_rate(total_clicks: int, total_views: int) -> float:
    """Clicks per 100 views; 0 when there are no views."""
    return _safe_div(total_clicks, total_views) * 100


def average_item_price(items: List[Item]) -> float:
    """
    Mean price over the whole catalog.

    Non-numeric and missing prices contribute 0 to the sum but the item
    still counts in the denominator, the same exclusion rule used by the
    revenue sums.
    """
    if not items:
        return 0.0
    return sum(i.numeric_price or 0.0 for i in items) / len(items)


def aggregate_kpis(
    items: List[Item],
    stats: List[ItemStat],
    sold_statuses: Iterable[str] = REPORT_SOLD_STATUSES,
) -> KPIRecord:
    """
    Derive summary KPIs.

    Args:
        items: Catalog snapshot (never time-filtered)
        stats: Per-item view/click counts for the window
        sold_statuses: Which statuses are revenue-bearing

    Returns:
        KPIRecord; all zeros for an empty catalog
    """
    total_views = sum(s.view_count for s in stats)
    total_clicks = sum(s.click_count for s in stats)

    sold = priced_items_with_status(items, sold_statuses)
    total_revenue = sum(i.numeric_price for i in sold)

    available = priced_items_with_status(items, {ItemStatus.AVAILABLE.value})
    inventory_value = sum(i.numeric_price for i in available)

    return KPIRecord(
        total_items=len(items),
        total_views=total_views,
        total_clicks=total_clicks,
        conversion_rate=conversion_rate(total_clicks, total_views),
        sold_items_count=len(sold),
        total_revenue=float(total_revenue),
        avg_sale_price=_safe_div(total_revenue, len(sold)),
        available_items_count=len(available),
        inventory_value=float(inventory_value),
        avg_item_price=average_item_price(items),
    )
