"""
Weekly AI insight: fixed trailing-window snapshot, prompt, generation, cache.

The snapshot window is always the last ``INSIGHT_LOOKBACK_DAYS`` days and
ignores any report date-range selector. Every successful generation
appends a new log row; the newest row is the cached insight.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, Optional, List

from atelier.config import config, InsightConfig
from atelier.date_range import trailing_window_start
from atelier.exceptions import InsightGenerationError
from atelier.kpi import INSIGHT_SOLD_STATUSES
from atelier.llm_client import LLMClient
from atelier.models import Item, ItemStatus, InsightLog
from atelier.observability import get_logger, timed
from atelier.store import AtelierStore

logger = get_logger(__name__)

NO_TOP_COLLECTION = "N/A"
EMPTY_INSIGHT_TEXT = "No insight available."


@dataclass(frozen=True)
class WeeklyMetrics:
    """Metrics snapshot embedded in the prompt and stored with the insight."""
    total_items: int = 0
    available_items: int = 0
    sold_items: int = 0
    total_revenue: float = 0.0
    week_visitors: int = 0
    top_collection: str = NO_TOP_COLLECTION

    @classmethod
    def from_catalog(cls, items: List[Item], week_visitors: int) -> "WeeklyMetrics":
        """
        Build the snapshot from a catalog and a visitor count.

        Sold uses the insight policy (sold + offline_sold) with no price
        check; non-numeric prices add 0 to revenue. The top collection is
        the first sold item in catalog order.
        """
        sold = [i for i in items if i.status in INSIGHT_SOLD_STATUSES]
        available = [i for i in items if i.status == ItemStatus.AVAILABLE.value]
        return cls(
            total_items=len(items),
            available_items=len(available),
            sold_items=len(sold),
            total_revenue=float(sum(i.numeric_price or 0 for i in sold)),
            week_visitors=week_visitors,
            top_collection=sold[0].title if sold else NO_TOP_COLLECTION,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalItems": self.total_items,
            "availableItems": self.available_items,
            "soldItems": self.sold_items,
            "totalRevenue": self.total_revenue,
            "weekVisitors": self.week_visitors,
            "topCollection": self.top_collection,
        }


def _format_amount(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"


def build_prompt(metrics: WeeklyMetrics, insight_config: InsightConfig = None) -> str:
    """Render the analyst prompt for a metrics snapshot."""
    cfg = insight_config or config.insight
    return f"""You are the AI Business Analyst for {cfg.brand_name}.

This week's data:
- Total Items: {metrics.total_items}
- Available Items: {metrics.available_items}
- Sold Items: {metrics.sold_items}
- Total Revenue: {cfg.currency}{_format_amount(metrics.total_revenue)}
- Weekly Visitors: {metrics.week_visitors}
- Top Collection: {metrics.top_collection}

Give 3-4 short, actionable and relevant insights in {cfg.language} (relaxed but professional tone).
Use bullet points.
"""


@dataclass(frozen=True)
class InsightResult:
    """Insight returned to callers, fresh or cached."""
    insight: str
    metrics: Dict[str, Any]
    cached: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"insight": self.insight, "metrics": self.metrics, "cached": self.cached}


class InsightCache:
    """Single-slot view over the append-only insight log."""

    def __init__(self, store: AtelierStore):
        self.store = store

    async def latest(self) -> Optional[InsightLog]:
        """Newest insight log, or None when nothing has been generated."""
        return await self.store.insights.latest()

    async def get_cached(self) -> Optional[InsightResult]:
        log = await self.latest()
        if log is None:
            return None
        return InsightResult(insight=log.insight_text, metrics=log.metrics, cached=True)

    async def append(self, insight_text: str, metrics: Dict[str, Any]) -> InsightLog:
        return await self.store.insights.append(insight_text, metrics)


class InsightGenerator:
    """Computes the weekly snapshot, asks the LLM for a narrative and caches it."""

    def __init__(
        self,
        store: AtelierStore,
        llm: LLMClient,
        cache: Optional[InsightCache] = None,
        insight_config: InsightConfig = None,
    ):
        self.store = store
        self.llm = llm
        self.cache = cache or InsightCache(store)
        self.config = insight_config or config.insight

    async def compute_metrics(self, now: Optional[datetime] = None) -> WeeklyMetrics:
        """Snapshot over the whole catalog plus distinct visitors in the trailing window."""
        items = await self.store.catalog.load_all()
        since = trailing_window_start(self.config.lookback_days, now=now)
        week_visitors = await self.store.events.count_distinct_visitors(since)
        return WeeklyMetrics.from_catalog(items, week_visitors)

    @timed("generate_insight", warn_threshold_ms=10000)
    async def generate(self, now: Optional[datetime] = None) -> InsightResult:
        """
        Generate and persist a fresh insight.

        Snapshot, generation and persistence run strictly in that order.
        Nothing is written unless generation succeeded.

        Raises:
            InsightGenerationError: If the LLM is unavailable or fails
            DataSourceError: If the snapshot or the write fails
        """
        metrics = await self.compute_metrics(now=now)
        prompt = build_prompt(metrics, self.config)

        response = await self.llm.complete(prompt)
        if not isinstance(response, dict) or response.get("error"):
            details = response.get("content") if isinstance(response, dict) else repr(response)
            raise InsightGenerationError("AI insight failed", details, model=self.llm.model)

        # Blank text is treated like a missing completion; the Malay admin page
        # showed "Tiada insight." for a missing one and kept "" as is.
        insight_text = (response.get("content") or "").strip() or EMPTY_INSIGHT_TEXT
        metrics_dict = metrics.to_dict()
        await self.cache.append(insight_text, metrics_dict)

        logger.info(
            "Insight generated",
            extra={"model": self.llm.model, "week_visitors": metrics.week_visitors}
        )
        return InsightResult(insight=insight_text, metrics=metrics_dict, cached=False)
