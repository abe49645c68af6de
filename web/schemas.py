"""
Pydantic response models for API endpoints.

Field names are camelCase to match what the admin pages consume.
"""
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════

class StoreStats(BaseModel):
    """DuckDB store statistics."""
    status: str
    latency_ms: Optional[float] = None
    items: Optional[int] = None
    views: Optional[int] = None
    clicks: Optional[int] = None
    insight_logs: Optional[int] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status: healthy or degraded")
    version: str = Field(description="Application version")
    uptime_seconds: int = Field(description="Uptime in seconds")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
    store: StoreStats
    llm_configured: bool = Field(description="Whether ANTHROPIC_API_KEY is set")


class MetricsResponse(BaseModel):
    """In-process request metrics."""
    requests: Dict[str, int] = Field(default_factory=dict)
    errors: Dict[str, int] = Field(default_factory=dict)
    timing: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# REPORT
# ═══════════════════════════════════════════════════════════════════════════════

class ItemStatResponse(BaseModel):
    """Per-item counts for the selected window."""
    id: str
    title: str
    slug: Optional[str] = None
    price: float = Field(description="Numeric price, 0 when missing or non-numeric")
    status: Optional[str] = None
    viewCount: int
    clickCount: int


class ReportResponse(BaseModel):
    """Catalog report for one date range."""
    itemStats: List[ItemStatResponse]
    totalViews: int
    totalClicks: int
    conversionRate: float = Field(description="Clicks per 100 views")
    totalRevenue: float
    soldItemsCount: int
    availableItemsCount: int
    inventoryValue: float
    avgItemPrice: float
    avgSalePrice: float
    dateRangeLabel: str
    currentRange: str


# ═══════════════════════════════════════════════════════════════════════════════
# AI INSIGHTS
# ═══════════════════════════════════════════════════════════════════════════════

class InsightMetrics(BaseModel):
    """Weekly snapshot stored alongside each insight."""
    totalItems: int
    availableItems: int
    soldItems: int
    totalRevenue: float
    weekVisitors: int
    topCollection: str


class InsightResponse(BaseModel):
    """Insight payload. Narrative and metrics are omitted when nothing is cached."""
    cached: bool
    insight: Optional[str] = None
    metrics: Optional[InsightMetrics] = None


# ═══════════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ═══════════════════════════════════════════════════════════════════════════════

class RecentItem(BaseModel):
    """Recently added catalog item."""
    id: str
    title: str
    slug: Optional[str] = None
    price: Optional[float] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class DashboardResponse(BaseModel):
    """Admin overview counters."""
    totalItems: int
    availableItems: int
    soldItems: int
    totalViews: int
    weekVisitors: int = Field(description="View events in the last 7 days")
    totalWhatsAppClicks: int
    recentItems: List[RecentItem]
    cachedInsight: Optional[InsightResponse] = None
