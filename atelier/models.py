"""
Domain models for catalog items, telemetry events and insight logs.

These dataclasses are the single source of truth for data structures
passed between the repositories, the report/insight services and the
web layer.
"""
import json
import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Dict, Any


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS
# ═══════════════════════════════════════════════════════════════════════════════

class ItemStatus(str, Enum):
    """Known catalog item statuses. Anything else is neither available nor sold."""
    AVAILABLE = "available"
    SOLD = "sold"
    OFFLINE_SOLD = "offline_sold"


class EventKind(str, Enum):
    """Telemetry stream an event belongs to."""
    VIEW = "view"
    CLICK = "click"

    @property
    def table(self) -> str:
        """Store table holding events of this kind."""
        return _EVENT_TABLES[self]


_EVENT_TABLES = {
    EventKind.VIEW: "analytics_item_views",
    EventKind.CLICK: "whatsapp_clicks",
}


# ═══════════════════════════════════════════════════════════════════════════════
# PRICE PARSING
# ═══════════════════════════════════════════════════════════════════════════════

def parse_price(value: Any) -> Optional[float]:
    """
    Interpret a raw price as a number.

    Returns None for missing, blank, boolean, non-finite or unparsable
    values. Callers decide whether None means "exclude" or "count as 0".
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(Decimal(text))
        except (InvalidOperation, ValueError):
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


# ═══════════════════════════════════════════════════════════════════════════════
# DATACLASSES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class Item:
    """Catalog item. Catalog membership is never time-filtered."""
    id: str
    title: str
    slug: Optional[str] = None
    price: Any = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: tuple) -> "Item":
        """Create Item from an ``(id, title, slug, price, status, created_at)`` row."""
        return cls(
            id=row[0],
            title=row[1],
            slug=row[2],
            price=row[3],
            status=row[4],
            created_at=row[5],
        )

    @property
    def numeric_price(self) -> Optional[float]:
        """Price as a number, or None when missing or non-numeric."""
        return parse_price(self.price)

    @property
    def has_numeric_price(self) -> bool:
        return self.numeric_price is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "price": self.numeric_price,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class ItemStat:
    """Per-item view/click counts for one report window. Never persisted."""
    item: Item
    view_count: int = 0
    click_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the way the report page consumes it (price coerced to 0)."""
        return {
            "id": self.item.id,
            "title": self.item.title,
            "slug": self.item.slug,
            "price": self.item.numeric_price or 0,
            "status": self.item.status,
            "viewCount": self.view_count,
            "clickCount": self.click_count,
        }


@dataclass
class InsightLog:
    """Generated narrative plus the metrics snapshot it was derived from."""
    id: str
    insight_text: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: tuple) -> "InsightLog":
        """Create InsightLog from an ``(id, insight_text, metrics, created_at)`` row."""
        metrics = row[2]
        if isinstance(metrics, str):
            metrics = json.loads(metrics) if metrics else {}
        return cls(
            id=row[0],
            insight_text=row[1],
            metrics=metrics or {},
            created_at=row[3],
        )
