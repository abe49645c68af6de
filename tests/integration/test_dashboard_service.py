"""
Integration tests for the admin overview counters.
"""
import pytest
from datetime import timedelta

from atelier.models import EventKind
from web.services import dashboard_service


@pytest.mark.asyncio
async def test_overview_on_empty_store(store, now):
    overview = await dashboard_service.get_overview(store, now=now)

    assert overview["totalItems"] == 0
    assert overview["soldItems"] == 0
    assert overview["recentItems"] == []
    assert overview["cachedInsight"] is None


@pytest.mark.asyncio
async def test_overview_counts(seeded_store, now):
    await seeded_store.events.record_many(EventKind.VIEW, [
        ("kebaya-01", "v1", now - timedelta(days=1)),
        ("kebaya-01", "v1", now - timedelta(days=2)),
        ("tudung-03", "v2", now - timedelta(days=30)),
    ])
    await seeded_store.events.record_click("kebaya-01", now)

    overview = await dashboard_service.get_overview(seeded_store, now=now, recent_limit=2)

    assert overview["totalItems"] == 6
    assert overview["availableItems"] == 2
    assert overview["soldItems"] == 3  # sold + offline_sold
    assert overview["totalViews"] == 3
    assert overview["weekVisitors"] == 2  # raw view rows, not distinct visitors
    assert overview["totalWhatsAppClicks"] == 1
    assert [i["id"] for i in overview["recentItems"]] == ["selendang-06", "kaftan-05"]


@pytest.mark.asyncio
async def test_overview_includes_cached_insight(seeded_store, now):
    await seeded_store.insights.append("- Restock kebaya", {"soldItems": 3})

    overview = await dashboard_service.get_overview(seeded_store, now=now)

    assert overview["cachedInsight"] == {
        "insight": "- Restock kebaya",
        "metrics": {"soldItems": 3},
        "cached": True,
    }
