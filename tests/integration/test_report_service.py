"""
Integration tests for report generation over an in-memory store.
"""
import pytest
from datetime import timedelta
from unittest.mock import MagicMock

from atelier.date_range import DateRange
from atelier.exceptions import DataSourceError
from atelier.models import EventKind
from atelier.report_service import MetricsJoinEngine, ReportService


@pytest.fixture
def report_service(seeded_store):
    return ReportService(seeded_store, MetricsJoinEngine(seeded_store, max_concurrency=2))


async def _seed_events(store, now):
    """Kebaya: 3 recent views + 1 old view, 1 click; tudung: 1 view."""
    await store.events.record_many(EventKind.VIEW, [
        ("kebaya-01", "v1", now - timedelta(hours=1)),
        ("kebaya-01", "v2", now - timedelta(days=3)),
        ("kebaya-01", "v1", now - timedelta(days=5)),
        ("kebaya-01", "v9", now - timedelta(days=200)),
        ("tudung-03", "v3", now - timedelta(days=20)),
    ])
    await store.events.record_many(EventKind.CLICK, [
        ("kebaya-01", now - timedelta(days=2)),
    ])


class TestReportService:
    """Tests for ReportService.generate."""

    @pytest.mark.asyncio
    async def test_empty_catalog(self, store, now):
        report = await ReportService(store).generate("week", now=now)
        assert report.item_stats == []
        assert report.kpis.total_items == 0
        assert report.kpis.conversion_rate == 0
        assert report.kpis.avg_item_price == 0

    @pytest.mark.asyncio
    async def test_one_stat_per_item_in_catalog_order(self, report_service, sample_catalog, now):
        report = await report_service.generate("all", now=now)
        assert [s.item.id for s in report.item_stats] == [r["item_id"] for r in sample_catalog]

    @pytest.mark.asyncio
    async def test_catalog_ignores_window(self, report_service, now):
        """Items appear in every range even though they were created long ago."""
        report = await report_service.generate("today", now=now)
        assert len(report.item_stats) == 6
        assert report.kpis.total_items == 6

    @pytest.mark.asyncio
    async def test_window_filters_events(self, report_service, seeded_store, now):
        await _seed_events(seeded_store, now)

        week = await report_service.generate("week", now=now)
        stats = {s.item.id: s for s in week.item_stats}
        assert stats["kebaya-01"].view_count == 3
        assert stats["kebaya-01"].click_count == 1
        assert stats["tudung-03"].view_count == 0
        assert week.kpis.total_views == 3
        assert week.kpis.total_clicks == 1

        month = await report_service.generate("month", now=now)
        assert month.kpis.total_views == 4

        everything = await report_service.generate("all", now=now)
        assert everything.kpis.total_views == 5
        assert everything.since is None

    @pytest.mark.asyncio
    async def test_kpis_on_seeded_catalog(self, report_service, now):
        report = await report_service.generate("all", now=now)
        kpis = report.kpis

        # Only "sold" with a numeric price counts toward revenue here
        assert kpis.sold_items_count == 1
        assert kpis.total_revenue == 100
        assert kpis.avg_sale_price == 100
        assert kpis.available_items_count == 1
        assert kpis.inventory_value == 50
        assert kpis.avg_item_price == pytest.approx(260 / 6)

    @pytest.mark.asyncio
    async def test_conversion_rate(self, report_service, seeded_store, now):
        await _seed_events(seeded_store, now)
        report = await report_service.generate("all", now=now)
        assert report.kpis.conversion_rate == pytest.approx(20.0)

    @pytest.mark.asyncio
    async def test_two_items_ten_views_one_click_each(self, store, now):
        for item_id in ("a", "b"):
            await store.catalog.add_item(item_id.upper(), price="10", item_id=item_id, created_at=now)
            await store.events.record_many(
                EventKind.VIEW, [(item_id, f"v{n}", now - timedelta(days=n)) for n in range(10)]
            )
            await store.events.record_click(item_id, now)

        kpis = (await ReportService(store).generate("all", now=now)).kpis
        assert kpis.total_views == 20
        assert kpis.total_clicks == 2
        assert kpis.conversion_rate == pytest.approx(10.0)

    @pytest.mark.asyncio
    async def test_unknown_selector_is_all(self, report_service, now):
        report = await report_service.generate("fortnight", now=now)
        assert report.date_range is DateRange.ALL
        assert report.label == "All Time"

    @pytest.mark.asyncio
    async def test_to_dict_shape(self, report_service, seeded_store, now):
        await _seed_events(seeded_store, now)
        data = (await report_service.generate(DateRange.WEEK, now=now)).to_dict()

        assert data["currentRange"] == "week"
        assert data["dateRangeLabel"] == "Last 7 Days"
        assert data["totalViews"] == 3
        kurung = next(s for s in data["itemStats"] if s["id"] == "kurung-02")
        assert kurung["price"] == 0
        assert kurung["viewCount"] == 0

    @pytest.mark.asyncio
    async def test_missing_table_raises_data_source_error(self, report_service, seeded_store, now):
        await seeded_store.db.execute("DROP TABLE whatsapp_clicks")
        with pytest.raises(DataSourceError):
            await report_service.generate("week", now=now)


class TestMetricsJoinEngine:
    """Tests for the fan-out and grouped join strategies."""

    @pytest.mark.asyncio
    async def test_strategies_agree(self, seeded_store, now):
        await _seed_events(seeded_store, now)
        items = await seeded_store.catalog.load_all()
        since = now - timedelta(days=7)

        fanout = await MetricsJoinEngine(seeded_store, 1, "fanout").build_item_stats(items, since)
        grouped = await MetricsJoinEngine(seeded_store, 1, "grouped").build_item_stats(items, since)

        assert [(s.item.id, s.view_count, s.click_count) for s in fanout] == \
               [(s.item.id, s.view_count, s.click_count) for s in grouped]

    @pytest.mark.asyncio
    async def test_empty_items(self, store):
        engine = MetricsJoinEngine(store, 4, "fanout")
        assert await engine.build_item_stats([], None) == []

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            MetricsJoinEngine(MagicMock(), 4, "parallel")

    def test_strategy_case_insensitive(self):
        assert MetricsJoinEngine(MagicMock(), 4, "GROUPED").strategy == "grouped"
