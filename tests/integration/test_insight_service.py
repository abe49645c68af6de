"""
Integration tests for weekly insight generation and caching.
"""
import pytest
from datetime import timedelta

from atelier.config import InsightConfig
from atelier.exceptions import InsightGenerationError, DataSourceError
from atelier.insight_service import (
    InsightCache,
    InsightGenerator,
    EMPTY_INSIGHT_TEXT,
)
from atelier.models import EventKind


@pytest.fixture
def insight_config():
    return InsightConfig(anthropic_api_key="test-key", lookback_days=7)


@pytest.fixture
def generator(seeded_store, mock_llm, insight_config):
    return InsightGenerator(seeded_store, mock_llm, insight_config=insight_config)


class TestComputeMetrics:
    """Tests for the weekly snapshot."""

    @pytest.mark.asyncio
    async def test_seeded_catalog(self, generator, now):
        metrics = await generator.compute_metrics(now=now)
        assert metrics.total_items == 6
        assert metrics.sold_items == 3
        assert metrics.available_items == 2
        assert metrics.total_revenue == 180
        assert metrics.top_collection == "Kebaya Sulam"
        assert metrics.week_visitors == 0

    @pytest.mark.asyncio
    async def test_week_visitors_are_distinct_and_windowed(self, generator, seeded_store, now):
        await seeded_store.events.record_many(EventKind.VIEW, [
            ("kebaya-01", "v1", now - timedelta(days=1)),
            ("tudung-03", "v1", now - timedelta(days=2)),
            ("tudung-03", "v2", now - timedelta(days=6)),
            ("tudung-03", None, now - timedelta(days=1)),
            ("kaftan-05", "v3", now - timedelta(days=8)),
        ])
        metrics = await generator.compute_metrics(now=now)
        assert metrics.week_visitors == 2

    @pytest.mark.asyncio
    async def test_empty_store(self, store, mock_llm, insight_config, now):
        metrics = await InsightGenerator(store, mock_llm, insight_config=insight_config) \
            .compute_metrics(now=now)
        assert metrics.total_items == 0
        assert metrics.top_collection == "N/A"


class TestGenerate:
    """Tests for InsightGenerator.generate."""

    @pytest.mark.asyncio
    async def test_success_persists_and_returns_fresh(self, generator, seeded_store, mock_llm, now):
        result = await generator.generate(now=now)

        assert result.cached is False
        assert result.insight == "- Restock kebaya\n- Promote kaftan"
        assert result.metrics["soldItems"] == 3
        assert result.metrics["topCollection"] == "Kebaya Sulam"

        latest = await seeded_store.insights.latest()
        assert latest.insight_text == result.insight
        assert latest.metrics == result.metrics

        prompt = mock_llm.complete.await_args.args[0]
        assert "Sold Items: 3" in prompt
        assert "Top Collection: Kebaya Sulam" in prompt

    @pytest.mark.asyncio
    async def test_every_call_appends(self, generator, seeded_store, mock_llm, now):
        await generator.generate(now=now)
        mock_llm.complete.return_value = {"content": "- Second run"}
        await generator.generate(now=now)

        assert await seeded_store.insights.count() == 2
        assert (await seeded_store.insights.latest()).insight_text == "- Second run"

    @pytest.mark.asyncio
    async def test_empty_completion_uses_fallback(self, generator, seeded_store, mock_llm, now):
        mock_llm.complete.return_value = {"content": "   "}
        result = await generator.generate(now=now)

        assert result.insight == EMPTY_INSIGHT_TEXT
        assert (await seeded_store.insights.latest()).insight_text == EMPTY_INSIGHT_TEXT

    @pytest.mark.asyncio
    async def test_llm_error_persists_nothing(self, generator, seeded_store, mock_llm, now):
        mock_llm.complete.return_value = {"content": "API error: overloaded", "error": True}

        with pytest.raises(InsightGenerationError) as exc_info:
            await generator.generate(now=now)

        assert exc_info.value.model == "claude-test"
        assert "overloaded" in str(exc_info.value)
        assert await seeded_store.insights.count() == 0

    @pytest.mark.asyncio
    async def test_snapshot_failure_skips_llm(self, generator, seeded_store, mock_llm, now):
        await seeded_store.db.execute("DROP TABLE analytics_item_views")

        with pytest.raises(DataSourceError):
            await generator.generate(now=now)
        mock_llm.complete.assert_not_awaited()


class TestInsightCache:
    """Tests for InsightCache."""

    @pytest.mark.asyncio
    async def test_nothing_cached(self, store):
        assert await InsightCache(store).get_cached() is None

    @pytest.mark.asyncio
    async def test_cached_result_after_generate(self, generator, seeded_store, now):
        fresh = await generator.generate(now=now)
        cached = await InsightCache(seeded_store).get_cached()

        assert cached.cached is True
        assert cached.insight == fresh.insight
        assert cached.metrics == fresh.metrics

    @pytest.mark.asyncio
    async def test_cache_read_does_not_regenerate(self, generator, seeded_store, mock_llm, now):
        await generator.generate(now=now)
        cache = InsightCache(seeded_store)
        await cache.get_cached()
        await cache.get_cached()

        assert mock_llm.complete.await_count == 1
        assert await seeded_store.insights.count() == 1
