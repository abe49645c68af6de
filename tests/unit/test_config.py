"""
Tests for atelier.config module.
"""
import pytest
from dataclasses import replace

from atelier.config import (
    AppConfig,
    ReportConfig,
    InsightConfig,
    WebConfig,
    ConfigurationError,
    validate_config,
)


def _config(**report_overrides) -> AppConfig:
    report = {"timezone": "UTC", "join_strategy": "fanout", "max_concurrent_queries": 8}
    report.update(report_overrides)
    return replace(
        AppConfig(),
        report=replace(ReportConfig(), **report),
        insight=replace(InsightConfig(), lookback_days=7),
    )


class TestValidateConfig:
    """Tests for validate_config."""

    def test_defaults_are_valid(self):
        validate_config(_config())

    def test_unknown_join_strategy(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(_config(join_strategy="sharded"))
        assert "REPORT_JOIN_STRATEGY" in str(exc_info.value)

    def test_non_positive_concurrency(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(_config(max_concurrent_queries=0))
        assert "REPORT_MAX_CONCURRENT_QUERIES" in str(exc_info.value)

    def test_unknown_timezone(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(_config(timezone="Mars/Olympus_Mons"))
        assert "REPORT_TIMEZONE" in str(exc_info.value)

    def test_non_positive_rate_limit(self):
        cfg = replace(_config(), web=replace(WebConfig(), rate_limit_per_minute=0))
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(cfg)
        assert "RATE_LIMIT_PER_MINUTE" in str(exc_info.value)

    def test_llm_key_required_when_asked(self):
        cfg = replace(_config(), insight=replace(InsightConfig(), anthropic_api_key=""))
        validate_config(cfg)
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(cfg, require_llm=True)
        assert "ANTHROPIC_API_KEY" in str(exc_info.value)

    def test_collects_all_errors(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config(_config(join_strategy="x", max_concurrent_queries=0))
        message = str(exc_info.value)
        assert "REPORT_JOIN_STRATEGY" in message
        assert "REPORT_MAX_CONCURRENT_QUERIES" in message


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("REPORT_JOIN_STRATEGY", "GROUPED")
    monkeypatch.setenv("INSIGHT_LOOKBACK_DAYS", "14")
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "5")
    cfg = AppConfig()
    assert cfg.report.join_strategy == "grouped"
    assert cfg.insight.lookback_days == 14
    assert cfg.web.rate_limit_per_minute == 5
