"""
Centralized configuration for the Atelier dashboard.

This module provides a single source of truth for all configuration values.
Configuration is loaded from environment variables with sensible defaults.

Usage:
    from atelier.config import config

    db_path = config.store.db_path
    model = config.insight.model
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

JOIN_STRATEGIES = ("fanout", "grouped")


@dataclass(frozen=True)
class StoreConfig:
    """DuckDB store configuration."""

    db_path: str = field(
        default_factory=lambda: os.getenv(
            "ATELIER_DB_PATH", str(BASE_DIR / "data" / "atelier.duckdb")
        )
    )
    query_timeout: float = field(
        default_factory=lambda: float(os.getenv("STORE_QUERY_TIMEOUT", "30"))
    )


@dataclass(frozen=True)
class ReportConfig:
    """Report generation configuration."""

    timezone: str = field(default_factory=lambda: os.getenv("REPORT_TIMEZONE", "UTC"))
    max_concurrent_queries: int = field(
        default_factory=lambda: int(os.getenv("REPORT_MAX_CONCURRENT_QUERIES", "8"))
    )
    join_strategy: str = field(
        default_factory=lambda: os.getenv("REPORT_JOIN_STRATEGY", "fanout").lower()
    )
    recent_items_limit: int = 5


@dataclass(frozen=True)
class InsightConfig:
    """AI insight generation configuration."""

    anthropic_api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    model: str = field(
        default_factory=lambda: os.getenv("INSIGHT_MODEL", "claude-sonnet-4-20250514")
    )
    max_tokens: int = field(default_factory=lambda: int(os.getenv("INSIGHT_MAX_TOKENS", "800")))
    lookback_days: int = field(
        default_factory=lambda: int(os.getenv("INSIGHT_LOOKBACK_DAYS", "7"))
    )
    brand_name: str = field(
        default_factory=lambda: os.getenv("INSIGHT_BRAND_NAME", "Kaira Atelier")
    )
    language: str = field(
        default_factory=lambda: os.getenv("INSIGHT_LANGUAGE", "Bahasa Malaysia")
    )
    currency: str = "RM"


@dataclass(frozen=True)
class WebConfig:
    """Web service configuration."""

    host: str = field(default_factory=lambda: os.getenv("WEB_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("WEB_PORT", "8080")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "text"))

    # Requests per minute per client on the report endpoint
    rate_limit_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_PER_MINUTE", "30"))
    )


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""

    version: str = "1.0.0"
    store: StoreConfig = field(default_factory=StoreConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    insight: InsightConfig = field(default_factory=InsightConfig)
    web: WebConfig = field(default_factory=WebConfig)


# Global config instance
config = AppConfig()

VERSION = config.version


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def validate_config(app_config: AppConfig = None, require_llm: bool = False) -> None:
    """
    Validate that all required configuration is present.

    Call this on application startup to fail fast with clear error messages
    instead of cryptic runtime failures.

    Args:
        app_config: Config to validate (defaults to the global config)
        require_llm: If True, the Anthropic API key must be set

    Raises:
        ConfigurationError: If required configuration is missing
    """
    cfg = app_config or config
    errors = []

    if cfg.report.join_strategy not in JOIN_STRATEGIES:
        errors.append(
            f"REPORT_JOIN_STRATEGY must be one of {', '.join(JOIN_STRATEGIES)} "
            f"(got {cfg.report.join_strategy!r})"
        )

    if cfg.report.max_concurrent_queries < 1:
        errors.append("REPORT_MAX_CONCURRENT_QUERIES must be at least 1")

    try:
        ZoneInfo(cfg.report.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"REPORT_TIMEZONE is not a known time zone: {cfg.report.timezone!r}")

    if cfg.web.rate_limit_per_minute < 1:
        errors.append("RATE_LIMIT_PER_MINUTE must be at least 1")

    if cfg.insight.lookback_days < 1:
        errors.append("INSIGHT_LOOKBACK_DAYS must be at least 1")

    if require_llm and not cfg.insight.anthropic_api_key:
        errors.append("ANTHROPIC_API_KEY is required but not set")

    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)
