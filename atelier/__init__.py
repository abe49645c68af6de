"""
Analytics engine for the Atelier catalog dashboard.

This package holds the logic shared by the web service and scripts:
- exceptions: Custom exception hierarchy
- config: Centralized configuration
- date_range: Report window resolution
- kpi: KPI aggregation and the two sold policies
- report_service / insight_service: report and weekly insight flows
- store: DuckDB-backed repositories
"""

# Import in dependency order
from atelier.exceptions import (
    AtelierError,
    DataSourceError,
    QueryTimeoutError,
    InsightGenerationError,
    ValidationError,
)

from atelier.config import config

from atelier.date_range import DateRange, resolve_lower_bound

from atelier.kpi import (
    KPIRecord,
    aggregate_kpis,
    REPORT_SOLD_STATUSES,
    INSIGHT_SOLD_STATUSES,
)

__all__ = [
    # Exceptions
    "AtelierError",
    "DataSourceError",
    "QueryTimeoutError",
    "InsightGenerationError",
    "ValidationError",
    # Config
    "config",
    # Date ranges
    "DateRange",
    "resolve_lower_bound",
    # KPIs
    "KPIRecord",
    "aggregate_kpis",
    "REPORT_SOLD_STATUSES",
    "INSIGHT_SOLD_STATUSES",
]
