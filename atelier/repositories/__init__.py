"""
Repository layer for the DuckDB store.

- Database / BaseRepository: connection management and schema initialization
- CatalogRepository: catalog snapshot and status counts
- EventRepository: view/click counts and distinct visitors
- InsightRepository: append-only insight log
"""
from atelier.repositories.base import Database, BaseRepository
from atelier.repositories.catalog_repo import CatalogRepository
from atelier.repositories.events_repo import EventRepository
from atelier.repositories.insights_repo import InsightRepository

__all__ = [
    "Database",
    "BaseRepository",
    "CatalogRepository",
    "EventRepository",
    "InsightRepository",
]
