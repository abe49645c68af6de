#!/usr/bin/env python3
"""
Seed a DuckDB store with a demo catalog and synthetic telemetry.

Useful for trying the dashboard locally without production data. Prices
include a few malformed values on purpose so the KPI rules are visible.

Usage:
    PYTHONPATH=. python scripts/seed_demo_data.py
    PYTHONPATH=. python scripts/seed_demo_data.py --db /tmp/demo.duckdb --days 60 --seed 7
"""
import argparse
import asyncio
import logging
import random
from datetime import datetime, timedelta, timezone

from atelier.config import config
from atelier.models import EventKind
from atelier.store import open_store

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEMO_CATALOG = [
    ("Kebaya Sulam Emas", "450", "sold"),
    ("Baju Kurung Moden", "280", "available"),
    ("Tudung Satin Premium", "65", "available"),
    ("Jubah Lace Putih", "320", "offline_sold"),
    ("Kaftan Batik Terengganu", "RM210", "sold"),
    ("Selendang Songket", "150", "available"),
    ("Kurung Kedah Pastel", None, "available"),
    ("Kebaya Nyonya Biru", "390", "sold"),
]


async def seed(db_path: str, days: int, visitors: int, rng: random.Random) -> dict:
    now = datetime.now(timezone.utc)
    counts = {"items": 0, "views": 0, "clicks": 0}

    async with open_store(db_path) as store:
        items = []
        for offset, (title, price, status) in enumerate(DEMO_CATALOG):
            slug = title.lower().replace(" ", "-")
            item = await store.catalog.add_item(
                title,
                price=price,
                status=status,
                slug=slug,
                created_at=now - timedelta(days=days + len(DEMO_CATALOG) - offset),
            )
            items.append(item)
        counts["items"] = len(items)

        views, clicks = [], []
        visitor_ids = [f"visitor-{n:04d}" for n in range(visitors)]
        for item in items:
            for _ in range(rng.randint(5, 40)):
                seen_at = now - timedelta(minutes=rng.randint(0, days * 24 * 60))
                visitor = rng.choice(visitor_ids) if rng.random() > 0.1 else None
                views.append((item.id, visitor, seen_at))
                if rng.random() < 0.15:
                    clicks.append((item.id, seen_at + timedelta(seconds=rng.randint(5, 300))))

        counts["views"] = await store.events.record_many(EventKind.VIEW, views)
        counts["clicks"] = await store.events.record_many(EventKind.CLICK, clicks)

    return counts


def main():
    parser = argparse.ArgumentParser(description='Seed a demo catalog and telemetry')
    parser.add_argument('--db', type=str, default=config.store.db_path, help='Path to DuckDB database file')
    parser.add_argument('--days', type=int, default=30, help='Spread events over the last N days')
    parser.add_argument('--visitors', type=int, default=50, help='Number of distinct visitor ids')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible data')
    args = parser.parse_args()

    logger.info(f"Seeding {args.db} ({args.days} days, {args.visitors} visitors)")
    counts = asyncio.run(seed(args.db, args.days, args.visitors, random.Random(args.seed)))
    logger.info(
        f"Done: {counts['items']} items, {counts['views']} views, {counts['clicks']} clicks"
    )


if __name__ == "__main__":
    main()
