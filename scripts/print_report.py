#!/usr/bin/env python3
"""
Print a catalog report for one date range from the command line.

Usage:
    PYTHONPATH=. python scripts/print_report.py --range week
    PYTHONPATH=. python scripts/print_report.py --range all --db /tmp/demo.duckdb
"""
import argparse
import asyncio
import sys

from atelier.config import config
from atelier.date_range import DateRange
from atelier.exceptions import DataSourceError
from atelier.report_service import ReportService
from atelier.store import open_store


async def build_report(db_path: str, date_range: DateRange):
    async with open_store(db_path) as store:
        return await ReportService(store).generate(date_range)


def print_report(report) -> None:
    kpis = report.kpis
    currency = config.insight.currency

    print(f"\n{'=' * 60}")
    print(f"Catalog report: {report.label}")
    print('=' * 60)
    print(f"  Items:            {kpis.total_items:>8}")
    print(f"  Views:            {kpis.total_views:>8}")
    print(f"  WhatsApp clicks:  {kpis.total_clicks:>8}")
    print(f"  Conversion:       {kpis.conversion_rate:>7.1f}%")
    print(f"  Sold:             {kpis.sold_items_count:>8}")
    print(f"  Revenue:          {currency}{kpis.total_revenue:>10.2f}")
    print(f"  Avg sale price:   {currency}{kpis.avg_sale_price:>10.2f}")
    print(f"  Available:        {kpis.available_items_count:>8}")
    print(f"  Inventory value:  {currency}{kpis.inventory_value:>10.2f}")
    print(f"  Avg item price:   {currency}{kpis.avg_item_price:>10.2f}")

    print(f"\n--- Items ---")
    for stat in sorted(report.item_stats, key=lambda s: s.view_count, reverse=True):
        print(f"  {stat.item.title[:32]:<32} {stat.view_count:>6} views {stat.click_count:>4} clicks")


def main():
    parser = argparse.ArgumentParser(description='Print a catalog report')
    parser.add_argument('--range', type=str, default='all', help='today, week, month, year or all')
    parser.add_argument('--db', type=str, default=config.store.db_path, help='Path to DuckDB database file')
    args = parser.parse_args()

    try:
        report = asyncio.run(build_report(args.db, DateRange.parse(args.range)))
    except DataSourceError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_report(report)


if __name__ == "__main__":
    main()
