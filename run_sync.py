# run_sync.py
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Make the repo root importable when run as a script
repo_root = Path(__file__).resolve().parent
if str(repo_root) not in sys.path:
    sys.path.append(str(repo_root))

from core.config import get_settings
from core.logging import setup_logging
from models.sync import SyncReport, SyncStatus
from services.fetcher import Fetcher
from services.storage import create_sql_stores
from services.sync import SyncService


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run one sync pass against the university site")
    parser.add_argument(
        "--source",
        choices=("all",) + SyncService.SOURCES,
        default="all",
        help="which source to sync (default: all)",
    )
    parser.add_argument("--database-url", help="override DATABASE_URL")
    parser.add_argument("--log-level", help="override LOG_LEVEL")
    parser.add_argument(
        "--news-pages",
        type=int,
        help="how many news listing pages to walk (default: NEWS_PAGES)",
    )
    return parser.parse_args(argv)


def print_summary(reports: Dict[str, SyncReport]) -> None:
    print("\n=== SYNC SUMMARY ===")
    for name, report in reports.items():
        print(
            f"{name:<10} {report.status.value:<10} created={report.created} "
            f"updated={report.updated} unchanged={report.skipped} "
            f"failed={report.failed} ({report.duration_seconds:.1f}s)"
        )
        for error in report.errors:
            print(f"    ! {error}")


async def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    updates = {}
    if args.database_url:
        updates["DATABASE_URL"] = args.database_url
    if args.log_level:
        updates["LOG_LEVEL"] = args.log_level
    if args.news_pages:
        updates["NEWS_PAGES"] = args.news_pages
    if updates:
        settings = settings.model_copy(update=updates)

    setup_logging(settings.LOG_LEVEL)
    card_store, _ = create_sql_stores(settings.DATABASE_URL)

    async with Fetcher.from_settings(settings) as fetcher:
        service = SyncService(card_store, fetcher, settings=settings)
        sources = None if args.source == "all" else [args.source]
        reports = await service.sync_all(sources)

    print_summary(reports)
    failed = any(r.status is SyncStatus.FAILED or r.failed for r in reports.values())
    return 1 if failed else 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
