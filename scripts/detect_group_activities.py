#!/usr/bin/env python
"""
Run group activity detection once.

Usage:
    python scripts/detect_group_activities.py --lookback-hours 48 --dry-run
"""

import argparse
import asyncio
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from badge_engine.config import settings
from badge_engine.db.session import AsyncSessionLocal, init_db
from badge_engine.features.group_activity import GroupActivityService


async def run(lookback_hours: int, dry_run: bool) -> int:
    async with AsyncSessionLocal() as db:
        result = await GroupActivityService(db).detect_and_award(lookback_hours, dry_run=dry_run)

    print("=" * 60)
    print(f"GROUP DETECTION ({lookback_hours}h{', dry run' if dry_run else ''})")
    print("=" * 60)
    print(f"Activities scanned:  {result.activities_scanned}")
    print(f"With start point:    {result.activities_located}")
    print(f"Groups:              {result.groups}")
    print(f"Awarded:             {result.awarded}")
    print(f"Upgraded:            {result.upgraded}")
    print(f"Unchanged:           {result.unchanged}")
    print(f"Failed:              {result.failed}")

    return 0 if result.success and not result.failed else 1


def main():
    parser = argparse.ArgumentParser(description="Detect group activities and award the group badge")
    parser.add_argument(
        "--lookback-hours", type=int, default=settings.group_lookback_hours,
        help="How many hours back to scan (default: %(default)s)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Log what would be awarded without writing anything",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    init_db()
    sys.exit(asyncio.run(run(args.lookback_hours, args.dry_run)))


if __name__ == "__main__":
    main()
