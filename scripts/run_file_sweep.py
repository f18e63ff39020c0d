#!/usr/bin/env python3
"""
Run the orphan file sweep once, outside the API process.

Usage:
    python scripts/run_file_sweep.py
    python scripts/run_file_sweep.py --grace-seconds 0
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from jobboard.config import settings  # noqa: E402
from jobboard.core.logging import setup_logging  # noqa: E402
from jobboard.db.mongo import MongoDatabase  # noqa: E402
from jobboard.services.file_storage import FileStorage  # noqa: E402
from jobboard.services.file_sweeper import OrphanFileSweeper  # noqa: E402
from jobboard.services.user_store import UserStore  # noqa: E402


async def main(grace_seconds: int) -> int:
    mongo = MongoDatabase.from_settings(settings)
    try:
        db = await mongo.initialize()
        storage = FileStorage(settings.UPLOAD_DIR)
        storage.ensure_dirs()
        sweeper = OrphanFileSweeper(storage, UserStore(db), grace_seconds=grace_seconds)
        report = await sweeper.run()
    finally:
        mongo.close()

    print("🧹 Orphan file sweep finished")
    print(f"   Deleted: {report.deleted}")
    print(f"   Moved:   {report.moved}")
    print(f"   Skipped: {report.skipped}")
    print(f"   Errors:  {report.errored}")
    return 1 if report.errored else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Delete unreferenced uploads")
    parser.add_argument(
        "--grace-seconds",
        type=int,
        default=settings.SWEEP_GRACE_SECONDS,
        help="Leave files modified within this many seconds alone",
    )
    args = parser.parse_args()

    setup_logging(settings.LOG_LEVEL, "console")
    sys.exit(asyncio.run(main(args.grace_seconds)))
