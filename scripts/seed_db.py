#!/usr/bin/env python3
"""
Seed an empty database with sample users and jobs.

Usage:
    python scripts/seed_db.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from jobboard.config import settings  # noqa: E402
from jobboard.core.logging import setup_logging  # noqa: E402
from jobboard.db.mongo import MongoDatabase  # noqa: E402
from jobboard.db.seed import SAMPLE_USERS, seed_database  # noqa: E402
from jobboard.services.job_store import JobStore  # noqa: E402
from jobboard.services.user_store import UserStore  # noqa: E402


async def main() -> int:
    print("🌱 Seeding database")
    print("=" * 60)

    mongo = MongoDatabase.from_settings(settings)
    try:
        db = await mongo.initialize()
        seeded = await seed_database(UserStore(db), JobStore(db))
    finally:
        mongo.close()

    if seeded:
        print("✅ Sample data created. Accounts:")
        for user in SAMPLE_USERS:
            print(f"   - {user['email']} ({user['role'].value}) / {user['password']}")
    else:
        print("ℹ️  Database already contains users, nothing to do")
    return 0


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, "console")
    sys.exit(asyncio.run(main()))
