#!/usr/bin/env python3
"""
Create (or re-create) the MongoDB indexes for users and jobs.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from motor.motor_asyncio import AsyncIOMotorClient  # noqa: E402
from pymongo.errors import PyMongoError  # noqa: E402

from jobboard.config import settings  # noqa: E402
from jobboard.db.mongo import create_indexes  # noqa: E402


async def ensure_indexes() -> int:
    print("🔧 Ensuring MongoDB Indexes")
    print("=" * 60)

    print("\n📡 Connecting to MongoDB...")
    client = AsyncIOMotorClient(
        settings.MONGODB_URI,
        serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
    )
    db = client[settings.MONGODB_DATABASE]

    try:
        await client.admin.command("ping")
        print("✅ MongoDB connected")
    except PyMongoError as e:
        print(f"❌ MongoDB connection failed: {e}")
        return 1

    try:
        await create_indexes(db)

        for name in ("users", "jobs"):
            print(f"\n📋 Indexes on {name}:")
            indexes = await db[name].list_indexes().to_list(length=None)
            for idx in indexes:
                unique = " (unique)" if idx.get("unique") else ""
                print(f"   - {idx['name']}: {dict(idx.get('key', {}))}{unique}")
    finally:
        client.close()

    print("\n✅ Done")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(ensure_indexes()))
