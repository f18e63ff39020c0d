"""MongoDB connection management."""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from jobboard.models.job import JOBS_COLLECTION
from jobboard.models.user import USERS_COLLECTION

logger = logging.getLogger(__name__)


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create indexes for the users and jobs collections."""
    try:
        users = db[USERS_COLLECTION]
        await users.create_index("email", unique=True)
        await users.create_index("role")
        await users.create_index("profile_picture", sparse=True)
        await users.create_index("resume", sparse=True)

        jobs = db[JOBS_COLLECTION]
        await jobs.create_index("posted_by")
        await jobs.create_index("applicants")
        await jobs.create_index([("is_active", ASCENDING), ("created_at", DESCENDING)])
        await jobs.create_index("job_type")

        logger.info("✅ MongoDB indexes created")

    except PyMongoError as e:
        logger.warning(f"Index creation error (may already exist): {e}")


class MongoDatabase:
    """
    Owns the Motor client for the application.

    The database handle is created once in the application lifespan and
    shared by every store.
    """

    def __init__(self, uri: str, database: str, server_selection_timeout_ms: int = 5000,
                 socket_timeout_ms: int = 45000):
        self.uri = uri
        self.database_name = database
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.socket_timeout_ms = socket_timeout_ms
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None
        self._initialized = False

    @classmethod
    def from_settings(cls, settings) -> "MongoDatabase":
        return cls(
            uri=settings.MONGODB_URI,
            database=settings.MONGODB_DATABASE,
            server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            socket_timeout_ms=settings.MONGODB_SOCKET_TIMEOUT_MS,
        )

    async def initialize(self) -> AsyncIOMotorDatabase:
        """Connect, verify the server is reachable and create indexes."""
        if self._initialized:
            return self.db

        try:
            self.client = AsyncIOMotorClient(
                self.uri,
                maxPoolSize=10,
                minPoolSize=1,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                socketTimeoutMS=self.socket_timeout_ms,
                tz_aware=True,
            )
            await self.client.admin.command("ping")
            self.db = self.client[self.database_name]

            await create_indexes(self.db)

            self._initialized = True
            logger.info(f"✅ Connected to MongoDB: {self.database_name}")
            return self.db

        except PyMongoError as e:
            logger.error(f"❌ Failed to connect to MongoDB: {e}")
            raise

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB connection closed")
        self._initialized = False
