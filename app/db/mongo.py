"""
MongoDB client manager using motor.
Owns the single AsyncIOMotorClient for the process; constructed by the
application context and closed on shutdown.
"""

import time

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from app.config import Settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class MongoClientManager:
    """Lifecycle wrapper around the motor client."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self.client: AsyncIOMotorClient | None = None
        self._initialized = False
        self._closed = False

    async def initialize(self) -> None:
        """Create the client and verify the server is reachable."""
        if self._initialized:
            logger.warning("Mongo client already initialized")
            return

        if self._closed:
            raise RuntimeError("Cannot reinitialize closed Mongo client")

        try:
            logger.info("Connecting to MongoDB", database=self._settings.MONGO_DB_NAME)

            self.client = AsyncIOMotorClient(
                self._settings.MONGO_URI,
                tz_aware=True,
                serverSelectionTimeoutMS=self._settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            )
            await self.client.admin.command("ping")
            self._initialized = True

            logger.info("Connected to MongoDB", database=self._settings.MONGO_DB_NAME)

        except PyMongoError as e:
            logger.error("Error connecting to MongoDB", error=str(e))
            if self.client is not None:
                self.client.close()
                self.client = None
            raise

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if not self._initialized or self.client is None:
            raise RuntimeError("Mongo client not initialized")
        return self.client[self._settings.MONGO_DB_NAME]

    async def health_check(self) -> dict:
        """Ping the server and report latency."""
        if not self._initialized or self.client is None:
            return {"healthy": False, "error": "Mongo client not initialized"}

        t0 = time.time()
        try:
            await self.client.admin.command("ping")
            return {
                "healthy": True,
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }
        except PyMongoError as e:
            return {
                "healthy": False,
                "error": f"{type(e).__name__}: {e}",
                "latency_ms": round((time.time() - t0) * 1000, 1),
            }

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
        self._initialized = False
        self._closed = True
        logger.info("MongoDB connection closed")
