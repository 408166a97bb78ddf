"""Shared Motor client.

Ordering mutations run in multi-document transactions, so the deployment must
be a replica set or sharded cluster and sessions always read from the primary.
"""

import logging

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorDatabase,
)
from pymongo.errors import PyMongoError

from content_api.mongodb.config import MongoDBConfig, get_mongodb_config

logger = logging.getLogger(__name__)


def names_replica_set(connection_string: str) -> bool:
    """Whether the URI points at a deployment that can run transactions."""
    return connection_string.startswith("mongodb+srv://") or "replicaSet=" in connection_string


class MongoDBClient:
    """Process-wide Motor client, connected on first use."""

    _instance: "MongoDBClient | None" = None
    _client: AsyncIOMotorClient | None = None
    _config: MongoDBConfig | None = None

    def __new__(cls) -> "MongoDBClient":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def initialize(self, config: MongoDBConfig | None = None) -> None:
        """Create the Motor client; later calls keep the first configuration."""
        if self._client is not None:
            return

        self._config = config or get_mongodb_config()
        if not names_replica_set(self._config.connection_string):
            logger.warning(
                "MONGODB_CONNECTION_STRING names no replica set; ordering writes need transactions"
            )
        self._client = AsyncIOMotorClient(
            self._config.connection_string,
            maxPoolSize=self._config.max_pool_size,
            minPoolSize=self._config.min_pool_size,
            serverSelectionTimeoutMS=self._config.server_selection_timeout_ms,
            readPreference="primary",
            retryWrites=True,
            tz_aware=True,
        )
        logger.info("MongoDB client ready for database %s", self._config.database_name)

    @property
    def client(self) -> AsyncIOMotorClient:
        self.initialize()
        if self._client is None:
            msg = "MongoDB client failed to initialize"
            raise RuntimeError(msg)
        return self._client

    @property
    def config(self) -> MongoDBConfig:
        self.initialize()
        if self._config is None:
            msg = "MongoDB config failed to load"
            raise RuntimeError(msg)
        return self._config

    @property
    def database(self) -> AsyncIOMotorDatabase:
        return self.client[self.config.database_name]

    async def start_session(self) -> AsyncIOMotorClientSession:
        """Open a session for one ordering transaction."""
        return await self.client.start_session()

    async def close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        logger.info("MongoDB client closed")

    async def ping(self) -> bool:
        """Round-trip to the primary; ``False`` when it cannot be reached."""
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", e)
            return False
        return True


def get_mongodb_client() -> MongoDBClient:
    return MongoDBClient()
