import logging

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient

from linkedin_api.config import config

logger = logging.getLogger(__name__)


class Database:
    """Holds the shared async client; opened and closed by the app lifespan."""

    def __init__(self, uri: str, name: str) -> None:
        self.uri = uri
        self.name = name
        self.client: AsyncMongoClient | None = None

    @property
    def db(self):
        if self.client is None:
            raise RuntimeError("Database is not connected")
        return self.client[self.name]

    async def connect(self) -> None:
        logger.info("Connecting to MongoDB database %s", self.name)
        self.client = AsyncMongoClient(self.uri, tz_aware=True)
        await self.db["posts"].create_index([("createdAt", DESCENDING)])
        await self.db["posts"].create_index([("user", ASCENDING)])

    async def disconnect(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None


database = Database(config.MONGODB_URI, config.MONGODB_DB_NAME)
