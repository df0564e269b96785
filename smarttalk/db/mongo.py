import logging
from fastapi import HTTPException, status
from motor.motor_asyncio import AsyncIOMotorClient

from smarttalk.config.settings import DATABASE_SETTINGS

logger = logging.getLogger("SmartTalkAI")


class MongoManager:
    client: AsyncIOMotorClient = None
    db = None

    def connect(self, mongo_url: str = None, db_name: str = None):
        mongo_url = mongo_url or DATABASE_SETTINGS["mongo_url"]
        db_name = db_name or DATABASE_SETTINGS["db_name"]

        logger.info(f"Connecting to MongoDB (DB: {db_name})...")
        try:
            self.client = AsyncIOMotorClient(mongo_url, serverSelectionTimeoutMS=5000)
            self.db = self.client[db_name]
            logger.info("MongoDB client created.")
        except Exception as e:
            logger.error(f"Could not connect to MongoDB: {e}")
            raise

    async def ensure_indexes(self):
        await self.db.users.create_index("email", unique=True)
        await self.db.users.create_index("id", unique=True)
        await self.db.sessions.create_index("sessionId", unique=True)
        await self.db.sessions.create_index([("userId", 1), ("updatedAt", -1)])
        await self.db.messages.create_index([("sessionId", 1), ("timestamp", 1)])
        logger.info("MongoDB indexes ensured.")

    async def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def close(self):
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed.")


db_manager = MongoManager()


async def get_database():
    if db_manager.db is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable. Please ensure MongoDB is running.",
        )
    return db_manager.db
