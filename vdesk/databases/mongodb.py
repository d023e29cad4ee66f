from typing import List, Optional, Type
from pymongo import AsyncMongoClient
from beanie import init_beanie, Document
from pymongo.errors import ServerSelectionTimeoutError

from vdesk.configs.settings import settings
from vdesk.utils.logging import get_logger

logger = get_logger(__name__)


class MongoDB:
    """MongoDB connection manager using Beanie ODM"""

    def __init__(self):
        self.client: Optional[AsyncMongoClient] = None
        self.database = None

    async def connect(self, document_models: List[Type[Document]]):
        """Connect to MongoDB and initialize Beanie"""
        try:
            self.client = AsyncMongoClient(
                settings.MONGO_URL,
                serverSelectionTimeoutMS=8000,
                connectTimeoutMS=8000,
                socketTimeoutMS=10000,
                maxPoolSize=50,
                minPoolSize=0,
            )

            await self.client.admin.command('ping')

            self.database = self.client[settings.MONGO_DB]

            await init_beanie(
                database=self.database,
                document_models=document_models
            )
            logger.info(
                f"Beanie initialized with {len(document_models)} document models on '{settings.MONGO_DB}'")

            return True

        except ServerSelectionTimeoutError as e:
            logger.error(
                f"Failed to connect to MongoDB (timeout) at {settings.MONGO_HOST or 'localhost'}:{settings.MONGO_PORT}: {e}")
            raise ConnectionError("Cannot connect to MongoDB server")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {str(e)}")
            raise

    async def ping(self) -> bool:
        if not self.client:
            return False
        try:
            await self.client.admin.command('ping')
            return True
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {str(e)}")
            return False

    async def disconnect(self):
        """Disconnect from MongoDB"""
        if self.client:
            await self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")


# Global MongoDB instance
mongodb = MongoDB()
