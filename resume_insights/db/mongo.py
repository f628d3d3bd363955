# resume_insights/db/mongo.py
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from resume_insights.core.config import Settings

logger = logging.getLogger(__name__)

RESUMES_COLLECTION = "resumes"
COMPANIES_COLLECTION = "companies"

_mongo_client: Optional[AsyncIOMotorClient] = None


def get_mongo_client(settings: Settings) -> AsyncIOMotorClient:
    """
    Returns a cached Motor client.
    """
    global _mongo_client
    if _mongo_client is None:
        # tz_aware keeps stored datetimes comparable with the models' UTC timestamps
        _mongo_client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    return _mongo_client


def get_db(settings: Settings) -> AsyncIOMotorDatabase:
    client = get_mongo_client(settings)
    return client[settings.MONGODB_DB]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    resumes = db[RESUMES_COLLECTION]
    await resumes.create_index([("owner_id", ASCENDING), ("uploaded_at", DESCENDING)])
    await resumes.create_index([("analysis.ats_score", DESCENDING)])
    await resumes.create_index([("is_analyzed", ASCENDING)])

    companies = db[COMPANIES_COLLECTION]
    # name is unique by convention only: concurrent reconciliations may insert twice
    await companies.create_index([("name", ASCENDING)])
    await companies.create_index([("industry", ASCENDING)])
    await companies.create_index([("required_skills.skill", ASCENDING)])
    await companies.create_index([("experience_level", ASCENDING)])
    await companies.create_index([("is_active", ASCENDING)])
    logger.info("Mongo indexes ensured on %s", db.name)


def close_db() -> None:
    global _mongo_client
    if _mongo_client is not None:
        _mongo_client.close()
        _mongo_client = None
