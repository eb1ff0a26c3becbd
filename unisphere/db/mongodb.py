"""
MongoDB Connection Utility

MongoDB stores every collection the career-services app works with:
- users: Student and admin accounts
- jobs / employers: Job postings and the companies behind them
- applications: Student applications to jobs
- events / eventRegistrations: Career events and sign-ups
- resumes: Resume builder documents

The admin analytics only ever READ from these collections.
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from unisphere.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by its stored name (see COLLECTIONS)."""
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except PyMongoError as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "jobs": "jobs",
    "applications": "applications",
    "employers": "employers",
    "events": "events",
    "event_registrations": "eventRegistrations",
    "resumes": "resumes"
}

# The four collections the admin dashboard is computed from
DASHBOARD_SOURCES = ("users", "jobs", "applications", "event_registrations")


def init_mongo_indexes():
    """
    Create indexes for the dashboard's lookups.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Both identity fields are indexed until the userId -> studentId
    # migration is finished
    for key in ("applications", "event_registrations"):
        db[COLLECTIONS[key]].create_index("studentId")
        db[COLLECTIONS[key]].create_index("userId")

    # Company rollups join applications to jobs
    db[COLLECTIONS["applications"]].create_index("jobId")

    logger.info("MongoDB indexes created successfully")
