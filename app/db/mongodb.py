"""
MongoDB Connection Utility

Every entity of the platform lives in MongoDB:
- meetings, notifications, trainers, students
- reviews (testimonials)
- typing_histories (+ legacy typing_progresses mirror)
- demo_slots, demo_bookings
- interviews
- jobs
- batches, batch_students, and the course-player progress records
"""
import logging

from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database
from pymongo.collection import Collection
from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, tz_aware=False)
    return _client


def get_mongo_db() -> Database:
    """Get the platform database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Get a specific collection by its name (see COLLECTIONS)."""
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
    except Exception:
        logger.exception("MongoDB connection failed")
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "meetings": "meetings",
    "notifications": "notifications",
    "trainers": "trainers",
    "students": "students",
    "reviews": "reviews",
    "typing_history": "typing_histories",
    "typing_progress": "typing_progresses",
    "demo_slots": "demo_slots",
    "demo_bookings": "demo_bookings",
    "interviews": "interviews",
    "jobs": "jobs",
    "batches": "batches",
    "batch_students": "batch_students",
    "progress": "progresses",
    # managed by the course builder; read-only here
    "courses": "courses",
    "modules": "modules",
    "topics": "topics",
}


def init_mongo_indexes():
    """
    Create indexes for the constraints the platform relies on.
    Call this once during app startup.
    """
    db = get_mongo_db()

    db[COLLECTIONS["meetings"]].create_index([("date", DESCENDING)])
    db[COLLECTIONS["notifications"]].create_index([("recipient", ASCENDING), ("createdAt", DESCENDING)])
    db[COLLECTIONS["trainers"]].create_index("email", unique=True)

    db[COLLECTIONS["reviews"]].create_index([("createdAt", DESCENDING)])

    db[COLLECTIONS["typing_history"]].create_index([("studentId", ASCENDING), ("createdAt", DESCENDING)])
    db[COLLECTIONS["typing_progress"]].create_index("studentId")

    # One slot per (day, time)
    db[COLLECTIONS["demo_slots"]].create_index(
        [("date", ASCENDING), ("time", ASCENDING)],
        unique=True
    )
    db[COLLECTIONS["demo_bookings"]].create_index([("createdAt", DESCENDING)])

    db[COLLECTIONS["interviews"]].create_index("callId", unique=True, sparse=True)
    db[COLLECTIONS["interviews"]].create_index([("studentId", ASCENDING), ("createdAt", DESCENDING)])

    db[COLLECTIONS["jobs"]].create_index([("isActive", ASCENDING), ("postedAt", DESCENDING)])

    db[COLLECTIONS["batches"]].create_index([("courseId", ASCENDING), ("createdAt", DESCENDING)])
    # A student sits in at most one batch per course
    db[COLLECTIONS["batch_students"]].create_index(
        [("studentId", ASCENDING), ("courseId", ASCENDING)],
        unique=True
    )
    db[COLLECTIONS["batch_students"]].create_index([("batchId", ASCENDING), ("enrollmentDate", DESCENDING)])

    db[COLLECTIONS["progress"]].create_index([("studentId", ASCENDING), ("topicId", ASCENDING)])
    db[COLLECTIONS["progress"]].create_index([("studentId", ASCENDING), ("updatedAt", DESCENDING)])

    logger.info("MongoDB indexes created successfully")
