"""
Database connection manager for Talent Pipeline.

Holds one synchronous (PyMongo) and one asynchronous (Motor) client per
process and creates the indexes the pipeline collections rely on.
"""

from typing import Any, Optional
from urllib.parse import quote_plus

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from talent_pipeline.utils.config import DatabaseSettings, get_settings
from talent_pipeline.utils.logger import get_logger

logger = get_logger(__name__)

_CLIENT_OPTIONS = {
    "serverSelectionTimeoutMS": 5000,
    "connectTimeoutMS": 5000,
    "maxPoolSize": 50,
    "minPoolSize": 5,
    "tz_aware": False,
}


def build_mongo_uri(db_settings: DatabaseSettings) -> str:
    """
    Build a MongoDB connection URI from settings.

    Credentials are URL-encoded; hosts containing shell metacharacters
    are refused.
    """
    host = db_settings.host.strip()
    if not host or any(c in host for c in (";", "&", "|", "$", "`")):
        raise ValueError(f"Invalid database host: {host!r}")

    auth = ""
    if db_settings.username and db_settings.password:
        auth = f"{quote_plus(db_settings.username)}:{quote_plus(db_settings.password)}@"

    return f"mongodb://{auth}{host}:{db_settings.port}"


class DatabaseManager:
    """
    Manages MongoDB database connections.

    Singleton: every repository shares the same connection pools.
    """

    _instance: Optional["DatabaseManager"] = None
    _sync_client: Optional[MongoClient] = None
    _async_client: Optional[AsyncIOMotorClient] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if getattr(self, "_initialized", False):
            return

        self._db_settings = get_settings().database
        self._db_name = self._db_settings.name
        self._uri = build_mongo_uri(self._db_settings)
        self._initialized = True

    # -------------------------------------------------------------------------
    # Synchronous Client
    # -------------------------------------------------------------------------

    def get_sync_client(self) -> MongoClient:
        """Get or create synchronous MongoDB client."""
        if self._sync_client is None:
            logger.info("Creating synchronous MongoDB client")
            self._sync_client = MongoClient(self._uri, **_CLIENT_OPTIONS)
        return self._sync_client

    def get_sync_database(self) -> Database:
        return self.get_sync_client()[self._db_name]

    def get_sync_collection(self, collection_name: str) -> Any:
        return self.get_sync_database()[collection_name]

    def check_sync_connection(self) -> bool:
        """Check if synchronous connection is healthy."""
        try:
            self.get_sync_client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"Sync connection check failed: {e}")
            self.close_sync()
            return False

    # -------------------------------------------------------------------------
    # Asynchronous Client
    # -------------------------------------------------------------------------

    def get_async_client(self) -> AsyncIOMotorClient:
        """Get or create asynchronous MongoDB client."""
        if self._async_client is None:
            logger.info("Creating asynchronous MongoDB client")
            self._async_client = AsyncIOMotorClient(self._uri, **_CLIENT_OPTIONS)
        return self._async_client

    def get_async_database(self) -> AsyncIOMotorDatabase:
        return self.get_async_client()[self._db_name]

    def get_async_collection(self, collection_name: str) -> Any:
        return self.get_async_database()[collection_name]

    # -------------------------------------------------------------------------
    # Lifecycle Management
    # -------------------------------------------------------------------------

    def close_sync(self) -> None:
        if self._sync_client:
            logger.info("Closing synchronous MongoDB client")
            self._sync_client.close()
            self._sync_client = None

    # -------------------------------------------------------------------------
    # Index Management
    # -------------------------------------------------------------------------

    def ensure_indexes(self) -> None:
        """Create indexes for the applications and audit collections."""
        logger.info("Ensuring database indexes")

        applications = self.get_sync_collection(self._db_settings.applications_collection)
        applications.create_index(
            [("job_id", ASCENDING), ("candidate_id", ASCENDING)], unique=True
        )
        applications.create_index("candidate_id")
        applications.create_index([("job_id", ASCENDING), ("current_stage", ASCENDING)])
        applications.create_index([("updated_at", DESCENDING)])

        audit_logs = self.get_sync_collection(self._db_settings.audit_collection)
        audit_logs.create_index("action")
        audit_logs.create_index("actor.actor_id")
        audit_logs.create_index("related_application_id")
        audit_logs.create_index("related_job_id")
        audit_logs.create_index("compliance_relevant")
        audit_logs.create_index([("created_at", DESCENDING)])

        logger.info("Database indexes created successfully")


# Global database manager instance
_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the global database manager instance."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
