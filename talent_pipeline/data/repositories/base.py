"""
Base repository class providing common CRUD operations.

All entity-specific repositories inherit from this base class.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.collection import Collection
from pymongo.results import InsertOneResult

from talent_pipeline.data.database import DatabaseManager, get_database_manager
from talent_pipeline.data.models.base import BaseDocument, utc_now
from talent_pipeline.utils.logger import get_logger

logger = get_logger(__name__)

# Type variable for document models
T = TypeVar("T", bound=BaseDocument)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Implements both synchronous and asynchronous operations.
    Subclasses must define the collection name and model class.
    """

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Pydantic model class for this repository."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or get_database_manager()

    # -------------------------------------------------------------------------
    # Collection Access
    # -------------------------------------------------------------------------

    def _get_sync_collection(self) -> Collection:
        return self._db_manager.get_sync_collection(self.collection_name)

    def _get_async_collection(self) -> AsyncIOMotorCollection:
        return self._db_manager.get_async_collection(self.collection_name)

    # -------------------------------------------------------------------------
    # Document Conversion
    # -------------------------------------------------------------------------

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        if document is None:
            return None
        return self.model_class.model_validate(document)

    def _to_models(self, documents: list[dict[str, Any]]) -> list[T]:
        return [self._to_model(doc) for doc in documents if doc is not None]

    def _to_document(self, model: T) -> dict[str, Any]:
        return model.model_dump_mongo()

    @staticmethod
    def _to_object_id(id_value: str | ObjectId) -> Optional[ObjectId]:
        """Convert string to ObjectId; malformed ids map to None."""
        if isinstance(id_value, ObjectId):
            return id_value
        try:
            return ObjectId(id_value)
        except (InvalidId, TypeError):
            return None

    # -------------------------------------------------------------------------
    # Synchronous Operations
    # -------------------------------------------------------------------------

    def create(self, model: T) -> T:
        """Insert a new document and set its id on the model."""
        document = self._to_document(model)
        now = utc_now()
        document["created_at"] = now
        document["updated_at"] = now

        result: InsertOneResult = self._get_sync_collection().insert_one(document)
        model.id = result.inserted_id
        model.created_at = now
        model.updated_at = now
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model

    def get_by_id(self, id_value: str | ObjectId) -> Optional[T]:
        object_id = self._to_object_id(id_value)
        if object_id is None:
            return None
        return self._to_model(self._get_sync_collection().find_one({"_id": object_id}))

    def find(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 100,
        sort_by: str = "created_at",
        sort_order: int = -1,
    ) -> list[T]:
        """Find documents matching a query."""
        cursor = (
            self._get_sync_collection()
            .find(query)
            .sort(sort_by, sort_order)
            .skip(skip)
            .limit(limit)
        )
        return self._to_models(list(cursor))

    def count(self, query: Optional[dict[str, Any]] = None) -> int:
        return self._get_sync_collection().count_documents(query or {})

    # -------------------------------------------------------------------------
    # Asynchronous Operations
    # -------------------------------------------------------------------------

    async def create_async(self, model: T) -> T:
        """Insert a new document asynchronously."""
        document = self._to_document(model)
        now = utc_now()
        document["created_at"] = now
        document["updated_at"] = now

        result: InsertOneResult = await self._get_async_collection().insert_one(document)
        model.id = result.inserted_id
        model.created_at = now
        model.updated_at = now
        logger.debug(f"Created {self.collection_name} document: {result.inserted_id}")
        return model

    async def get_by_id_async(self, id_value: str | ObjectId) -> Optional[T]:
        object_id = self._to_object_id(id_value)
        if object_id is None:
            return None
        document = await self._get_async_collection().find_one({"_id": object_id})
        return self._to_model(document)
