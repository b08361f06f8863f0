"""
Pydantic bases for the documents Talent Pipeline keeps in MongoDB.

A document holds its ObjectId under ``_id`` when handed to the driver and
as a 24-character hex string in JSON output. Embedded models (stage
events, rejection details, match inputs) have no identity of their own.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import core_schema


def utc_now() -> datetime:
    """Naive UTC timestamp, the form PyMongo hands back from the server."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PyObjectId(ObjectId):
    """ObjectId field type accepting either an ObjectId or its hex string."""

    @classmethod
    def validate(cls, value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        raise ValueError(f"Invalid ObjectId: {value!r}")

    @classmethod
    def __get_pydantic_core_schema__(
        cls, _source_type: Any, _handler: Any
    ) -> core_schema.CoreSchema:
        # Python-mode dumps keep the ObjectId for the driver
        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )


class TimestampMixin(BaseModel):
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class BaseDocument(TimestampMixin):
    """Top-level document of a collection, identified by ``_id``."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    @property
    def document_id(self) -> str:
        """Hex form of ``_id``; empty until the document has been inserted."""
        return str(self.id) if self.id is not None else ""

    def model_dump_mongo(self) -> dict[str, Any]:
        """Field dict for the driver, keyed by ``_id`` and without unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class EmbeddedModel(BaseModel):
    """Subdocument stored inside a parent document."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )
