"""
Data layer for Talent Pipeline.

Submodules:
- database: MongoDB connection management
- models: Pydantic data models/schemas
- repositories: Database operations and queries
"""

from .database import (
    DatabaseManager,
    build_mongo_uri,
    get_database_manager,
)

__all__ = [
    "DatabaseManager",
    "build_mongo_uri",
    "get_database_manager",
]
