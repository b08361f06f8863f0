"""
Database repositories for Talent Pipeline data access.

Implements the repository pattern over the MongoDB collections.
"""

# Base repository
from .base import BaseRepository

# Entity repositories
from .application_repository import ApplicationRepository, get_application_repository
from .audit_repository import AuditRepository, get_audit_repository

__all__ = [
    # Base
    "BaseRepository",
    # Application
    "ApplicationRepository",
    "get_application_repository",
    # Audit
    "AuditRepository",
    "get_audit_repository",
]
