"""
FastAPI dependency injection functions.

This module provides the dependency that hands the shared group directory
service to route handlers.
"""

from functools import lru_cache

from group_directory.core.database import SessionLocal
from group_directory.core.group_cache import build_cache
from group_directory.core.group_store import GroupStore
from group_directory.services.domain.group_service import GroupDirectoryService


@lru_cache(maxsize=1)
def get_directory() -> GroupDirectoryService:
    """
    FastAPI dependency for the group directory.

    One service instance per process, so the group cache survives
    between requests.

    Returns:
        GroupDirectoryService: directory bound to the configured database
    """
    return GroupDirectoryService(GroupStore(SessionLocal), cache=build_cache())
