"""
Database models package.

This module imports all SQLAlchemy models to ensure they are
registered with the database metadata for table creation.
"""

# Import all models to register them with SQLAlchemy
from group_directory.models.groups import Group, User, group_user, group_admin, preferences

# Export all models for easy importing
__all__ = [
    # Group records
    "Group",

    # Relations
    "group_user",
    "group_admin",

    # Joined for membership searches
    "User",
    "preferences"
]
