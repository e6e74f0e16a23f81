"""
API routes package.

This package contains the FastAPI route modules of the group directory.
"""

from group_directory.api.routes import groups

__all__ = [
    "groups"
]
