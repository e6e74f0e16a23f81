"""
Pydantic schemas package.

This module exports the schemas used for API request/response validation.
"""

from group_directory.schemas.groups import (
    GroupCreate, DisplayNameUpdate, GroupResponse, GroupList,
    GroupDetailsRequest, GroupDetailsResponse,
    MemberSummary, MemberList, MemberCount
)

__all__ = [
    "GroupCreate",
    "DisplayNameUpdate",
    "GroupResponse",
    "GroupList",
    "GroupDetailsRequest",
    "GroupDetailsResponse",
    "MemberSummary",
    "MemberList",
    "MemberCount"
]
