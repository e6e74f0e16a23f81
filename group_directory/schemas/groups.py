"""
Pydantic schemas for group directory API validation and serialization.

These schemas define the structure of request and response payloads
for the group endpoints.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

from group_directory.config.settings import settings
from group_directory.services.domain.group_service import derive_gid


class GroupCreate(BaseModel):
    """Schema for creating a new group."""
    display_name: str = Field(..., min_length=1)

    @field_validator('display_name')
    @classmethod
    def display_name_not_blank(cls, v):
        """Reject names made of whitespace only."""
        if not v.strip():
            raise ValueError('Display name must not be blank')
        return v

    @field_validator('display_name')
    @classmethod
    def gid_fits_in_path(cls, v):
        """The gid ends up in /groups/{gid} URLs, which cannot carry '/'."""
        if '/' in derive_gid(v, settings.gid_max_bytes):
            raise ValueError("Display names of up to 64 bytes must not contain '/'")
        return v


class DisplayNameUpdate(BaseModel):
    """Schema for renaming a group. Blank names fall back to the gid."""
    display_name: str = ""


class GroupResponse(BaseModel):
    """Schema for group API responses."""
    gid: str
    display_name: str


class GroupList(BaseModel):
    """Paged list of gids."""
    groups: List[str]
    search: str = ""
    limit: int = -1
    offset: int = 0


class GroupDetailsRequest(BaseModel):
    """Batch details request."""
    gids: List[str]


class GroupDetailsResponse(BaseModel):
    """Details keyed by gid; groups that do not exist are left out."""
    details: Dict[str, Dict[str, str]]


class MemberSummary(BaseModel):
    """Summary schema for user references in member listings."""
    uid: str
    display_name: Optional[str] = None


class MemberList(BaseModel):
    gid: str
    members: List[MemberSummary]


class MemberCount(BaseModel):
    gid: str
    count: int
    disabled: int
