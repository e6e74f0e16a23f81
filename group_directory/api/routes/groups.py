"""
Group directory API endpoints.

This module provides REST endpoints for group lifecycle, display names,
batch lookups and membership management. All work is delegated to the
GroupDirectoryService.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from group_directory.core.dependencies import get_directory
from group_directory.schemas.groups import (
    GroupCreate, DisplayNameUpdate, GroupResponse, GroupList,
    GroupDetailsRequest, GroupDetailsResponse,
    MemberSummary, MemberList, MemberCount
)
from group_directory.services.domain.group_service import GroupDirectoryService

router = APIRouter()


def _require_group(directory: GroupDirectoryService, gid: str) -> None:
    if not directory.group_exists(gid):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Group {gid} not found"
        )


@router.get("/", response_model=GroupList)
async def list_groups(
    search: str = Query("", description="Case-insensitive substring of gid or display name"),
    limit: int = Query(-1, description="Maximum number of groups, <= 0 for all"),
    offset: int = Query(0, ge=0, description="Number of groups to skip"),
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Retrieve gids ordered ascending, optionally filtered by a search string.
    """
    groups = directory.get_groups(search, limit, offset)
    return GroupList(groups=groups, search=search, limit=limit, offset=offset)


@router.post("/", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(
    group_data: GroupCreate,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Create a new group.

    The gid is the display name itself, or its SHA-256 digest when the
    name is longer than 64 bytes.
    """
    result = directory.create_group(group_data.display_name)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=result.error.message
        )
    return GroupResponse(gid=result.data, display_name=group_data.display_name)


@router.post("/details", response_model=GroupDetailsResponse)
async def get_groups_details(
    request: GroupDetailsRequest,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Resolve details for many groups at once. Unknown gids are omitted.
    """
    return GroupDetailsResponse(details=directory.get_groups_details(request.gids))


@router.get("/{gid}", response_model=GroupResponse)
async def get_group(
    gid: str,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Retrieve a group. The display name falls back to the gid when blank.
    """
    _require_group(directory, gid)
    display_name = directory.get_display_name(gid)
    return GroupResponse(gid=gid, display_name=display_name or gid)


@router.delete("/{gid}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(
    gid: str,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Delete a group together with its memberships and admin assignments.
    """
    directory.delete_group(gid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{gid}/display-name", response_model=GroupResponse)
async def set_display_name(
    gid: str,
    update: DisplayNameUpdate,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Rename a group. A blank name resets the display name to the gid.
    """
    if not directory.set_display_name(gid, update.display_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Group {gid} not found"
        )
    return GroupResponse(gid=gid, display_name=directory.get_display_name(gid))


@router.get("/{gid}/members", response_model=MemberList)
async def get_group_members(
    gid: str,
    search: str = Query("", description="Matches uid, display name or email"),
    limit: int = Query(-1, description="Maximum number of members, <= 0 for all"),
    offset: int = Query(0, ge=0, description="Number of members to skip"),
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Get members of a group ordered by uid.
    """
    users = directory.search_in_group(gid, search, limit, offset)
    return MemberList(
        gid=gid,
        members=[MemberSummary(uid=user.uid, display_name=user.display_name) for user in users.values()]
    )


@router.get("/{gid}/members/count", response_model=MemberCount)
async def count_group_members(
    gid: str,
    search: str = Query("", description="Substring of the uid"),
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Count members of a group, and how many of them are disabled.
    """
    return MemberCount(
        gid=gid,
        count=directory.count_users_in_group(gid, search),
        disabled=directory.count_disabled_in_group(gid)
    )


@router.get("/{gid}/members/{uid}")
async def check_membership(
    gid: str,
    uid: str,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Check whether a user belongs to a group.
    """
    return {"gid": gid, "uid": uid, "member": directory.in_group(uid, gid)}


@router.put("/{gid}/members/{uid}")
async def add_group_member(
    gid: str,
    uid: str,
    response: Response,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Add a user to a group. Adding an existing member changes nothing.
    """
    _require_group(directory, gid)
    added = directory.add_to_group(uid, gid)
    response.status_code = status.HTTP_201_CREATED if added else status.HTTP_200_OK
    return {"gid": gid, "uid": uid, "added": added}


@router.delete("/{gid}/members/{uid}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_group_member(
    gid: str,
    uid: str,
    directory: GroupDirectoryService = Depends(get_directory)
):
    """
    Remove a user from a group. Removing a non-member is not an error.
    """
    directory.remove_from_group(uid, gid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
