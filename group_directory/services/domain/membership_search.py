"""
Membership Search

Builds the user-in-group query and turns its rows into lazily resolved
user handles.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol

from sqlalchemy import select, func, and_, or_, literal
from sqlalchemy.sql import Select

from group_directory.core.group_store import GroupStore, LIKE_ESCAPE, contains_pattern
from group_directory.models.groups import User, group_user, preferences

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    """Whatever resolves a uid into a full user object."""

    def get(self, uid: str) -> Any:
        ...


@dataclass
class UserHandle:
    """
    Reference to a group member.

    The full user is only fetched from the user directory when resolve()
    is first called.
    """
    uid: str
    display_name: Optional[str] = None
    directory: Optional[UserDirectory] = field(default=None, repr=False, compare=False)
    _user: Any = field(default=None, init=False, repr=False, compare=False)

    def resolve(self) -> Any:
        if self._user is None and self.directory is not None:
            self._user = self.directory.get(self.uid)
        return self._user

    def get_display_name(self) -> str:
        if self.display_name:
            return self.display_name
        user = self.resolve()
        name = getattr(user, "display_name", None) if user is not None else None
        return name or self.uid


def build_member_search_query(gid: str, search: str = "", limit: int = -1, offset: int = 0) -> Select:
    """
    Members of gid joined to their user rows.

    Without a search the rows are ordered by uid. With a search the email
    preference is joined as well, any of uid, display name or email may
    match, and rows are ordered by the lower-cased uid instead.
    """
    members = group_user.outerjoin(User.__table__, group_user.c.uid == User.uid)

    if search != "":
        pattern = contains_pattern(search)
        members = members.outerjoin(preferences, and_(
            preferences.c.userid == User.uid,
            preferences.c.appid == literal("settings"),
            preferences.c.configkey == literal("email"),
        ))
        query = (
            select(group_user.c.uid, User.displayname)
            .select_from(members)
            .where(group_user.c.gid == gid)
            .where(or_(
                group_user.c.uid.ilike(pattern, escape=LIKE_ESCAPE),
                User.displayname.ilike(pattern, escape=LIKE_ESCAPE),
                preferences.c.configvalue.ilike(pattern, escape=LIKE_ESCAPE),
            ))
            .order_by(func.lower(group_user.c.uid).asc())
        )
    else:
        query = (
            select(group_user.c.uid, User.displayname)
            .select_from(members)
            .where(group_user.c.gid == gid)
            .order_by(group_user.c.uid.asc())
        )

    if limit > 0:
        query = query.limit(limit)
    if offset > 0:
        query = query.offset(offset)

    return query


class MembershipSearchResolver:
    """Runs member searches against the store."""

    def __init__(self, store: GroupStore, user_directory: Optional[UserDirectory] = None):
        self._store = store
        self._user_directory = user_directory

    def search(self, gid: str, search: str = "", limit: int = -1, offset: int = 0) -> Dict[str, UserHandle]:
        rows = self._store.fetch_all(build_member_search_query(gid, search, limit, offset))

        # A uid can come back more than once through the joins
        users: Dict[str, UserHandle] = {}
        for row in rows:
            users[row.uid] = UserHandle(row.uid, row.displayname, self._user_directory)

        logger.debug(f"Member search in {gid} for '{search}' returned {len(users)} users")
        return users
