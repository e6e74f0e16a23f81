"""
Group record store adapter.

Translates directory operations into parameterized SQLAlchemy statements.
The adapter owns no state besides its session factory: every call opens
a session, runs its statement and closes it again.
"""

import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy import select, insert, update, delete, func, distinct, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import Executable

from group_directory.models.groups import Group, group_user, group_admin, preferences
from group_directory.models.records import GroupRecord
from group_directory.services.base import GroupAlreadyExistsError

logger = logging.getLogger(__name__)

groups = Group.__table__

LIKE_ESCAPE = "\\"


def escape_like(search: str) -> str:
    """Escape LIKE wildcards so search text only ever matches literally."""
    return (
        search.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(search: str) -> str:
    return f"%{escape_like(search)}%"


class GroupStore:
    """Stateless translator between directory operations and SQL."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def fetch_all(self, statement: Executable) -> List[Any]:
        """Run a read statement and return all rows."""
        with self._session_factory() as session:
            return list(session.execute(statement).all())

    def fetch_scalar(self, statement: Executable) -> Any:
        with self._session_factory() as session:
            return session.execute(statement).scalar()

    def execute(self, statement: Executable) -> int:
        """Run a write statement in its own transaction and return the row count."""
        with self._session_factory.begin() as session:
            return session.execute(statement).rowcount

    # Groups

    def insert_group(self, gid: str, display_name: str) -> None:
        try:
            self.execute(insert(groups).values(gid=gid, displayname=display_name))
        except IntegrityError as e:
            logger.debug(f"Unique constraint violated for group {gid}: {e.orig}")
            raise GroupAlreadyExistsError(gid) from e

    def delete_group(self, gid: str) -> int:
        return self.execute(delete(groups).where(groups.c.gid == gid))

    def delete_memberships(self, gid: str) -> int:
        return self.execute(delete(group_user).where(group_user.c.gid == gid))

    def delete_admins(self, gid: str) -> int:
        return self.execute(delete(group_admin).where(group_admin.c.gid == gid))

    def fetch_group(self, gid: str) -> Optional[GroupRecord]:
        rows = self.fetch_all(select(Group.gid, Group.displayname).where(Group.gid == gid))
        if not rows:
            return None
        return GroupRecord(rows[0].gid, rows[0].displayname or "")

    def fetch_groups(self, gids: Iterable[str]) -> List[GroupRecord]:
        """Fetch many groups with a single IN query; callers bound the list size."""
        gids = list(gids)
        if not gids:
            return []
        rows = self.fetch_all(select(Group.gid, Group.displayname).where(Group.gid.in_(gids)))
        return [GroupRecord(str(row.gid), str(row.displayname or "")) for row in rows]

    def search_groups(self, search: str = "", limit: int = -1, offset: int = 0) -> List[GroupRecord]:
        query = select(Group.gid, Group.displayname).order_by(Group.gid.asc())

        if search != "":
            pattern = contains_pattern(search)
            query = query.where(or_(
                Group.gid.ilike(pattern, escape=LIKE_ESCAPE),
                Group.displayname.ilike(pattern, escape=LIKE_ESCAPE),
            ))

        if limit > 0:
            query = query.limit(limit)
        if offset > 0:
            query = query.offset(offset)

        return [GroupRecord(row.gid, row.displayname or "") for row in self.fetch_all(query)]

    def fetch_display_name(self, gid: str) -> Optional[str]:
        return self.fetch_scalar(select(Group.displayname).where(Group.gid == gid))

    def update_display_name(self, gid: str, display_name: str) -> int:
        return self.execute(
            update(groups).where(groups.c.gid == gid).values(displayname=display_name)
        )

    # Memberships

    def membership_exists(self, uid: str, gid: str) -> bool:
        query = (
            select(group_user.c.uid)
            .where(group_user.c.gid == gid, group_user.c.uid == uid)
            .limit(1)
        )
        return bool(self.fetch_all(query))

    def insert_membership(self, uid: str, gid: str) -> None:
        self.execute(insert(group_user).values(uid=uid, gid=gid))

    def delete_membership(self, uid: str, gid: str) -> int:
        return self.execute(
            delete(group_user).where(group_user.c.uid == uid, group_user.c.gid == gid)
        )

    def fetch_user_groups(self, uid: str) -> List[GroupRecord]:
        query = (
            select(group_user.c.gid, Group.displayname)
            .select_from(group_user.outerjoin(groups, group_user.c.gid == Group.gid))
            .where(group_user.c.uid == uid)
            .order_by(group_user.c.gid.asc())
        )
        return [GroupRecord(row.gid, row.displayname or "") for row in self.fetch_all(query)]

    def count_members(self, gid: str, search: str = "") -> int:
        query = select(func.count().label("num_users")).select_from(group_user).where(
            group_user.c.gid == gid
        )
        if search != "":
            query = query.where(group_user.c.uid.like(contains_pattern(search), escape=LIKE_ESCAPE))
        return int(self.fetch_scalar(query) or 0)

    def count_disabled_members(self, gid: str) -> int:
        """Count members whose core/enabled preference is the string 'false'."""
        query = (
            select(func.count(distinct(group_user.c.uid)))
            .select_from(preferences.join(group_user, preferences.c.userid == group_user.c.uid))
            .where(
                preferences.c.appid == "core",
                preferences.c.configkey == "enabled",
                preferences.c.configvalue == "false",
                group_user.c.gid == gid,
            )
        )
        return int(self.fetch_scalar(query) or 0)
