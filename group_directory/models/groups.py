"""
Group directory SQLAlchemy models.

This module defines the relations the directory reads and writes:
groups, group memberships and group admins, plus the user and
preference relations that membership searches join against.
"""

from sqlalchemy import Column, String, Text, Table, Index

from group_directory.core.database import Base


# Membership edges carry no payload and no primary key: the directory
# enforces one edge per (uid, gid) pair itself
group_user = Table(
    'group_user',
    Base.metadata,
    Column('gid', String(64), nullable=False, default=''),
    Column('uid', String(64), nullable=False, default=''),
    Index('gu_gid_uid_index', 'gid', 'uid'),
    Index('gu_uid_index', 'uid'),
)

group_admin = Table(
    'group_admin',
    Base.metadata,
    Column('gid', String(64), nullable=False, default=''),
    Column('uid', String(64), nullable=False, default=''),
    Index('group_admin_uid', 'uid'),
)

# Key/value user preferences, owned by other applications
preferences = Table(
    'preferences',
    Base.metadata,
    Column('userid', String(64), primary_key=True),
    Column('appid', String(32), primary_key=True),
    Column('configkey', String(64), primary_key=True),
    Column('configvalue', Text, nullable=True),
)


class Group(Base):
    """
    Group record.

    The gid is derived from the display name the group was created with
    and never changes; displayname may be edited later.
    """
    __tablename__ = "groups"

    gid = Column(String(64), primary_key=True, default='')
    displayname = Column(String(255), nullable=False, default='')

    def __repr__(self):
        return f"<Group(gid='{self.gid}', displayname='{self.displayname}')>"


class User(Base):
    """
    User record as far as the directory needs it.

    Accounts are managed elsewhere; membership searches only read
    the uid and display name.
    """
    __tablename__ = "users"

    uid = Column(String(64), primary_key=True, default='')
    displayname = Column(String(64), nullable=True)

    def __repr__(self):
        return f"<User(uid='{self.uid}')>"
