import pytest
from sqlalchemy import create_engine, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from group_directory.core.database import create_tables
from group_directory.core.group_cache import InMemoryGroupCache
from group_directory.core.group_store import GroupStore
from group_directory.models.groups import Group, User, group_user, preferences
from group_directory.services.domain.group_service import GroupDirectoryService


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def store(session_factory):
    return GroupStore(session_factory)


@pytest.fixture
def cache():
    return InMemoryGroupCache()


@pytest.fixture
def directory(store, cache):
    return GroupDirectoryService(store, cache=cache)


@pytest.fixture
def seed(engine):
    """Insert rows straight into the database, bypassing the directory."""

    class Seeder:
        def groups(self, *records):
            with engine.begin() as conn:
                conn.execute(insert(Group.__table__), [{"gid": gid, "displayname": name} for gid, name in records])

        def users(self, *records):
            with engine.begin() as conn:
                conn.execute(insert(User.__table__), [{"uid": uid, "displayname": name} for uid, name in records])

        def members(self, gid, *uids):
            with engine.begin() as conn:
                conn.execute(insert(group_user), [{"gid": gid, "uid": uid} for uid in uids])

        def preference(self, userid, appid, configkey, configvalue):
            with engine.begin() as conn:
                conn.execute(insert(preferences).values(
                    userid=userid, appid=appid, configkey=configkey, configvalue=configvalue
                ))

    return Seeder()
