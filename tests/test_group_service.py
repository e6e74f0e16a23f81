import hashlib
import random

import pytest
from sqlalchemy import select, func

from group_directory.config.settings import settings
from group_directory.core.database import drop_tables
from group_directory.models.groups import group_user
from group_directory.models.records import GroupRecord
from group_directory.services.base import GroupAlreadyExistsError, StoreError
from group_directory.services.domain.group_service import GroupDirectoryService, derive_gid, chunked


def edge_count(engine, uid, gid):
    with engine.connect() as conn:
        return conn.execute(
            select(func.count()).select_from(group_user)
            .where(group_user.c.uid == uid, group_user.c.gid == gid)
        ).scalar()


class TestDeriveGid:
    def test_short_name_is_used_verbatim(self):
        assert derive_gid("Engineering") == "Engineering"

    def test_name_of_exactly_64_bytes_is_used_verbatim(self):
        name = "x" * 64
        assert derive_gid(name) == name

    def test_long_name_is_hashed(self):
        name = "x" * 65
        assert derive_gid(name) == hashlib.sha256(name.encode("utf-8")).hexdigest()

    def test_length_is_measured_in_bytes(self):
        # 33 characters, 66 bytes
        name = "é" * 33
        assert derive_gid(name) == hashlib.sha256(name.encode("utf-8")).hexdigest()


class TestCreateDelete:
    def test_create_returns_gid_and_caches_it(self, directory, cache):
        result = directory.create_group("Engineering")

        assert result.success
        assert result.data == "Engineering"
        assert cache.get("Engineering") == GroupRecord("Engineering", "Engineering")

    def test_create_long_name_stores_hashed_gid(self, directory):
        name = "A very long department name that certainly does not fit into 64 bytes"
        result = directory.create_group(name)

        assert result.data == hashlib.sha256(name.encode("utf-8")).hexdigest()
        assert directory.get_display_name(result.data) == name

    def test_create_existing_group_reports_conflict(self, directory):
        directory.create_group("Engineering")

        result = directory.create_group("Engineering")

        assert not result.success
        assert isinstance(result.error, GroupAlreadyExistsError)
        assert result.error.gid == "Engineering"

    def test_delete_removes_group_edges_and_cache_entry(self, directory, cache, engine, seed):
        directory.create_group("eng")
        directory.add_to_group("alice", "eng")
        directory.add_to_group("alice", "ops")

        assert directory.delete_group("eng") is True

        assert not cache.has("eng")
        assert directory.group_exists("eng") is False
        assert edge_count(engine, "alice", "eng") == 0
        assert edge_count(engine, "alice", "ops") == 1

    def test_delete_unknown_group_still_succeeds(self, directory):
        assert directory.delete_group("nope") is True


class TestMembership:
    def test_add_twice_creates_one_edge(self, directory, engine):
        assert directory.add_to_group("alice", "eng") is True
        assert directory.add_to_group("alice", "eng") is False
        assert edge_count(engine, "alice", "eng") == 1

    def test_in_group(self, directory):
        directory.add_to_group("alice", "eng")

        assert directory.in_group("alice", "eng")
        assert not directory.in_group("bob", "eng")

    def test_remove_non_member_is_idempotent(self, directory, engine):
        directory.add_to_group("alice", "eng")

        assert directory.remove_from_group("bob", "eng") is True
        assert edge_count(engine, "alice", "eng") == 1

        assert directory.remove_from_group("alice", "eng") is True
        assert directory.remove_from_group("alice", "eng") is True
        assert edge_count(engine, "alice", "eng") == 0

    def test_get_user_groups_populates_cache(self, directory, cache, seed):
        seed.groups(("eng", "Engineering"), ("ops", "Operations"))
        seed.members("ops", "alice")
        seed.members("eng", "alice", "bob")

        assert directory.get_user_groups("alice") == ["eng", "ops"]
        assert cache.get("ops") == GroupRecord("ops", "Operations")
        assert directory.get_user_groups("") == []


class TestGetGroups:
    @pytest.fixture(autouse=True)
    def groups(self, seed):
        seed.groups(
            ("delta", "Fourth"),
            ("alpha", "First"),
            ("charlie", "Third team"),
            ("bravo", "Second TEAM"),
            ("echo", ""),
        )

    def test_all_groups_ordered_by_gid(self, directory):
        assert directory.get_groups() == ["alpha", "bravo", "charlie", "delta", "echo"]

    def test_search_matches_gid_or_display_name_case_insensitively(self, directory):
        assert directory.get_groups("team") == ["bravo", "charlie"]
        assert directory.get_groups("ALP") == ["alpha"]

    def test_limit_and_offset(self, directory):
        assert directory.get_groups(limit=2, offset=1) == ["bravo", "charlie"]

    def test_non_positive_limit_and_offset_are_ignored(self, directory):
        assert directory.get_groups(limit=0, offset=-3) == ["alpha", "bravo", "charlie", "delta", "echo"]

    def test_every_row_is_cached(self, directory, cache):
        directory.get_groups()

        assert cache.get("bravo") == GroupRecord("bravo", "Second TEAM")
        assert cache.get("echo") == GroupRecord("echo", "")


class TestSearchEscaping:
    def test_percent_matches_literally(self, directory, seed):
        seed.groups(("100%", "full"), ("1000", "thousand"))

        assert directory.get_groups("0%") == ["100%"]

    def test_underscore_matches_literally(self, directory, seed):
        seed.groups(("a_b", ""), ("axb", ""))

        assert directory.get_groups("_") == ["a_b"]


class TestExistence:
    def test_group_exists_uses_cache_first(self, directory, cache, monkeypatch):
        cache.put(GroupRecord("cached", "Cached"))

        def fail(gid):
            raise AssertionError("store should not be queried")

        monkeypatch.setattr(directory.store, "fetch_group", fail)
        assert directory.group_exists("cached")

    def test_group_exists_caches_store_hit(self, directory, cache, seed):
        seed.groups(("eng", "Engineering"))

        assert directory.group_exists("eng")
        assert cache.get("eng") == GroupRecord("eng", "Engineering")
        assert not directory.group_exists("missing")
        assert not cache.has("missing")

    def test_groups_exist_is_chunked(self, directory, cache, seed, monkeypatch):
        gids = [f"group-{i:04d}" for i in range(2500)]
        stored = set(gids[::3])
        seed.groups(*[(gid, gid.upper()) for gid in stored])

        chunks = []
        fetch_groups = directory.store.fetch_groups

        def recording_fetch(chunk):
            chunks.append(len(chunk))
            return fetch_groups(chunk)

        monkeypatch.setattr(directory.store, "fetch_groups", recording_fetch)

        assert directory.groups_exist(set(gids)) == stored
        assert chunks == [1000, 1000, 500]
        assert all(cache.has(gid) for gid in stored)

    def test_groups_exist_skips_cached_ids(self, directory, seed, monkeypatch):
        seed.groups(("a", ""), ("b", ""))
        directory.group_exists("a")

        chunks = []
        fetch_groups = directory.store.fetch_groups

        def recording_fetch(chunk):
            chunks.append(list(chunk))
            return fetch_groups(chunk)

        monkeypatch.setattr(directory.store, "fetch_groups", recording_fetch)

        assert directory.groups_exist(["a", "b", "c"]) == {"a", "b"}
        assert chunks == [["b", "c"]]

    def test_groups_exist_independent_of_splitting(self, store, seed):
        gids = [f"g{i}" for i in range(2500)]
        stored = set(random.Random(7).sample(gids, 900))
        seed.groups(*[(gid, "") for gid in stored])

        whole = GroupDirectoryService(store, chunk_size=1000).groups_exist(gids)

        shuffled = list(gids)
        random.Random(11).shuffle(shuffled)
        small_chunks = GroupDirectoryService(store, chunk_size=7)
        split = small_chunks.groups_exist(shuffled[:1234]) | small_chunks.groups_exist(shuffled[1234:])

        assert whole == stored
        assert split == stored

    def test_chunked_helper(self):
        assert list(chunked(["a", "b", "c"], 2)) == [["a", "b"], ["c"]]
        assert list(chunked([], 1000)) == []

    def test_chunked_rejects_empty_chunks(self):
        with pytest.raises(ValueError):
            list(chunked(["a"], 0))


class TestLimits:
    @pytest.mark.parametrize("chunk_size", [0, -1, 1001, 5000])
    def test_chunk_size_out_of_range(self, store, chunk_size):
        with pytest.raises(ValueError):
            GroupDirectoryService(store, chunk_size=chunk_size)

    @pytest.mark.parametrize("chunk_size", [1, 1000])
    def test_chunk_size_bounds_accepted(self, store, chunk_size):
        assert GroupDirectoryService(store, chunk_size=chunk_size).chunk_size == chunk_size

    @pytest.mark.parametrize("gid_max_bytes", [0, 65, 255])
    def test_gid_max_bytes_out_of_range(self, store, gid_max_bytes):
        with pytest.raises(ValueError):
            GroupDirectoryService(store, gid_max_bytes=gid_max_bytes)

    def test_out_of_range_settings_are_rejected(self, store, monkeypatch):
        monkeypatch.setattr(settings, "batch_chunk_size", 0)
        with pytest.raises(ValueError):
            GroupDirectoryService(store)

        monkeypatch.setattr(settings, "batch_chunk_size", 5000)
        with pytest.raises(ValueError):
            GroupDirectoryService(store)


class TestDetails:
    def test_group_details(self, directory, seed):
        seed.groups(("eng", "Engineering"), ("blank", ""))

        assert directory.get_group_details("eng") == {"display_name": "Engineering"}
        assert directory.get_group_details("blank") == {}
        assert directory.get_group_details("missing") == {}

    def test_groups_details_mixes_cache_and_store(self, directory, cache, seed):
        seed.groups(("eng", "Engineering"), ("ops", "Operations"), ("blank", ""))
        cache.put(GroupRecord("eng", "Cached engineering"))

        details = directory.get_groups_details(["eng", "ops", "blank", "missing"])

        assert details == {
            "eng": {"display_name": "Cached engineering"},
            "ops": {"display_name": "Operations"},
            "blank": {},
        }
        assert cache.get("ops") == GroupRecord("ops", "Operations")


class TestDisplayName:
    def test_end_to_end_lifecycle(self, directory):
        assert directory.create_group("Engineering").data == "Engineering"
        assert directory.group_exists("Engineering")
        assert directory.get_display_name("Engineering") == "Engineering"

        assert directory.set_display_name("Engineering", "") is True
        assert directory.get_display_name("Engineering") == "Engineering"

        assert directory.delete_group("Engineering") is True
        assert directory.group_exists("Engineering") is False

    def test_blank_name_persists_gid(self, directory, store):
        directory.create_group("eng")

        assert directory.set_display_name("eng", "   ")
        assert store.fetch_display_name("eng") == "eng"

    def test_name_is_trimmed_and_written_through(self, directory, store, cache):
        directory.create_group("eng")

        assert directory.set_display_name("eng", "  Engineering  ")
        assert store.fetch_display_name("eng") == "Engineering"
        assert cache.get("eng") == GroupRecord("eng", "Engineering")
        assert directory.get_display_name("eng") == "Engineering"

    def test_set_on_missing_group_fails(self, directory, store):
        assert directory.set_display_name("missing", "Name") is False
        assert store.fetch_display_name("missing") is None

    def test_rename_of_group_deleted_elsewhere(self, directory, cache):
        cache.put(GroupRecord("gone", "Gone"))

        assert directory.set_display_name("gone", "Back") is False
        assert not cache.has("gone")
        assert directory.group_exists("gone") is False

    def test_rename_to_same_name(self, directory, store, cache, monkeypatch):
        directory.create_group("eng")
        # MySQL reports 0 affected rows when the value does not change
        monkeypatch.setattr(store, "update_display_name", lambda gid, name: 0)

        assert directory.set_display_name("eng", "eng") is True
        assert cache.get("eng") == GroupRecord("eng", "eng")

    def test_blank_cached_name_falls_through_to_store(self, directory, cache, seed):
        seed.groups(("eng", "Engineering"))
        cache.put(GroupRecord("eng", "  "))

        assert directory.get_display_name("eng") == "Engineering"
        # Not refilled from this path
        assert cache.get("eng") == GroupRecord("eng", "  ")

    def test_missing_group_has_empty_name(self, directory):
        assert directory.get_display_name("missing") == ""


class TestStoreFailures:
    def test_store_errors_propagate(self, directory, engine):
        drop_tables(engine)

        with pytest.raises(StoreError) as excinfo:
            directory.group_exists("eng")
        assert excinfo.value.operation == "group_exists"

    def test_create_on_broken_store_raises(self, directory, engine):
        drop_tables(engine)

        with pytest.raises(StoreError):
            directory.create_group("eng")
