"""
Group Domain Service

This service is the public API of the group directory: group lifecycle,
memberships, batch lookups, searches and display names. Every read goes
to the group cache first and falls through to the store on a miss; every
successful store read refills the cache.
"""

import hashlib
import logging
from itertools import islice
from typing import Dict, Iterable, Iterator, List, Optional, Set

from group_directory.config.settings import settings
from group_directory.core.group_cache import GroupCache, InMemoryGroupCache
from group_directory.core.group_store import GroupStore
from group_directory.models.records import GroupRecord
from group_directory.services.base import BaseService, ServiceResult, service_method, GroupAlreadyExistsError
from group_directory.services.capabilities import GroupAction, supported_actions
from group_directory.services.domain.membership_search import (
    MembershipSearchResolver, UserDirectory, UserHandle
)

logger = logging.getLogger(__name__)

# Largest IN (...) list sent to the store
MAX_CHUNK_SIZE = 1000
# Width of groups.gid
MAX_GID_BYTES = 64


def derive_gid(display_name: str, max_bytes: int = 64) -> str:
    """
    Compute the gid for a new group.

    Names that fit into the gid column are used verbatim, longer ones are
    replaced by their SHA-256 hex digest (64 characters).
    """
    if len(display_name.encode("utf-8")) > max_bytes:
        return hashlib.sha256(display_name.encode("utf-8")).hexdigest()
    return display_name


def chunked(items: Iterable[str], size: int) -> Iterator[List[str]]:
    """Yield lists of at most size items."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    iterator = iter(items)
    while True:
        chunk = list(islice(iterator, size))
        if not chunk:
            return
        yield chunk


def _details(display_name: str) -> Dict[str, str]:
    return {"display_name": display_name} if display_name else {}


class GroupDirectoryService(BaseService):
    """Service for groups stored in a SQL database."""

    def __init__(
        self,
        store: GroupStore,
        cache: Optional[GroupCache] = None,
        user_directory: Optional[UserDirectory] = None,
        chunk_size: Optional[int] = None,
        gid_max_bytes: Optional[int] = None,
    ):
        super().__init__("GroupDirectoryService")
        self.store = store
        self.cache = cache if cache is not None else InMemoryGroupCache()
        self.chunk_size = settings.batch_chunk_size if chunk_size is None else chunk_size
        self.gid_max_bytes = settings.gid_max_bytes if gid_max_bytes is None else gid_max_bytes
        if not 1 <= self.chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}, got {self.chunk_size}")
        if not 1 <= self.gid_max_bytes <= MAX_GID_BYTES:
            raise ValueError(f"gid_max_bytes must be between 1 and {MAX_GID_BYTES}, got {self.gid_max_bytes}")
        self._members = MembershipSearchResolver(store, user_directory)

    @property
    def backend_name(self) -> str:
        """Backend name shown in group management."""
        return "Database"

    def implements_actions(self, actions: GroupAction) -> bool:
        return bool(supported_actions(self) & actions)

    # Group lifecycle

    @service_method
    def create_group(self, display_name: str) -> ServiceResult[str]:
        """Create a group; the result carries GroupAlreadyExistsError on collision."""
        gid = derive_gid(display_name, self.gid_max_bytes)
        try:
            self.store.insert_group(gid, display_name)
        except GroupAlreadyExistsError as e:
            return ServiceResult.error_result(e)

        self.cache.put(GroupRecord(gid, display_name))
        self.logger.info(f"Created group {gid}")
        return ServiceResult.success_result(gid)

    @service_method
    def delete_group(self, gid: str) -> bool:
        """
        Delete a group with its memberships and admin assignments.

        The three deletes are independent statements, so a failure midway
        can leave edges pointing at a removed group.
        """
        self.store.delete_group(gid)
        self.store.delete_memberships(gid)
        self.store.delete_admins(gid)

        self.cache.evict(gid)
        self.logger.info(f"Deleted group {gid}")
        return True

    # Memberships

    @service_method
    def in_group(self, uid: str, gid: str) -> bool:
        return self.store.membership_exists(uid, gid)

    @service_method
    def add_to_group(self, uid: str, gid: str) -> bool:
        """Add uid to gid; returns False if the membership already existed."""
        # No duplicate entries
        if self.in_group(uid, gid):
            return False
        self.store.insert_membership(uid, gid)
        return True

    @service_method
    def remove_from_group(self, uid: str, gid: str) -> bool:
        self.store.delete_membership(uid, gid)
        return True

    @service_method
    def get_user_groups(self, uid: str) -> List[str]:
        """All gids uid belongs to. Does not check that the user exists."""
        if not uid:
            return []

        groups = []
        for record in self.store.fetch_user_groups(uid):
            self.cache.put(record)
            groups.append(record.gid)
        return groups

    # Lookups

    @service_method
    def get_groups(self, search: str = "", limit: int = -1, offset: int = 0) -> List[str]:
        groups = []
        for record in self.store.search_groups(search, limit, offset):
            self.cache.put(record)
            groups.append(record.gid)
        return groups

    @service_method
    def group_exists(self, gid: str) -> bool:
        if self.cache.has(gid):
            return True

        record = self.store.fetch_group(gid)
        if record is None:
            return False
        self.cache.put(record)
        return True

    @service_method
    def groups_exist(self, gids: Iterable[str]) -> Set[str]:
        """
        Return the subset of gids that exist.

        Cached gids need no query; the rest are looked up in IN queries of
        at most chunk_size ids each.
        """
        existing: Set[str] = set()
        unknown: List[str] = []
        for gid in dict.fromkeys(gids):
            if self.cache.has(gid):
                existing.add(gid)
            else:
                unknown.append(gid)

        for chunk in chunked(unknown, self.chunk_size):
            for record in self.store.fetch_groups(chunk):
                self.cache.put(record)
                existing.add(record.gid)

        return existing

    @service_method
    def get_group_details(self, gid: str) -> Dict[str, str]:
        return _details(self.get_display_name(gid))

    @service_method
    def get_groups_details(self, gids: Iterable[str]) -> Dict[str, Dict[str, str]]:
        """Details of every existing group in gids, keyed by gid."""
        details: Dict[str, Dict[str, str]] = {}
        unknown: List[str] = []
        for gid in dict.fromkeys(gids):
            record = self.cache.get(gid)
            if record is not None:
                details[gid] = _details(record.display_name)
            else:
                unknown.append(gid)

        for chunk in chunked(unknown, self.chunk_size):
            for record in self.store.fetch_groups(chunk):
                self.cache.put(record)
                details[record.gid] = _details(record.display_name)

        return details

    # Display names

    @service_method
    def get_display_name(self, gid: str) -> str:
        record = self.cache.get(gid)
        if record is not None and record.display_name.strip() != "":
            return record.display_name

        # Not cached on purpose: the caller may be probing for a blank name
        display_name = self.store.fetch_display_name(gid)
        return str(display_name) if display_name is not None else ""

    @service_method
    def set_display_name(self, gid: str, display_name: str) -> bool:
        """Rename a group. A blank name is replaced by the gid."""
        if not self.group_exists(gid):
            return False

        display_name = display_name.strip()
        if display_name == "":
            display_name = gid

        # Some backends count only changed rows, so 0 can also mean "same name"
        if self.store.update_display_name(gid, display_name) == 0 and self.store.fetch_group(gid) is None:
            # Deleted elsewhere while a stale entry was still cached
            self.cache.evict(gid)
            return False

        self.cache.put(GroupRecord(gid, display_name))
        return True

    # Members

    @service_method
    def users_in_group(self, gid: str, search: str = "", limit: int = -1, offset: int = 0) -> List[str]:
        return list(self.search_in_group(gid, search, limit, offset).keys())

    @service_method
    def search_in_group(self, gid: str, search: str = "", limit: int = -1, offset: int = 0) -> Dict[str, UserHandle]:
        return self._members.search(gid, search, limit, offset)

    @service_method
    def count_users_in_group(self, gid: str, search: str = "") -> int:
        return self.store.count_members(gid, search)

    @service_method
    def count_disabled_in_group(self, gid: str) -> int:
        return self.store.count_disabled_members(gid)
