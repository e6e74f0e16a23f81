"""
Group backend capabilities.

A backend advertises what it can do by implementing any subset of the
protocols below. Callers feature-detect with isinstance() or supports()
instead of relying on a deep class hierarchy.
"""

from enum import IntFlag
from typing import Dict, Iterable, List, Protocol, Set, runtime_checkable


class GroupAction(IntFlag):
    """Action bits a backend reports through implements_actions()."""
    CREATE_GROUP = 0x00000001
    DELETE_GROUP = 0x00000010
    ADD_TO_GROUP = 0x00000100
    REMOVE_FROM_GROUP = 0x00001000
    COUNT_USERS = 0x00100000
    GROUP_DETAILS = 0x01000000


@runtime_checkable
class NamedBackend(Protocol):
    @property
    def backend_name(self) -> str:
        ...


@runtime_checkable
class CreateNamedGroupBackend(Protocol):
    def create_group(self, display_name: str):
        ...


@runtime_checkable
class DeleteGroupBackend(Protocol):
    def delete_group(self, gid: str) -> bool:
        ...


@runtime_checkable
class AddToGroupBackend(Protocol):
    def add_to_group(self, uid: str, gid: str) -> bool:
        ...


@runtime_checkable
class RemoveFromGroupBackend(Protocol):
    def remove_from_group(self, uid: str, gid: str) -> bool:
        ...


@runtime_checkable
class CountUsersBackend(Protocol):
    def count_users_in_group(self, gid: str, search: str = "") -> int:
        ...


@runtime_checkable
class CountDisabledInGroupBackend(Protocol):
    def count_disabled_in_group(self, gid: str) -> int:
        ...


@runtime_checkable
class GetDisplayNameBackend(Protocol):
    def get_display_name(self, gid: str) -> str:
        ...


@runtime_checkable
class SetDisplayNameBackend(Protocol):
    def set_display_name(self, gid: str, display_name: str) -> bool:
        ...


@runtime_checkable
class GroupDetailsBackend(Protocol):
    def get_group_details(self, gid: str) -> Dict[str, str]:
        ...


@runtime_checkable
class SearchableGroupBackend(Protocol):
    def search_in_group(self, gid: str, search: str = "", limit: int = -1, offset: int = 0) -> Dict:
        ...


@runtime_checkable
class BatchMethodsBackend(Protocol):
    def groups_exist(self, gids: Iterable[str]) -> Set[str]:
        ...

    def get_groups_details(self, gids: Iterable[str]) -> Dict[str, Dict[str, str]]:
        ...


ALL_CAPABILITIES = (
    NamedBackend,
    CreateNamedGroupBackend,
    DeleteGroupBackend,
    AddToGroupBackend,
    RemoveFromGroupBackend,
    CountUsersBackend,
    CountDisabledInGroupBackend,
    GetDisplayNameBackend,
    SetDisplayNameBackend,
    GroupDetailsBackend,
    SearchableGroupBackend,
    BatchMethodsBackend,
)

# Capabilities that map onto an action bit
_ACTION_CAPABILITIES = {
    GroupAction.CREATE_GROUP: CreateNamedGroupBackend,
    GroupAction.DELETE_GROUP: DeleteGroupBackend,
    GroupAction.ADD_TO_GROUP: AddToGroupBackend,
    GroupAction.REMOVE_FROM_GROUP: RemoveFromGroupBackend,
    GroupAction.COUNT_USERS: CountUsersBackend,
    GroupAction.GROUP_DETAILS: GroupDetailsBackend,
}


def supports(backend: object, capability: type) -> bool:
    """Return whether backend implements the given capability protocol."""
    return isinstance(backend, capability)


def supported_capabilities(backend: object) -> List[str]:
    return [capability.__name__ for capability in ALL_CAPABILITIES if isinstance(backend, capability)]


def supported_actions(backend: object) -> GroupAction:
    """Fold the backend's capabilities into a GroupAction mask."""
    actions = GroupAction(0)
    for action, capability in _ACTION_CAPABILITIES.items():
        if isinstance(backend, capability):
            actions |= action
    return actions
