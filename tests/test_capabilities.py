from group_directory.services.capabilities import (
    AddToGroupBackend,
    BatchMethodsBackend,
    CountDisabledInGroupBackend,
    DeleteGroupBackend,
    GroupAction,
    NamedBackend,
    SearchableGroupBackend,
    SetDisplayNameBackend,
    supported_actions,
    supported_capabilities,
    supports,
)


class AddOnlyBackend:
    def add_to_group(self, uid, gid):
        return True


class TestCapabilities:
    def test_directory_implements_every_capability(self, directory):
        for capability in (
            NamedBackend,
            AddToGroupBackend,
            BatchMethodsBackend,
            CountDisabledInGroupBackend,
            DeleteGroupBackend,
            SearchableGroupBackend,
            SetDisplayNameBackend,
        ):
            assert supports(directory, capability), capability.__name__

        assert directory.backend_name == "Database"

    def test_partial_backend(self):
        backend = AddOnlyBackend()

        assert supports(backend, AddToGroupBackend)
        assert not supports(backend, DeleteGroupBackend)
        assert supported_capabilities(backend) == ["AddToGroupBackend"]
        assert supported_actions(backend) == GroupAction.ADD_TO_GROUP

    def test_implements_actions(self, directory):
        assert directory.implements_actions(GroupAction.CREATE_GROUP)
        assert directory.implements_actions(GroupAction.COUNT_USERS | GroupAction.GROUP_DETAILS)
        assert not directory.implements_actions(GroupAction(0))
        assert supported_actions(directory) == (
            GroupAction.CREATE_GROUP | GroupAction.DELETE_GROUP
            | GroupAction.ADD_TO_GROUP | GroupAction.REMOVE_FROM_GROUP
            | GroupAction.COUNT_USERS | GroupAction.GROUP_DETAILS
        )
